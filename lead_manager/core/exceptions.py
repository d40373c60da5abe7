"""
Custom exceptions for Lead Manager.
Provides consistent error handling across the API, services and workspace.
"""
from typing import Optional

from fastapi import HTTPException, status


class LeadManagerException(Exception):
    """Base exception for Lead Manager"""
    def __init__(self, message: str = "An error occurred"):
        self.message = message
        super().__init__(self.message)


class NotFoundError(LeadManagerException):
    """Resource not found"""
    def __init__(self, resource: str = "Resource", resource_id: str = None):
        message = f"{resource} not found"
        if resource_id:
            message = f"{resource} with id '{resource_id}' not found"
        super().__init__(message)


class ForbiddenError(LeadManagerException):
    """Access denied"""
    def __init__(self, message: str = "You don't have permission to access this resource"):
        super().__init__(message)


class CSVParseError(LeadManagerException):
    """The uploaded CSV could not be parsed"""
    def __init__(self, detail: str):
        self.detail = detail
        super().__init__(f"CSV parsing error: {detail}")


class ExternalServiceError(LeadManagerException):
    """External service call failed"""
    def __init__(self, service: str = "External service", message: str = None):
        msg = f"{service} call failed"
        if message:
            msg = f"{msg}: {message}"
        super().__init__(msg)


class ActionFailedError(LeadManagerException):
    """A user-initiated write failed; carries the underlying error text."""
    def __init__(self, action: str, detail: Optional[str] = None):
        self.action = action
        self.detail = detail
        message = f"Failed to {action}"
        if detail:
            message = f"{message}: {detail}"
        super().__init__(message)


# HTTP Exception helpers
def raise_not_found(resource: str = "Resource", resource_id: str = None):
    """Raise 404 HTTPException"""
    err = NotFoundError(resource, resource_id)
    raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=err.message)


def raise_bad_request(message: str):
    """Raise 400 HTTPException"""
    raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=message)


def raise_unauthorized(message: str = "Could not validate credentials"):
    """Raise 401 HTTPException"""
    raise HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail=message,
        headers={"WWW-Authenticate": "Bearer"},
    )


def raise_forbidden(message: str = None):
    """Raise 403 HTTPException"""
    err = ForbiddenError(message) if message else ForbiddenError()
    raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail=err.message)
