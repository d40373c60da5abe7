"""
API dependencies - shared across all routes.
"""
import uuid
from typing import AsyncIterator, Optional

from fastapi import Depends
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from sqlmodel.ext.asyncio.session import AsyncSession

from lead_manager.database import get_session
from lead_manager.config import settings
from lead_manager.core.security import verify_token
from lead_manager.core.exceptions import raise_forbidden, raise_unauthorized
from lead_manager.core.vocabulary import Tenant
from lead_manager.models.user import User
from lead_manager.repositories.user_repo import UserRepository
from lead_manager.services.integrations.base import OutreachProvider
from lead_manager.services.integrations.instantly import InstantlyClient


bearer_scheme = HTTPBearer(auto_error=False)


async def get_current_user(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(bearer_scheme),
    session: AsyncSession = Depends(get_session)
) -> User:
    """Get current authenticated user from JWT token."""
    if not credentials:
        raise_unauthorized("Not authenticated")

    payload = verify_token(credentials.credentials, "access")
    if not payload:
        raise_unauthorized("Could not validate credentials")

    user_id = payload.get("user_id")
    if not user_id:
        raise_unauthorized("Could not validate credentials")

    try:
        user_uuid = uuid.UUID(user_id)
    except ValueError:
        raise_unauthorized("Could not validate credentials")

    user_repo = UserRepository(session)
    user = await user_repo.get(user_uuid)

    if not user:
        raise_unauthorized("User not found")

    if not user.is_active:
        raise_unauthorized("User account is deactivated")

    return user


async def require_admin(current_user: User = Depends(get_current_user)) -> User:
    """Current user, must be an admin."""
    if not current_user.is_admin:
        raise_forbidden("Admin access required")
    return current_user


def ensure_company_access(user: User, company: str) -> str:
    """
    Check the user may work the given tenant; returns the canonical tenant name.

    Members are limited to Avalern regardless of allowed_companies.
    """
    allowed = {c.lower() for c in user.allowed_companies or []}
    tenant = next((t.value for t in Tenant if t.value.lower() == company.lower()), None)

    if tenant is None or tenant.lower() not in allowed:
        raise_forbidden(f"Access denied to company {company}")
    if not user.is_admin and tenant != Tenant.AVALERN.value:
        raise_forbidden(f"Access denied to company {company}")
    return tenant


def ensure_self_or_admin(user: User, user_id: uuid.UUID) -> None:
    if not user.is_admin and user.id != user_id:
        raise_forbidden("You can only access your own data")


async def get_outreach_provider() -> AsyncIterator[Optional[OutreachProvider]]:
    """Instantly client, or None when no API key is configured."""
    if not settings.INSTANTLY_API_KEY:
        yield None
        return

    client = InstantlyClient()
    try:
        yield client
    finally:
        await client.aclose()
