"""
Security utilities for Lead Manager.

Access tokens are issued by the external auth provider with the shared
SECRET_KEY; this service only verifies them.
"""
from typing import Literal, Optional

import jwt

from lead_manager.config import settings


TokenType = Literal["access"]


def decode_token(token: str) -> Optional[dict]:
    """Decoded payload of a signed, unexpired token, else None."""
    try:
        return jwt.decode(
            token,
            settings.SECRET_KEY,
            algorithms=[settings.ALGORITHM],
            options={"require": ["exp", "user_id"]},
        )
    except jwt.InvalidTokenError:
        return None


def verify_token(token: str, token_type: TokenType = "access") -> Optional[dict]:
    """Payload of a valid token of the given type; anything else is None."""
    payload = decode_token(token)
    if payload and payload.get("type") == token_type:
        return payload
    return None
