"""
Staff identity: access token verification.
"""

from academy.kernel.identity.jwt import (
    AccessTokenPayload,
    JWTManager,
    StaffRole,
    verify_access_token,
)

__all__ = [
    "AccessTokenPayload",
    "JWTManager",
    "StaffRole",
    "verify_access_token",
]
