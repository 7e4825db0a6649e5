"""
FastAPI dependencies for staff identity and database sessions.
"""

import uuid
from dataclasses import dataclass
from typing import Annotated, Optional

from fastapi import Depends, HTTPException, status
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from sqlalchemy.ext.asyncio import AsyncSession

from academy.database import get_db
from academy.kernel.identity.jwt import StaffRole, verify_access_token


# Security scheme
security = HTTPBearer(auto_error=False)

DbSession = Annotated[AsyncSession, Depends(get_db)]


@dataclass
class StaffIdentity:
    """The authenticated staff member, as asserted by the access token."""

    id: uuid.UUID
    email: str
    role: StaffRole
    name: Optional[str] = None

    @property
    def is_admin(self) -> bool:
        return self.role in (StaffRole.ADMIN, StaffRole.MANAGER)


async def get_current_staff(
    credentials: Annotated[Optional[HTTPAuthorizationCredentials], Depends(security)],
) -> StaffIdentity:
    """Get current authenticated staff member or raise 401."""
    if not credentials:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Not authenticated",
            headers={"WWW-Authenticate": "Bearer"},
        )

    payload = verify_access_token(credentials.credentials)
    if not payload:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid or expired token",
            headers={"WWW-Authenticate": "Bearer"},
        )

    try:
        staff_id = uuid.UUID(payload.sub)
        role = StaffRole(payload.role)
    except ValueError:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Malformed token subject",
            headers={"WWW-Authenticate": "Bearer"},
        )

    return StaffIdentity(id=staff_id, email=payload.email, role=role, name=payload.name)


CurrentStaff = Annotated[StaffIdentity, Depends(get_current_staff)]


async def require_admin(staff: CurrentStaff) -> StaffIdentity:
    """Require a manager or admin for catalog authoring and overrides."""
    if not staff.is_admin:
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Admin access required",
        )
    return staff


AdminStaff = Annotated[StaffIdentity, Depends(require_admin)]
