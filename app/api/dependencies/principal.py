# app/api/dependencies/principal.py
from dataclasses import dataclass
from typing import Optional

from fastapi import Depends, Header, HTTPException, status

from app.schemas.daily_log import UserRole


@dataclass(frozen=True)
class Principal:
    """
    The caller of a request, as asserted by the fronting gateway.
    """

    user_id: int
    role: str

    @property
    def is_manager(self) -> bool:
        return self.role == UserRole.MANAGER.value


async def get_current_principal(
    user_id: Optional[int] = Header(
        default=None,
        alias="X-User-Id",
        description="Directory id of the authenticated caller.",
    ),
    role: Optional[str] = Header(
        default=None,
        alias="X-User-Role",
        description="Role of the caller: 'manager' or 'team_leader'.",
    ),
) -> Principal:
    """
    Resolve the caller from identity headers.

    Authentication itself happens upstream; this only rejects requests
    that arrive without a usable identity.
    """
    if user_id is None or not role:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Missing caller identity headers.",
        )

    normalized_role = role.strip().lower().replace(" ", "_")
    if normalized_role not in {r.value for r in UserRole}:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail=f"Unknown role '{role}'.",
        )

    return Principal(user_id=user_id, role=normalized_role)


async def require_manager(
    principal: Principal = Depends(get_current_principal),
) -> Principal:
    if not principal.is_manager:
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Only managers can perform this action.",
        )
    return principal
