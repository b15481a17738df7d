from enum import Enum

from fastapi import Depends, HTTPException

from solar_scheduler.deps.auth import get_request_context
from solar_scheduler.services.context import RequestContext


class Role(Enum):
    ADMIN = "ADMIN"
    MANAGER = "MANAGER"
    EMPLOYEE = "EMPLOYEE"


_RANK = {
    Role.EMPLOYEE: 1,
    Role.MANAGER: 2,
    Role.ADMIN: 3,
}


def require_role(role: Role):
    def dependency(ctx: RequestContext = Depends(get_request_context)) -> RequestContext:
        try:
            user_role = Role(str(ctx.role).upper())
        except ValueError as exc:
            raise HTTPException(status_code=403, detail="Invalid role claim") from exc

        if _RANK[user_role] < _RANK[role]:
            raise HTTPException(status_code=403, detail="Insufficient role")

        return ctx

    return dependency
