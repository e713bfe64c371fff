# perftrack/authz.py
from __future__ import annotations

from typing import Callable

from fastapi import Depends

from perftrack.auth import get_current_user
from perftrack.errors import Forbidden


def require_role(*allowed_roles: str) -> Callable:
    """
    Usage:
        @router.get("/admin/dashboard")
        def dashboard(user: dict = Depends(require_role("ADMIN"))):
            ...
    """
    allowed = set(r.strip().upper() for r in allowed_roles if r)

    def _dep(user: dict = Depends(get_current_user)) -> dict:
        role = (user.get("role") or "").strip().upper()
        if role not in allowed:
            raise Forbidden("Insufficient role")
        return user

    return _dep
