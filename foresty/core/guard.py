"""
Route guard - allow a page or redirect based on the resolved auth state.
"""

from enum import Enum
from typing import Optional
from urllib.parse import quote

from fastapi import Depends, Request

from foresty.core.auth import AuthContext, get_auth
from foresty.schemas.schemas import UserRole


class GuardDecision(str, Enum):
    ALLOW = "allow"
    LOADING = "loading"
    SIGNIN = "signin"
    PROFILE = "profile"


class RouteBlocked(Exception):
    """Raised by guard dependencies; turned into a redirect (or loading page) in main."""

    def __init__(self, decision: GuardDecision, location: Optional[str] = None):
        super().__init__(decision.value)
        self.decision = decision
        self.location = location


def evaluate(
    auth: AuthContext,
    require_admin: bool = False,
    require_role: Optional[str] = None,
) -> GuardDecision:
    if auth.loading:
        return GuardDecision.LOADING
    if not auth.is_authenticated:
        return GuardDecision.SIGNIN
    if require_admin and not auth.is_admin:
        return GuardDecision.PROFILE
    if require_role and auth.role != require_role:
        return GuardDecision.PROFILE
    return GuardDecision.ALLOW


def signin_url(next_path: str) -> str:
    return f"/signin?next={quote(next_path, safe='/')}"


def protected(require_admin: bool = False, require_role: Optional[UserRole] = None):
    """Build a dependency that lets the request through or raises RouteBlocked."""
    role = require_role.value if require_role else None

    async def guard(request: Request, auth: AuthContext = Depends(get_auth)) -> AuthContext:
        decision = evaluate(auth, require_admin, role)
        if decision == GuardDecision.ALLOW:
            return auth
        if decision == GuardDecision.SIGNIN:
            raise RouteBlocked(decision, signin_url(request.url.path))
        if decision == GuardDecision.PROFILE:
            raise RouteBlocked(decision, "/profile")
        raise RouteBlocked(decision)

    return guard


get_current_user = protected()
get_current_admin = protected(require_admin=True)
get_current_job_poster = protected(require_role=UserRole.job_poster)
