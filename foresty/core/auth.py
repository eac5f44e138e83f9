"""
Authentication - session and role resolution.

Provides:
- Access token decoding (python-jose)
- Role resolution from the stored profile attribute, with an email fallback
- AuthResolver: recomputes the auth state on every auth event
- FastAPI dependencies: get_auth (per-request state), get_user_db (token-scoped client)
"""

import logging
import time
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, Optional, Tuple

from fastapi import Depends, Request
from jose import JWTError, jwt

from foresty.core.config import Settings, get_settings
from foresty.db.supabase import SupabaseClient, SupabaseError, get_supabase
from foresty.schemas.schemas import UserRole

log = logging.getLogger(__name__)

SESSION_KEY = "auth"


class AuthEvent(str, Enum):
    INITIAL_SESSION = "INITIAL_SESSION"
    SIGNED_IN = "SIGNED_IN"
    SIGNED_OUT = "SIGNED_OUT"
    TOKEN_REFRESHED = "TOKEN_REFRESHED"


@dataclass
class AuthContext:
    """Auth state for one request. Written by AuthResolver only."""
    session: Optional[Dict[str, Any]] = None
    user: Optional[Dict[str, Any]] = None
    role: Optional[str] = None
    is_admin: bool = False
    loading: bool = False
    event: AuthEvent = AuthEvent.INITIAL_SESSION
    metadata: Dict[str, Any] = field(default_factory=dict)

    @property
    def is_authenticated(self) -> bool:
        return self.user is not None

    @property
    def user_id(self) -> Optional[str]:
        return self.user["id"] if self.user else None

    @property
    def access_token(self) -> Optional[str]:
        return self.session.get("access_token") if self.session else None


def role_from_email(email: Optional[str]) -> str:
    """Guess a role from the address when the profile stores none. Case-insensitive."""
    email = (email or "").lower()
    if "employer" in email or "job-poster" in email:
        return UserRole.job_poster.value
    return UserRole.job_seeker.value


def resolve_role(
    stored: Optional[str],
    email: Optional[str],
    email_fallback: bool = True,
    user_id: Optional[str] = None,
) -> str:
    """Stored user_type wins; otherwise fall back to the email heuristic."""
    if stored in {r.value for r in UserRole}:
        return stored
    if email_fallback:
        role = role_from_email(email)
        log.warning("No stored role for user %s, inferred %s from email", user_id, role)
        return role
    return UserRole.job_seeker.value


def decode_token(token: str, settings: Optional[Settings] = None) -> Optional[dict]:
    """
    Decode an access token.

    Verifies the signature when a JWT secret is configured; otherwise the claims
    are read unverified (the backend re-checks the token on every call anyway).
    """
    settings = settings or get_settings()
    try:
        if settings.supabase_jwt_secret:
            return jwt.decode(
                token,
                settings.supabase_jwt_secret,
                algorithms=[settings.jwt_algorithm],
                audience=settings.jwt_audience,
            )
        return jwt.get_unverified_claims(token)
    except JWTError as e:
        log.warning("Rejected access token: %s", e)
        return None


def session_from_response(data: Dict[str, Any]) -> Dict[str, Any]:
    """Keep only what the cookie needs from a GoTrue token response."""
    expires_at = data.get("expires_at")
    if expires_at is None and data.get("expires_in"):
        expires_at = int(time.time()) + int(data["expires_in"])
    return {
        "access_token": data["access_token"],
        "refresh_token": data.get("refresh_token"),
        "expires_at": expires_at,
    }


class AuthResolver:
    """
    Resolves session, user, role and admin flag.

    Every auth event (initial load, sign-in, refresh, sign-out) goes through
    handle(), which overwrites the state with a fresh AuthContext.
    """

    def __init__(self, backend: SupabaseClient, settings: Optional[Settings] = None):
        self.backend = backend
        self.settings = settings or get_settings()

    async def lookup_role(self, user: Dict[str, Any], access_token: str) -> Tuple[str, bool]:
        stored = None
        try:
            profile = await self.backend.with_token(access_token).select(
                "profiles", "user_type", filters={"id": user["id"]}, single=True
            )
            if profile:
                stored = profile.get("user_type")
        except SupabaseError:
            log.exception("Error fetching user profile for %s", user["id"])

        role = resolve_role(stored, user.get("email"), self.settings.role_email_fallback, user["id"])
        return role, stored == UserRole.admin.value

    async def handle(self, event: AuthEvent, session: Optional[Dict[str, Any]]) -> AuthContext:
        if event == AuthEvent.SIGNED_OUT or not session:
            return AuthContext(event=AuthEvent.SIGNED_OUT)

        claims = decode_token(session["access_token"], self.settings)
        if not claims or not claims.get("sub"):
            return AuthContext(event=AuthEvent.SIGNED_OUT)

        user = {
            "id": claims["sub"],
            "email": claims.get("email"),
            "user_metadata": claims.get("user_metadata") or {},
        }
        role, is_admin = await self.lookup_role(user, session["access_token"])
        return AuthContext(
            session=session, user=user, role=role, is_admin=is_admin,
            event=event, metadata=user["user_metadata"],
        )

    def _needs_refresh(self, session: Dict[str, Any]) -> bool:
        expires_at = session.get("expires_at")
        if not expires_at:
            return False
        return int(expires_at) - self.settings.token_refresh_margin <= time.time()

    async def load(self, request: Request) -> AuthContext:
        """Initial resolution for a request, refreshing the token if it is about to expire."""
        session = request.session.get(SESSION_KEY)
        if not session:
            return await self.handle(AuthEvent.SIGNED_OUT, None)

        if self._needs_refresh(session):
            if not session.get("refresh_token"):
                request.session.pop(SESSION_KEY, None)
                return await self.handle(AuthEvent.SIGNED_OUT, None)
            try:
                data = await self.backend.refresh_session(session["refresh_token"])
            except SupabaseError:
                log.exception("Token refresh failed, signing out")
                request.session.pop(SESSION_KEY, None)
                return await self.handle(AuthEvent.SIGNED_OUT, None)
            session = session_from_response(data)
            request.session[SESSION_KEY] = session
            return await self.handle(AuthEvent.TOKEN_REFRESHED, session)

        return await self.handle(AuthEvent.INITIAL_SESSION, session)

    async def sign_in(self, request: Request, data: Dict[str, Any]) -> AuthContext:
        session = session_from_response(data)
        request.session[SESSION_KEY] = session
        auth = await self.handle(AuthEvent.SIGNED_IN, session)
        request.state.auth = auth
        return auth

    async def sign_out(self, request: Request, auth: AuthContext) -> AuthContext:
        if auth.access_token:
            try:
                await self.backend.sign_out(auth.access_token)
            except SupabaseError:
                # The local session is dropped regardless
                log.exception("Backend logout failed")
        request.session.pop(SESSION_KEY, None)
        signed_out = await self.handle(AuthEvent.SIGNED_OUT, None)
        request.state.auth = signed_out
        return signed_out


def get_resolver(backend: SupabaseClient = Depends(get_supabase)) -> AuthResolver:
    return AuthResolver(backend)


async def get_auth(request: Request, resolver: AuthResolver = Depends(get_resolver)) -> AuthContext:
    """
    FastAPI dependency - auth state for the current request.

    Usage:
        @router.get("/page")
        async def page(auth: AuthContext = Depends(get_auth)):
            ...
    """
    auth = getattr(request.state, "auth", None)
    if auth is None:
        auth = await resolver.load(request)
        request.state.auth = auth
    return auth


def get_user_db(
    auth: AuthContext = Depends(get_auth),
    backend: SupabaseClient = Depends(get_supabase),
) -> SupabaseClient:
    """Backend client acting as the signed-in user (anonymous when signed out)."""
    return backend.with_token(auth.access_token)
