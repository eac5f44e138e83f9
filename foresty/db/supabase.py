"""
Hosted backend client - auth, tables and rpc over HTTP.

Wraps the three APIs the app talks to:
- GoTrue auth (/auth/v1): password sign-in, sign-up, refresh, logout
- PostgREST tables (/rest/v1/<table>): select / insert / update / delete
- PostgREST rpc (/rest/v1/rpc/<fn>)

All failures surface as SupabaseError so route handlers can turn them into toasts.
"""

import logging
from typing import Any, Dict, List, Optional

import httpx

from foresty.core.config import Settings, get_settings

log = logging.getLogger(__name__)


class SupabaseError(Exception):
    """Error returned by the hosted backend (or raised when it is unreachable)."""

    def __init__(self, status_code: int, message: str):
        super().__init__(message)
        self.status_code = status_code
        self.message = message


def _error_message(response: httpx.Response) -> str:
    """Pull a readable message out of a GoTrue or PostgREST error body."""
    try:
        body = response.json()
    except ValueError:
        return response.text or response.reason_phrase
    if isinstance(body, dict):
        for key in ("msg", "message", "error_description", "error"):
            if body.get(key):
                return str(body[key])
    return response.reason_phrase


def _eq_filters(filters: Optional[Dict[str, Any]]) -> Dict[str, str]:
    return {column: f"eq.{value}" for column, value in (filters or {}).items()}


class SupabaseClient:
    """
    Thin async client for the hosted backend.

    A client bound to a user's access token is obtained with with_token();
    it shares the underlying connection pool with the anonymous client.
    """

    def __init__(
        self,
        settings: Optional[Settings] = None,
        access_token: Optional[str] = None,
        http: Optional[httpx.AsyncClient] = None,
    ):
        self.settings = settings or get_settings()
        self.access_token = access_token
        self._http = http

    @property
    def http(self) -> httpx.AsyncClient:
        if self._http is None:
            self._http = httpx.AsyncClient(timeout=self.settings.request_timeout)
        return self._http

    def with_token(self, access_token: Optional[str]) -> "SupabaseClient":
        return SupabaseClient(self.settings, access_token, self.http)

    def _headers(self, access_token: Optional[str] = None, prefer: Optional[str] = None) -> Dict[str, str]:
        token = access_token or self.access_token or self.settings.supabase_anon_key
        headers = {
            "apikey": self.settings.supabase_anon_key,
            "Authorization": f"Bearer {token}",
        }
        if prefer:
            headers["Prefer"] = prefer
        return headers

    async def _request(
        self,
        method: str,
        url: str,
        *,
        params: Optional[Dict[str, Any]] = None,
        json: Any = None,
        access_token: Optional[str] = None,
        prefer: Optional[str] = None,
    ) -> Any:
        try:
            response = await self.http.request(
                method, url, params=params, json=json,
                headers=self._headers(access_token, prefer),
            )
        except httpx.RequestError as e:
            log.error("Backend unreachable: %s %s (%s)", method, url, e)
            raise SupabaseError(503, "Le service est momentanément indisponible")

        if response.status_code >= 400:
            message = _error_message(response)
            log.warning("Backend error %s on %s %s: %s", response.status_code, method, url, message)
            raise SupabaseError(response.status_code, message)

        if not response.content:
            return None
        return response.json()

    # ============================================================
    # AUTH
    # ============================================================

    async def sign_in_with_password(self, email: str, password: str) -> Dict[str, Any]:
        """Returns the session: access_token, refresh_token, expires_at, user."""
        return await self._request(
            "POST", f"{self.settings.auth_url}/token",
            params={"grant_type": "password"},
            json={"email": email, "password": password},
        )

    async def sign_up(self, email: str, password: str, metadata: Dict[str, Any]) -> Dict[str, Any]:
        return await self._request(
            "POST", f"{self.settings.auth_url}/signup",
            json={"email": email, "password": password, "data": metadata},
        )

    async def refresh_session(self, refresh_token: str) -> Dict[str, Any]:
        return await self._request(
            "POST", f"{self.settings.auth_url}/token",
            params={"grant_type": "refresh_token"},
            json={"refresh_token": refresh_token},
        )

    async def sign_out(self, access_token: str) -> None:
        await self._request("POST", f"{self.settings.auth_url}/logout", access_token=access_token)

    # ============================================================
    # TABLES
    # ============================================================

    async def select(
        self,
        table: str,
        columns: str = "*",
        *,
        filters: Optional[Dict[str, Any]] = None,
        order: Optional[str] = None,
        desc: bool = False,
        single: bool = False,
    ) -> Any:
        """
        Select rows with equality filters.

        With single=True the first matching row is returned, or None.
        """
        params: Dict[str, Any] = {"select": columns, **_eq_filters(filters)}
        if order:
            params["order"] = f"{order}.{'desc' if desc else 'asc'}"
        if single:
            params["limit"] = 1

        rows = await self._request("GET", f"{self.settings.rest_url}/{table}", params=params) or []
        if single:
            return rows[0] if rows else None
        return rows

    async def insert(self, table: str, rows: Any) -> List[Dict[str, Any]]:
        """Insert one row (dict) or many (list); returns the stored rows."""
        return await self._request(
            "POST", f"{self.settings.rest_url}/{table}",
            json=rows, prefer="return=representation",
        ) or []

    async def update(self, table: str, values: Dict[str, Any], *, filters: Dict[str, Any]) -> List[Dict[str, Any]]:
        return await self._request(
            "PATCH", f"{self.settings.rest_url}/{table}",
            params=_eq_filters(filters), json=values, prefer="return=representation",
        ) or []

    async def delete(self, table: str, *, filters: Dict[str, Any]) -> None:
        # PostgREST refuses unfiltered deletes, so filters are mandatory
        if not filters:
            raise ValueError("delete() requires at least one filter")
        await self._request("DELETE", f"{self.settings.rest_url}/{table}", params=_eq_filters(filters))

    async def rpc(self, function: str, params: Optional[Dict[str, Any]] = None) -> Any:
        return await self._request("POST", f"{self.settings.rest_url}/rpc/{function}", json=params or {})

    async def close(self) -> None:
        if self._http is not None:
            await self._http.aclose()
            self._http = None


# Global instance (created lazily)
_client: Optional[SupabaseClient] = None


def get_supabase() -> SupabaseClient:
    """FastAPI dependency - shared anonymous backend client."""
    global _client
    if _client is None:
        _client = SupabaseClient(get_settings())
    return _client


async def close_supabase() -> None:
    global _client
    if _client is not None:
        await _client.close()
        _client = None
