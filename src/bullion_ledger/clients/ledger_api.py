"""Client for the hosted ledger backend (token auth + PostgREST tables)."""

import asyncio
from datetime import UTC, datetime, timedelta
from typing import Any, cast

import httpx
import structlog

from bullion_ledger.config import get_settings

logger = structlog.get_logger(__name__)

# Refresh this long before the server-side expiry.
TOKEN_REFRESH_MARGIN = timedelta(minutes=5)
DEFAULT_TOKEN_LIFETIME_SECONDS = 3600


class LedgerAPIError(Exception):
    """Base exception for ledger backend errors."""

    def __init__(self, message: str, status_code: int | None = None, details: Any = None):
        super().__init__(message)
        self.status_code = status_code
        self.details = details


class AuthenticationError(LedgerAPIError):
    """Authentication failed."""

    pass


class RateLimitError(LedgerAPIError):
    """Rate limit exceeded."""

    pass


def eq(value: Any) -> str:
    """Build a PostgREST equality filter value."""
    return f"eq.{value}"


class LedgerAPIClient:
    """Async client for the ledger backend's auth and table endpoints."""

    def __init__(
        self,
        base_url: str | None = None,
        api_key: str | None = None,
        email: str | None = None,
        password: str | None = None,
        access_token: str | None = None,
        refresh_token: str | None = None,
    ):
        settings = get_settings()
        self.base_url = (base_url or settings.ledger_api_url).rstrip("/")
        self._api_key = api_key or settings.ledger_api_key.get_secret_value()
        self._email = email or settings.ledger_email
        self._password = password or settings.ledger_password.get_secret_value()
        self._timeout = settings.ledger_timeout
        self._max_retries = settings.ledger_max_retries

        self._access_token: str | None = access_token
        self._refresh_token: str | None = refresh_token
        self._token_expires_at: datetime | None = None
        if access_token:
            self._token_expires_at = (
                datetime.now(UTC)
                + timedelta(seconds=DEFAULT_TOKEN_LIFETIME_SECONDS)
                - TOKEN_REFRESH_MARGIN
            )

        self._user: dict[str, Any] | None = None
        self._client: httpx.AsyncClient | None = None
        self._lock = asyncio.Lock()

    async def _get_client(self) -> httpx.AsyncClient:
        """Get or create HTTP client."""
        if self._client is None:
            self._client = httpx.AsyncClient(
                base_url=self.base_url,
                timeout=httpx.Timeout(self._timeout),
            )
        return self._client

    async def close(self) -> None:
        """Close the HTTP client."""
        if self._client:
            await self._client.aclose()
            self._client = None

    async def __aenter__(self) -> "LedgerAPIClient":
        await self.login()
        return self

    async def __aexit__(self, exc_type: Any, exc_val: Any, exc_tb: Any) -> None:
        await self.close()

    # === Authentication ===

    @property
    def current_user(self) -> dict[str, Any] | None:
        """User returned by the last login or user fetch."""
        return self._user

    @property
    def current_email(self) -> str | None:
        if self._user and self._user.get("email"):
            return str(self._user["email"])
        return None

    def _store_session(self, data: dict[str, Any]) -> None:
        self._access_token = data["access_token"]
        self._refresh_token = data.get("refresh_token", self._refresh_token)
        expires_in = int(data.get("expires_in") or DEFAULT_TOKEN_LIFETIME_SECONDS)
        self._token_expires_at = (
            datetime.now(UTC) + timedelta(seconds=expires_in) - TOKEN_REFRESH_MARGIN
        )
        if isinstance(data.get("user"), dict):
            self._user = data["user"]

    @staticmethod
    def _json_object(response: httpx.Response, context: str) -> dict[str, Any]:
        data_raw = response.json()
        if not isinstance(data_raw, dict):
            raise LedgerAPIError(f"Invalid {context} response format")
        return cast(dict[str, Any], data_raw)

    async def login(self) -> dict[str, Any]:
        """Authenticate with email and password and store the session."""
        client = await self._get_client()

        response = await client.post(
            "/auth/v1/token",
            params={"grant_type": "password"},
            json={"email": self._email, "password": self._password},
            headers={"apikey": self._api_key},
        )

        if response.status_code in (400, 401):
            raise AuthenticationError(
                "Invalid credentials", status_code=response.status_code
            )
        response.raise_for_status()

        data = self._json_object(response, "login")
        self._store_session(data)

        logger.info("logged_in", user=self.current_email)
        return data

    async def refresh_tokens(self) -> None:
        """Exchange the refresh token for a new access token."""
        if not self._refresh_token:
            raise AuthenticationError("No refresh token available")

        client = await self._get_client()
        response = await client.post(
            "/auth/v1/token",
            params={"grant_type": "refresh_token"},
            json={"refresh_token": self._refresh_token},
            headers={"apikey": self._api_key},
        )

        if response.status_code in (400, 401):
            # Refresh token revoked or expired, need full re-login
            await self.login()
            return

        response.raise_for_status()
        self._store_session(self._json_object(response, "refresh"))
        logger.debug("tokens_refreshed")

    async def _ensure_authenticated(self) -> None:
        """Ensure we have a valid access token."""
        async with self._lock:
            if not self._access_token:
                await self.login()
            elif self._token_expires_at and datetime.now(UTC) >= self._token_expires_at:
                await self.refresh_tokens()

    def _get_headers(self, prefer: str | None = None) -> dict[str, str]:
        """Get request headers with project key and auth token."""
        headers = {"Content-Type": "application/json", "apikey": self._api_key}
        if self._access_token:
            headers["Authorization"] = f"Bearer {self._access_token}"
        if prefer:
            headers["Prefer"] = prefer
        return headers

    async def get_user(self) -> dict[str, Any]:
        """Fetch the signed-in user."""
        result = await self._request("GET", "/auth/v1/user")
        if isinstance(result, dict):
            self._user = result
            return result
        return {}

    # === Generic Request Methods ===

    async def _request(
        self,
        method: str,
        path: str,
        params: dict[str, Any] | None = None,
        json: dict[str, Any] | list[dict[str, Any]] | None = None,
        prefer: str | None = None,
        retry_count: int = 0,
    ) -> dict[str, Any] | list[dict[str, Any]]:
        """Make an authenticated API request with retry logic."""
        await self._ensure_authenticated()
        client = await self._get_client()

        try:
            response = await client.request(
                method=method,
                url=path,
                params=params,
                json=json,
                headers=self._get_headers(prefer),
            )

            if response.status_code == 401 and retry_count < 1:
                # Token expired during request, refresh and retry
                await self.refresh_tokens()
                return await self._request(
                    method, path, params, json, prefer, retry_count + 1
                )

            if response.status_code == 429:
                retry_after = int(response.headers.get("Retry-After", "60"))
                raise RateLimitError(
                    f"Rate limited, retry after {retry_after}s",
                    status_code=429,
                    details={"retry_after": retry_after},
                )

            if response.status_code >= 400:
                try:
                    error_detail = response.json() if response.content else {}
                except ValueError:
                    error_detail = {
                        "raw": response.text[:500]
                        if response.text
                        else "empty response"
                    }
                raise LedgerAPIError(
                    f"API error: {response.status_code}",
                    status_code=response.status_code,
                    details=error_detail,
                )

            return response.json() if response.content else {}

        except httpx.RequestError as e:
            if retry_count < self._max_retries:
                await asyncio.sleep(2**retry_count)  # Exponential backoff
                return await self._request(
                    method, path, params, json, prefer, retry_count + 1
                )
            raise LedgerAPIError(f"Request failed: {e}") from e

    @staticmethod
    def _extract_rows(result: Any) -> list[dict[str, Any]]:
        """Return rows from a list response (or a single-row object)."""
        if isinstance(result, list):
            return result
        if isinstance(result, dict) and result:
            return [result]
        return []

    # === Table Endpoints ===

    async def select(
        self,
        table: str,
        filters: dict[str, Any] | None = None,
        order: str | None = None,
        limit: int | None = None,
        columns: str = "*",
    ) -> list[dict[str, Any]]:
        """Select rows matching equality ``filters``.

        Args:
            table: Table name.
            filters: Column -> value; each becomes an ``eq.`` filter.
            order: PostgREST order clause, e.g. ``"created_at.desc"``.
            limit: Maximum number of rows.
            columns: Column list for ``select``.
        """
        params: dict[str, Any] = {"select": columns}
        for column, value in (filters or {}).items():
            params[column] = eq(value)
        if order:
            params["order"] = order
        if limit is not None:
            params["limit"] = max(limit, 1)
        result = await self._request("GET", f"/rest/v1/{table}", params=params)
        return self._extract_rows(result)

    async def insert(self, table: str, row: dict[str, Any]) -> dict[str, Any]:
        """Insert one row and return it as stored."""
        result = await self._request(
            "POST",
            f"/rest/v1/{table}",
            params={"select": "*"},
            json=row,
            prefer="return=representation",
        )
        rows = self._extract_rows(result)
        return rows[0] if rows else {}

    async def update(
        self, table: str, values: dict[str, Any], filters: dict[str, Any]
    ) -> list[dict[str, Any]]:
        """Update rows matching ``filters`` and return them."""
        if not filters:
            raise LedgerAPIError("Refusing to update without filters")
        params: dict[str, Any] = {"select": "*"}
        for column, value in filters.items():
            params[column] = eq(value)
        result = await self._request(
            "PATCH",
            f"/rest/v1/{table}",
            params=params,
            json=values,
            prefer="return=representation",
        )
        return self._extract_rows(result)

    async def delete(self, table: str, filters: dict[str, Any]) -> None:
        """Delete rows matching ``filters``."""
        if not filters:
            raise LedgerAPIError("Refusing to delete without filters")
        params = {column: eq(value) for column, value in filters.items()}
        await self._request("DELETE", f"/rest/v1/{table}", params=params)
