"""Bearer-token authentication for the club backend."""

from __future__ import annotations

from typing import Any

import aiohttp

from ._serialization import decamelize
from .const import AUTH_LOGIN_ENDPOINT, AUTH_LOGOUT_ENDPOINT, HEADER_AUTHORIZATION
from .exceptions import ApiConnectionError, AuthenticationError
from .models import User


class ClubAuth:
    """Holds the admin console's bearer token.

    Lifecycle:
        1. Call ``login(username, password)`` to obtain a token.
        2. Use ``get_headers()`` to obtain headers for API calls.
        3. On 401/403, the client calls ``mark_unauthenticated()`` and the
           admin has to log in again.

    The token can be persisted by the caller (``token``) and handed back
    later with ``restore_token()``, the way the site keeps it across page
    loads.
    """

    def __init__(
        self,
        session: aiohttp.ClientSession,
        base_url: str,
        timeout: aiohttp.ClientTimeout,
    ) -> None:
        self._session = session
        self._base_url = base_url
        self._timeout = timeout
        self._token: str | None = None
        self._user: User | None = None

    @property
    def is_authenticated(self) -> bool:
        return self._token is not None

    @property
    def token(self) -> str | None:
        return self._token

    @property
    def user(self) -> User | None:
        return self._user

    def restore_token(self, token: str | None) -> None:
        """Reuse a token saved from an earlier login."""
        self._token = token or None

    async def login(self, username: str, password: str) -> User:
        """POST credentials and keep the returned bearer token.

        Raises:
            AuthenticationError: On invalid credentials or a malformed reply.
            ApiConnectionError: If the server is unreachable.
        """
        payload = {"username": username, "password": password}
        try:
            async with self._session.post(
                f"{self._base_url}{AUTH_LOGIN_ENDPOINT}",
                json=payload,
                headers={"Content-Type": "application/json"},
                timeout=self._timeout,
            ) as resp:
                if resp.status in (400, 401, 403):
                    raise AuthenticationError("Invalid username or password")
                if resp.status != 200:
                    body = await resp.text()
                    raise AuthenticationError(f"Login failed: HTTP {resp.status} - {body}")
                data = decamelize(await resp.json())
        except aiohttp.ClientError as err:
            raise ApiConnectionError(f"Connection error during login: {err}") from err
        except TimeoutError as err:
            raise ApiConnectionError("Login timed out") from err

        if not isinstance(data, dict):
            raise AuthenticationError("Malformed login response")
        body: dict[str, Any] = data.get("data") or {}
        token = body.get("token")
        if not data.get("success", True) or not token:
            raise AuthenticationError(data.get("message") or "Login response had no token")

        self._token = token
        self._user = User.from_api_response(body["user"]) if body.get("user") else None
        return self._user or User(id="", username=username)

    async def logout(self) -> None:
        """Tell the backend we are leaving and forget the token.

        The backend is stateless (JWT), so a failed logout call still clears
        the local token.
        """
        if self._token is None:
            return
        try:
            async with self._session.post(
                f"{self._base_url}{AUTH_LOGOUT_ENDPOINT}",
                headers=self.get_headers(),
                timeout=self._timeout,
            ):
                pass
        except (aiohttp.ClientError, TimeoutError) as err:
            raise ApiConnectionError(f"Connection error during logout: {err}") from err
        finally:
            self.mark_unauthenticated()

    def get_headers(self, *, required: bool = False) -> dict[str, str]:
        """Build headers for an API request.

        Args:
            required: The endpoint is admin-only; fail early without a token.

        Raises:
            AuthenticationError: If ``required`` and not logged in.
        """
        if required and self._token is None:
            raise AuthenticationError("Not authenticated. Call login() first.")
        headers = {"Content-Type": "application/json"}
        if self._token is not None:
            headers[HEADER_AUTHORIZATION] = f"Bearer {self._token}"
        return headers

    def mark_unauthenticated(self) -> None:
        """Drop the token (e.g. after a 401)."""
        self._token = None
        self._user = None
