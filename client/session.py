"""
Client-side session handling for the Notes API.

SessionManager wraps an httpx.AsyncClient. It keeps the access token in
memory, sends the device fingerprint on every call, and on a 401 refreshes the
session through the refresh cookie and replays the request once. Concurrent
401s all wait on the same refresh task, so exactly one /refresh-token call is
in flight at a time; a second call would present an already-rotated cookie
and fail.
"""
from __future__ import annotations

import asyncio
import json
import logging
import os
from typing import Any, Callable

import httpx

from client.device import get_device_info

logger = logging.getLogger(__name__)

DEFAULT_BASE_URL = "http://localhost:5500"
USER_AGENT = f"notes-client/1.0 python-httpx/{httpx.__version__}"

# 401s from these are answers, not expired sessions
AUTH_PATHS = frozenset({"/signup", "/login", "/logout", "/refresh-token"})


class ApiRequestError(Exception):
    """The API answered with a failure envelope."""

    def __init__(self, status: int, code: str | None, message: str | None):
        super().__init__(message or code or f"HTTP {status}")
        self.status = status
        self.code = code
        self.message = message


class SessionExpired(ApiRequestError):
    """Refreshing the session failed; the user has to log in again."""


def unwrap(response: httpx.Response) -> dict[str, Any]:
    """Return the `data` member of a success envelope or raise ApiRequestError."""
    try:
        payload = response.json()
    except ValueError:
        raise ApiRequestError(response.status_code, "BAD_RESPONSE", response.text)
    if isinstance(payload, dict) and payload.get("ok"):
        return payload.get("data") or {}
    error = payload.get("error") if isinstance(payload, dict) else None
    error = error or {}
    raise ApiRequestError(response.status_code, error.get("code"), error.get("message"))


class SessionManager:
    """Authenticated access to the Notes API for one backend."""

    def __init__(
        self,
        base_url: str | None = None,
        *,
        device_file: str | os.PathLike | None = None,
        user_agent: str = USER_AGENT,
        timeout: float = 10.0,
        transport: httpx.AsyncBaseTransport | None = None,
        on_logout: Callable[[], None] | None = None,
    ) -> None:
        self.base_url = base_url or os.getenv("NOTES_API_URL", DEFAULT_BASE_URL)
        self.device_info = get_device_info(user_agent, device_file)
        self.on_logout = on_logout
        self.access_token: str | None = None
        self.user: dict[str, Any] | None = None
        # Pending refresh shared by every caller that hits a 401
        self._refresh_task: asyncio.Task | None = None
        self._client = httpx.AsyncClient(
            base_url=self.base_url,
            timeout=timeout,
            transport=transport,
            headers={"User-Agent": user_agent},
        )

    async def __aenter__(self) -> "SessionManager":
        return self

    async def __aexit__(self, *exc_info) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        await self._client.aclose()

    @property
    def is_authenticated(self) -> bool:
        return self.access_token is not None

    def _headers(self, token: str | None) -> dict[str, str]:
        headers = {"x-device-info": json.dumps(self.device_info)}
        if token:
            headers["Authorization"] = f"Bearer {token}"
        return headers

    def _store(self, data: dict[str, Any]) -> dict[str, Any] | None:
        self.access_token = data.get("accessToken")
        self.user = data.get("user")
        return self.user

    def _clear(self) -> None:
        self.access_token = None
        self.user = None

    async def _send(self, method: str, url: str, token: str | None, **kwargs) -> httpx.Response:
        headers = {**kwargs.pop("headers", {}), **self._headers(token)}
        return await self._client.request(method, url, headers=headers, **kwargs)

    async def request(self, method: str, url: str, **kwargs) -> httpx.Response:
        """Send a request, refreshing the session and retrying once on a 401."""
        token = self.access_token
        response = await self._send(method, url, token, **kwargs)
        if response.status_code != 401 or url in AUTH_PATHS:
            return response

        # Another caller may already have swapped in a fresh token
        if self.access_token is None or self.access_token == token:
            # Cancelling one waiter must not cancel the refresh the others share
            await asyncio.shield(self.refresh())
        logger.debug("Retrying %s %s with refreshed token", method, url)
        return await self._send(method, url, self.access_token, **kwargs)

    def refresh(self) -> asyncio.Task:
        """
        Return the in-flight refresh task, starting one if there is none.

        The check and the assignment happen with no await in between, so on a
        single event loop at most one refresh task exists at any time.
        """
        if self._refresh_task is None:
            self._refresh_task = asyncio.ensure_future(self._run_refresh())
        else:
            logger.debug("Joining in-flight session refresh")
        return self._refresh_task

    async def _run_refresh(self) -> dict[str, Any] | None:
        had_session = self.access_token is not None or self.user is not None
        try:
            response = await self._send("POST", "/refresh-token", None)
            user = self._store(unwrap(response))
            logger.debug("Session refreshed")
            return user
        except (ApiRequestError, httpx.HTTPError) as exc:
            self._clear()
            if had_session and self.on_logout is not None:
                self.on_logout()
            status = getattr(exc, "status", 0)
            raise SessionExpired(status, getattr(exc, "code", None), str(exc)) from exc
        finally:
            self._refresh_task = None

    async def resume(self) -> dict[str, Any] | None:
        """Silently pick up a session from the refresh cookie, if there is one."""
        try:
            return await asyncio.shield(self.refresh())
        except SessionExpired:
            logger.debug("No session to resume")
            return None

    async def signup(self, email: str, username: str, password: str) -> dict[str, Any] | None:
        response = await self._send(
            "POST", "/signup", None,
            json={"email": email, "username": username, "password": password},
        )
        return self._store(unwrap(response))

    async def login(self, username_or_email: str, password: str) -> dict[str, Any] | None:
        response = await self._send(
            "POST", "/login", None,
            json={"usernameOrEmail": username_or_email, "password": password},
        )
        return self._store(unwrap(response))

    async def logout(self) -> None:
        try:
            response = await self._send("POST", "/logout", None)
            unwrap(response)
        finally:
            self._clear()

    async def me(self) -> dict[str, Any]:
        return unwrap(await self.request("GET", "/me"))["user"]
