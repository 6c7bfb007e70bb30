"""Async CTFd REST client.

Every ``/api/v1`` response is wrapped in a ``{"success", "data", "errors"}``
envelope; this client unwraps it and maps failures to provider errors.
"""

from __future__ import annotations

import logging
import re
from typing import Any

import httpx

from ctfpilot.contracts.exceptions import AuthenticationError, ProviderError

_LOG = logging.getLogger(__name__)

_NONCE_PATTERN = re.compile(r"""csrfNonce['"]?\s*[:=]\s*["']([0-9a-fA-F]+)["']""")


class CTFdClient:
    def __init__(self, http: httpx.AsyncClient) -> None:
        self._http = http

    async def aclose(self) -> None:
        await self._http.aclose()

    async def request(
        self,
        method: str,
        path: str,
        *,
        params: dict[str, Any] | None = None,
        json: Any = None,
        data: dict[str, Any] | None = None,
        files: dict[str, Any] | None = None,
    ) -> Any:
        """Send an API request and return the envelope's ``data``.

        Raises:
            AuthenticationError: CTFd rejected the credentials.
            ProviderError: Transport failure, HTTP error, or ``success: false``.
        """
        _LOG.debug("%s %s", method, path)
        try:
            response = await self._http.request(method, path, params=params, json=json, data=data, files=files)
        except httpx.HTTPError as exc:
            raise ProviderError(f"{method} {path} failed: {exc}") from exc

        payload = self._decode(method, path, response)
        if not payload.get("success", False):
            raise ProviderError(
                f"{method} {path} was rejected: {_format_errors(payload)}",
                status_code=response.status_code,
            )
        return payload.get("data")

    async def get(self, path: str, *, params: dict[str, Any] | None = None) -> Any:
        return await self.request("GET", path, params=params)

    async def post(self, path: str, *, json: Any = None, data: dict[str, Any] | None = None, files: Any = None) -> Any:
        return await self.request("POST", path, json=json, data=data, files=files)

    async def patch(self, path: str, *, json: Any) -> Any:
        return await self.request("PATCH", path, json=json)

    async def delete(self, path: str, *, params: dict[str, Any] | None = None) -> None:
        await self.request("DELETE", path, params=params)

    async def download(self, location: str) -> bytes:
        """Fetch raw upload bytes from ``/files/<location>``."""
        path = f"/files/{location.lstrip('/')}"
        try:
            response = await self._http.get(path)
        except httpx.HTTPError as exc:
            raise ProviderError(f"GET {path} failed: {exc}") from exc
        self._raise_for_status("GET", path, response)
        return response.content

    async def login(self, username: str, password: str) -> None:
        """Open an admin session through the login form.

        The CSRF nonce scraped from the login page is kept as the
        ``CSRF-Token`` header, which CTFd requires for session-authenticated
        API writes.
        """
        try:
            page = await self._http.get("/login")
            nonce = _scrape_nonce(page.text)
            response = await self._http.post(
                "/login",
                data={"name": username, "password": password, "nonce": nonce},
                follow_redirects=False,
            )
        except httpx.HTTPError as exc:
            raise AuthenticationError(f"CTFd login failed: {exc}") from exc

        if response.status_code not in (301, 302, 303) or "session" not in self._http.cookies:
            raise AuthenticationError(f"CTFd login failed for user '{username}'", status_code=response.status_code)

        page = await self._http.get("/challenges")
        self._http.headers["CSRF-Token"] = _scrape_nonce(page.text)
        _LOG.debug("Opened CTFd session for %s", username)

    def _decode(self, method: str, path: str, response: httpx.Response) -> dict[str, Any]:
        if response.status_code >= 400:
            try:
                body = response.json()
            except ValueError:
                body = None
            if isinstance(body, dict) and "success" in body and response.status_code not in (401, 403):
                body.setdefault("errors", {"status": response.status_code})
                body["success"] = False
                return body
            self._raise_for_status(method, path, response)
        try:
            payload = response.json()
        except ValueError as exc:
            raise ProviderError(
                f"{method} {path} returned a non-JSON response", status_code=response.status_code
            ) from exc
        if not isinstance(payload, dict):
            raise ProviderError(f"{method} {path} returned an unexpected payload", status_code=response.status_code)
        return payload

    @staticmethod
    def _raise_for_status(method: str, path: str, response: httpx.Response) -> None:
        status = response.status_code
        if status in (401, 403):
            raise AuthenticationError(f"{method} {path} is not authorized (HTTP {status})", status_code=status)
        if status >= 400:
            raise ProviderError(f"{method} {path} failed with HTTP {status}", status_code=status)


def _scrape_nonce(html: str) -> str:
    match = _NONCE_PATTERN.search(html)
    if match is None:
        raise AuthenticationError("CTFd page does not expose a CSRF nonce")
    return match.group(1)


def _format_errors(payload: dict[str, Any]) -> str:
    errors = payload.get("errors") or payload.get("message")
    if not errors:
        return "no details"
    if isinstance(errors, dict):
        parts = []
        for key, value in errors.items():
            text = "; ".join(str(v) for v in value) if isinstance(value, list) else str(value)
            parts.append(f"{key}: {text}")
        return ", ".join(parts)
    if isinstance(errors, list):
        return "; ".join(str(error) for error in errors)
    return str(errors)
