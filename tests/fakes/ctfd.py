"""Routable CTFd stand-in for ``httpx.MockTransport``."""

from __future__ import annotations

import json
from typing import Any

import httpx


def envelope(data: Any = None, *, success: bool = True, errors: Any = None) -> dict[str, Any]:
    body: dict[str, Any] = {"success": success, "data": data}
    if errors is not None:
        body["errors"] = errors
    return body


class FakeCTFd:
    """Answers requests from a ``(method, path) -> response`` table and records them."""

    def __init__(self) -> None:
        self.requests: list[httpx.Request] = []
        self._routes: dict[tuple[str, str], httpx.Response | Exception] = {}

    def route(self, method: str, path: str, response: httpx.Response | Exception) -> None:
        self._routes[(method, path)] = response

    def json(self, method: str, path: str, data: Any = None, *, status: int = 200) -> None:
        self.route(method, path, httpx.Response(status, json=envelope(data)))

    def transport(self) -> httpx.MockTransport:
        return httpx.MockTransport(self)

    def body(self, index: int = -1) -> Any:
        return json.loads(self.requests[index].content)

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        response = self._routes.get((request.method, request.url.path))
        if response is None:
            return httpx.Response(404, json={"success": False, "message": "not found"})
        if isinstance(response, Exception):
            raise response
        return response
