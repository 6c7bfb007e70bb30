"""Admin login credentials resolver."""

from __future__ import annotations

import os

from ctfpilot.auth.base import Credentials, CredentialsResolver
from ctfpilot.contracts.exceptions import AuthenticationError


class LoginCredentialsResolver(CredentialsResolver):
    async def resolve(self) -> Credentials:
        username = (os.getenv("CTFD_ADMIN_USERNAME") or "").strip()
        password = os.getenv("CTFD_ADMIN_PASSWORD") or ""
        if not username or not password:
            raise AuthenticationError("CTFD_ADMIN_USERNAME and CTFD_ADMIN_PASSWORD must both be set")
        return Credentials(username=username, password=password)
