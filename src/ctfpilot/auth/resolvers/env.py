"""Environment credentials resolver."""

from __future__ import annotations

import os

from ctfpilot.auth.base import Credentials, CredentialsResolver
from ctfpilot.contracts.exceptions import AuthenticationError


class EnvCredentialsResolver(CredentialsResolver):
    """Reads ``CTFD_API_KEY``, falling back to the admin login variables."""

    async def resolve(self) -> Credentials:
        token = (os.getenv("CTFD_API_KEY") or "").strip()
        if token:
            return Credentials(token=token)
        username = (os.getenv("CTFD_ADMIN_USERNAME") or "").strip()
        password = os.getenv("CTFD_ADMIN_PASSWORD") or ""
        if username and password:
            return Credentials(username=username, password=password)
        raise AuthenticationError(
            "CTFD_API_KEY is not set, and CTFD_ADMIN_USERNAME/CTFD_ADMIN_PASSWORD are incomplete"
        )
