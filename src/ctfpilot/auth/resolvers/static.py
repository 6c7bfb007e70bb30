"""Static token resolver."""

from __future__ import annotations

from dataclasses import dataclass

from ctfpilot.auth.base import Credentials, CredentialsResolver
from ctfpilot.contracts.exceptions import AuthenticationError


@dataclass(frozen=True)
class StaticTokenResolver(CredentialsResolver):
    token: str

    async def resolve(self) -> Credentials:
        resolved = self.token.strip()
        if not resolved:
            raise AuthenticationError("Static token is empty")
        return Credentials(token=resolved)
