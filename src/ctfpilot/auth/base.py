"""Auth resolver interfaces."""

from __future__ import annotations

from abc import ABC, abstractmethod

from pydantic import BaseModel, model_validator


class Credentials(BaseModel):
    """Either an admin API token or an admin username/password pair."""

    token: str | None = None
    username: str | None = None
    password: str | None = None

    model_config = {"frozen": True}

    @model_validator(mode="after")
    def validate_pair(self) -> Credentials:
        if self.token is None and not (self.username and self.password):
            raise ValueError("credentials need a token or both username and password")
        return self


class CredentialsResolver(ABC):
    @abstractmethod
    async def resolve(self) -> Credentials:
        """Resolve and return CTFd credentials."""
