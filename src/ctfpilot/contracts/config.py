"""Configuration contracts."""

from __future__ import annotations

from pathlib import Path

from pydantic import BaseModel, Field, model_validator


class CtfPilotConfig(BaseModel):
    url: str
    auth: str = "env"
    token: str | None = None
    challenge_path: Path
    state_path: Path = Path("ctfpilot-state.json")
    max_retries: int = Field(default=3, ge=0, le=10)
    timeout: float = Field(default=30.0, gt=0)
    skip_unchanged_sets: bool = False

    model_config = {"frozen": True}

    @model_validator(mode="after")
    def validate_url(self) -> CtfPilotConfig:
        if not self.url.startswith(("http://", "https://")):
            raise ValueError("url must start with http:// or https://")
        return self

    @model_validator(mode="after")
    def validate_auth_token(self) -> CtfPilotConfig:
        token = (self.token or "").strip()
        if self.auth == "token":
            if not token:
                raise ValueError("token auth requires a non-empty token")
            return self
        if token:
            raise ValueError("token must be unset when auth is not 'token'")
        if self.auth not in {"env", "login", "token"}:
            raise ValueError("auth must be one of: env, login, token")
        return self

    @property
    def base_url(self) -> str:
        return self.url.rstrip("/")
