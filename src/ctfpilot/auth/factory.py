"""Credentials resolver factory."""

from __future__ import annotations

from ctfpilot.auth.base import CredentialsResolver
from ctfpilot.auth.resolvers.env import EnvCredentialsResolver
from ctfpilot.auth.resolvers.login import LoginCredentialsResolver
from ctfpilot.auth.resolvers.static import StaticTokenResolver
from ctfpilot.contracts.config import CtfPilotConfig
from ctfpilot.contracts.exceptions import ConfigError

RESOLVERS: dict[str, type[CredentialsResolver]] = {
    "env": EnvCredentialsResolver,
    "login": LoginCredentialsResolver,
    "token": StaticTokenResolver,
}


def create_credentials_resolver(config: CtfPilotConfig) -> CredentialsResolver:
    auth_mode = config.auth
    if auth_mode not in RESOLVERS:
        raise ConfigError(f"Unknown auth mode: {auth_mode}")

    if auth_mode == "token":
        return StaticTokenResolver(token=config.token or "")
    return RESOLVERS[auth_mode]()
