from pathlib import Path

import pytest

from ctfpilot.auth.factory import create_credentials_resolver
from ctfpilot.auth.resolvers.env import EnvCredentialsResolver
from ctfpilot.auth.resolvers.login import LoginCredentialsResolver
from ctfpilot.auth.resolvers.static import StaticTokenResolver
from ctfpilot.contracts.config import CtfPilotConfig
from ctfpilot.contracts.exceptions import ConfigError


def _make_config(*, auth: str, token: str | None = None) -> CtfPilotConfig:
    return CtfPilotConfig(
        url="https://ctfd.example.com",
        auth=auth,
        token=token,
        challenge_path=Path("challenge.json"),
    )


def test_factory_creates_env_resolver() -> None:
    resolver = create_credentials_resolver(_make_config(auth="env"))

    assert isinstance(resolver, EnvCredentialsResolver)


def test_factory_creates_login_resolver() -> None:
    resolver = create_credentials_resolver(_make_config(auth="login"))

    assert isinstance(resolver, LoginCredentialsResolver)


def test_factory_creates_static_resolver() -> None:
    resolver = create_credentials_resolver(_make_config(auth="token", token="tok_123"))

    assert isinstance(resolver, StaticTokenResolver)
    assert resolver.token == "tok_123"


def test_factory_rejects_unknown_auth_mode() -> None:
    config = CtfPilotConfig.model_construct(
        url="https://ctfd.example.com", auth="oauth", token=None, challenge_path=Path("challenge.json")
    )

    with pytest.raises(ConfigError, match="Unknown auth mode"):
        create_credentials_resolver(config)
