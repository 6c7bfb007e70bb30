"""Factory for creating provider instances."""

from __future__ import annotations

from ctfpilot.auth.base import Credentials
from ctfpilot.contracts.config import CtfPilotConfig
from ctfpilot.contracts.provider import Provider
from ctfpilot.providers.ctfd.provider import CTFdProvider


def create_provider(config: CtfPilotConfig, credentials: Credentials) -> Provider:
    """Create a CTFd provider for *config*.

    The returned provider is an async context manager::

        async with create_provider(config, credentials) as provider:
            spec = await provider.get_challenge("1")
    """
    return CTFdProvider(
        url=config.base_url,
        token=credentials.token,
        username=credentials.username,
        password=credentials.password,
        max_retries=config.max_retries,
        timeout=config.timeout,
    )
