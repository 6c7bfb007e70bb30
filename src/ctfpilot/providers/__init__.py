"""Provider implementations and factory."""

from ctfpilot.providers.ctfd import CTFdProvider
from ctfpilot.providers.dry_run import DryRunGateway, DryRunProvider
from ctfpilot.providers.factory import create_provider

__all__ = ["CTFdProvider", "DryRunGateway", "DryRunProvider", "create_provider"]
