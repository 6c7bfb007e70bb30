"""Authentication resolvers."""

from ctfpilot.auth.base import Credentials, CredentialsResolver
from ctfpilot.auth.factory import create_credentials_resolver

__all__ = ["Credentials", "CredentialsResolver", "create_credentials_resolver"]
