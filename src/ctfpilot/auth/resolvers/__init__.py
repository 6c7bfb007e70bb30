"""Concrete credentials resolvers."""

from ctfpilot.auth.resolvers.env import EnvCredentialsResolver
from ctfpilot.auth.resolvers.login import LoginCredentialsResolver
from ctfpilot.auth.resolvers.static import StaticTokenResolver

__all__ = ["EnvCredentialsResolver", "LoginCredentialsResolver", "StaticTokenResolver"]
