"""Exception hierarchy for ctfpilot."""

from __future__ import annotations


class CtfPilotError(Exception):
    """Base exception for all ctfpilot errors."""


class ConfigError(CtfPilotError):
    """Configuration loading or validation failure."""


class ChallengeLoadError(CtfPilotError):
    """Challenge declaration loading/parsing failure."""


class ChallengeValidationError(CtfPilotError):
    """Challenge declaration semantic validation failure."""

    def __init__(self, errors: list[str]) -> None:
        self.errors = errors
        joined = "\n".join(f"  - {e}" for e in errors)
        super().__init__(f"Challenge validation failed:\n{joined}")


class StateError(CtfPilotError):
    """Recorded state could not be read or written."""


class ProviderError(CtfPilotError):
    """Base remote operation failure."""

    def __init__(self, message: str, *, status_code: int | None = None) -> None:
        super().__init__(message)
        self.status_code = status_code


class AuthenticationError(ProviderError):
    """Authentication/authorization failure."""


class ReconcileError(CtfPilotError):
    """Reconciliation could not safely proceed."""


class DuplicateIdentityError(ReconcileError):
    """Two desired sub-entities carry the same remote identity."""

    def __init__(self, kind: str, identities: list[str]) -> None:
        self.kind = kind
        self.identities = identities
        joined = ", ".join(identities)
        super().__init__(f"duplicate {kind} identities in desired collection: {joined}")


class ReconcileInvariantError(ReconcileError):
    """Internal invariant violated; the pass is terminated."""
