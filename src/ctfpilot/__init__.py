"""Public API surface for ctfpilot."""

__version__ = "0.4.0"

from ctfpilot.auth import Credentials, CredentialsResolver, create_credentials_resolver
from ctfpilot.config import load_config
from ctfpilot.contracts.challenge import ChallengeSpec, ChallengeState, Requirements
from ctfpilot.contracts.config import CtfPilotConfig
from ctfpilot.contracts.exceptions import (
    AuthenticationError,
    ChallengeLoadError,
    ChallengeValidationError,
    ConfigError,
    CtfPilotError,
    DuplicateIdentityError,
    ProviderError,
    ReconcileError,
    ReconcileInvariantError,
    StateError,
)
from ctfpilot.contracts.provider import Provider, SubEntityGateway
from ctfpilot.contracts.reconcile import (
    ActionOp,
    ApplyResult,
    Diagnostic,
    DiagnosticKind,
    ReconcilePlan,
    ReconcileResult,
    Severity,
)
from ctfpilot.contracts.records import KIND_ORDER, FileRecord, FlagRecord, HintRecord, SetMember, SubEntityKind
from ctfpilot.engine import ApplyProgress, ChallengeEngine
from ctfpilot.providers import CTFdProvider, DryRunProvider, create_provider
from ctfpilot.sdk import CtfPilot, load_challenge

__all__ = [
    "KIND_ORDER",
    "ActionOp",
    "ApplyProgress",
    "ApplyResult",
    "AuthenticationError",
    "CTFdProvider",
    "ChallengeEngine",
    "ChallengeLoadError",
    "ChallengeSpec",
    "ChallengeState",
    "ChallengeValidationError",
    "ConfigError",
    "Credentials",
    "CredentialsResolver",
    "CtfPilot",
    "CtfPilotConfig",
    "CtfPilotError",
    "Diagnostic",
    "DiagnosticKind",
    "DryRunProvider",
    "DuplicateIdentityError",
    "FileRecord",
    "FlagRecord",
    "HintRecord",
    "Provider",
    "ProviderError",
    "ReconcileError",
    "ReconcileInvariantError",
    "ReconcilePlan",
    "ReconcileResult",
    "Requirements",
    "SetMember",
    "Severity",
    "StateError",
    "SubEntityGateway",
    "SubEntityKind",
    "create_credentials_resolver",
    "create_provider",
    "load_challenge",
    "load_config",
]
