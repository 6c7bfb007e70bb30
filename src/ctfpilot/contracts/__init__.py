"""Public contracts for ctfpilot."""

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
    Action,
    ActionOp,
    ApplyResult,
    ChangeDecision,
    Diagnostic,
    DiagnosticKind,
    MatchResult,
    ReconcilePlan,
    ReconcileResult,
    Severity,
)
from ctfpilot.contracts.records import (
    KIND_ORDER,
    FileRecord,
    FlagRecord,
    HintRecord,
    SetMember,
    SubEntityKind,
    SubRecord,
)

__all__ = [
    "KIND_ORDER",
    "Action",
    "ActionOp",
    "ApplyResult",
    "AuthenticationError",
    "ChallengeLoadError",
    "ChallengeSpec",
    "ChallengeState",
    "ChallengeValidationError",
    "ChangeDecision",
    "ConfigError",
    "CtfPilotConfig",
    "CtfPilotError",
    "Diagnostic",
    "DiagnosticKind",
    "DuplicateIdentityError",
    "FileRecord",
    "FlagRecord",
    "HintRecord",
    "MatchResult",
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
    "SubRecord",
]
