"""Reconciliation contracts: plans, actions, diagnostics and results."""

from __future__ import annotations

from collections import Counter
from dataclasses import dataclass, field
from enum import StrEnum

from pydantic import BaseModel, Field

from ctfpilot.contracts.challenge import ChallengeState
from ctfpilot.contracts.exceptions import ReconcileInvariantError
from ctfpilot.contracts.records import SubEntityKind, SubRecord


class ChangeDecision(StrEnum):
    NO_CHANGE = "no_change"
    UPDATE = "update"
    REPLACE = "replace"


class ActionOp(StrEnum):
    CREATE = "create"
    UPDATE = "update"
    DELETE = "delete"
    KEEP = "keep"


@dataclass(frozen=True, slots=True)
class MatchResult:
    matched: list[tuple[SubRecord, SubRecord]] = field(default_factory=list)
    unmatched_desired: list[SubRecord] = field(default_factory=list)
    unmatched_remote: list[SubRecord] = field(default_factory=list)


@dataclass(frozen=True, slots=True)
class Action:
    """One step of a plan.

    Both halves of a replace carry ``replaces`` (the identity being
    invalidated); a replace is always a ``DELETE`` immediately followed by
    its ``CREATE``.
    """

    op: ActionOp
    kind: SubEntityKind
    desired: SubRecord | None = None
    remote: SubRecord | None = None
    recorded: SubRecord | None = None
    replaces: str | None = None

    @property
    def is_replace(self) -> bool:
        return self.replaces is not None

    def require_desired(self) -> SubRecord:
        if self.desired is None:
            raise ReconcileInvariantError(f"{self.describe()} carries no desired record")
        return self.desired

    def require_remote(self) -> SubRecord:
        if self.remote is None:
            raise ReconcileInvariantError(f"{self.describe()} carries no remote record")
        return self.remote

    def require_remote_id(self) -> str:
        remote_id = self.require_remote().id
        if remote_id is None:
            raise ReconcileInvariantError(f"{self.describe()} targets a remote record without an id")
        return remote_id

    @property
    def target_id(self) -> str | None:
        if self.remote is not None:
            return self.remote.id
        if self.desired is not None:
            return self.desired.id
        return None

    def describe(self) -> str:
        target = self.target_id
        label = self.op.value if not self.is_replace else f"replace/{self.op.value}"
        return f"{label} {self.kind.value}" + (f" #{target}" if target else "")


@dataclass(frozen=True, slots=True)
class ReconcilePlan:
    kind: SubEntityKind
    actions: list[Action] = field(default_factory=list)

    def counts(self) -> Counter[ActionOp]:
        return Counter(action.op for action in self.actions)

    @property
    def converged(self) -> bool:
        return all(action.op == ActionOp.KEEP for action in self.actions)


class Severity(StrEnum):
    WARNING = "warning"
    ERROR = "error"
    CRITICAL = "critical"


class DiagnosticKind(StrEnum):
    MATCHER_DEFECT = "matcher_defect"
    REMOTE_FAILURE = "remote_failure"
    REPLACE_PARTIAL = "replace_partial"
    CANCELLED = "cancelled"


class Diagnostic(BaseModel):
    kind: DiagnosticKind
    severity: Severity
    message: str
    collection: SubEntityKind | None = None
    op: ActionOp | None = None
    entity_id: str | None = None

    model_config = {"frozen": True}

    def __str__(self) -> str:
        scope = self.collection.value if self.collection is not None else "challenge"
        return f"[{self.severity.value}] {scope}: {self.message}"


class ReconcileResult(BaseModel):
    """Outcome of one reconciliation pass over a single sub-collection."""

    kind: SubEntityKind
    new_state: list[SubRecord] = Field(default_factory=list)
    diagnostics: list[Diagnostic] = Field(default_factory=list)
    cancelled: bool = False
    applied: dict[ActionOp, int] = Field(default_factory=dict)

    @property
    def failed(self) -> bool:
        return self.cancelled or bool(self.diagnostics)


class ApplyResult(BaseModel):
    """Outcome of a whole-challenge apply (create or update)."""

    state: ChallengeState
    diagnostics: list[Diagnostic] = Field(default_factory=list)
    collections: dict[SubEntityKind, ReconcileResult] = Field(default_factory=dict)
    created: bool = False
    cancelled: bool = False
    dry_run: bool = False

    @property
    def failed(self) -> bool:
        return self.cancelled or bool(self.diagnostics)
