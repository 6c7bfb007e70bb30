"""Per-collection reconciliation entry point."""

from __future__ import annotations

import asyncio
from collections.abc import Sequence

from ctfpilot.contracts.exceptions import DuplicateIdentityError
from ctfpilot.contracts.provider import SubEntityGateway
from ctfpilot.contracts.reconcile import Diagnostic, DiagnosticKind, ReconcilePlan, ReconcileResult, Severity
from ctfpilot.contracts.records import SubEntityKind, SubRecord
from ctfpilot.reconcile.executor import Executor
from ctfpilot.reconcile.planner import plan


class Reconciler:
    def __init__(self, *, skip_unchanged_sets: bool = False, cancel: asyncio.Event | None = None) -> None:
        self._skip_unchanged_sets = skip_unchanged_sets
        self._cancel = cancel

    def preview(
        self,
        kind: SubEntityKind,
        desired: Sequence[SubRecord],
        remote: Sequence[SubRecord],
        recorded: Sequence[SubRecord] | None = None,
    ) -> ReconcilePlan:
        return plan(kind, desired, remote, recorded, skip_unchanged_sets=self._skip_unchanged_sets)

    async def reconcile(
        self,
        gateway: SubEntityGateway,
        parent_id: str,
        desired: Sequence[SubRecord],
        remote: Sequence[SubRecord],
        recorded: Sequence[SubRecord] | None = None,
    ) -> ReconcileResult:
        """Converge one sub-collection and return the state to record.

        A matcher defect aborts this collection only: nothing is applied and
        the recorded state is carried forward. Invariant violations propagate.
        """
        kind = gateway.kind
        try:
            actions = self.preview(kind, desired, remote, recorded)
        except DuplicateIdentityError as exc:
            return ReconcileResult(
                kind=kind,
                new_state=list(recorded or ()),
                diagnostics=[
                    Diagnostic(
                        kind=DiagnosticKind.MATCHER_DEFECT,
                        severity=Severity.ERROR,
                        collection=kind,
                        message=str(exc),
                    )
                ],
            )
        return await Executor(gateway, cancel=self._cancel).apply(actions, parent_id)
