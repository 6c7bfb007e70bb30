"""Challenge (parent aggregate) apply pipeline."""

from __future__ import annotations

import asyncio
import base64
from collections.abc import Sequence

from ctfpilot.contracts.challenge import ChallengeSpec, ChallengeState
from ctfpilot.contracts.exceptions import ProviderError, ReconcileError
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
from ctfpilot.contracts.records import KIND_ORDER, FileRecord, SetMember, SubEntityKind, SubRecord
from ctfpilot.engine.progress import ApplyProgress, NullApplyProgress
from ctfpilot.reconcile.kinds import policy_for
from ctfpilot.reconcile.reconciler import Reconciler

CHALLENGE_PHASE = "challenge"


def desired_records(spec: ChallengeSpec, kind: SubEntityKind) -> list[SubRecord]:
    values = spec.collection(kind)
    if policy_for(kind).keyed:
        return values
    return [SetMember(value=value) for value in values]


def declared_values(kind: SubEntityKind, records: Sequence[SubRecord]) -> list[object]:
    if policy_for(kind).keyed:
        return list(records)
    return [record.value for record in records if isinstance(record, SetMember)]


class ChallengeEngine:
    def __init__(
        self,
        provider: Provider,
        *,
        skip_unchanged_sets: bool = False,
        cancel: asyncio.Event | None = None,
        progress: ApplyProgress | None = None,
        dry_run: bool = False,
    ) -> None:
        self._provider = provider
        self._cancel = cancel
        self._dry_run = dry_run
        self._progress: ApplyProgress = progress or NullApplyProgress()
        self._reconciler = Reconciler(skip_unchanged_sets=skip_unchanged_sets, cancel=cancel)

    async def create(self, spec: ChallengeSpec) -> ApplyResult:
        """Create the challenge, then every sub-collection against an empty remote.

        Raises:
            ProviderError: the challenge itself could not be created.
            ReconcileError: cancelled before anything was created.
        """
        self._progress.phase_start(CHALLENGE_PHASE)
        if self._is_cancelled():
            error = ReconcileError("apply cancelled before the challenge was created")
            self._progress.phase_error(CHALLENGE_PHASE, error)
            raise error
        try:
            challenge_id = await self._provider.create_challenge(spec)
        except BaseException as exc:
            self._progress.phase_error(CHALLENGE_PHASE, exc)
            raise
        self._progress.phase_done(CHALLENGE_PHASE)

        collections: dict[SubEntityKind, ReconcileResult] = {}
        for kind in KIND_ORDER:
            self._progress.phase_start(kind.value)
            collections[kind] = await self._reconcile_kind(
                kind, challenge_id, desired_records(spec, kind), remote=[], recorded=None
            )
        return self._result(challenge_id, spec, collections, [], created=True)

    async def update(self, spec: ChallengeSpec, recorded: ChallengeState) -> ApplyResult:
        """Converge an existing challenge.

        Direct fields are patched first, then each sub-collection in fixed
        kind order. A failure on one step is recorded and the next is still
        attempted.
        """
        challenge_id = recorded.id
        diagnostics: list[Diagnostic] = []
        base = recorded.spec

        self._progress.phase_start(CHALLENGE_PHASE)
        if self._is_cancelled():
            self._progress.phase_error(CHALLENGE_PHASE, ReconcileError("cancelled"))
        else:
            try:
                await self._provider.update_challenge(challenge_id, spec)
            except ProviderError as exc:
                diagnostics.append(
                    Diagnostic(
                        kind=DiagnosticKind.REMOTE_FAILURE,
                        severity=Severity.ERROR,
                        op=ActionOp.UPDATE,
                        entity_id=challenge_id,
                        message=f"unable to update challenge #{challenge_id}: {exc}",
                    )
                )
                self._progress.phase_error(CHALLENGE_PHASE, exc)
            else:
                base = spec
                self._progress.phase_done(CHALLENGE_PHASE)

        collections: dict[SubEntityKind, ReconcileResult] = {}
        for kind in KIND_ORDER:
            previous = desired_records(recorded.spec, kind)
            self._progress.phase_start(kind.value)
            remote = await self._list_remote(kind, challenge_id, diagnostics)
            if remote is None:
                collections[kind] = ReconcileResult(kind=kind, new_state=previous, cancelled=self._is_cancelled())
                continue
            collections[kind] = await self._reconcile_kind(
                kind, challenge_id, desired_records(spec, kind), remote=remote, recorded=previous
            )
        return self._result(challenge_id, base, collections, diagnostics, created=False)

    async def plan(self, spec: ChallengeSpec, recorded: ChallengeState | None) -> dict[SubEntityKind, ReconcilePlan]:
        """Preview the actions an apply would take, reading remote state only."""
        plans: dict[SubEntityKind, ReconcilePlan] = {}
        for kind in KIND_ORDER:
            if recorded is None:
                remote: list[SubRecord] = []
                previous = None
            else:
                remote = await self._provider.gateway(kind).list_for_parent(recorded.id)
                previous = desired_records(recorded.spec, kind)
            plans[kind] = self._reconciler.preview(kind, desired_records(spec, kind), remote, previous)
        return plans

    async def read(self, challenge_id: str) -> ChallengeState:
        """Read the full remote state of a challenge, including file fingerprints."""
        spec = await self._provider.get_challenge(challenge_id)
        update: dict[str, list[object]] = {}
        for kind in KIND_ORDER:
            gateway = self._provider.gateway(kind)
            records = await gateway.list_for_parent(challenge_id)
            if kind == SubEntityKind.FILES:
                records = [
                    await self._with_content(gateway, record) for record in records if isinstance(record, FileRecord)
                ]
            update[kind.value] = declared_values(kind, records)
        return ChallengeState(id=challenge_id, spec=spec.model_copy(update=update))

    async def delete(self, state: ChallengeState) -> None:
        # Nested rows are removed by the platform along with the challenge.
        await self._provider.delete_challenge(state.id)

    async def _reconcile_kind(
        self,
        kind: SubEntityKind,
        challenge_id: str,
        desired: list[SubRecord],
        *,
        remote: list[SubRecord],
        recorded: list[SubRecord] | None,
    ) -> ReconcileResult:
        phase = kind.value
        result = await self._reconciler.reconcile(
            self._provider.gateway(kind), challenge_id, desired, remote, recorded
        )
        self._progress.item_done(phase, sum(result.applied.values()))
        if result.failed:
            self._progress.phase_error(phase, ReconcileError("; ".join(str(d) for d in result.diagnostics)))
        else:
            self._progress.phase_done(phase)
        return result

    async def _list_remote(
        self, kind: SubEntityKind, challenge_id: str, diagnostics: list[Diagnostic]
    ) -> list[SubRecord] | None:
        if self._is_cancelled():
            self._progress.phase_error(kind.value, ReconcileError("cancelled"))
            return None
        try:
            return await self._provider.gateway(kind).list_for_parent(challenge_id)
        except ProviderError as exc:
            diagnostics.append(
                Diagnostic(
                    kind=DiagnosticKind.REMOTE_FAILURE,
                    severity=Severity.ERROR,
                    collection=kind,
                    message=f"unable to list {kind.value} of challenge #{challenge_id}: {exc}",
                )
            )
            self._progress.phase_error(kind.value, exc)
            return None

    @staticmethod
    async def _with_content(gateway: SubEntityGateway, record: FileRecord) -> FileRecord:
        raw = await gateway.fetch_content(record)
        return FileRecord(
            id=record.id,
            name=record.name,
            location=record.location,
            content_b64=base64.b64encode(raw).decode("ascii"),
        )

    def _is_cancelled(self) -> bool:
        return self._cancel is not None and self._cancel.is_set()

    def _result(
        self,
        challenge_id: str,
        base: ChallengeSpec,
        collections: dict[SubEntityKind, ReconcileResult],
        diagnostics: list[Diagnostic],
        *,
        created: bool,
    ) -> ApplyResult:
        update = {kind.value: declared_values(kind, result.new_state) for kind, result in collections.items()}
        all_diagnostics = list(diagnostics)
        for kind in KIND_ORDER:
            result = collections.get(kind)
            if result is not None:
                all_diagnostics.extend(result.diagnostics)

        cancelled = self._is_cancelled() or any(result.cancelled for result in collections.values())
        if cancelled and not any(d.kind == DiagnosticKind.CANCELLED for d in all_diagnostics):
            all_diagnostics.append(
                Diagnostic(kind=DiagnosticKind.CANCELLED, severity=Severity.WARNING, message="apply was cancelled")
            )

        return ApplyResult(
            state=ChallengeState(id=challenge_id, spec=base.model_copy(update=update)),
            diagnostics=all_diagnostics,
            collections=collections,
            created=created,
            cancelled=cancelled,
            dry_run=self._dry_run,
        )
