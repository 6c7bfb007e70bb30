"""Sequential execution of a reconciliation plan against a gateway."""

from __future__ import annotations

import asyncio
from collections import Counter

from ctfpilot.contracts.exceptions import ProviderError, ReconcileInvariantError
from ctfpilot.contracts.provider import SubEntityGateway
from ctfpilot.contracts.reconcile import (
    Action,
    ActionOp,
    Diagnostic,
    DiagnosticKind,
    ReconcilePlan,
    ReconcileResult,
    Severity,
)
from ctfpilot.contracts.records import SubRecord
from ctfpilot.reconcile.kinds import KindPolicy, policy_for


class Executor:
    """Applies a plan one action at a time.

    Remote failures never abort the pass: each one is recorded as a
    diagnostic and the next action runs. The cancellation event is checked
    before every remote call; once set, the remaining actions are folded as
    unapplied. A replace pair is one unit for cancellation purposes.
    """

    def __init__(self, gateway: SubEntityGateway, *, cancel: asyncio.Event | None = None) -> None:
        self._gateway = gateway
        self._cancel = cancel

    async def apply(self, plan: ReconcilePlan, parent_id: str) -> ReconcileResult:
        policy = policy_for(plan.kind)
        run = _Run(policy)

        actions = plan.actions
        index = 0
        while index < len(actions):
            action = actions[index]
            if action.is_replace:
                create = _paired_create(actions, index)
                if self._cancelled(run, skipping=2):
                    run.keep(policy.fold_unreplaced(action.require_remote(), action.recorded))
                else:
                    await self._replace(run, action, create, parent_id)
                index += 2
                continue

            if action.op == ActionOp.KEEP:
                run.keep(policy.fold_kept(action.require_desired(), action.require_remote()))
            elif self._cancelled(run, skipping=1):
                self._fold_unapplied(run, action)
            else:
                await self._run_single(run, action, parent_id)
            index += 1

        if run.cancelled:
            run.diagnostics.append(
                Diagnostic(
                    kind=DiagnosticKind.CANCELLED,
                    severity=Severity.WARNING,
                    collection=plan.kind,
                    message=f"cancelled with {run.skipped} action(s) not applied",
                )
            )

        return ReconcileResult(
            kind=plan.kind,
            new_state=run.new_state,
            diagnostics=run.diagnostics,
            cancelled=run.cancelled,
            applied=dict(run.applied),
        )

    def _cancelled(self, run: _Run, *, skipping: int) -> bool:
        if self._cancel is not None and self._cancel.is_set():
            run.cancelled = True
        if run.cancelled:
            run.skipped += skipping
        return run.cancelled

    async def _run_single(self, run: _Run, action: Action, parent_id: str) -> None:
        try:
            if action.op == ActionOp.CREATE:
                desired = action.require_desired()
                echoed = await self._gateway.create(parent_id, desired)
                run.keep(run.policy.fold_created(desired, echoed))
            elif action.op == ActionOp.UPDATE:
                payload = run.policy.fill_unset(action.require_desired(), action.require_remote())
                run.keep(await self._gateway.update(action.require_remote_id(), payload))
            elif action.op == ActionOp.DELETE:
                await self._gateway.delete(action.require_remote_id())
            else:  # pragma: no cover
                raise ReconcileInvariantError(f"unexpected action: {action.op}")
        except ProviderError as exc:
            run.fail(action, exc)
            self._fold_unapplied(run, action)
            return
        run.applied[action.op] += 1

    async def _replace(self, run: _Run, delete: Action, create: Action, parent_id: str) -> None:
        old = delete.require_remote()
        old_id = delete.require_remote_id()
        desired = create.require_desired()
        try:
            await self._gateway.delete(old_id)
        except ProviderError as exc:
            run.fail(delete, exc)
            run.keep(run.policy.fold_unreplaced(old, delete.recorded))
            return
        run.applied[ActionOp.DELETE] += 1

        try:
            echoed = await self._gateway.create(parent_id, desired)
        except ProviderError as exc:
            run.diagnostics.append(
                Diagnostic(
                    kind=DiagnosticKind.REPLACE_PARTIAL,
                    severity=Severity.CRITICAL,
                    collection=create.kind,
                    op=ActionOp.CREATE,
                    entity_id=old_id,
                    message=f"{create.kind.value} #{old_id} was deleted but its replacement failed: {exc}",
                )
            )
            return
        run.applied[ActionOp.CREATE] += 1
        run.keep(run.policy.fold_created(desired, echoed))

    @staticmethod
    def _fold_unapplied(run: _Run, action: Action) -> None:
        # Whatever did not run is still what the remote holds.
        if action.op == ActionOp.UPDATE and action.remote is not None:
            run.keep(action.remote)


class _Run:
    def __init__(self, policy: KindPolicy) -> None:
        self.policy = policy
        self.new_state: list[SubRecord] = []
        self.diagnostics: list[Diagnostic] = []
        self.applied: Counter[ActionOp] = Counter()
        self.cancelled = False
        self.skipped = 0

    def keep(self, record: SubRecord) -> None:
        self.new_state.append(record)

    def fail(self, action: Action, exc: ProviderError) -> None:
        self.diagnostics.append(
            Diagnostic(
                kind=DiagnosticKind.REMOTE_FAILURE,
                severity=Severity.ERROR,
                collection=action.kind,
                op=action.op,
                entity_id=action.target_id,
                message=f"unable to {action.describe()}: {exc}",
            )
        )


def _paired_create(actions: list[Action], index: int) -> Action:
    delete = actions[index]
    following = actions[index + 1] if index + 1 < len(actions) else None
    if (
        delete.op != ActionOp.DELETE
        or following is None
        or following.op != ActionOp.CREATE
        or following.replaces != delete.replaces
    ):
        raise ReconcileInvariantError(f"replace of {delete.kind.value} #{delete.replaces} is not a delete/create pair")
    return following
