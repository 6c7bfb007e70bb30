"""Reconciliation planning for one sub-collection."""

from __future__ import annotations

from collections import Counter
from collections.abc import Sequence

from ctfpilot.contracts.exceptions import ReconcileInvariantError
from ctfpilot.contracts.reconcile import Action, ActionOp, ChangeDecision, MatchResult, ReconcilePlan
from ctfpilot.contracts.records import SetMember, SubEntityKind, SubRecord
from ctfpilot.reconcile.detector import needs_change
from ctfpilot.reconcile.kinds import policy_for
from ctfpilot.reconcile.matcher import match


def plan(
    kind: SubEntityKind,
    desired: Sequence[SubRecord],
    remote: Sequence[SubRecord],
    recorded: Sequence[SubRecord] | None = None,
    *,
    skip_unchanged_sets: bool = False,
) -> ReconcilePlan:
    """Compute the ordered action list converging ``remote`` to ``desired``.

    Keyed kinds emit, in declared order, one ``KEEP``/``UPDATE``/``CREATE``
    per desired record (a replace is a ``DELETE`` immediately followed by its
    ``CREATE``), then every orphan ``DELETE``. Unkeyed kinds are rebuilt:
    every remote row is deleted, then every desired value is created.

    Raises:
        DuplicateIdentityError: two desired records share an identity.
        ReconcileInvariantError: the match result is not a partition.
    """
    if not policy_for(kind).keyed:
        return _plan_set(kind, desired, remote, skip_unchanged_sets=skip_unchanged_sets)

    result = match(kind, desired, remote)
    _verify_partition(desired, remote, result)

    recorded_by_id = {record.id: record for record in recorded or () if record.id is not None}
    remote_by_desired = {id(pair_desired): pair_remote for pair_desired, pair_remote in result.matched}

    actions: list[Action] = []
    for record in desired:
        counterpart = remote_by_desired.get(id(record))
        if counterpart is None:
            actions.append(Action(op=ActionOp.CREATE, kind=kind, desired=record))
            continue

        previous = recorded_by_id.get(counterpart.id)
        decision = needs_change(kind, record, counterpart, previous)
        if decision == ChangeDecision.NO_CHANGE:
            actions.append(Action(op=ActionOp.KEEP, kind=kind, desired=record, remote=counterpart, recorded=previous))
        elif decision == ChangeDecision.UPDATE:
            actions.append(Action(op=ActionOp.UPDATE, kind=kind, desired=record, remote=counterpart, recorded=previous))
        else:
            actions.extend(_replace_pair(kind, record, counterpart, previous))

    for orphan in result.unmatched_remote:
        actions.append(Action(op=ActionOp.DELETE, kind=kind, remote=orphan))

    return ReconcilePlan(kind=kind, actions=actions)


def _replace_pair(
    kind: SubEntityKind,
    desired: SubRecord,
    remote: SubRecord,
    recorded: SubRecord | None,
) -> list[Action]:
    old_id = remote.id
    fresh = desired.model_copy(update={"id": None})
    return [
        Action(op=ActionOp.DELETE, kind=kind, desired=desired, remote=remote, recorded=recorded, replaces=old_id),
        Action(op=ActionOp.CREATE, kind=kind, desired=fresh, remote=remote, recorded=recorded, replaces=old_id),
    ]


def _plan_set(
    kind: SubEntityKind,
    desired: Sequence[SubRecord],
    remote: Sequence[SubRecord],
    *,
    skip_unchanged_sets: bool,
) -> ReconcilePlan:
    result = match(kind, desired, remote)
    if skip_unchanged_sets and _same_multiset(result.unmatched_desired, result.unmatched_remote):
        pairs = zip(
            sorted(result.unmatched_desired, key=_set_value),
            sorted(result.unmatched_remote, key=_set_value),
            strict=True,
        )
        keeps = [Action(op=ActionOp.KEEP, kind=kind, desired=wanted, remote=actual) for wanted, actual in pairs]
        return ReconcilePlan(kind=kind, actions=keeps)

    actions = [Action(op=ActionOp.DELETE, kind=kind, remote=record) for record in result.unmatched_remote]
    actions.extend(Action(op=ActionOp.CREATE, kind=kind, desired=record) for record in result.unmatched_desired)
    return ReconcilePlan(kind=kind, actions=actions)


def _set_value(record: SubRecord) -> str:
    if not isinstance(record, SetMember):
        raise ReconcileInvariantError(f"expected a set member, got {type(record).__name__}")
    return record.value


def _same_multiset(desired: Sequence[SubRecord], remote: Sequence[SubRecord]) -> bool:
    return Counter(map(_set_value, desired)) == Counter(map(_set_value, remote))


def _verify_partition(desired: Sequence[SubRecord], remote: Sequence[SubRecord], result: MatchResult) -> None:
    desired_seen = Counter(id(pair[0]) for pair in result.matched)
    desired_seen.update(id(record) for record in result.unmatched_desired)
    remote_seen = Counter(id(pair[1]) for pair in result.matched)
    remote_seen.update(id(record) for record in result.unmatched_remote)

    if desired_seen != Counter(id(record) for record in desired):
        raise ReconcileInvariantError("desired records are not partitioned exactly once")
    if remote_seen != Counter(id(record) for record in remote):
        raise ReconcileInvariantError("remote records are not partitioned exactly once")
    for wanted, actual in result.matched:
        if wanted.id is None or wanted.id != actual.id:
            raise ReconcileInvariantError(f"matched pair has mismatched identities: {wanted.id!r} != {actual.id!r}")
