"""Change detection for matched sub-entity pairs."""

from __future__ import annotations

from typing import Any

from ctfpilot.contracts.reconcile import ChangeDecision
from ctfpilot.contracts.records import SubEntityKind, SubRecord
from ctfpilot.reconcile.kinds import KindPolicy, policy_for


def needs_change(
    kind: SubEntityKind,
    desired: SubRecord,
    remote: SubRecord,
    recorded: SubRecord | None,
) -> ChangeDecision:
    policy = policy_for(kind)
    if policy.replace_only:
        return _replace_decision(policy, desired, recorded)
    if any(_field_differs(policy, name, desired, remote) for name in policy.mutable_fields):
        return ChangeDecision.UPDATE
    return ChangeDecision.NO_CHANGE


def _replace_decision(policy: KindPolicy, desired: SubRecord, recorded: SubRecord | None) -> ChangeDecision:
    # Compared against the recorded state: the remote side would need an
    # extra content download per file.
    if recorded is None:
        return ChangeDecision.REPLACE
    wanted = policy.fingerprint(desired)
    applied = policy.fingerprint(recorded)
    if wanted is None or applied is None or wanted != applied:
        return ChangeDecision.REPLACE
    return ChangeDecision.NO_CHANGE


def _field_differs(policy: KindPolicy, name: str, desired: SubRecord, remote: SubRecord) -> bool:
    wanted: Any = getattr(desired, name, None)
    if wanted is None:
        return False
    actual: Any = getattr(remote, name, None)
    if name in policy.unordered_fields:
        return sorted(wanted) != sorted(actual or [])
    return bool(wanted != actual)
