"""Identity matching between desired and remote sub-collections."""

from __future__ import annotations

from collections import Counter
from collections.abc import Sequence

from ctfpilot.contracts.exceptions import DuplicateIdentityError
from ctfpilot.contracts.reconcile import MatchResult
from ctfpilot.contracts.records import SubEntityKind, SubRecord
from ctfpilot.reconcile.kinds import policy_for


def match(kind: SubEntityKind, desired: Sequence[SubRecord], remote: Sequence[SubRecord]) -> MatchResult:
    """Partition ``desired`` and ``remote`` into matched pairs and leftovers.

    Keyed kinds match on identity only: a desired record without an identity
    is always new, and a desired identity that no longer exists remotely is
    treated as new as well. Unkeyed kinds never match anything.
    """
    if not policy_for(kind).keyed:
        return MatchResult(unmatched_desired=list(desired), unmatched_remote=list(remote))

    _check_duplicates(kind, desired)

    remote_by_id = {record.id: record for record in remote if record.id is not None}
    matched: list[tuple[SubRecord, SubRecord]] = []
    unmatched_desired: list[SubRecord] = []
    claimed: set[str] = set()
    for record in desired:
        if record.id is None or record.id not in remote_by_id:
            unmatched_desired.append(record)
            continue
        matched.append((record, remote_by_id[record.id]))
        claimed.add(record.id)

    unmatched_remote = [record for record in remote if record.id not in claimed]
    return MatchResult(matched=matched, unmatched_desired=unmatched_desired, unmatched_remote=unmatched_remote)


def _check_duplicates(kind: SubEntityKind, desired: Sequence[SubRecord]) -> None:
    counts = Counter(record.id for record in desired if record.id is not None)
    duplicates = sorted(identity for identity, count in counts.items() if count > 1)
    if duplicates:
        raise DuplicateIdentityError(kind.value, duplicates)
