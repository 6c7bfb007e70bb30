"""Identity binding between a declaration and the recorded state."""

from __future__ import annotations

from ctfpilot.contracts.challenge import ChallengeSpec, ChallengeState
from ctfpilot.contracts.records import KEYED_KINDS, KIND_ORDER, KeyedRecord


def bind_identities(spec: ChallengeSpec, recorded: ChallengeState | None) -> ChallengeSpec:
    """Give declared keyed records the identity recorded at the same position.

    A record that spells out its own ``id`` keeps it, and a recorded identity
    already claimed explicitly elsewhere in the declaration is not reused.
    """
    if recorded is None:
        return spec

    update: dict[str, list[KeyedRecord]] = {}
    for kind in KIND_ORDER:
        if kind not in KEYED_KINDS:
            continue
        declared: list[KeyedRecord] = spec.collection(kind)
        previous: list[KeyedRecord] = recorded.spec.collection(kind)
        claimed = {record.id for record in declared if record.id is not None}

        bound: list[KeyedRecord] = []
        for index, record in enumerate(declared):
            if record.id is None and index < len(previous):
                candidate = previous[index].id
                if candidate is not None and candidate not in claimed:
                    record = record.model_copy(update={"id": candidate})
                    claimed.add(candidate)
            bound.append(record)
        update[kind.value] = bound
    return spec.model_copy(update=update)
