"""Per-kind reconciliation policies."""

from __future__ import annotations

from dataclasses import dataclass

from ctfpilot.contracts.records import FileRecord, SetMember, SubEntityKind, SubRecord


@dataclass(frozen=True, slots=True)
class KindPolicy:
    kind: SubEntityKind
    keyed: bool
    replace_only: bool = False
    mutable_fields: tuple[str, ...] = ()
    unordered_fields: frozenset[str] = frozenset()

    def fingerprint(self, record: SubRecord | None) -> str | None:
        if isinstance(record, FileRecord):
            return record.sha256
        return None

    def fill_unset(self, desired: SubRecord, remote: SubRecord) -> SubRecord:
        """Update payload for *desired*: fields it leaves unset keep their remote value."""
        inherited = {
            name: getattr(remote, name)
            for name in self.mutable_fields
            if getattr(desired, name, None) is None and getattr(remote, name, None) is not None
        }
        if not inherited:
            return desired
        return desired.model_copy(update=inherited)

    def fold_created(self, desired: SubRecord, echoed: SubRecord) -> SubRecord:
        """New-state record for a successful create."""
        if isinstance(desired, FileRecord):
            return desired.model_copy(update={"id": echoed.id, "location": getattr(echoed, "location", None)})
        if isinstance(desired, SetMember):
            return SetMember(value=desired.value, id=echoed.id)
        return echoed

    def fold_kept(self, desired: SubRecord, remote: SubRecord) -> SubRecord:
        """New-state record for an entity that is already converged remotely."""
        if isinstance(desired, FileRecord):
            location = getattr(remote, "location", None) or desired.location
            return desired.model_copy(update={"id": remote.id, "location": location})
        return remote

    def fold_unreplaced(self, remote: SubRecord, recorded: SubRecord | None) -> SubRecord:
        """New-state record when a replace never got past its delete half."""
        if recorded is not None and recorded.id == remote.id:
            return recorded
        return remote


POLICIES: dict[SubEntityKind, KindPolicy] = {
    SubEntityKind.FLAGS: KindPolicy(
        kind=SubEntityKind.FLAGS,
        keyed=True,
        mutable_fields=("content", "data", "type"),
    ),
    SubEntityKind.HINTS: KindPolicy(
        kind=SubEntityKind.HINTS,
        keyed=True,
        mutable_fields=("content", "cost", "requirements"),
        unordered_fields=frozenset({"requirements"}),
    ),
    SubEntityKind.FILES: KindPolicy(kind=SubEntityKind.FILES, keyed=True, replace_only=True),
    SubEntityKind.TAGS: KindPolicy(kind=SubEntityKind.TAGS, keyed=False),
    SubEntityKind.TOPICS: KindPolicy(kind=SubEntityKind.TOPICS, keyed=False),
}


def policy_for(kind: SubEntityKind) -> KindPolicy:
    return POLICIES[kind]
