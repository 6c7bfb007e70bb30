"""In-memory dry-run provider."""

from __future__ import annotations

from types import TracebackType

from ctfpilot.contracts.challenge import ChallengeSpec, ChallengeState
from ctfpilot.contracts.exceptions import ProviderError
from ctfpilot.contracts.provider import Provider, SubEntityGateway
from ctfpilot.contracts.records import (
    KIND_ORDER,
    FileRecord,
    SetMember,
    SubEntityKind,
    SubRecord,
)


class DryRunGateway(SubEntityGateway):
    """Sub-entity rows kept in memory, keyed by parent id."""

    def __init__(self, provider: DryRunProvider, kind: SubEntityKind) -> None:
        self.kind = kind
        self._provider = provider
        self._rows: dict[str, list[SubRecord]] = {}

    def seed(self, parent_id: str, records: list[SubRecord]) -> None:
        self._rows[parent_id] = list(records)

    async def create(self, parent_id: str, record: SubRecord) -> SubRecord:
        self._provider.require_challenge(parent_id)
        entity_id = self._provider.next_id()
        if isinstance(record, FileRecord):
            created: SubRecord = record.model_copy(update={"id": entity_id, "location": f"dry-run/{record.name}"})
        else:
            created = record.model_copy(update={"id": entity_id})
        self._rows.setdefault(parent_id, []).append(created)
        return created

    async def list_for_parent(self, parent_id: str) -> list[SubRecord]:
        self._provider.require_challenge(parent_id)
        return list(self._rows.get(parent_id, []))

    async def update(self, entity_id: str, record: SubRecord) -> SubRecord:
        if self.kind not in (SubEntityKind.FLAGS, SubEntityKind.HINTS):
            return await super().update(entity_id, record)
        for rows in self._rows.values():
            for index, row in enumerate(rows):
                if row.id == entity_id:
                    rows[index] = record.model_copy(update={"id": entity_id})
                    return rows[index]
        raise ProviderError(f"{self.kind.value} #{entity_id} not found", status_code=404)

    async def delete(self, entity_id: str) -> None:
        for rows in self._rows.values():
            for index, row in enumerate(rows):
                if row.id == entity_id:
                    del rows[index]
                    return
        raise ProviderError(f"{self.kind.value} #{entity_id} not found", status_code=404)

    async def fetch_content(self, record: FileRecord) -> bytes:
        if self.kind != SubEntityKind.FILES:
            return await super().fetch_content(record)
        raw = record.raw_bytes()
        if raw is None:
            raise ProviderError(f"file '{record.name}' content is not available in dry-run mode")
        return raw


class DryRunProvider(Provider):
    """Provider that simulates CTFd without network calls.

    Seeding it with the recorded state makes the simulated remote look the
    way the last apply left it.
    """

    def __init__(self, seed: ChallengeState | None = None) -> None:
        self._counter = 0
        self._challenges: dict[str, ChallengeSpec] = {}
        self._gateways = {kind: DryRunGateway(self, kind) for kind in KIND_ORDER}
        if seed is not None:
            self._seed(seed)

    async def __aenter__(self) -> DryRunProvider:
        return self

    async def __aexit__(
        self,
        exc_type: type[BaseException] | None,
        exc_val: BaseException | None,
        exc_tb: TracebackType | None,
    ) -> None:
        return None

    def next_id(self) -> str:
        self._counter += 1
        return f"dry-run-{self._counter}"

    def require_challenge(self, challenge_id: str) -> ChallengeSpec:
        spec = self._challenges.get(challenge_id)
        if spec is None:
            raise ProviderError(f"Challenge not found: {challenge_id}", status_code=404)
        return spec

    async def create_challenge(self, spec: ChallengeSpec) -> str:
        challenge_id = self.next_id()
        self._challenges[challenge_id] = _without_collections(spec)
        return challenge_id

    async def get_challenge(self, challenge_id: str) -> ChallengeSpec:
        return self.require_challenge(challenge_id)

    async def update_challenge(self, challenge_id: str, spec: ChallengeSpec) -> None:
        self.require_challenge(challenge_id)
        self._challenges[challenge_id] = _without_collections(spec)

    async def delete_challenge(self, challenge_id: str) -> None:
        self.require_challenge(challenge_id)
        del self._challenges[challenge_id]
        for gateway in self._gateways.values():
            gateway.seed(challenge_id, [])

    def gateway(self, kind: SubEntityKind) -> SubEntityGateway:
        return self._gateways[kind]

    def _seed(self, state: ChallengeState) -> None:
        self._challenges[state.id] = _without_collections(state.spec)
        for kind in KIND_ORDER:
            values = state.spec.collection(kind)
            if kind in (SubEntityKind.TAGS, SubEntityKind.TOPICS):
                records: list[SubRecord] = [
                    SetMember(value=value, id=f"{state.id}-{kind.value}-{index}") for index, value in enumerate(values)
                ]
            else:
                records = [record for record in values if record.id is not None]
            self._gateways[kind].seed(state.id, records)


def _without_collections(spec: ChallengeSpec) -> ChallengeSpec:
    return spec.model_copy(update={kind.value: [] for kind in KIND_ORDER})
