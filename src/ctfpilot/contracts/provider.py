"""Remote gateway contracts."""

from __future__ import annotations

from abc import ABC, abstractmethod
from types import TracebackType

from ctfpilot.contracts.challenge import ChallengeSpec
from ctfpilot.contracts.exceptions import ProviderError
from ctfpilot.contracts.records import FileRecord, SubEntityKind, SubRecord


class SubEntityGateway(ABC):
    """CRUD for one sub-entity kind. Each call is atomic on its own."""

    kind: SubEntityKind

    @abstractmethod
    async def create(self, parent_id: str, record: SubRecord) -> SubRecord: ...  # pragma: no cover

    @abstractmethod
    async def list_for_parent(self, parent_id: str) -> list[SubRecord]: ...  # pragma: no cover

    async def update(self, entity_id: str, record: SubRecord) -> SubRecord:
        raise ProviderError(f"{self.kind.value} cannot be updated in place")

    @abstractmethod
    async def delete(self, entity_id: str) -> None: ...  # pragma: no cover

    async def fetch_content(self, record: FileRecord) -> bytes:
        raise ProviderError(f"{self.kind.value} have no downloadable content")


class Provider(ABC):
    @abstractmethod
    async def __aenter__(self) -> Provider: ...  # pragma: no cover

    @abstractmethod
    async def __aexit__(
        self,
        exc_type: type[BaseException] | None,
        exc_val: BaseException | None,
        exc_tb: TracebackType | None,
    ) -> None: ...  # pragma: no cover

    @abstractmethod
    async def create_challenge(self, spec: ChallengeSpec) -> str: ...  # pragma: no cover

    @abstractmethod
    async def get_challenge(self, challenge_id: str) -> ChallengeSpec: ...  # pragma: no cover

    @abstractmethod
    async def update_challenge(self, challenge_id: str, spec: ChallengeSpec) -> None: ...  # pragma: no cover

    @abstractmethod
    async def delete_challenge(self, challenge_id: str) -> None: ...  # pragma: no cover

    @abstractmethod
    def gateway(self, kind: SubEntityKind) -> SubEntityGateway: ...  # pragma: no cover
