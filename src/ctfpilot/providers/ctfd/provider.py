"""CTFd provider adapter over the REST API."""

from __future__ import annotations

import logging
from types import TracebackType
from typing import Any, TypeVar

import httpx

from ctfpilot.contracts.challenge import ChallengeSpec
from ctfpilot.contracts.exceptions import ProviderError
from ctfpilot.contracts.provider import Provider, SubEntityGateway
from ctfpilot.contracts.records import FileRecord, FlagRecord, HintRecord, SetMember, SubEntityKind, SubRecord
from ctfpilot.providers.ctfd import mapper
from ctfpilot.providers.ctfd.client import CTFdClient

_LOG = logging.getLogger(__name__)

_RecordT = TypeVar("_RecordT", FlagRecord, HintRecord, FileRecord, SetMember)


def _expect(record: SubRecord, record_type: type[_RecordT]) -> _RecordT:
    if not isinstance(record, record_type):
        raise ProviderError(f"expected a {record_type.__name__}, got {type(record).__name__}")
    return record


class _Gateway(SubEntityGateway):
    def __init__(self, provider: CTFdProvider) -> None:
        self._provider = provider

    @property
    def client(self) -> CTFdClient:
        return self._provider.require_client()

    async def list_for_parent(self, parent_id: str) -> list[SubRecord]:
        rows = await self.client.get(f"/api/v1/challenges/{parent_id}/{self.kind.value}")
        return [self._from_api(row) for row in rows or []]

    def _from_api(self, row: dict[str, Any]) -> SubRecord:
        raise NotImplementedError  # pragma: no cover


class FlagGateway(_Gateway):
    kind = SubEntityKind.FLAGS

    async def create(self, parent_id: str, record: SubRecord) -> SubRecord:
        record = _expect(record, FlagRecord)
        return mapper.flag_from_api(await self.client.post("/api/v1/flags", json=mapper.flag_payload(parent_id, record)))

    async def update(self, entity_id: str, record: SubRecord) -> SubRecord:
        record = _expect(record, FlagRecord)
        body = mapper.flag_payload("", record)
        del body["challenge"]
        body["id"] = mapper.as_remote_id(entity_id)
        return mapper.flag_from_api(await self.client.patch(f"/api/v1/flags/{entity_id}", json=body))

    async def delete(self, entity_id: str) -> None:
        await self.client.delete(f"/api/v1/flags/{entity_id}")

    def _from_api(self, row: dict[str, Any]) -> SubRecord:
        return mapper.flag_from_api(row)


class HintGateway(_Gateway):
    kind = SubEntityKind.HINTS

    async def create(self, parent_id: str, record: SubRecord) -> SubRecord:
        record = _expect(record, HintRecord)
        return mapper.hint_from_api(await self.client.post("/api/v1/hints", json=mapper.hint_payload(parent_id, record)))

    async def update(self, entity_id: str, record: SubRecord) -> SubRecord:
        record = _expect(record, HintRecord)
        body = mapper.hint_payload("", record)
        del body["challenge"]
        body["id"] = mapper.as_remote_id(entity_id)
        return mapper.hint_from_api(await self.client.patch(f"/api/v1/hints/{entity_id}", json=body))

    async def delete(self, entity_id: str) -> None:
        await self.client.delete(f"/api/v1/hints/{entity_id}")

    def _from_api(self, row: dict[str, Any]) -> SubRecord:
        return mapper.hint_from_api(row)


class FileGateway(_Gateway):
    kind = SubEntityKind.FILES

    async def create(self, parent_id: str, record: SubRecord) -> SubRecord:
        record = _expect(record, FileRecord)
        raw = record.raw_bytes()
        if raw is None:
            raise ProviderError(f"file '{record.name}' has no content to upload")
        rows = await self.client.post(
            "/api/v1/files",
            data={"challenge": parent_id, "type": "challenge"},
            files={"file": (record.name, raw)},
        )
        if not rows:
            raise ProviderError(f"upload of '{record.name}' returned no file")
        return mapper.file_from_api(rows[0])

    async def delete(self, entity_id: str) -> None:
        await self.client.delete(f"/api/v1/files/{entity_id}")

    async def fetch_content(self, record: FileRecord) -> bytes:
        if record.location is None:
            raise ProviderError(f"file '{record.name}' has no location")
        return await self.client.download(record.location)

    def _from_api(self, row: dict[str, Any]) -> SubRecord:
        return mapper.file_from_api(row)


class TagGateway(_Gateway):
    kind = SubEntityKind.TAGS

    async def create(self, parent_id: str, record: SubRecord) -> SubRecord:
        record = _expect(record, SetMember)
        body = {"challenge": mapper.as_remote_id(parent_id), "value": record.value}
        return mapper.member_from_api(await self.client.post("/api/v1/tags", json=body))

    async def delete(self, entity_id: str) -> None:
        await self.client.delete(f"/api/v1/tags/{entity_id}")

    def _from_api(self, row: dict[str, Any]) -> SubRecord:
        return mapper.member_from_api(row)


class TopicGateway(_Gateway):
    kind = SubEntityKind.TOPICS

    async def create(self, parent_id: str, record: SubRecord) -> SubRecord:
        record = _expect(record, SetMember)
        body = {"challenge": mapper.as_remote_id(parent_id), "type": "challenge", "value": record.value}
        created = await self.client.post("/api/v1/topics", json=body)
        # The response describes the challenge/topic link, which is what deletes target.
        return SetMember(value=record.value, id=created["id"])

    async def delete(self, entity_id: str) -> None:
        await self.client.delete("/api/v1/topics", params={"type": "challenge", "target_id": entity_id})

    def _from_api(self, row: dict[str, Any]) -> SubRecord:
        return mapper.member_from_api(row)


class CTFdProvider(Provider):
    """Provider talking to one CTFd instance.

    Authentication is either an admin API token or an admin session opened
    through the login form.
    """

    def __init__(
        self,
        *,
        url: str,
        token: str | None = None,
        username: str | None = None,
        password: str | None = None,
        max_retries: int = 3,
        timeout: float = 30.0,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self._login: tuple[str, str] | None = None
        if token is None:
            if username is None or password is None:
                raise ProviderError("CTFd provider needs an API token or admin username and password")
            self._login = (username, password)
        self._url = url.rstrip("/")
        self._token = token
        self._max_retries = max_retries
        self._timeout = timeout
        self._transport = transport
        self._client: CTFdClient | None = None
        self._gateways: dict[SubEntityKind, SubEntityGateway] = {
            gateway.kind: gateway
            for gateway in (
                FileGateway(self),
                FlagGateway(self),
                TagGateway(self),
                TopicGateway(self),
                HintGateway(self),
            )
        }

    async def __aenter__(self) -> CTFdProvider:
        self._open_transport()
        if self._login is not None:
            await self.require_client().login(*self._login)
        return self

    async def __aexit__(
        self,
        exc_type: type[BaseException] | None,
        exc_val: BaseException | None,
        exc_tb: TracebackType | None,
    ) -> None:
        if self._client is not None:
            await self._client.aclose()
            self._client = None

    def _open_transport(self) -> None:
        from ctfpilot.providers.ctfd._retrying_transport import RetryingTransport

        headers = {"Accept": "application/json"}
        if self._token is not None:
            headers["Authorization"] = f"Token {self._token}"
        http = httpx.AsyncClient(
            base_url=self._url,
            transport=RetryingTransport(transport=self._transport, max_retries=self._max_retries),
            headers=headers,
            timeout=httpx.Timeout(self._timeout),
        )
        self._client = CTFdClient(http)

    def require_client(self) -> CTFdClient:
        if self._client is None:
            raise ProviderError("Provider is not initialized. Use 'async with'.")
        return self._client

    # ------------------------------------------------------------------
    # Provider contract
    # ------------------------------------------------------------------

    async def create_challenge(self, spec: ChallengeSpec) -> str:
        created = await self.require_client().post("/api/v1/challenges", json=mapper.challenge_payload(spec))
        challenge_id = str(created["id"])
        _LOG.debug("Created challenge %s (#%s)", spec.name, challenge_id)
        return challenge_id

    async def get_challenge(self, challenge_id: str) -> ChallengeSpec:
        client = self.require_client()
        data = await client.get(f"/api/v1/challenges/{challenge_id}", params={"view": "admin"})
        requirements = await client.get(f"/api/v1/challenges/{challenge_id}/requirements")
        return mapper.challenge_from_api(data, requirements)

    async def update_challenge(self, challenge_id: str, spec: ChallengeSpec) -> None:
        payload = mapper.challenge_payload(spec)
        # The challenge type is fixed at creation.
        payload.pop("type")
        if spec.requirements is None:
            payload["requirements"] = {"prerequisites": [], "anonymize": False}
        await self.require_client().patch(f"/api/v1/challenges/{challenge_id}", json=payload)

    async def delete_challenge(self, challenge_id: str) -> None:
        await self.require_client().delete(f"/api/v1/challenges/{challenge_id}")

    def gateway(self, kind: SubEntityKind) -> SubEntityGateway:
        return self._gateways[kind]
