"""Tests for CTFdProvider and its per-kind gateways."""

from __future__ import annotations

import httpx
import pytest

from ctfpilot.contracts.exceptions import ProviderError
from ctfpilot.contracts.records import FileRecord, FlagRecord, HintRecord, SetMember, SubEntityKind
from ctfpilot.providers.ctfd import CTFdProvider
from ctfpilot.reconcile.reconciler import Reconciler
from tests.fakes.challenges import make_spec
from tests.fakes.ctfd import FakeCTFd


def _provider(ctfd: FakeCTFd, **kwargs: object) -> CTFdProvider:
    options: dict[str, object] = {"token": "ctfd_admin_token"}
    options.update(kwargs)
    return CTFdProvider(url="https://ctfd.example.com/", max_retries=0, transport=ctfd.transport(), **options)  # type: ignore[arg-type]


def test_requires_token_or_login_credentials() -> None:
    with pytest.raises(ProviderError, match="API token"):
        CTFdProvider(url="https://ctfd.example.com", username="admin")


@pytest.mark.asyncio
async def test_calls_outside_context_fail() -> None:
    provider = _provider(FakeCTFd())

    with pytest.raises(ProviderError, match="async with"):
        await provider.delete_challenge("1")


@pytest.mark.asyncio
async def test_token_is_sent_as_authorization_header() -> None:
    ctfd = FakeCTFd()
    ctfd.json("DELETE", "/api/v1/challenges/3")

    async with _provider(ctfd) as provider:
        await provider.delete_challenge("3")

    assert ctfd.requests[0].headers["Authorization"] == "Token ctfd_admin_token"


@pytest.mark.asyncio
async def test_login_credentials_open_a_session_on_enter() -> None:
    ctfd = FakeCTFd()
    ctfd.route("GET", "/login", httpx.Response(200, text='csrfNonce: "aa11"'))
    ctfd.route("POST", "/login", httpx.Response(302, headers={"Location": "/", "Set-Cookie": "session=s1; Path=/"}))
    ctfd.route("GET", "/challenges", httpx.Response(200, text='csrfNonce: "bb22"'))

    async with _provider(ctfd, token=None, username="admin", password="hunter2"):
        pass

    assert [request.url.path for request in ctfd.requests] == ["/login", "/login", "/challenges"]
    assert "Authorization" not in ctfd.requests[0].headers


@pytest.mark.asyncio
async def test_create_challenge_posts_dynamic_scoring() -> None:
    ctfd = FakeCTFd()
    ctfd.json("POST", "/api/v1/challenges", {"id": 12})

    async with _provider(ctfd) as provider:
        challenge_id = await provider.create_challenge(make_spec())

    body = ctfd.body()
    assert challenge_id == "12"
    assert body["type"] == "dynamic"
    assert body["value"] == 500
    assert body["decay"] == 20
    assert body["minimum"] == 100
    assert "requirements" not in body


@pytest.mark.asyncio
async def test_update_challenge_keeps_type_and_clears_requirements() -> None:
    ctfd = FakeCTFd()
    ctfd.json("PATCH", "/api/v1/challenges/12", {"id": 12})

    async with _provider(ctfd) as provider:
        await provider.update_challenge("12", make_spec(description="Changed"))

    body = ctfd.body()
    assert "type" not in body
    assert body["description"] == "Changed"
    assert body["requirements"] == {"prerequisites": [], "anonymize": False}
    assert body["next_id"] is None


@pytest.mark.asyncio
async def test_get_challenge_reads_requirements() -> None:
    ctfd = FakeCTFd()
    ctfd.json(
        "GET",
        "/api/v1/challenges/12",
        {
            "id": 12,
            "name": "Lunar Descent",
            "category": "pwn",
            "description": "d",
            "type": "dynamic",
            "initial": 500,
            "decay": 20,
            "minimum": 100,
            "function": "logarithmic",
            "state": "visible",
        },
    )
    ctfd.json("GET", "/api/v1/challenges/12/requirements", {"prerequisites": [3], "anonymize": True})

    async with _provider(ctfd) as provider:
        spec = await provider.get_challenge("12")

    assert ctfd.requests[0].url.params["view"] == "admin"
    assert spec.function == "logarithmic"
    assert spec.state == "visible"
    assert spec.requirements is not None
    assert spec.requirements.prerequisites == ["3"]
    assert spec.requirements.behavior == "anonymized"


@pytest.mark.asyncio
async def test_flag_gateway_round_trip() -> None:
    ctfd = FakeCTFd()
    ctfd.json("GET", "/api/v1/challenges/12/flags", [{"id": 4, "content": "CTF{a}", "data": "", "type": "static"}])
    ctfd.json("POST", "/api/v1/flags", {"id": 5, "content": "CTF{b}", "data": "case_insensitive", "type": "static"})
    ctfd.json("PATCH", "/api/v1/flags/4", {"id": 4, "content": "CTF{c}", "data": "", "type": "regex"})

    async with _provider(ctfd) as provider:
        gateway = provider.gateway(SubEntityKind.FLAGS)
        listed = await gateway.list_for_parent("12")
        created = await gateway.create("12", FlagRecord(content="CTF{b}", data="case_insensitive"))
        updated = await gateway.update("4", FlagRecord(content="CTF{c}", type="regex"))

    assert listed == [FlagRecord(id="4", content="CTF{a}", data="case_sensitive", type="static")]
    assert ctfd.body(1) == {"challenge": 12, "content": "CTF{b}", "type": "static", "data": "case_insensitive"}
    assert created.id == "5"
    assert ctfd.body(2) == {"id": 4, "content": "CTF{c}", "type": "regex", "data": ""}
    assert isinstance(updated, FlagRecord)
    assert updated.type == "regex"


@pytest.mark.asyncio
async def test_reconciled_flag_update_preserves_remote_type_and_case() -> None:
    ctfd = FakeCTFd()
    ctfd.json("PATCH", "/api/v1/flags/7", {"id": 7, "content": "FLAG{b}", "data": "case_insensitive", "type": "regex"})
    remote = FlagRecord(id="7", content="FLAG{a}", data="case_insensitive", type="regex")

    async with _provider(ctfd) as provider:
        result = await Reconciler().reconcile(
            provider.gateway(SubEntityKind.FLAGS), "12", [FlagRecord(id="7", content="FLAG{b}")], [remote]
        )

    assert ctfd.body() == {"id": 7, "content": "FLAG{b}", "type": "regex", "data": "case_insensitive"}
    assert result.diagnostics == []


@pytest.mark.asyncio
async def test_reconciled_hint_update_preserves_remote_cost_and_prerequisites() -> None:
    ctfd = FakeCTFd()
    ctfd.json("PATCH", "/api/v1/hints/5", {"id": 5, "content": "new", "cost": 50, "requirements": {"prerequisites": [4]}})
    remote = HintRecord(id="5", content="old", cost=50, requirements=["4"])

    async with _provider(ctfd) as provider:
        await Reconciler().reconcile(
            provider.gateway(SubEntityKind.HINTS), "12", [HintRecord(id="5", content="new")], [remote]
        )

    body = ctfd.body()
    assert body["cost"] == 50
    assert body["requirements"] == {"prerequisites": [4]}


@pytest.mark.asyncio
async def test_hint_gateway_sends_prerequisites() -> None:
    ctfd = FakeCTFd()
    ctfd.json("POST", "/api/v1/hints", {"id": 8, "content": "Look up", "cost": 10, "requirements": {"prerequisites": [7]}})

    async with _provider(ctfd) as provider:
        created = await provider.gateway(SubEntityKind.HINTS).create(
            "12", HintRecord(content="Look up", cost=10, requirements=["7"])
        )

    assert ctfd.body()["requirements"] == {"prerequisites": [7]}
    assert created == HintRecord(id="8", content="Look up", cost=10, requirements=["7"])


@pytest.mark.asyncio
async def test_file_gateway_uploads_multipart() -> None:
    ctfd = FakeCTFd()
    ctfd.json("POST", "/api/v1/files", [{"id": 9, "type": "challenge", "location": "abc123/notes.txt"}])

    async with _provider(ctfd) as provider:
        created = await provider.gateway(SubEntityKind.FILES).create("12", FileRecord(name="notes.txt", content="hello"))

    request = ctfd.requests[0]
    assert request.headers["Content-Type"].startswith("multipart/form-data")
    assert b'filename="notes.txt"' in request.content
    assert b"hello" in request.content
    assert created == FileRecord(id="9", name="notes.txt", location="abc123/notes.txt")


@pytest.mark.asyncio
async def test_file_gateway_refuses_upload_without_content() -> None:
    async with _provider(FakeCTFd()) as provider:
        with pytest.raises(ProviderError, match="no content"):
            await provider.gateway(SubEntityKind.FILES).create("12", FileRecord(name="notes.txt", sha256="abc"))


@pytest.mark.asyncio
async def test_file_gateway_downloads_content() -> None:
    ctfd = FakeCTFd()
    ctfd.route("GET", "/files/abc123/notes.txt", httpx.Response(200, content=b"hello"))

    async with _provider(ctfd) as provider:
        raw = await provider.gateway(SubEntityKind.FILES).fetch_content(
            FileRecord(id="9", name="notes.txt", location="abc123/notes.txt")
        )

    assert raw == b"hello"


@pytest.mark.asyncio
async def test_gateway_rejects_records_of_another_kind() -> None:
    ctfd = FakeCTFd()

    async with _provider(ctfd) as provider:
        with pytest.raises(ProviderError, match="expected a FlagRecord"):
            await provider.gateway(SubEntityKind.FLAGS).create("12", SetMember(value="hard"))

    assert ctfd.requests == []


@pytest.mark.asyncio
async def test_tags_cannot_be_updated_in_place() -> None:
    async with _provider(FakeCTFd()) as provider:
        with pytest.raises(ProviderError, match="cannot be updated"):
            await provider.gateway(SubEntityKind.TAGS).update("3", SetMember(value="hard"))


@pytest.mark.asyncio
async def test_topic_gateway_targets_the_challenge_link() -> None:
    ctfd = FakeCTFd()
    ctfd.json("POST", "/api/v1/topics", {"id": 21, "challenge_id": 12, "topic_id": 2})
    ctfd.json("DELETE", "/api/v1/topics")

    async with _provider(ctfd) as provider:
        gateway = provider.gateway(SubEntityKind.TOPICS)
        created = await gateway.create("12", SetMember(value="orbital"))
        await gateway.delete("21")

    assert created == SetMember(value="orbital", id="21")
    assert ctfd.body(0) == {"challenge": 12, "type": "challenge", "value": "orbital"}
    params = ctfd.requests[1].url.params
    assert params["type"] == "challenge"
    assert params["target_id"] == "21"
