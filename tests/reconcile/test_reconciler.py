from __future__ import annotations

import pytest

from ctfpilot.contracts.reconcile import ActionOp, DiagnosticKind
from ctfpilot.contracts.records import FileRecord, FlagRecord, SetMember, SubEntityKind
from ctfpilot.reconcile.kinds import policy_for
from ctfpilot.reconcile.reconciler import Reconciler
from tests.fakes.provider import FakeProvider


@pytest.mark.asyncio
async def test_reconcile_runs_plan_against_gateway() -> None:
    provider = FakeProvider()
    gateway = provider.gateway(SubEntityKind.FLAGS)
    gateway.seed("1", FlagRecord(id="5", content="old"))
    remote = await gateway.list_for_parent("1")

    result = await Reconciler().reconcile(gateway, "1", [FlagRecord(content="new")], remote)

    assert [record.content for record in result.new_state] == ["new"]
    assert gateway.delete_calls == ["5"]


@pytest.mark.asyncio
async def test_duplicate_identities_abort_only_this_collection() -> None:
    provider = FakeProvider()
    gateway = provider.gateway(SubEntityKind.FLAGS)
    recorded = [FlagRecord(id="4", content="a")]

    result = await Reconciler().reconcile(
        gateway,
        "1",
        [FlagRecord(id="4", content="a"), FlagRecord(id="4", content="b")],
        recorded,
        recorded,
    )

    assert provider.calls == []
    assert result.new_state == recorded
    assert result.diagnostics[0].kind == DiagnosticKind.MATCHER_DEFECT
    assert result.failed


def test_preview_makes_no_gateway_calls() -> None:
    reconciler = Reconciler(skip_unchanged_sets=True)

    preview = reconciler.preview(SubEntityKind.TAGS, [SetMember(value="a")], [SetMember(value="a", id="1")])

    assert [action.op for action in preview.actions] == [ActionOp.KEEP]


def test_file_policy_folds_echo_into_desired_record() -> None:
    policy = policy_for(SubEntityKind.FILES)
    desired = FileRecord(name="a.txt", content="hello")

    folded = policy.fold_created(desired, FileRecord(id="12", name="a.txt", location="d41d/a.txt"))

    assert isinstance(folded, FileRecord)
    assert folded.id == "12"
    assert folded.location == "d41d/a.txt"
    assert folded.sha256 == desired.sha256
