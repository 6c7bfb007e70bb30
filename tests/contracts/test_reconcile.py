from __future__ import annotations

import pytest

from ctfpilot.contracts.exceptions import ReconcileInvariantError
from ctfpilot.contracts.reconcile import Action, ActionOp
from ctfpilot.contracts.records import FlagRecord, SubEntityKind


def test_action_accessors_return_their_records() -> None:
    desired = FlagRecord(id="7", content="FLAG{b}")
    remote = FlagRecord(id="7", content="FLAG{a}")
    action = Action(op=ActionOp.UPDATE, kind=SubEntityKind.FLAGS, desired=desired, remote=remote)

    assert action.require_desired() is desired
    assert action.require_remote() is remote
    assert action.require_remote_id() == "7"


def test_create_action_has_no_remote_side() -> None:
    action = Action(op=ActionOp.CREATE, kind=SubEntityKind.FLAGS, desired=FlagRecord(content="FLAG{a}"))

    with pytest.raises(ReconcileInvariantError, match="no remote record"):
        action.require_remote()


def test_delete_action_has_no_desired_side() -> None:
    action = Action(op=ActionOp.DELETE, kind=SubEntityKind.FLAGS, remote=FlagRecord(id="3", content="FLAG{a}"))

    with pytest.raises(ReconcileInvariantError, match="no desired record"):
        action.require_desired()


def test_remote_record_without_identity_is_rejected() -> None:
    action = Action(op=ActionOp.DELETE, kind=SubEntityKind.FLAGS, remote=FlagRecord(content="FLAG{a}"))

    with pytest.raises(ReconcileInvariantError, match="without an id"):
        action.require_remote_id()
