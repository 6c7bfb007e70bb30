import json
from pathlib import Path

import pytest

from ctfpilot.contracts.challenge import ChallengeState
from ctfpilot.contracts.exceptions import StateError
from ctfpilot.contracts.records import FileRecord, FlagRecord
from ctfpilot.persistence import load_state, output_state_path, persist_state, remove_state
from tests.fakes.challenges import make_spec


def _state() -> ChallengeState:
    return ChallengeState(
        id="12",
        spec=make_spec(
            files=[FileRecord(id="2", name="notes.txt", content="secret", location="abc/notes.txt")],
            flags=[FlagRecord(id="3", content="CTF{x}")],
            tags=["easy"],
        ),
    )


def test_output_state_path_for_dry_run(tmp_path: Path) -> None:
    state_path = tmp_path / "ctfpilot-state.json"

    assert output_state_path(state_path=state_path, dry_run=False) == state_path
    assert output_state_path(state_path=state_path, dry_run=True) == tmp_path / "ctfpilot-state.json.dry-run"


def test_persist_and_load_round_trip(tmp_path: Path) -> None:
    state_path = tmp_path / "nested" / "state.json"

    written = persist_state(state=_state(), state_path=state_path, dry_run=False)
    loaded = load_state(state_path=state_path)

    assert written == state_path
    assert loaded is not None
    assert loaded.id == "12"
    assert loaded.spec.flags == [FlagRecord(id="3", content="CTF{x}")]
    assert loaded.spec.files[0].sha256 == _state().spec.files[0].sha256


def test_persisted_state_never_contains_file_bytes(tmp_path: Path) -> None:
    state_path = tmp_path / "state.json"

    persist_state(state=_state(), state_path=state_path, dry_run=False)

    payload = json.loads(state_path.read_text(encoding="utf-8"))
    assert "secret" not in state_path.read_text(encoding="utf-8")
    assert set(payload["spec"]["files"][0]) == {"id", "name", "location", "sha256"}


def test_dry_run_persists_next_to_state(tmp_path: Path) -> None:
    state_path = tmp_path / "state.json"

    written = persist_state(state=_state(), state_path=state_path, dry_run=True)

    assert written.name == "state.json.dry-run"
    assert not state_path.exists()


def test_load_missing_state_returns_none(tmp_path: Path) -> None:
    assert load_state(state_path=tmp_path / "state.json") is None


def test_load_invalid_state_raises(tmp_path: Path) -> None:
    state_path = tmp_path / "state.json"
    state_path.write_text('{"id": "1"}', encoding="utf-8")

    with pytest.raises(StateError, match="invalid state file"):
        load_state(state_path=state_path)


def test_remove_state_tolerates_missing_file(tmp_path: Path) -> None:
    state_path = tmp_path / "state.json"
    persist_state(state=_state(), state_path=state_path, dry_run=False)

    remove_state(state_path=state_path)
    remove_state(state_path=state_path)

    assert not state_path.exists()
