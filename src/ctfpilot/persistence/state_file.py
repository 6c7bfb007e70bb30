"""Recorded-state persistence helpers."""

from __future__ import annotations

import json
from pathlib import Path
from typing import Any

from pydantic import ValidationError

from ctfpilot.contracts.challenge import ChallengeState
from ctfpilot.contracts.exceptions import StateError


def output_state_path(*, state_path: Path, dry_run: bool) -> Path:
    if not dry_run:
        return state_path
    return Path(f"{state_path}.dry-run")


def persist_state(*, state: ChallengeState, state_path: Path, dry_run: bool) -> Path:
    path = output_state_path(state_path=state_path, dry_run=dry_run)
    try:
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(state.model_dump_json(indent=2), encoding="utf-8")
    except OSError as exc:
        raise StateError(f"failed to persist state: {path}") from exc
    return path


def load_state(*, state_path: Path) -> ChallengeState | None:
    """Return the recorded state, or ``None`` before the first apply."""
    if not state_path.exists():
        return None
    try:
        payload: Any = json.loads(state_path.read_text(encoding="utf-8"))
        return ChallengeState.model_validate(payload)
    except (OSError, json.JSONDecodeError, ValidationError) as exc:
        raise StateError(f"invalid state file: {state_path}") from exc


def remove_state(*, state_path: Path) -> None:
    try:
        state_path.unlink(missing_ok=True)
    except OSError as exc:
        raise StateError(f"failed to remove state file: {state_path}") from exc
