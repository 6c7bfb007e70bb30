"""Shared test fixtures for ctfpilot tests."""

from __future__ import annotations

import json
from pathlib import Path

import pytest

from ctfpilot.contracts.challenge import ChallengeSpec
from ctfpilot.contracts.config import CtfPilotConfig
from ctfpilot.contracts.records import FileRecord, FlagRecord, HintRecord
from tests.fakes.challenges import make_spec


@pytest.fixture
def sample_spec() -> ChallengeSpec:
    """A challenge declaring one of every sub-entity kind."""
    return make_spec(
        files=[FileRecord(name="notes.txt", content="hello")],
        flags=[FlagRecord(content="CTF{moon}", data="case_insensitive")],
        tags=["easy"],
        topics=["orbital"],
        hints=[HintRecord(content="Look up", cost=10)],
    )


@pytest.fixture
def sample_config(tmp_path: Path) -> CtfPilotConfig:
    return CtfPilotConfig(
        url="https://ctfd.example.com",
        auth="token",
        token="ctfd_admin_token",
        challenge_path=tmp_path / "challenge.json",
        state_path=tmp_path / "ctfpilot-state.json",
    )


@pytest.fixture
def challenge_file(tmp_path: Path) -> Path:
    """Write a declaration with an on-disk attachment and return its path."""
    (tmp_path / "dist").mkdir()
    (tmp_path / "dist" / "binary.bin").write_bytes(b"\x00\x01\x02")
    path = tmp_path / "challenge.json"
    path.write_text(
        json.dumps(
            {
                "name": "Lunar Descent",
                "category": "pwn",
                "description": "Land the module.",
                "initial": 500,
                "decay": 20,
                "minimum": 100,
                "files": [{"path": "dist/binary.bin"}],
                "flags": [{"content": "CTF{moon}"}],
                "tags": ["easy"],
                "topics": ["orbital"],
                "hints": [{"content": "Look up", "cost": 10}],
            }
        ),
        encoding="utf-8",
    )
    return path
