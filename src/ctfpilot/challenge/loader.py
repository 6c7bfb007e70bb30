"""Challenge declaration loading from JSON."""

from __future__ import annotations

import base64
import json
from pathlib import Path
from typing import Any

from pydantic import ValidationError

from ctfpilot.contracts.challenge import ChallengeSpec
from ctfpilot.contracts.exceptions import ChallengeLoadError


class ChallengeLoader:
    """Load a challenge declaration into a ``ChallengeSpec``.

    File attachments may name a ``path`` instead of inline content; it is
    resolved against the declaration's directory and read as bytes.
    """

    def load(self, path: Path) -> ChallengeSpec:
        payload = self._read_json(path)
        if not isinstance(payload, dict):
            raise ChallengeLoadError(f"challenge declaration root must be an object: {path}")

        files = payload.get("files", [])
        if not isinstance(files, list):
            raise ChallengeLoadError(f"'files' must be an array: {path}")
        payload["files"] = [self._inline_file(entry, base_dir=path.parent) for entry in files]

        try:
            return ChallengeSpec.model_validate(payload)
        except ValidationError as exc:
            raise ChallengeLoadError(f"challenge schema mismatch: {exc}") from exc

    @staticmethod
    def _read_json(path: Path) -> Any:
        if not path.exists():
            raise ChallengeLoadError(f"challenge declaration not found: {path}")
        try:
            return json.loads(path.read_text(encoding="utf-8"))
        except json.JSONDecodeError as exc:
            raise ChallengeLoadError(f"invalid JSON in challenge declaration: {path}") from exc
        except OSError as exc:
            raise ChallengeLoadError(f"failed reading challenge declaration: {path}") from exc

    @staticmethod
    def _inline_file(entry: Any, *, base_dir: Path) -> Any:
        if not isinstance(entry, dict) or "path" not in entry:
            return entry
        item = dict(entry)
        source = Path(str(item.pop("path"))).expanduser()
        if not source.is_absolute():
            source = base_dir / source
        try:
            raw = source.read_bytes()
        except OSError as exc:
            raise ChallengeLoadError(f"failed reading attachment: {source}") from exc
        item.setdefault("name", source.name)
        item["content_b64"] = base64.b64encode(raw).decode("ascii")
        return item
