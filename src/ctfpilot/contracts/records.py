"""Sub-entity record contracts.

Records are immutable: every stage of a reconciliation pass produces new
records through ``model_copy`` instead of rewriting fields in place.
"""

from __future__ import annotations

import base64
import binascii
import hashlib
from enum import StrEnum
from typing import Any, Literal

from pydantic import BaseModel, Field, field_validator, model_validator


class SubEntityKind(StrEnum):
    FILES = "files"
    FLAGS = "flags"
    TAGS = "tags"
    TOPICS = "topics"
    HINTS = "hints"


# Orchestration order used by the parent aggregate.
KIND_ORDER: tuple[SubEntityKind, ...] = (
    SubEntityKind.FILES,
    SubEntityKind.FLAGS,
    SubEntityKind.TAGS,
    SubEntityKind.TOPICS,
    SubEntityKind.HINTS,
)


def _normalize_identity(value: Any) -> str | None:
    if value is None:
        return None
    text = str(value).strip()
    return text or None


class KeyedRecord(BaseModel):
    """A sub-entity whose identity is assigned by the remote service."""

    id: str | None = None

    model_config = {"frozen": True}

    @field_validator("id", mode="before")
    @classmethod
    def _identity(cls, value: Any) -> str | None:
        return _normalize_identity(value)

    @property
    def committed(self) -> bool:
        return self.id is not None


class FlagRecord(KeyedRecord):
    content: str
    data: Literal["case_sensitive", "case_insensitive"] | None = None
    type: Literal["static", "regex"] | None = None

    @field_validator("data", mode="before")
    @classmethod
    def _empty_data(cls, value: Any) -> Any:
        # CTFd stores case sensitivity as an empty string.
        if value == "":
            return "case_sensitive"
        return value


class HintRecord(KeyedRecord):
    content: str
    cost: int | None = None
    requirements: list[str] | None = None

    @field_validator("requirements", mode="before")
    @classmethod
    def _requirement_ids(cls, value: Any) -> Any:
        if value is None:
            return None
        return [str(item) for item in value]


class FileRecord(KeyedRecord):
    """A challenge attachment.

    ``content`` (text) and ``content_b64`` (binary-safe) are mutually
    exclusive sources of the file bytes. Neither is ever persisted: the
    recorded state only keeps the ``sha256`` fingerprint.
    """

    name: str
    content: str | None = Field(default=None, exclude=True, repr=False)
    content_b64: str | None = Field(default=None, exclude=True, repr=False)
    location: str | None = None
    sha256: str | None = None

    @model_validator(mode="before")
    @classmethod
    def _fingerprint(cls, data: Any) -> Any:
        if not isinstance(data, dict):
            return data
        content = data.get("content")
        content_b64 = data.get("content_b64")
        if content is not None and content_b64 is not None:
            raise ValueError("file content and content_b64 are mutually exclusive")
        raw: bytes | None = None
        if content is not None:
            raw = str(content).encode("utf-8")
        elif content_b64 is not None:
            try:
                raw = base64.b64decode(str(content_b64), validate=True)
            except binascii.Error as exc:
                raise ValueError(f"invalid base64 file content: {exc}") from exc
        if raw is None:
            return data
        return {**data, "sha256": file_fingerprint(str(data.get("name", "")), raw)}

    def raw_bytes(self) -> bytes | None:
        if self.content is not None:
            return self.content.encode("utf-8")
        if self.content_b64 is not None:
            return base64.b64decode(self.content_b64)
        return None


def file_fingerprint(name: str, raw: bytes) -> str:
    digest = hashlib.sha256()
    digest.update(name.encode("utf-8"))
    digest.update(b"\0")
    digest.update(raw)
    return digest.hexdigest()


def filename(location: str) -> str:
    return location.rsplit("/", 1)[-1]


class SetMember(BaseModel):
    """A tag or topic row; only remote rows carry an ``id``."""

    value: str
    id: str | None = None

    model_config = {"frozen": True}

    @field_validator("id", mode="before")
    @classmethod
    def _identity(cls, value: Any) -> str | None:
        return _normalize_identity(value)


SubRecord = FlagRecord | HintRecord | FileRecord | SetMember

KEYED_KINDS = frozenset({SubEntityKind.FILES, SubEntityKind.FLAGS, SubEntityKind.HINTS})
