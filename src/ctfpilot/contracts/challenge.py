"""Challenge (parent aggregate) contracts."""

from __future__ import annotations

from typing import Any, Literal

from pydantic import BaseModel, Field, field_validator, model_validator

from ctfpilot.contracts.records import FileRecord, FlagRecord, HintRecord, SubEntityKind


class Requirements(BaseModel):
    behavior: Literal["hidden", "anonymized"] = "hidden"
    prerequisites: list[str] = Field(default_factory=list)

    model_config = {"frozen": True}

    @field_validator("prerequisites", mode="before")
    @classmethod
    def _prerequisite_ids(cls, value: Any) -> Any:
        if value is None:
            return []
        return [str(item) for item in value]


class ChallengeSpec(BaseModel):
    """Declared challenge: direct fields plus its sub-collections."""

    name: str
    category: str
    description: str
    connection_info: str = ""
    max_attempts: int = 0
    function: Literal["linear", "logarithmic"] = "linear"
    value: int | None = None
    initial: int | None = None
    decay: int | None = None
    minimum: int | None = None
    state: Literal["hidden", "visible"] = "hidden"
    type: Literal["standard", "dynamic"] = "dynamic"
    requirements: Requirements | None = None
    # Challenge unlocked after this one is solved.
    next: int | None = None

    files: list[FileRecord] = Field(default_factory=list)
    flags: list[FlagRecord] = Field(default_factory=list)
    tags: list[str] = Field(default_factory=list)
    topics: list[str] = Field(default_factory=list)
    hints: list[HintRecord] = Field(default_factory=list)

    model_config = {"frozen": True}

    @model_validator(mode="after")
    def validate_scoring(self) -> ChallengeSpec:
        if self.type == "standard":
            if self.value is None:
                raise ValueError("standard challenges require value")
            return self
        missing = [name for name in ("initial", "decay", "minimum") if getattr(self, name) is None]
        if missing:
            raise ValueError(f"dynamic challenges require {', '.join(missing)}")
        return self

    def collection(self, kind: SubEntityKind) -> list[Any]:
        return list(getattr(self, kind.value))

    def direct_fields(self) -> dict[str, Any]:
        """Parent fields sent on create/patch (sub-collections excluded)."""
        return self.model_dump(mode="json", exclude={kind.value for kind in SubEntityKind})


class ChallengeState(BaseModel):
    """Recorded state of one challenge after an apply."""

    id: str
    spec: ChallengeSpec

    model_config = {"frozen": True}

    @field_validator("id", mode="before")
    @classmethod
    def _challenge_id(cls, value: Any) -> str:
        return str(value)
