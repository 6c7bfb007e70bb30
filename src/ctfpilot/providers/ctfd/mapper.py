"""Translation between CTFd JSON payloads and ctfpilot records."""

from __future__ import annotations

from typing import Any

from ctfpilot.contracts.challenge import ChallengeSpec, Requirements
from ctfpilot.contracts.exceptions import ProviderError
from ctfpilot.contracts.records import FileRecord, FlagRecord, HintRecord, SetMember, filename

_DYNAMIC_FIELDS = ("initial", "decay", "minimum", "function")


def as_remote_id(value: str) -> int | str:
    """CTFd expects numeric ids in request bodies."""
    return int(value) if value.isdigit() else value


def requirements_payload(requirements: Requirements | None) -> dict[str, Any] | None:
    if requirements is None:
        return None
    return {
        "prerequisites": [as_remote_id(item) for item in requirements.prerequisites],
        "anonymize": requirements.behavior == "anonymized",
    }


def challenge_payload(spec: ChallengeSpec) -> dict[str, Any]:
    fields = spec.direct_fields()
    payload: dict[str, Any] = {
        "name": fields["name"],
        "category": fields["category"],
        "description": fields["description"],
        "connection_info": fields["connection_info"],
        "max_attempts": fields["max_attempts"],
        "state": fields["state"],
        "type": fields["type"],
        "next_id": fields["next"],
    }
    if spec.type == "dynamic":
        payload.update({name: fields[name] for name in _DYNAMIC_FIELDS})
        payload["value"] = fields["initial"]
    else:
        payload["value"] = fields["value"]
    requirements = requirements_payload(spec.requirements)
    if requirements is not None:
        payload["requirements"] = requirements
    return payload


def challenge_from_api(data: dict[str, Any], requirements: dict[str, Any] | None) -> ChallengeSpec:
    challenge_type = data.get("type", "standard")
    try:
        return ChallengeSpec(
            name=data["name"],
            category=data.get("category", ""),
            description=data.get("description") or "",
            connection_info=data.get("connection_info") or "",
            max_attempts=data.get("max_attempts") or 0,
            function=data.get("function") or "linear",
            value=data.get("value") if challenge_type == "standard" else None,
            initial=data.get("initial"),
            decay=data.get("decay"),
            minimum=data.get("minimum"),
            state=data.get("state", "hidden"),
            type=challenge_type,
            requirements=requirements_from_api(requirements),
            next=data.get("next_id"),
        )
    except (KeyError, ValueError) as exc:
        raise ProviderError(f"unexpected challenge payload: {exc}") from exc


def requirements_from_api(data: dict[str, Any] | None) -> Requirements | None:
    if not data:
        return None
    return Requirements(
        behavior="anonymized" if data.get("anonymize") else "hidden",
        prerequisites=data.get("prerequisites") or [],
    )


def flag_payload(parent_id: str, record: FlagRecord) -> dict[str, Any]:
    return {
        "challenge": as_remote_id(parent_id),
        "content": record.content,
        "type": record.type or "static",
        # CTFd stores case sensitivity as an empty string.
        "data": "case_insensitive" if record.data == "case_insensitive" else "",
    }


def flag_from_api(data: dict[str, Any]) -> FlagRecord:
    return FlagRecord(id=data["id"], content=data["content"], data=data.get("data") or "", type=data.get("type"))


def hint_payload(parent_id: str, record: HintRecord) -> dict[str, Any]:
    return {
        "challenge": as_remote_id(parent_id),
        "content": record.content,
        "cost": record.cost or 0,
        "requirements": {"prerequisites": [as_remote_id(item) for item in record.requirements or []]},
    }


def hint_from_api(data: dict[str, Any]) -> HintRecord:
    requirements = data.get("requirements") or {}
    return HintRecord(
        id=data["id"],
        content=data.get("content", ""),
        cost=data.get("cost", 0),
        requirements=requirements.get("prerequisites") or [],
    )


def file_from_api(data: dict[str, Any]) -> FileRecord:
    location = data["location"]
    return FileRecord(id=data["id"], name=filename(location), location=location)


def member_from_api(data: dict[str, Any]) -> SetMember:
    return SetMember(value=data["value"], id=data["id"])
