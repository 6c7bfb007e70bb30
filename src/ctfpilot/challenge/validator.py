"""Challenge declaration semantic validation."""

from __future__ import annotations

from collections import Counter

from ctfpilot.contracts.challenge import ChallengeSpec
from ctfpilot.contracts.exceptions import ChallengeValidationError


class ChallengeValidator:
    def validate(self, spec: ChallengeSpec) -> None:
        errors: list[str] = []

        if not spec.name.strip():
            errors.append("challenge name must not be empty")
        if spec.max_attempts < 0:
            errors.append(f"max_attempts must not be negative: {spec.max_attempts}")
        if spec.next is not None and spec.next <= 0:
            errors.append(f"next must be a challenge id: {spec.next}")

        names = Counter(file.name for file in spec.files)
        for name, count in names.items():
            if count > 1:
                errors.append(f"duplicate file name: {name}")
        for file in spec.files:
            if file.sha256 is None:
                errors.append(f"file has no content: {file.name}")

        for index, flag in enumerate(spec.flags):
            if not flag.content:
                errors.append(f"flag #{index} has empty content")

        for index, hint in enumerate(spec.hints):
            if hint.cost is not None and hint.cost < 0:
                errors.append(f"hint #{index} has a negative cost: {hint.cost}")

        for field in ("tags", "topics"):
            for value in getattr(spec, field):
                if not value.strip():
                    errors.append(f"{field} must not contain empty values")
                    break

        if errors:
            raise ChallengeValidationError(errors)
