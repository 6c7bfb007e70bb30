"""Challenge apply engine."""

from .engine import ChallengeEngine, declared_values, desired_records
from .progress import ApplyProgress, NullApplyProgress

__all__ = ["ApplyProgress", "ChallengeEngine", "NullApplyProgress", "declared_values", "desired_records"]
