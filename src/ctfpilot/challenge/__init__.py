"""Challenge declaration loading, validation, and identity binding."""

from ctfpilot.challenge.binding import bind_identities
from ctfpilot.challenge.loader import ChallengeLoader
from ctfpilot.challenge.validator import ChallengeValidator

__all__ = ["ChallengeLoader", "ChallengeValidator", "bind_identities"]
