"""SDK composition root for ctfpilot."""

from __future__ import annotations

import asyncio
from pathlib import Path

from ctfpilot.auth import create_credentials_resolver
from ctfpilot.challenge import ChallengeLoader, ChallengeValidator, bind_identities
from ctfpilot.config import load_config
from ctfpilot.contracts.challenge import ChallengeSpec, ChallengeState
from ctfpilot.contracts.config import CtfPilotConfig
from ctfpilot.contracts.exceptions import StateError
from ctfpilot.contracts.provider import Provider
from ctfpilot.contracts.reconcile import ApplyResult, ReconcilePlan
from ctfpilot.contracts.records import SubEntityKind
from ctfpilot.engine import ChallengeEngine
from ctfpilot.engine.progress import ApplyProgress
from ctfpilot.persistence import load_state, output_state_path, persist_state, remove_state
from ctfpilot.providers.dry_run import DryRunProvider
from ctfpilot.providers.factory import create_provider


def load_challenge(path: str | Path) -> ChallengeSpec:
    """Load and validate a challenge declaration."""
    spec = ChallengeLoader().load(Path(path))
    ChallengeValidator().validate(spec)
    return spec


class CtfPilot:
    """ctfpilot SDK public API."""

    def __init__(
        self,
        *,
        provider: Provider | None,
        config: CtfPilotConfig,
        progress: ApplyProgress | None = None,
        cancel: asyncio.Event | None = None,
    ) -> None:
        self._provider = provider
        self._config = config
        self._progress = progress
        self._cancel = cancel

    @classmethod
    async def from_config(
        cls,
        config: CtfPilotConfig | str | Path,
        *,
        progress: ApplyProgress | None = None,
        cancel: asyncio.Event | None = None,
    ) -> CtfPilot:
        if not isinstance(config, CtfPilotConfig):
            config = load_config(config)
        return cls(provider=None, config=config, progress=progress, cancel=cancel)

    @property
    def config(self) -> CtfPilotConfig:
        return self._config

    def recorded_state(self) -> ChallengeState | None:
        return load_state(state_path=self._config.state_path)

    async def apply(self, spec: ChallengeSpec | None = None, *, dry_run: bool = False) -> ApplyResult:
        """Converge the remote challenge to *spec* and persist the new state.

        Without a recorded state the challenge is created. A dry run works
        against an in-memory copy of the recorded state and writes its result
        next to the real state file.
        """
        declared = spec if spec is not None else load_challenge(self._config.challenge_path)
        recorded = self.recorded_state()
        bound = bind_identities(declared, recorded)

        if dry_run:
            provider: Provider = DryRunProvider(seed=recorded)
        else:
            provider = await self._resolve_apply_provider()
        async with provider:
            engine = self._engine(provider, dry_run=dry_run)
            if recorded is None:
                result = await engine.create(bound)
            else:
                result = await engine.update(bound, recorded)

        persist_state(state=result.state, state_path=self._config.state_path, dry_run=dry_run)
        return result

    async def plan(self, spec: ChallengeSpec | None = None) -> dict[SubEntityKind, ReconcilePlan]:
        """Preview the per-collection actions of the next apply without writing anything."""
        declared = spec if spec is not None else load_challenge(self._config.challenge_path)
        recorded = self.recorded_state()
        bound = bind_identities(declared, recorded)
        if recorded is None:
            return await self._engine(DryRunProvider()).plan(bound, None)

        provider = await self._resolve_apply_provider()
        async with provider:
            return await self._engine(provider).plan(bound, recorded)

    async def import_challenge(self, challenge_id: str) -> ChallengeState:
        """Adopt an existing remote challenge as the recorded state."""
        provider = await self._resolve_apply_provider()
        async with provider:
            state = await self._engine(provider).read(challenge_id)
        persist_state(state=state, state_path=self._config.state_path, dry_run=False)
        return state

    async def destroy(self, *, dry_run: bool = False) -> ChallengeState:
        """Delete the recorded challenge and forget its state."""
        recorded = self.recorded_state()
        if recorded is None:
            raise StateError(f"no recorded challenge to destroy: {self._config.state_path}")
        if dry_run:
            return recorded

        provider = await self._resolve_apply_provider()
        async with provider:
            await self._engine(provider).delete(recorded)
        remove_state(state_path=self._config.state_path)
        remove_state(state_path=output_state_path(state_path=self._config.state_path, dry_run=True))
        return recorded

    def _engine(self, provider: Provider, *, dry_run: bool = False) -> ChallengeEngine:
        return ChallengeEngine(
            provider,
            skip_unchanged_sets=self._config.skip_unchanged_sets,
            cancel=self._cancel,
            progress=self._progress,
            dry_run=dry_run,
        )

    async def _resolve_apply_provider(self) -> Provider:
        if self._provider is not None:
            return self._provider

        credentials = await create_credentials_resolver(self._config).resolve()
        return create_provider(self._config, credentials)
