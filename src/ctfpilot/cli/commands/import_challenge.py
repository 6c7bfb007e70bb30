"""Import command formatting."""

from __future__ import annotations

import argparse

from ctfpilot import KIND_ORDER, ChallengeState, CtfPilotConfig


def format_import_summary(state: ChallengeState, config: CtfPilotConfig) -> str:
    spec = state.spec
    lines = [
        "",
        "ctfpilot - import complete",
        "",
        f"  Challenge: {spec.name} (#{state.id})",
        f"  Type:      {spec.type}",
    ]
    for kind in KIND_ORDER:
        label = f"{kind.value.capitalize()}:"
        lines.append(f"  {label:<11}{len(spec.collection(kind))}")
    lines.append("")
    lines.append(f"  State:     {config.state_path}")
    lines.append("")
    return "\n".join(lines)


async def run_import(args: argparse.Namespace) -> ChallengeState:
    import ctfpilot.cli as cli

    config = cli.load_config(args.config)
    pilot = await cli.CtfPilot.from_config(config)
    state = await pilot.import_challenge(args.challenge_id)

    print(cli._format_import_summary(state, config))
    return state


__all__ = ["format_import_summary", "run_import"]
