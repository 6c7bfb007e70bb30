"""Destroy command formatting."""

from __future__ import annotations

import argparse

from ctfpilot import ChallengeState


def format_destroy_summary(state: ChallengeState, *, dry_run: bool) -> str:
    mode = "dry-run" if dry_run else "apply"

    lines = [
        "",
        f"ctfpilot - destroy complete ({mode})",
        "",
        f"  Challenge: {state.spec.name} (#{state.id})",
        "",
    ]

    if dry_run:
        lines.append("  [dry-run] The challenge was not deleted")
        lines.append("")

    return "\n".join(lines)


async def run_destroy(args: argparse.Namespace) -> ChallengeState:
    import ctfpilot.cli as cli

    config = cli.load_config(args.config)
    pilot = await cli.CtfPilot.from_config(config)
    state = await pilot.destroy(dry_run=args.dry_run)

    print(cli._format_destroy_summary(state, dry_run=args.dry_run))
    return state


__all__ = ["format_destroy_summary", "run_destroy"]
