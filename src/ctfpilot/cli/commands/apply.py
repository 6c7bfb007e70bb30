"""Apply command formatting."""

from __future__ import annotations

import argparse
import asyncio
import signal

from ctfpilot import KIND_ORDER, ApplyResult, CtfPilotConfig
from ctfpilot.cli.common import format_diagnostics, format_op_counts
from ctfpilot.cli.progress.rich import RichApplyProgress


def format_apply_summary(result: ApplyResult, config: CtfPilotConfig) -> str:
    mode = "dry-run" if result.dry_run else "apply"
    spec = result.state.spec
    status = "created" if result.created else "updated"
    if result.cancelled:
        status = "cancelled"

    lines = [
        "",
        f"ctfpilot - apply complete ({mode})",
        "",
        f"  Challenge: {spec.name} (#{result.state.id})",
        f"  Status:    {status}",
        "",
    ]
    for kind in KIND_ORDER:
        collection = result.collections.get(kind)
        if collection is None:
            continue
        label = f"{kind.value.capitalize()}:"
        lines.append(f"  {label:<11}{len(collection.new_state)} recorded ({format_op_counts(collection.applied)})")

    lines.extend(format_diagnostics(result.diagnostics))

    lines.append("")
    state_path = f"{config.state_path}.dry-run" if result.dry_run else str(config.state_path)
    lines.append(f"  State:     {state_path}")

    if result.dry_run:
        lines.append("")
        lines.append("  [dry-run] No changes were made")

    lines.append("")
    return "\n".join(lines)


def _install_cancel_handler(cancel: asyncio.Event) -> bool:
    try:
        asyncio.get_running_loop().add_signal_handler(signal.SIGINT, cancel.set)
    except (NotImplementedError, RuntimeError):
        return False
    return True


async def run_apply(args: argparse.Namespace) -> ApplyResult:
    import ctfpilot.cli as cli

    config = cli.load_config(args.config)
    cancel = asyncio.Event()
    # Ctrl-C stops the apply between remote calls; the partial state is still persisted.
    installed = _install_cancel_handler(cancel)

    try:
        if not args.verbose:
            with RichApplyProgress() as progress:
                pilot = await cli.CtfPilot.from_config(config, progress=progress, cancel=cancel)
                result = await pilot.apply(dry_run=args.dry_run)
        else:
            pilot = await cli.CtfPilot.from_config(config, cancel=cancel)
            result = await pilot.apply(dry_run=args.dry_run)
    finally:
        if installed:
            asyncio.get_running_loop().remove_signal_handler(signal.SIGINT)

    print(cli._format_apply_summary(result, config))
    return result


__all__ = ["format_apply_summary", "run_apply"]
