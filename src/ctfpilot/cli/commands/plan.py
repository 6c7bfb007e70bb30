"""Plan command formatting."""

from __future__ import annotations

import argparse

from ctfpilot import KIND_ORDER, ActionOp, ReconcilePlan, SubEntityKind
from ctfpilot.cli.common import format_op_counts


def format_plan_summary(plans: dict[SubEntityKind, ReconcilePlan]) -> str:
    lines = ["", "ctfpilot - plan", ""]
    converged = True
    for kind in KIND_ORDER:
        plan = plans.get(kind)
        if plan is None:
            continue
        converged = converged and plan.converged
        label = f"{kind.value.capitalize()}:"
        lines.append(f"  {label:<11}{format_op_counts(plan.counts())}")
        for action in plan.actions:
            if action.op != ActionOp.KEEP:
                lines.append(f"    - {action.describe()}")

    lines.append("")
    lines.append("  Status:    up to date" if converged else "  Status:    changes pending")
    lines.append("")
    return "\n".join(lines)


async def run_plan(args: argparse.Namespace) -> dict[SubEntityKind, ReconcilePlan]:
    import ctfpilot.cli as cli

    config = cli.load_config(args.config)
    pilot = await cli.CtfPilot.from_config(config)
    plans = await pilot.plan()

    print(cli._format_plan_summary(plans))
    return plans


__all__ = ["format_plan_summary", "run_plan"]
