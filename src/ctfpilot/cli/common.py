"""Shared CLI formatting helpers."""

from __future__ import annotations

from collections.abc import Iterable, Mapping

from ctfpilot import ActionOp, Diagnostic

_OP_LABELS = (
    (ActionOp.CREATE, "created"),
    (ActionOp.UPDATE, "updated"),
    (ActionOp.DELETE, "deleted"),
    (ActionOp.KEEP, "kept"),
)


def format_op_counts(counts: Mapping[ActionOp, int], *, labels: Iterable[tuple[ActionOp, str]] = _OP_LABELS) -> str:
    parts = [f"{counts[op]} {label}" for op, label in labels if counts.get(op)]
    return ", ".join(parts) if parts else "no changes"


def format_diagnostics(diagnostics: list[Diagnostic]) -> list[str]:
    if not diagnostics:
        return []
    lines = ["", f"  {pluralize(len(diagnostics), 'diagnostic')}:"]
    lines.extend(f"    {diagnostic}" for diagnostic in diagnostics)
    return lines


def pluralize(count: int, noun: str) -> str:
    return f"{count} {noun}{'s' if count != 1 else ''}"
