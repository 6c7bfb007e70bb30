"""CLI parser construction."""

from __future__ import annotations

import argparse
from importlib.metadata import PackageNotFoundError, version


def _package_version() -> str:
    try:
        return version("ctfpilot")
    except PackageNotFoundError:
        return "0.0.0"


def _add_common(parser: argparse.ArgumentParser) -> None:
    parser.add_argument("--config", default="./ctfpilot.json", help="Path to ctfpilot.json")
    parser.add_argument("--verbose", "-v", action="store_true", help="Enable debug logging")


def _add_mode(parser: argparse.ArgumentParser) -> None:
    mode = parser.add_mutually_exclusive_group(required=True)
    mode.add_argument("--dry-run", action="store_true", help="Preview mode")
    mode.add_argument("--apply", action="store_true", help="Apply mode")


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="ctfpilot")
    parser.add_argument("--version", action="version", version=f"%(prog)s {_package_version()}")

    subparsers = parser.add_subparsers(dest="command", required=True)

    apply_parser = subparsers.add_parser("apply", help="Converge the CTFd challenge to its declaration")
    _add_common(apply_parser)
    _add_mode(apply_parser)

    plan_parser = subparsers.add_parser("plan", help="Show the actions the next apply would take")
    _add_common(plan_parser)

    import_parser = subparsers.add_parser("import", help="Adopt an existing CTFd challenge as recorded state")
    import_parser.add_argument("challenge_id", help="CTFd challenge id")
    _add_common(import_parser)

    destroy_parser = subparsers.add_parser("destroy", help="Delete the recorded challenge from CTFd")
    _add_common(destroy_parser)
    _add_mode(destroy_parser)

    return parser


__all__ = ["build_parser"]
