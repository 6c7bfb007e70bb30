"""CLI app entrypoint and error mapping."""

from __future__ import annotations

import sys

from ctfpilot import (
    AuthenticationError,
    ChallengeLoadError,
    ChallengeValidationError,
    ConfigError,
    ProviderError,
    ReconcileError,
    StateError,
)


def main(argv: list[str] | None = None) -> int:
    import ctfpilot.cli as cli

    parser = cli.build_parser()
    args = parser.parse_args(argv)

    if args.verbose:
        cli.logging.basicConfig(level=cli.logging.DEBUG, format="%(name)s %(message)s", stream=sys.stderr)

    try:
        if args.command == "apply":
            result = cli.asyncio.run(cli._run_apply(args))
            # The state was persisted, but the challenge has not converged.
            return 6 if result.failed else 0
        if args.command == "plan":
            cli.asyncio.run(cli._run_plan(args))
        elif args.command == "import":
            cli.asyncio.run(cli._run_import(args))
        elif args.command == "destroy":
            cli.asyncio.run(cli._run_destroy(args))
        return 0
    except (ConfigError, ChallengeLoadError, ChallengeValidationError, StateError) as exc:
        print(f"error: {exc}", file=sys.stderr)
        return 3
    except (AuthenticationError, ProviderError) as exc:
        print(f"error: {exc}", file=sys.stderr)
        return 4
    except ReconcileError as exc:
        print(f"error: {exc}", file=sys.stderr)
        return 5
    except Exception as exc:  # pragma: no cover
        print(f"error: {exc}", file=sys.stderr)
        return 1


__all__ = ["main"]
