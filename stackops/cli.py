#!/usr/bin/env python3
"""Ephemeral stack maintenance CLI."""

from __future__ import annotations

import argparse
import sys

from stackops.commands import delete, unprotect
from stackops.core.deployment import DeploymentEngine, PulumiEngine
from stackops.core.errors import StackOpsError
from stackops.core.logging_config import setup_logging
from stackops.core.runner import CommandRunner, StackCommandExecutor
from stackops.core.settings import HarnessSettings


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description="Ephemeral stack toolkit (unprotect + full delete)",
    )
    parser.add_argument(
        "--log-level",
        help="Log level (default: LOG_LEVEL or INFO)",
    )

    subparsers = parser.add_subparsers(dest="command", required=True)
    delete.register_parser(subparsers)
    unprotect.register_parser(subparsers)

    return parser


def main(
    argv: list[str] | None = None,
    *,
    engine: DeploymentEngine | None = None,
    executor: StackCommandExecutor | None = None,
    settings: HarnessSettings | None = None,
) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)
    settings = settings or HarnessSettings()

    setup_logging(settings.LOG_CONFIG_PATH, level=args.log_level or settings.LOG_LEVEL)

    if not hasattr(args, "func"):
        parser.print_help()
        return 2

    if not args.work_dir:
        args.work_dir = settings.WORK_DIR
    engine = engine or PulumiEngine()

    try:
        if executor is None:
            runner = CommandRunner()
            runner.require_command(settings.PULUMI_BIN)
            executor = StackCommandExecutor(runner, pulumi_bin=settings.PULUMI_BIN)
        return int(args.func(args, engine, executor))
    except StackOpsError as exc:
        print(f"Error: {exc}", file=sys.stderr)
        return 1


if __name__ == "__main__":
    raise SystemExit(main())
