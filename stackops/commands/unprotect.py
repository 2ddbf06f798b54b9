"""CLI parser for the unprotect command."""

from __future__ import annotations

import argparse

from stackops.core.deployment import DeploymentEngine
from stackops.core.runner import StackCommandExecutor
from stackops.core.teardown import unprotect_all


def register_parser(subparsers: argparse._SubParsersAction[argparse.ArgumentParser]) -> None:
    parser = subparsers.add_parser(
        "unprotect",
        help="Clear deletion protection from every resource in a stack",
    )
    parser.add_argument("--stack", "-s", required=True, help="Name of the stack to unprotect")
    parser.add_argument(
        "--work-dir",
        help="Project directory holding the stack (default: WORK_DIR or current directory)",
    )
    parser.set_defaults(func=run)


def run(
    args: argparse.Namespace,
    engine: DeploymentEngine,
    executor: StackCommandExecutor,
) -> int:
    stack = engine.select(args.stack, args.work_dir)
    unprotect_all(stack, executor)
    return 0
