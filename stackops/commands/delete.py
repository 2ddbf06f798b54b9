"""CLI parser for the delete command."""

from __future__ import annotations

import argparse
import logging

from stackops.core.deployment import DeploymentEngine
from stackops.core.runner import StackCommandExecutor
from stackops.core.teardown import fully_delete_stack

logger = logging.getLogger(__name__)


def register_parser(subparsers: argparse._SubParsersAction[argparse.ArgumentParser]) -> None:
    parser = subparsers.add_parser(
        "delete",
        help="Fully delete a testing stack (unprotect, destroy, remove)",
    )
    parser.add_argument("--stack", "-s", required=True, help="Name of the stack to delete")
    parser.add_argument(
        "--work-dir",
        help="Project directory holding the stack (default: WORK_DIR or current directory)",
    )
    parser.add_argument(
        "--no-refresh",
        dest="refresh",
        action="store_false",
        help="Skip refreshing the stack from the provider before deleting",
    )
    parser.set_defaults(func=run)


def run(
    args: argparse.Namespace,
    engine: DeploymentEngine,
    executor: StackCommandExecutor,
) -> int:
    stack = engine.select(args.stack, args.work_dir)

    if args.refresh:
        logger.info("Refreshing %s", stack.name)
        stack.refresh()

    fully_delete_stack(stack, executor)
    return 0
