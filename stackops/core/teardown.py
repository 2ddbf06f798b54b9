"""
Full deletion of ephemeral stacks.

Order per stack: unprotect every resource, destroy, remove the stack record.
"Already absent" outcomes count as success so teardown can be repeated on a
stack that was partially deleted or never applied.
"""

from __future__ import annotations

import logging
from typing import Iterable, Protocol

from stackops.core.deployment import Deployment
from stackops.core.errors import CommandExecutionError, StackNotFoundError

logger = logging.getLogger(__name__)

_ABSENT_MARKERS = (
    "no stack named",
    "stack not found",
    "no resources",
    "does not exist",
)


class ProtectionClearer(Protocol):
    def unprotect_all(self, stack: Deployment) -> None: ...


def is_absent_failure(exc: Exception) -> bool:
    if isinstance(exc, StackNotFoundError):
        return True
    if isinstance(exc, CommandExecutionError):
        detail = f"{exc} {exc.output}".lower()
        return any(marker in detail for marker in _ABSENT_MARKERS)
    return False


def unprotect_all(stack: Deployment, executor: ProtectionClearer) -> None:
    try:
        executor.unprotect_all(stack)
    except CommandExecutionError as exc:
        if not is_absent_failure(exc):
            raise
        logger.info("Nothing to unprotect in %s", stack.name)


def fully_delete_stack(stack: Deployment, executor: ProtectionClearer) -> None:
    """Unprotect, destroy and remove `stack`, tolerating already-absent state."""
    logger.info("Unprotecting resources from %s", stack.name)
    unprotect_all(stack, executor)

    logger.info("Deleting resources from %s", stack.name)
    try:
        stack.destroy()
    except StackNotFoundError:
        logger.info("No resources to delete in %s", stack.name)

    logger.info("Deleting %s", stack.name)
    try:
        stack.remove_state()
    except StackNotFoundError:
        logger.info("Stack %s was already removed", stack.name)

    logger.info("Deleted %s", stack.name)


def teardown_all(
    stacks: Iterable[Deployment],
    executor: ProtectionClearer,
) -> list[tuple[str, Exception]]:
    """Fully delete `stacks` in the given order, collecting failures instead of stopping."""
    failures: list[tuple[str, Exception]] = []
    for stack in stacks:
        try:
            fully_delete_stack(stack, executor)
        except Exception as exc:
            logger.error("Teardown failed for %s: %s", stack.name, exc)
            failures.append((stack.name, exc))
    return failures
