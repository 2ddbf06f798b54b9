"""
Ephemeral stack test harness.

Creates uniquely named stacks from template stacks, validates them and
guarantees their full deletion.
"""

from .core.errors import (
    CommandExecutionError,
    ConfigurationError,
    DriftDetectedError,
    ProvisioningError,
    ReferenceNotFoundError,
    StackNotFoundError,
    StackOpsError,
    TeardownError,
    ValidationError,
)
from .core.orchestrator import ephemeral_stacks, run_ephemeral_test
from .core.select import select
from .core.settings import RunOptions
from .core.stack_ref import StackRef, stack_ref
from .core.teardown import fully_delete_stack

__all__ = [
    "CommandExecutionError",
    "ConfigurationError",
    "DriftDetectedError",
    "ProvisioningError",
    "ReferenceNotFoundError",
    "StackNotFoundError",
    "StackOpsError",
    "TeardownError",
    "ValidationError",
    "ephemeral_stacks",
    "run_ephemeral_test",
    "select",
    "RunOptions",
    "StackRef",
    "stack_ref",
    "fully_delete_stack",
]
