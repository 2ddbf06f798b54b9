"""
Exception classes for the stack harness.

ConfigurationError and ReferenceNotFoundError are raised straight to the
caller. Provisioning, drift and validation failures abort the forward phase
of a run but never prevent teardown.
"""

from __future__ import annotations


class StackOpsError(RuntimeError):
    """Base exception for stack harness failures."""


class ConfigurationError(StackOpsError):
    """Raised when required configuration is missing or invalid."""


class ProvisioningError(StackOpsError):
    """Raised when the engine fails to apply, refresh or destroy a stack."""

    def __init__(self, stack_name: str, operation: str, cause: Exception | str):
        self.stack_name = stack_name
        self.operation = operation
        self.cause = cause
        super().__init__(f"{operation} failed for stack {stack_name}: {cause}")


class StackNotFoundError(ProvisioningError):
    """Raised when the engine has no record of the stack."""


class DriftDetectedError(StackOpsError):
    """Raised when a freshly applied and refreshed stack still has pending changes."""

    def __init__(self, stack_name: str, changes: dict[str, int] | None = None):
        self.stack_name = stack_name
        self.changes = dict(changes or {})
        if self.changes:
            summary = ", ".join(f"{op}={count}" for op, count in sorted(self.changes.items()))
            super().__init__(f"Stack {stack_name} is not stable after apply ({summary})")
        else:
            super().__init__(f"Stack {stack_name} is not stable after apply")


class ValidationError(StackOpsError):
    """Raised when the caller's validation callback fails."""

    def __init__(self, template: str, stack_name: str, cause: BaseException):
        self.template = template
        self.stack_name = stack_name
        self.cause = cause
        super().__init__(f"Validation failed for {template} ({stack_name}): {cause}")


class ReferenceNotFoundError(StackOpsError):
    """Raised when a required output is absent on a referenced stack."""

    def __init__(self, stack_name: str, key: str):
        self.stack_name = stack_name
        self.key = key
        super().__init__(f"Required output '{key}' does not exist on stack {stack_name}")


class CommandExecutionError(StackOpsError):
    """Raised when an administrative command exits non-zero or cannot start."""

    def __init__(self, message: str, *, returncode: int | None = None, output: str = ""):
        self.returncode = returncode
        self.output = output
        super().__init__(message)


class TeardownError(StackOpsError):
    """Raised when one or more stacks could not be fully deleted."""

    def __init__(self, failures: list[tuple[str, Exception]]):
        self.failures = list(failures)
        names = ", ".join(name for name, _ in self.failures)
        super().__init__(f"Failed to tear down {len(self.failures)} stack(s): {names}")
