"""
Deployment handles over the Pulumi automation API.

`Deployment` and `DeploymentEngine` are the seams the orchestrator and the
teardown controller work against. `PulumiEngine` / `PulumiDeployment` bind
them to `pulumi.automation`; tests bind them to in-memory fakes.
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Callable, Dict, Protocol, TypeVar

from pulumi import automation as auto

from stackops.core.errors import DriftDetectedError, ProvisioningError, StackNotFoundError

logger = logging.getLogger(__name__)
engine_logger = logging.getLogger("stackops.engine")

ConfigMap = Dict[str, auto.ConfigValue]
OutputMap = Dict[str, auto.OutputValue]

_NO_CHANGES_EXPECTED = "no changes were expected"

T = TypeVar("T")


class Deployment(Protocol):
    """One engine-managed stack, identified by name and work dir."""

    @property
    def name(self) -> str: ...

    @property
    def work_dir(self) -> str: ...

    def get_all_config(self, source_name: str) -> ConfigMap: ...

    def set_all_config(self, config: ConfigMap) -> None: ...

    def up(self) -> None: ...

    def refresh(self) -> None: ...

    def preview_expect_no_changes(self) -> None: ...

    def destroy(self) -> None: ...

    def remove_state(self) -> None: ...

    def outputs(self) -> OutputMap: ...


class DeploymentEngine(Protocol):
    def select_or_create(self, name: str, work_dir: str) -> Deployment: ...

    def select(self, name: str, work_dir: str) -> Deployment: ...


def _log_engine_output(line: str) -> None:
    engine_logger.debug(line.rstrip("\n"))


def pending_changes(change_summary: dict | None) -> dict[str, int]:
    """Return the non-`same` operations with a positive count."""
    changes: dict[str, int] = {}
    for op, count in (change_summary or {}).items():
        op_name = str(getattr(op, "value", op))
        if op_name == "same" or not count:
            continue
        changes[op_name] = int(count)
    return changes


class PulumiDeployment:
    """`Deployment` backed by a `pulumi.automation.Stack`."""

    def __init__(self, stack: auto.Stack) -> None:
        self._stack = stack

    @property
    def name(self) -> str:
        return self._stack.name

    @property
    def work_dir(self) -> str:
        return self._stack.workspace.work_dir

    @property
    def stack(self) -> auto.Stack:
        return self._stack

    def _call(self, operation: str, func: Callable[[], T]) -> T:
        try:
            return func()
        except auto.StackNotFoundError as exc:
            raise StackNotFoundError(self.name, operation, exc) from exc
        except auto.CommandError as exc:
            raise ProvisioningError(self.name, operation, exc) from exc

    def get_all_config(self, source_name: str) -> ConfigMap:
        return self._call(
            "get config",
            lambda: self._stack.workspace.get_all_config(source_name),
        )

    def set_all_config(self, config: ConfigMap) -> None:
        if not config:
            return
        self._call(
            "set config",
            lambda: self._stack.workspace.set_all_config(self.name, config),
        )

    def up(self) -> None:
        self._call("up", lambda: self._stack.up(on_output=_log_engine_output))

    def refresh(self) -> None:
        self._call("refresh", lambda: self._stack.refresh(on_output=_log_engine_output))

    def preview_expect_no_changes(self) -> None:
        try:
            result = self._stack.preview(
                expect_no_changes=True,
                on_output=_log_engine_output,
            )
        except auto.StackNotFoundError as exc:
            raise StackNotFoundError(self.name, "preview", exc) from exc
        except auto.CommandError as exc:
            if _NO_CHANGES_EXPECTED in str(exc).lower():
                raise DriftDetectedError(self.name) from exc
            raise ProvisioningError(self.name, "preview", exc) from exc

        changes = pending_changes(result.change_summary)
        if changes:
            raise DriftDetectedError(self.name, changes)

    def destroy(self) -> None:
        self._call("destroy", lambda: self._stack.destroy(on_output=_log_engine_output))

    def remove_state(self) -> None:
        self._call("remove", lambda: self._stack.workspace.remove_stack(self.name))

    def outputs(self) -> OutputMap:
        return self._call("outputs", self._stack.outputs)


class PulumiEngine:
    """`DeploymentEngine` creating local-workspace stacks from a project directory."""

    def select_or_create(self, name: str, work_dir: str) -> PulumiDeployment:
        logger.debug("Selecting or creating stack %s in %s", name, work_dir)
        try:
            stack = auto.create_or_select_stack(
                stack_name=name,
                work_dir=str(Path(work_dir)),
            )
        except auto.CommandError as exc:
            raise ProvisioningError(name, "create", exc) from exc
        return PulumiDeployment(stack)

    def select(self, name: str, work_dir: str) -> PulumiDeployment:
        try:
            stack = auto.select_stack(stack_name=name, work_dir=str(Path(work_dir)))
        except auto.StackNotFoundError as exc:
            raise StackNotFoundError(name, "select", exc) from exc
        except auto.CommandError as exc:
            raise ProvisioningError(name, "select", exc) from exc
        return PulumiDeployment(stack)
