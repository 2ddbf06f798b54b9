"""
Where: stackops/tests/conftest.py
What: In-memory engine, stack and command executor fakes.
Why: Exercise orchestration and teardown without a real engine or cloud account.
"""

from __future__ import annotations

import pytest
from pulumi.automation import ConfigValue

from stackops.core.errors import (
    CommandExecutionError,
    DriftDetectedError,
    ProvisioningError,
    StackNotFoundError,
)


class FakeStack:
    def __init__(self, engine: "FakeEngine", name: str, work_dir: str, index: int) -> None:
        self.engine = engine
        self._name = name
        self._work_dir = work_dir
        self.index = index
        self.config: dict[str, ConfigValue] = {}
        self.config_writes: list[dict[str, ConfigValue]] = []
        self.exists = True
        self.resources = 0
        self.protected = False
        self.output_values: dict = {}

    @property
    def name(self) -> str:
        return self._name

    @property
    def work_dir(self) -> str:
        return self._work_dir

    def _event(self, op: str) -> None:
        self.engine.events.append((op, self._name))
        failure = self.engine.failures.get((self.index, op))
        if failure is not None:
            raise failure

    def get_all_config(self, source_name: str) -> dict[str, ConfigValue]:
        self._event("get_config")
        if source_name not in self.engine.templates:
            raise StackNotFoundError(source_name, "get config", "no stack named " + source_name)
        return dict(self.engine.templates[source_name])

    def set_all_config(self, config: dict[str, ConfigValue]) -> None:
        self._event("set_config")
        self.config_writes.append(dict(config))
        self.config.update(config)

    def up(self) -> None:
        self._event("up")
        self.resources = self.engine.resources_per_stack
        self.protected = True
        self.output_values = {"stackName": self._name}

    def refresh(self) -> None:
        self._event("refresh")
        if not self.exists:
            raise StackNotFoundError(self._name, "refresh", "no stack named " + self._name)

    def preview_expect_no_changes(self) -> None:
        self._event("preview")
        if self.engine.drift:
            raise DriftDetectedError(self._name, {"update": 1})

    def destroy(self) -> None:
        self._event("destroy")
        if not self.exists:
            raise StackNotFoundError(self._name, "destroy", "no stack named " + self._name)
        if self.protected and self.resources:
            raise ProvisioningError(self._name, "destroy", "resource is protected")
        self.resources = 0

    def remove_state(self) -> None:
        self._event("remove")
        if not self.exists:
            raise StackNotFoundError(self._name, "remove", "no stack named " + self._name)
        if self.resources:
            raise ProvisioningError(self._name, "remove", "stack still has resources")
        self.exists = False
        self.engine.live.pop(self._name, None)

    def outputs(self) -> dict:
        self._event("outputs")
        return dict(self.output_values)


class FakeEngine:
    def __init__(self) -> None:
        self.templates: dict[str, dict[str, ConfigValue]] = {}
        self.events: list[tuple[str, str]] = []
        self.failures: dict[tuple[int, str], Exception] = {}
        self.created: list[FakeStack] = []
        self.live: dict[str, FakeStack] = {}
        self.resources_per_stack = 2
        self.drift = False

    def select_or_create(self, name: str, work_dir: str) -> FakeStack:
        self.events.append(("select_or_create", name))
        stack = self.live.get(name)
        if stack is None:
            stack = FakeStack(self, name, work_dir, index=len(self.created))
            self.created.append(stack)
            self.live[name] = stack
        return stack

    def select(self, name: str, work_dir: str) -> FakeStack:
        self.events.append(("select", name))
        stack = self.live.get(name)
        if stack is None:
            raise StackNotFoundError(name, "select", "no stack named " + name)
        return stack

    def ops(self, op: str) -> list[str]:
        return [name for event, name in self.events if event == op]


class FakeExecutor:
    def __init__(self) -> None:
        self.calls: list[str] = []
        self.error: Exception | None = None

    def unprotect_all(self, stack: FakeStack) -> None:
        self.calls.append(stack.name)
        stack.engine.events.append(("unprotect", stack.name))
        if self.error is not None:
            raise self.error
        if not stack.exists:
            raise CommandExecutionError(
                f"command failed with exit code 255: pulumi --stack {stack.name}",
                returncode=255,
                output=f"error: no stack named '{stack.name}' found",
            )
        stack.protected = False


@pytest.fixture
def engine() -> FakeEngine:
    fake = FakeEngine()
    fake.templates = {
        "base": {
            "proj:domain": ConfigValue(value="example.com"),
            "proj:db-password": ConfigValue(value="hunter2", secret=True),
        },
        "app": {
            "proj:domain": ConfigValue(value="app.example.com"),
            "proj:env-stack": ConfigValue(value="org/proj/base"),
        },
    }
    return fake


@pytest.fixture
def executor() -> FakeExecutor:
    return FakeExecutor()
