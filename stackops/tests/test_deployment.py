"""
Where: stackops/tests/test_deployment.py
What: Unit tests for the Pulumi-backed deployment handle.
Why: Keep the engine adapter thin and its stability check strict.
"""

from __future__ import annotations

from types import SimpleNamespace

import pytest
from pulumi.automation import ConfigValue, OpType

from stackops.core import deployment as deployment_module
from stackops.core.deployment import PulumiDeployment, PulumiEngine, pending_changes
from stackops.core.errors import DriftDetectedError


class _FakeWorkspace:
    def __init__(self) -> None:
        self.work_dir = "/srv/infra"
        self.calls: list[tuple] = []

    def get_all_config(self, stack_name):
        self.calls.append(("get_all_config", stack_name))
        return {"proj:domain": ConfigValue(value="example.com")}

    def set_all_config(self, stack_name, config):
        self.calls.append(("set_all_config", stack_name, sorted(config)))

    def remove_stack(self, stack_name):
        self.calls.append(("remove_stack", stack_name))


class _FakeAutoStack:
    def __init__(self, change_summary=None) -> None:
        self.name = "test-abcd"
        self.workspace = _FakeWorkspace()
        self.change_summary = change_summary or {}
        self.calls: list[tuple] = []

    def up(self, **kwargs):
        self.calls.append(("up", sorted(kwargs)))

    def refresh(self, **kwargs):
        self.calls.append(("refresh", sorted(kwargs)))

    def preview(self, **kwargs):
        self.calls.append(("preview", kwargs.get("expect_no_changes")))
        return SimpleNamespace(change_summary=self.change_summary)

    def destroy(self, **kwargs):
        self.calls.append(("destroy", sorted(kwargs)))

    def outputs(self):
        return {}


def test_handle_exposes_stack_identity() -> None:
    handle = PulumiDeployment(_FakeAutoStack())

    assert handle.name == "test-abcd"
    assert handle.work_dir == "/srv/infra"


def test_config_is_read_from_template_and_written_to_self() -> None:
    auto_stack = _FakeAutoStack()
    handle = PulumiDeployment(auto_stack)

    config = handle.get_all_config("base")
    handle.set_all_config(config)
    handle.set_all_config({})

    assert auto_stack.workspace.calls == [
        ("get_all_config", "base"),
        ("set_all_config", "test-abcd", ["proj:domain"]),
    ]


def test_lifecycle_calls_stream_engine_output() -> None:
    auto_stack = _FakeAutoStack()
    handle = PulumiDeployment(auto_stack)

    handle.up()
    handle.refresh()
    handle.destroy()
    handle.remove_state()

    assert auto_stack.calls == [
        ("up", ["on_output"]),
        ("refresh", ["on_output"]),
        ("destroy", ["on_output"]),
    ]
    assert auto_stack.workspace.calls == [("remove_stack", "test-abcd")]


def test_preview_without_pending_changes_passes() -> None:
    auto_stack = _FakeAutoStack(change_summary={"same": 12})

    PulumiDeployment(auto_stack).preview_expect_no_changes()

    assert auto_stack.calls == [("preview", True)]


def test_preview_with_pending_changes_raises_drift() -> None:
    auto_stack = _FakeAutoStack(change_summary={"same": 10, "update": 2, "delete": 0})

    with pytest.raises(DriftDetectedError) as excinfo:
        PulumiDeployment(auto_stack).preview_expect_no_changes()

    assert excinfo.value.changes == {"update": 2}
    assert "update=2" in str(excinfo.value)


def test_pending_changes_accepts_enum_keys() -> None:
    summary = {OpType.SAME: 4, OpType.REPLACE: 1, OpType.CREATE: 0}

    assert pending_changes(summary) == {"replace": 1}
    assert pending_changes(None) == {}


def test_engine_selects_or_creates_stack_in_work_dir(monkeypatch) -> None:
    calls: list[dict] = []

    def fake_create_or_select_stack(**kwargs):
        calls.append(kwargs)
        return _FakeAutoStack()

    monkeypatch.setattr(
        deployment_module.auto, "create_or_select_stack", fake_create_or_select_stack
    )

    handle = PulumiEngine().select_or_create("test-abcd", "infra")

    assert calls == [{"stack_name": "test-abcd", "work_dir": "infra"}]
    assert handle.name == "test-abcd"
