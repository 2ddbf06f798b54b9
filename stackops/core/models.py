"""Dataclasses for ephemeral stack runs."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Iterator

from stackops.core.deployment import Deployment


@dataclass(frozen=True)
class StackEntry:
    template: str
    stack: Deployment


@dataclass
class RunContext:
    """Stacks prepared during one run, in creation order."""

    work_dir: str
    entries: list[StackEntry] = field(default_factory=list)

    def record(self, template: str, stack: Deployment) -> None:
        self.entries.append(StackEntry(template=template, stack=stack))

    def __iter__(self) -> Iterator[StackEntry]:
        return iter(list(self.entries))

    def __len__(self) -> int:
        return len(self.entries)

    def stack_names(self) -> dict[str, str]:
        return {entry.template: entry.stack.name for entry in self.entries}

    def teardown_order(self) -> list[Deployment]:
        return [entry.stack for entry in reversed(self.entries)]
