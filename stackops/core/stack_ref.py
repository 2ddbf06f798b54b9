"""
Typed access to outputs of a separately deployed stack.

The expected outputs are declared with a schema type (TypedDict, dataclass or
any annotated class). The schema only describes keys and is never
instantiated or called. Lookups resolve lazily against the live outputs of the
referenced stack through `pulumi.StackReference`.
"""

from __future__ import annotations

import logging
import typing
from typing import Any, Generic, Optional, Protocol, Type, TypeVar

import pulumi

from stackops.core.errors import ReferenceNotFoundError

logger = logging.getLogger(__name__)

S = TypeVar("S")


class OutputSource(Protocol):
    def get_output(self, name: str) -> Any: ...


class StackRef(Generic[S]):
    def __init__(
        self,
        stack_name: str,
        schema: Optional[Type[S]] = None,
        *,
        source: OutputSource | None = None,
    ) -> None:
        self.stack_name = stack_name
        self.schema = schema
        self._source = source

    @property
    def declared_keys(self) -> tuple[str, ...]:
        if self.schema is None:
            return ()
        return tuple(typing.get_type_hints(self.schema))

    def _output_source(self) -> OutputSource:
        if self._source is None:
            self._source = pulumi.StackReference(self.stack_name)
        return self._source

    def _warn_undeclared(self, key: str) -> None:
        if self.schema is not None and key not in self.declared_keys:
            logger.warning(
                "Output '%s' is not declared in %s for stack %s",
                key,
                self.schema.__name__,
                self.stack_name,
            )

    def require(self, key: str) -> pulumi.Output[Any]:
        """Output for `key`; resolving it fails with ReferenceNotFoundError if absent."""
        self._warn_undeclared(key)
        stack_name = self.stack_name

        def _required(value: Any) -> Any:
            if value is None:
                raise ReferenceNotFoundError(stack_name, key)
            return value

        return self._output_source().get_output(key).apply(_required)

    def get(self, key: str) -> pulumi.Output[Optional[Any]]:
        """Output for `key`, resolving to None if the stack has no such output."""
        self._warn_undeclared(key)
        return self._output_source().get_output(key)


def stack_ref(stack_name: str, schema: Optional[Type[S]] = None) -> StackRef[S]:
    return StackRef(stack_name, schema)
