from __future__ import annotations

from typing import Any, Callable, Mapping, Optional, Protocol, TypeVar

import pulumi

from stackops.core.errors import ConfigurationError

R = TypeVar("R")

STACK_TYPE_KEY = "stack-type"


class ConfigReader(Protocol):
    def get(self, key: str) -> Optional[Any]: ...


def select(
    funcs: Mapping[str, Callable[[], R]],
    *,
    config: ConfigReader | None = None,
    key: str = STACK_TYPE_KEY,
) -> R:
    """Run the stack builder named by the `stack-type` config value and return its result."""
    reader = config if config is not None else pulumi.Config()
    allowed = sorted(funcs)

    value = reader.get(key)
    if value is None or str(value).strip() == "":
        raise ConfigurationError(
            f"Missing required configuration '{key}' (allowed values: {', '.join(allowed)})"
        )
    stack_type = str(value).strip()
    if stack_type not in funcs:
        raise ConfigurationError(
            f"Configuration '{key}' must be one of {', '.join(allowed)}, got: '{stack_type}'"
        )
    return funcs[stack_type]()
