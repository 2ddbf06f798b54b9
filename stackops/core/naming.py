from __future__ import annotations

import re
import secrets

from stackops.core.errors import ConfigurationError

DEFAULT_ID_LENGTH = 4
STACK_NAME_PREFIX = "test"

_NAME_PART_RE = re.compile(r"[^A-Za-z0-9_.-]+")


def random_suffix(id_length: int = DEFAULT_ID_LENGTH) -> str:
    """Hex-encode `id_length` cryptographically random bytes."""
    if id_length < 1:
        raise ConfigurationError(f"id_length must be a positive integer, got: {id_length}")
    return secrets.token_hex(id_length)


def _sanitize_name_part(value: str) -> str:
    cleaned = _NAME_PART_RE.sub("-", value.strip()).strip("-")
    return cleaned or "stack"


def generate_stack_name(
    template: str,
    *,
    id_length: int = DEFAULT_ID_LENGTH,
    fixed_name: str | None = None,
    template_count: int = 1,
) -> str:
    if fixed_name:
        if template_count > 1:
            return f"{fixed_name}-{_sanitize_name_part(template)}"
        return fixed_name
    return f"{STACK_NAME_PREFIX}-{random_suffix(id_length)}"
