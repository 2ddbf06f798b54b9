"""
Harness configuration.

Loads run modes and tool locations from environment variables (or a .env
file) with pydantic-settings, and converts them into the explicit
`RunOptions` the orchestrator receives.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class HarnessSettings(BaseSettings):
    """
    Environment-driven harness settings.
    """

    DELETE_ONLY: bool = Field(default=False, description="Skip create/validate, only tear down")
    SKIP_DELETE: bool = Field(default=False, description="Leave created stacks live")
    STACK_NAME: Optional[str] = Field(default=None, description="Fixed ephemeral stack name")

    PULUMI_BIN: str = Field(default="pulumi", description="Engine executable for admin commands")
    WORK_DIR: str = Field(default=".", description="Project directory holding the stacks")

    LOG_LEVEL: str = Field(default="INFO", description="Log level")
    LOG_CONFIG_PATH: Optional[str] = Field(default=None, description="YAML logging config")

    model_config = SettingsConfigDict(
        env_file=".env", env_file_encoding="utf-8", case_sensitive=True, extra="ignore"
    )

    @field_validator("STACK_NAME", "LOG_CONFIG_PATH", mode="before")
    @classmethod
    def _blank_to_none(cls, value):
        if isinstance(value, str) and value.strip() == "":
            return None
        return value

    @field_validator("DELETE_ONLY", "SKIP_DELETE", mode="before")
    @classmethod
    def _blank_to_false(cls, value):
        if isinstance(value, str) and value.strip() == "":
            return False
        return value


@dataclass(frozen=True)
class RunOptions:
    """Run modes for one orchestrator invocation."""

    delete_only: bool = False
    skip_delete: bool = False
    stack_name: str | None = None

    @classmethod
    def from_settings(cls, settings: HarnessSettings) -> "RunOptions":
        return cls(
            delete_only=settings.DELETE_ONLY,
            skip_delete=settings.SKIP_DELETE,
            stack_name=settings.STACK_NAME,
        )

    @classmethod
    def from_env(cls) -> "RunOptions":
        return cls.from_settings(HarnessSettings())
