# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.
"""Compiler configuration model and ``pyproject.toml`` loading."""

from __future__ import annotations

import tomllib
from collections.abc import Mapping
from enum import Enum
from pathlib import Path
from typing import Any, Final

from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator

from .errors import ConfigError

CONFIG_KEY: Final[str] = "cmdattr"
PYPROJECT_FILENAME: Final[str] = "pyproject.toml"


class DuplicatePolicy(str, Enum):
    """Enumerate how an option written twice on one declaration is treated."""

    LAST_WINS = "last-wins"
    ERROR = "error"


class OutputFormat(str, Enum):
    """Enumerate the emitted artifact formats."""

    PYTHON = "python"
    JSON = "json"


class CompilerConfig(BaseModel):
    """Settings shared by every declaration of one build."""

    model_config = ConfigDict(frozen=True, extra="forbid")

    framework_module: str = "framework.standard"
    duplicate_options: DuplicatePolicy = DuplicatePolicy.LAST_WINS
    command_parameters: tuple[str, ...] = ("Context", "Message", "Args")
    help_parameters: tuple[str, ...] = (
        "Context",
        "Message",
        "Args",
        "HelpOptions",
        "list[CommandGroup]",
        "set[UserId]",
    )
    return_types: tuple[str, ...] = Field(default=("CommandResult",), min_length=1)
    output_format: OutputFormat = OutputFormat.PYTHON

    @field_validator("framework_module")
    @classmethod
    def _check_module_path(cls, value: str) -> str:
        if not value or not all(part.isidentifier() for part in value.split(".")):
            raise ValueError(f"'{value}' is not a dotted module path")
        return value

    @property
    def strict_duplicates(self) -> bool:
        """Return ``True`` when duplicate options are rejected."""

        return self.duplicate_options is DuplicatePolicy.ERROR

    def with_overrides(self, **overrides: Any) -> CompilerConfig:
        """Return a copy with ``overrides`` applied, ignoring ``None`` values.

        Args:
            **overrides: Field values typically sourced from CLI flags.

        Returns:
            CompilerConfig: Validated configuration including the overrides.

        Raises:
            ConfigError: If an override produces an invalid configuration.
        """

        update = {key: value for key, value in overrides.items() if value is not None}
        if not update:
            return self
        return build_config({**self.model_dump(), **update}, source="overrides")


def build_config(data: Mapping[str, Any], *, source: str) -> CompilerConfig:
    """Validate ``data`` into a :class:`CompilerConfig`.

    Args:
        data: Raw configuration mapping.
        source: Label of the configuration source used in error messages.

    Returns:
        CompilerConfig: Validated configuration.

    Raises:
        ConfigError: If ``data`` contains unknown keys or invalid values.
    """

    normalised = {key.replace("-", "_"): value for key, value in data.items()}
    try:
        return CompilerConfig.model_validate(normalised)
    except ValidationError as exc:
        details = "; ".join(
            f"{'.'.join(str(part) for part in error['loc']) or '<root>'}: {error['msg']}" for error in exc.errors()
        )
        raise ConfigError(f"{source}: invalid configuration ({details})") from exc


def load_config(path: Path | None = None, *, root: Path | None = None) -> CompilerConfig:
    """Load configuration from ``[tool.cmdattr]`` of a ``pyproject.toml``.

    Args:
        path: Explicit configuration file. When ``None`` the file is looked up in ``root``.
        root: Directory searched for ``pyproject.toml`` (defaults to the working directory).

    Returns:
        CompilerConfig: Loaded configuration, or defaults when no table is present.

    Raises:
        ConfigError: If the file cannot be parsed or holds invalid settings.
    """

    if path is None:
        path = (root or Path.cwd()) / PYPROJECT_FILENAME
        if not path.is_file():
            return CompilerConfig()
    elif not path.is_file():
        raise ConfigError(f"configuration file not found: {path}")
    try:
        with path.open("rb") as stream:
            document = tomllib.load(stream)
    except tomllib.TOMLDecodeError as exc:
        raise ConfigError(f"{path}: failed to parse TOML: {exc}") from exc
    tool_section = document.get("tool", {})
    section = tool_section.get(CONFIG_KEY) if isinstance(tool_section, Mapping) else None
    if section is None:
        return CompilerConfig()
    if not isinstance(section, Mapping):
        raise ConfigError(f"{path}: [tool.{CONFIG_KEY}] must be a table")
    return build_config(section, source=str(path))


__all__ = [
    "CONFIG_KEY",
    "CompilerConfig",
    "DuplicatePolicy",
    "OutputFormat",
    "build_config",
    "load_config",
]
