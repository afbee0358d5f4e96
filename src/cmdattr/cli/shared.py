# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.

"""Shared utilities for CLI commands (logging, errors, configuration)."""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import Any

from rich.console import Console
from rich.text import Text

from ..config import CompilerConfig, load_config
from ..errors import ConfigError
from ..logging import fail as core_fail
from ..logging import ok as core_ok
from ..logging import warn as core_warn


class CLIError(RuntimeError):
    """Error raised when a CLI command fails and should exit with a status code."""

    def __init__(self, message: str, *, exit_code: int = 1) -> None:
        """Initialise the error with a message and exit code.

        Args:
            message: Human-readable error message shown to the user.
            exit_code: Exit status associated with the failure.
        """

        super().__init__(message)
        self.exit_code = exit_code


@dataclass(slots=True)
class CLILogger:
    """Adapter around project logging helpers respecting CLI emoji settings."""

    console: Console
    error_console: Console
    use_emoji: bool
    debug_enabled: bool = False

    def fail(self, message: str) -> None:
        """Log a failure message honouring emoji preferences."""

        core_fail(message, use_emoji=self.use_emoji)

    def warn(self, message: str) -> None:
        """Log a warning message honouring emoji preferences."""

        core_warn(message, use_emoji=self.use_emoji)

    def ok(self, message: str) -> None:
        """Log a success message honouring emoji preferences."""

        core_ok(message, use_emoji=self.use_emoji)

    def debug(self, message: str) -> None:
        """Emit a debug message when debug logging is enabled.

        Args:
            message: Debug payload written to standard error.
        """

        if self.debug_enabled:
            text = Text("[debug] ", style="bold cyan")
            text.append(message, style="dim")
            self.error_console.print(text, soft_wrap=True)


def build_cli_logger(*, emoji: bool, debug: bool = False, no_color: bool = False) -> CLILogger:
    """Return a ``CLILogger`` configured for the provided emoji preference.

    Args:
        emoji: Whether log output may include emoji glyphs.
        debug: Whether debug logging should be enabled.
        no_color: Whether terminal colour output should be disabled.

    Returns:
        CLILogger: Logger bound to dedicated stdout and stderr Rich consoles.
    """

    return CLILogger(
        console=Console(no_color=no_color, highlight=False, soft_wrap=True),
        error_console=Console(stderr=True, no_color=no_color, highlight=False, soft_wrap=True),
        use_emoji=emoji,
        debug_enabled=debug,
    )


def resolve_config(config_path: Path | None, root: Path, **overrides: Any) -> CompilerConfig:
    """Load the build configuration and apply CLI overrides.

    Args:
        config_path: Explicit configuration file, or ``None`` to use ``root/pyproject.toml``.
        root: Project root searched for ``pyproject.toml``.
        **overrides: Option values given on the command line (``None`` means unset).

    Returns:
        CompilerConfig: Validated configuration.

    Raises:
        CLIError: If the configuration cannot be loaded or validated.
    """

    try:
        return load_config(config_path, root=root).with_overrides(**overrides)
    except ConfigError as exc:
        raise CLIError(str(exc), exit_code=2) from exc


__all__ = ["CLIError", "CLILogger", "build_cli_logger", "resolve_config"]
