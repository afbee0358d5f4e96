# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.
"""CLI application entry point."""

from __future__ import annotations

from . import compile as compile_commands
from .typer_ext import create_typer

app = create_typer(help="Compile declarative command annotations into static configuration records.")
compile_commands.register(app)

__all__ = ["app"]
