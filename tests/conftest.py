# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.

"""Shared pytest fixtures."""

from __future__ import annotations

import textwrap
from collections.abc import Callable
from pathlib import Path

import pytest

from cmdattr.compiler import BuildResult, compile_modules
from cmdattr.config import CompilerConfig
from cmdattr.declarations import SourceModule, parse_source

SOURCE_PATH = Path("bot") / "commands.py"
SOURCE_MODULE = "bot.commands"


@pytest.fixture
def parse_module() -> Callable[..., SourceModule]:
    """Return a helper parsing dedented source text as ``bot.commands``."""

    def _parse(text: str, *, path: Path = SOURCE_PATH, module_name: str = SOURCE_MODULE) -> SourceModule:
        return parse_source(textwrap.dedent(text), path=path, module_name=module_name)

    return _parse


@pytest.fixture
def build(parse_module: Callable[..., SourceModule]) -> Callable[..., BuildResult]:
    """Return a helper compiling dedented source text in a single-module build."""

    def _build(text: str, config: CompilerConfig | None = None) -> BuildResult:
        return compile_modules([parse_module(text)], config)

    return _build
