# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.
"""Compile declarative command annotations into static configuration records."""

from __future__ import annotations

from importlib import metadata

from .compiler import BuildResult, compile_modules, compile_sources
from .config import CompilerConfig, load_config
from .diagnostics import Diagnostic
from .errors import AttributeCompileError, ConfigError, ErrorKind

__all__ = [
    "AttributeCompileError",
    "BuildResult",
    "CompilerConfig",
    "ConfigError",
    "Diagnostic",
    "ErrorKind",
    "__version__",
    "compile_modules",
    "compile_sources",
    "load_config",
]

try:
    __version__ = metadata.version("cmdattr")
except metadata.PackageNotFoundError:  # pragma: no cover - local development fallback
    __version__ = "0.0.0"
