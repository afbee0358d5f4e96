# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.

"""Shared type aliases, constants and source locations for the compiler."""

from __future__ import annotations

import ast
from collections.abc import Mapping, Sequence
from dataclasses import dataclass
from pathlib import Path
from typing import Final, TypeAlias

JSONPrimitive: TypeAlias = str | int | float | bool | None
JSONValue: TypeAlias = JSONPrimitive | Sequence["JSONValue"] | Mapping[str, "JSONValue"]

COMMAND_MARKER: Final[str] = "command"
HELP_MARKER: Final[str] = "help"
GROUP_CALL: Final[str] = "group"
GROUP_OPTIONS_CALL: Final[str] = "group_options"

COMMAND_SUFFIX: Final[str] = "COMMAND"
COMMAND_OPTIONS_SUFFIX: Final[str] = "COMMAND_OPTIONS"
HELP_SUFFIX: Final[str] = "HELP_COMMAND"
HELP_OPTIONS_SUFFIX: Final[str] = "HELP_OPTIONS"
GROUP_SUFFIX: Final[str] = "GROUP"
GROUP_OPTIONS_SUFFIX: Final[str] = "GROUP_OPTIONS"
REFERENCE_SEPARATOR: Final[str] = ":"


@dataclass(frozen=True, slots=True)
class SourceSpan:
    """Location of a construct inside an annotation source file."""

    path: Path
    line: int
    column: int
    end_line: int | None = None
    end_column: int | None = None

    @classmethod
    def of(cls, node: ast.AST, path: Path) -> SourceSpan:
        """Return the span covered by ``node`` inside ``path``.

        Args:
            node: Parsed syntax node carrying location attributes.
            path: Source file the node was parsed from.

        Returns:
            SourceSpan: One-based line and column span of ``node``.
        """

        return cls(
            path=path,
            line=getattr(node, "lineno", 1),
            column=getattr(node, "col_offset", 0) + 1,
            end_line=getattr(node, "end_lineno", None),
            end_column=(node.end_col_offset + 1) if getattr(node, "end_col_offset", None) is not None else None,
        )

    def __str__(self) -> str:
        return f"{self.path}:{self.line}:{self.column}"


def qualify(module: str, name: str) -> str:
    """Return the ``module:name`` reference to a name bound in ``module``.

    Check functions are stored qualified so that records inherited across
    modules keep pointing at the module that declared them.
    """

    return f"{module}{REFERENCE_SEPARATOR}{name}"


def split_reference(reference: str) -> tuple[str, str]:
    """Return the ``(module, name)`` pair of a reference built by :func:`qualify`."""

    module, _, name = reference.partition(REFERENCE_SEPARATOR)
    return module, name


__all__ = [
    "COMMAND_MARKER",
    "COMMAND_OPTIONS_SUFFIX",
    "COMMAND_SUFFIX",
    "GROUP_CALL",
    "GROUP_OPTIONS_CALL",
    "GROUP_OPTIONS_SUFFIX",
    "GROUP_SUFFIX",
    "HELP_MARKER",
    "HELP_OPTIONS_SUFFIX",
    "HELP_SUFFIX",
    "JSONPrimitive",
    "JSONValue",
    "REFERENCE_SEPARATOR",
    "SourceSpan",
    "qualify",
    "split_reference",
]
