# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.
"""Diagnostic records produced by a build and their console rendering."""

from __future__ import annotations

import json
from collections.abc import Iterable, Sequence

from pydantic import BaseModel, ConfigDict
from rich.console import Console
from rich.text import Text

from .errors import AttributeCompileError, ErrorKind


class Diagnostic(BaseModel):
    """Normalized compile error anchored at a source location."""

    model_config = ConfigDict(frozen=True)

    file: str
    line: int
    column: int
    kind: ErrorKind
    message: str
    declaration: str | None = None

    @classmethod
    def from_error(cls, error: AttributeCompileError, *, declaration: str | None = None) -> Diagnostic:
        """Return a diagnostic describing ``error``.

        Args:
            error: Compile error raised while processing a declaration.
            declaration: Name of the declaration the error belongs to, when known.

        Returns:
            Diagnostic: Record carrying the error's kind, message and location.
        """

        return cls(
            file=str(error.span.path),
            line=error.span.line,
            column=error.span.column,
            kind=error.kind,
            message=error.message,
            declaration=declaration,
        )

    @property
    def location(self) -> str:
        return f"{self.file}:{self.line}:{self.column}"

    def format(self) -> str:
        """Return the ``path:line:col: error[kind]: message`` line for this diagnostic."""

        return f"{self.location}: error[{self.kind.value}]: {self.message}"


def sort_diagnostics(diagnostics: Iterable[Diagnostic]) -> list[Diagnostic]:
    """Return ``diagnostics`` ordered by file, line and column."""

    return sorted(diagnostics, key=lambda item: (item.file, item.line, item.column))


def render_diagnostics(diagnostics: Sequence[Diagnostic], console: Console) -> None:
    """Print ``diagnostics`` one per line with Rich styling.

    Args:
        diagnostics: Diagnostics to print, already in display order.
        console: Console receiving the output.
    """

    for diagnostic in diagnostics:
        text = Text()
        text.append(diagnostic.location, style="bold")
        text.append(": ")
        text.append(f"error[{diagnostic.kind.value}]", style="bold red")
        text.append(": ")
        text.append(diagnostic.message)
        console.print(text)


def diagnostics_json(diagnostics: Sequence[Diagnostic]) -> str:
    """Return ``diagnostics`` serialised as an indented JSON array."""

    return json.dumps([diagnostic.model_dump(mode="json") for diagnostic in diagnostics], indent=2)


__all__ = ["Diagnostic", "diagnostics_json", "render_diagnostics", "sort_diagnostics"]
