# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.

"""Runtime stand-ins for the annotation names used in source modules.

Annotation sources are compiled from their syntax alone, but the generated
module imports them to reach the annotated functions. Importing this module's
names (``from cmdattr.markers import *``) keeps those sources importable: every
marker leaves the decorated function unchanged, ``group_options`` returns its
literal and ``group`` wraps its literal so ``admin.options`` resolves through
the variable the group is assigned to.
"""

from __future__ import annotations

from collections.abc import Callable
from typing import Any, Final, TypeVar

from .coercion import ValueShape
from .constants import Permissions
from .dispatch import TABLES
from .types import COMMAND_MARKER, HELP_MARKER

FunctionT = TypeVar("FunctionT", bound=Callable[..., Any])

_BARE_SHAPES: Final[frozenset[ValueShape]] = frozenset({ValueShape.FLAG, ValueShape.OPTIONAL_TEXT})


def _identity(function: FunctionT) -> FunctionT:
    return function


class Marker:
    """Decorator usable bare (``@owners_only``) or with a payload (``@aliases("p")``).

    Only markers that accept the bare form treat a single callable argument as
    the decorated function; for every other marker a callable argument is a
    payload such as a check function.
    """

    __slots__ = ("name", "bare")

    def __init__(self, name: str, *, bare: bool) -> None:
        self.name = name
        self.bare = bare

    def __call__(self, *args: Any) -> Any:
        if self.bare and len(args) == 1 and callable(args[0]) and not isinstance(args[0], Marker):
            return args[0]
        return _identity

    def __repr__(self) -> str:
        return f"Marker({self.name!r})"


def _bare_names() -> frozenset[str]:
    names: set[str] = {COMMAND_MARKER, HELP_MARKER}
    for table in TABLES.values():
        names.update(name for name, spec in table.fields.items() if spec.shape in _BARE_SHAPES)
    return frozenset(names)


def _build_markers() -> dict[str, Marker]:
    bare = _bare_names()
    names = {COMMAND_MARKER, HELP_MARKER}
    for table in TABLES.values():
        names.update(table.option_names)
    return {name: Marker(name, bare=name in bare) for name in sorted(names)}


MARKERS: Final[dict[str, Marker]] = _build_markers()
globals().update(MARKERS)


class GroupLiteral:
    """Runtime value of a ``group({...})`` declaration.

    Exposes ``options`` so later declarations can write
    ``"inherit": admin.options``.
    """

    __slots__ = ("literal",)

    def __init__(self, literal: dict[str, Any]) -> None:
        self.literal = literal

    @property
    def name(self) -> Any:
        return self.literal.get("name")

    @property
    def options(self) -> dict[str, Any]:
        return self.literal.get("options", {})


def group(literal: dict[str, Any]) -> GroupLiteral:
    """Wrap the group ``literal`` so its options can be referenced."""

    return GroupLiteral(literal)


def group_options(name: object, literal: dict[str, Any]) -> dict[str, Any]:
    """Return the options ``literal`` unchanged."""

    return literal


__all__ = ["GroupLiteral", "MARKERS", "Marker", "Permissions", "group", "group_options", *MARKERS]
