# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.

"""Resolve permission identifiers into a single permission bitfield."""

from __future__ import annotations

from collections.abc import Iterable

from .constants import Permissions
from .errors import UnknownPermissionError
from .values import Identifier


def resolve_permissions(identifiers: Iterable[Identifier]) -> int:
    """Return the bitwise OR of the permissions named by ``identifiers``.

    Identifiers are looked up in input order so the first unknown name is the
    one reported. Qualified names (``Permissions.ADMINISTRATOR``) resolve by
    their last segment. An empty input yields ``0``.

    Args:
        identifiers: Permission names as written in the annotation.

    Returns:
        int: Combined permission bits.

    Raises:
        UnknownPermissionError: If any identifier does not name a permission.
    """

    bits = 0
    for identifier in identifiers:
        permission = Permissions.from_name(identifier.name.rsplit(".", 1)[-1])
        if permission is None:
            raise UnknownPermissionError("invalid permission", span=identifier.span)
        bits |= permission.value
    return bits


def permission_names(bits: int) -> tuple[str, ...]:
    """Return the permission names set in ``bits`` ordered by bit position."""

    return tuple(member.name for member in Permissions if member.name is not None and bits & member.value)


__all__ = ["permission_names", "resolve_permissions"]
