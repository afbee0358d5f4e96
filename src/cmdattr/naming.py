# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.

"""Derive generated symbol names from command, help and group names."""

from __future__ import annotations


def sanitize_name(name: str) -> str:
    """Return ``name`` with a leading underscore when it starts with a digit.

    Args:
        name: Command name as declared by the user.

    Returns:
        str: Name usable as the stem of a generated symbol.
    """

    if name[:1].isdecimal():
        return f"_{name}"
    return name


def with_suffix(name: str, suffix: str) -> str:
    """Return the generated symbol for ``name`` and a record-kind ``suffix``.

    Args:
        name: Sanitised name stem.
        suffix: Record-kind suffix such as ``COMMAND_OPTIONS``.

    Returns:
        str: Uppercased ``NAME_SUFFIX`` symbol.
    """

    return f"{name.upper()}_{suffix}"


__all__ = ["sanitize_name", "with_suffix"]
