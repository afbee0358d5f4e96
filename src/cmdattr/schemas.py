# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.

"""Option schemas for commands, help commands and groups.

Each schema is a frozen dataclass whose defaults are the values used when an
option is never written. Records are produced by :class:`OptionsBuilder`, which
collects the options written on one declaration and is finalised exactly once.
"""

from __future__ import annotations

from dataclasses import dataclass, field, replace
from enum import Enum
from typing import Generic, TypeVar

from .constants import HelpBehaviour, OnlyIn
from .errors import DuplicateOptionError
from .values import AttributeValues


class SchemaKind(str, Enum):
    """Enumerate the declaration kinds that own an option schema."""

    COMMAND = "command"
    HELP = "help"
    GROUP = "group"


@dataclass(frozen=True, slots=True)
class CommandOptions:
    """Options written on a ``@command`` function."""

    checks: tuple[str, ...] = ()
    bucket: str | None = None
    aliases: tuple[str, ...] = ()
    description: str | None = None
    usage: str | None = None
    example: str | None = None
    min_args: int | None = None
    max_args: int | None = None
    allowed_roles: tuple[str, ...] = ()
    required_permissions: int = 0
    help_available: bool = True
    only_in: OnlyIn = OnlyIn.NONE
    owners_only: bool = False
    owner_privilege: bool = True
    sub: tuple[str, ...] = ()


@dataclass(frozen=True, slots=True)
class HelpOptions:
    """Layout options written on a ``@help`` function."""

    suggestion_text: str = "Did you mean `{}`?"
    no_help_available_text: str = "**Error**: No help available."
    usage_label: str = "Usage"
    usage_sample_label: str = "Sample usage"
    ungrouped_label: str = "Ungrouped"
    grouped_label: str = "Group"
    aliases_label: str = "Aliases"
    description_label: str = "Description"
    guild_only_text: str = "Only in guilds"
    checks_label: str = "Checks"
    dm_only_text: str = "Only in DM"
    dm_and_guild_text: str = "In DM and guilds"
    available_text: str = "Available"
    command_not_found_text: str = "**Error**: Command `{}` not found."
    individual_command_tip: str = (
        "To get help with an individual command, pass its name as an argument to this command."
    )
    group_prefix: str = "Prefix"
    strikethrough_commands_tip_in_dm: str | None = ""
    strikethrough_commands_tip_in_guild: str | None = ""
    lacking_role: HelpBehaviour = HelpBehaviour.STRIKE
    lacking_permissions: HelpBehaviour = HelpBehaviour.STRIKE
    lacking_ownership: HelpBehaviour = HelpBehaviour.HIDE
    wrong_channel: HelpBehaviour = HelpBehaviour.STRIKE
    embed_error_colour: str = "DARK_RED"
    embed_success_colour: str = "ROSEWATER"
    max_levenshtein_distance: int = 0


@dataclass(frozen=True, slots=True)
class GroupOptions:
    """Options shared by every command of a group."""

    prefixes: tuple[str, ...] = ()
    allowed_roles: tuple[str, ...] = ()
    only_in: OnlyIn = OnlyIn.NONE
    owners_only: bool = False
    owner_privilege: bool = True
    help_available: bool = True
    checks: tuple[str, ...] = ()
    required_permissions: int = 0
    default_command: str | None = None
    description: str | None = None


SchemaT = TypeVar("SchemaT", CommandOptions, HelpOptions, GroupOptions)


@dataclass(slots=True)
class OptionsBuilder(Generic[SchemaT]):
    """Accumulate option values for one declaration before freezing them.

    Attributes:
        schema: Record type produced by :meth:`finalize`.
        strict: When ``True`` an option written twice raises instead of overwriting.
    """

    schema: type[SchemaT]
    strict: bool = False
    _values: dict[str, object] = field(default_factory=dict)
    _seen: set[str] = field(default_factory=set)
    _owners: dict[str, str] = field(default_factory=dict)
    _current: AttributeValues | None = None

    def mark(self, attribute: AttributeValues) -> None:
        """Record that ``attribute`` was written, enforcing strictness.

        Args:
            attribute: Annotation occurrence about to be applied.

        Raises:
            DuplicateOptionError: If strict mode is on and the option was already written.
        """

        if attribute.name in self._seen and self.strict:
            raise DuplicateOptionError(
                f'option "{attribute.name}" is specified more than once',
                span=attribute.span,
            )
        self._seen.add(attribute.name)
        self._current = attribute

    def set(self, name: str, value: object) -> None:
        """Assign ``value`` to the schema field ``name`` (later writes win).

        Raises:
            DuplicateOptionError: If strict mode is on and another option already set ``name``.
        """

        current = self._current
        if current is not None:
            owner = self._owners.setdefault(name, current.name)
            if self.strict and owner != current.name:
                raise DuplicateOptionError(
                    f'option "{current.name}" sets `{name}`, which "{owner}" already set',
                    span=current.span,
                )
        self._values[name] = value

    def get(self, name: str, default: object = None) -> object:
        """Return the value written for ``name`` so far, or ``default``."""

        return self._values.get(name, default)

    def finalize(self, base: SchemaT | None = None) -> SchemaT:
        """Freeze the collected values on top of ``base`` or the schema defaults.

        Args:
            base: Record providing the starting values, e.g. an inherited group record.

        Returns:
            SchemaT: Immutable record with every written field applied.
        """

        start = base if base is not None else self.schema()
        return replace(start, **self._values)


__all__ = [
    "CommandOptions",
    "GroupOptions",
    "HelpOptions",
    "OptionsBuilder",
    "SchemaKind",
    "SchemaT",
]
