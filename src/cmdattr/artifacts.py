# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.

"""Resolved per-declaration artifacts ready for emission."""

from __future__ import annotations

from dataclasses import dataclass

from .naming import sanitize_name, with_suffix
from .schemas import CommandOptions, GroupOptions, HelpOptions
from .types import (
    COMMAND_OPTIONS_SUFFIX,
    COMMAND_SUFFIX,
    GROUP_OPTIONS_SUFFIX,
    GROUP_SUFFIX,
    HELP_OPTIONS_SUFFIX,
    HELP_SUFFIX,
    SourceSpan,
)


@dataclass(frozen=True, slots=True)
class CommandArtifact:
    """A validated ``@command`` function and its option record."""

    name: str
    identifier: str
    module: str
    options: CommandOptions
    cfgs: tuple[str, ...]
    span: SourceSpan
    sub_commands: tuple[str, ...] = ()

    @property
    def stem(self) -> str:
        """Return the sanitised name used to derive generated symbols."""

        return sanitize_name(self.name)

    @property
    def names(self) -> tuple[str, ...]:
        """Return the invocation names: the declared name followed by aliases."""

        return (self.name, *self.options.aliases)

    @property
    def options_symbol(self) -> str:
        return with_suffix(self.stem, COMMAND_OPTIONS_SUFFIX)

    @property
    def symbol(self) -> str:
        return with_suffix(self.stem, COMMAND_SUFFIX)


@dataclass(frozen=True, slots=True)
class HelpArtifact:
    """A validated ``@help`` function and its layout options."""

    identifier: str
    module: str
    options: HelpOptions
    cfgs: tuple[str, ...]
    span: SourceSpan

    @property
    def options_symbol(self) -> str:
        return with_suffix(self.identifier, HELP_OPTIONS_SUFFIX)

    @property
    def symbol(self) -> str:
        return with_suffix(self.identifier, HELP_SUFFIX)


@dataclass(frozen=True, slots=True)
class GroupOptionsArtifact:
    """A standalone ``group_options(...)`` record available for inheritance."""

    name: str
    module: str
    options: GroupOptions
    cfgs: tuple[str, ...]
    span: SourceSpan
    default_command: str | None = None

    @property
    def symbol(self) -> str:
        return with_suffix(sanitize_name(self.name), GROUP_OPTIONS_SUFFIX)


@dataclass(frozen=True, slots=True)
class GroupArtifact:
    """A resolved command group with its commands and sub-groups linked."""

    name: str
    module: str
    options: GroupOptions
    commands: tuple[str, ...]
    sub: tuple[str, ...]
    default_command: str | None
    cfgs: tuple[str, ...]
    span: SourceSpan

    @property
    def stem(self) -> str:
        return sanitize_name(self.name)

    @property
    def options_symbol(self) -> str:
        return with_suffix(self.stem, GROUP_OPTIONS_SUFFIX)

    @property
    def symbol(self) -> str:
        return with_suffix(self.stem, GROUP_SUFFIX)


Artifact = CommandArtifact | HelpArtifact | GroupOptionsArtifact | GroupArtifact

__all__ = [
    "Artifact",
    "CommandArtifact",
    "GroupArtifact",
    "GroupOptionsArtifact",
    "HelpArtifact",
]
