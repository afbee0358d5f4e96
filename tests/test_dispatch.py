# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.
"""Tests for the option dispatch tables."""

from __future__ import annotations

import ast
from pathlib import Path

import pytest

from cmdattr.constants import HelpBehaviour, OnlyIn, Permissions
from cmdattr.dispatch import COMMAND_TABLE, GROUP_TABLE, HELP_TABLE
from cmdattr.errors import (
    DuplicateOptionError,
    ShapeMismatchError,
    UnknownBehaviourError,
    UnknownOptionError,
)
from cmdattr.schemas import CommandOptions, GroupOptions
from cmdattr.values import AttributeValues, parse_attribute


def _attributes(*sources: str) -> list[AttributeValues]:
    return [parse_attribute(ast.parse(source, mode="eval").body, path=Path("bot.py")) for source in sources]


def test_unknown_option_names_the_identifier() -> None:
    with pytest.raises(UnknownOptionError, match='invalid attribute: "colour"'):
        COMMAND_TABLE.parse(_attributes('colour("red")'))


def test_help_options_are_not_command_options() -> None:
    with pytest.raises(UnknownOptionError, match='invalid attribute: "aliases"'):
        HELP_TABLE.parse(_attributes('aliases("x")'))


def test_num_args_sets_both_bounds() -> None:
    composite = COMMAND_TABLE.parse(_attributes("num_args(5)"))
    explicit = COMMAND_TABLE.parse(_attributes("min_args(5)", "max_args(5)"))

    assert composite == explicit
    assert composite.min_args == 5
    assert composite.max_args == 5


def test_unwritten_fields_keep_defaults() -> None:
    options = COMMAND_TABLE.parse(_attributes('description("Pong")'))

    assert options == CommandOptions(description="Pong")
    assert options.help_available is True
    assert options.owner_privilege is True
    assert options.only_in is OnlyIn.NONE


def test_later_occurrence_wins_by_default() -> None:
    options = COMMAND_TABLE.parse(_attributes('description("first")', 'description("second")'))

    assert options.description == "second"


def test_strict_mode_rejects_duplicates() -> None:
    with pytest.raises(DuplicateOptionError, match='option "description" is specified more than once'):
        COMMAND_TABLE.parse(_attributes('description("first")', 'description("second")'), strict=True)


def test_strict_mode_rejects_options_writing_the_same_field() -> None:
    with pytest.raises(DuplicateOptionError, match='option "min_args" sets `min_args`, which "num_args" already set'):
        COMMAND_TABLE.parse(_attributes("num_args(2)", "min_args(3)"), strict=True)

    with pytest.raises(DuplicateOptionError, match='option "prefix" sets `prefixes`'):
        GROUP_TABLE.parse(_attributes('prefixes("a", "b")', 'prefix("c")'), strict=True)


def test_options_writing_the_same_field_are_last_wins_by_default() -> None:
    options = COMMAND_TABLE.parse(_attributes("num_args(2)", "min_args(3)"))

    assert (options.min_args, options.max_args) == (3, 2)


def test_required_permissions_are_combined() -> None:
    options = COMMAND_TABLE.parse(_attributes("required_permissions(ADMINISTRATOR, BAN_MEMBERS)"))

    assert options.required_permissions == Permissions.ADMINISTRATOR | Permissions.BAN_MEMBERS


def test_checks_are_stored_verbatim() -> None:
    options = COMMAND_TABLE.parse(_attributes("checks(is_admin, guards.in_voice)"))

    assert options.checks == ("is_admin", "guards.in_voice")


def test_only_in_accepts_dms_and_guilds() -> None:
    assert COMMAND_TABLE.parse(_attributes('only_in("dms")')).only_in is OnlyIn.DM
    assert COMMAND_TABLE.parse(_attributes('only_in("guilds")')).only_in is OnlyIn.GUILD
    with pytest.raises(ShapeMismatchError, match='expected "guilds" or "dms"'):
        COMMAND_TABLE.parse(_attributes('only_in("channels")'))


def test_help_behaviours() -> None:
    options = HELP_TABLE.parse(_attributes('lacking_role("hide")', 'wrong_channel("nothing")'))

    assert options.lacking_role is HelpBehaviour.HIDE
    assert options.wrong_channel is HelpBehaviour.NOTHING
    assert options.lacking_permissions is HelpBehaviour.STRIKE
    with pytest.raises(UnknownBehaviourError, match='invalid help behaviour: "blink"'):
        HELP_TABLE.parse(_attributes('lacking_ownership("blink")'))


def test_colours_accept_constant_names() -> None:
    options = HELP_TABLE.parse(_attributes("embed_error_colour(Colour.BLURPLE)", "embed_success_colour(TEAL)"))

    assert options.embed_error_colour == "BLURPLE"
    assert options.embed_success_colour == "TEAL"
    with pytest.raises(ShapeMismatchError, match="is not a colour constant"):
        HELP_TABLE.parse(_attributes("embed_error_colour(Colour.PLAID)"))


def test_group_prefix_sets_single_prefix() -> None:
    options = GROUP_TABLE.parse(_attributes('prefixes("a", "b")', 'prefix("c")'))

    assert options.prefixes == ("c",)


def test_parse_starts_from_base_record() -> None:
    base = GroupOptions(prefixes=("admin",), only_in=OnlyIn.GUILD)
    options = GROUP_TABLE.parse(_attributes('description("Admin tools")'), base=base)

    assert options.prefixes == ("admin",)
    assert options.only_in is OnlyIn.GUILD
    assert options.description == "Admin tools"


def test_option_names_include_composites() -> None:
    assert {"num_args", "required_permissions", "only_in", "aliases"} <= COMMAND_TABLE.option_names
    assert "prefix" in GROUP_TABLE.option_names
    assert "lacking_role" in HELP_TABLE.option_names
