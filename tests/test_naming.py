# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.
"""Tests for generated symbol naming."""

from __future__ import annotations

from cmdattr.naming import sanitize_name, with_suffix


def test_leading_digit_gets_underscore() -> None:
    assert sanitize_name("42wins") == "_42wins"


def test_other_names_are_unchanged() -> None:
    assert sanitize_name("wins") == "wins"
    assert sanitize_name("_private") == "_private"


def test_symbols_are_uppercased_with_suffix() -> None:
    assert with_suffix("ping", "COMMAND") == "PING_COMMAND"
    assert with_suffix(sanitize_name("8ball"), "COMMAND_OPTIONS") == "_8BALL_COMMAND_OPTIONS"


def test_compiled_command_keeps_original_name(build) -> None:
    """The sanitised form only feeds symbols; the invocation name is untouched."""

    result = build(
        """
        @command("42wins")
        @aliases("fortytwo")
        def wins(ctx: Context, msg: Message, args: Args) -> CommandResult:
            ...
        """,
    )

    (command,) = result.commands
    assert command.symbol == "_42WINS_COMMAND"
    assert command.options_symbol == "_42WINS_COMMAND_OPTIONS"
    assert command.names == ("42wins", "fortytwo")
