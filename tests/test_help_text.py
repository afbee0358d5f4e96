# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.
"""Tests for the generated strikethrough help tip."""

from __future__ import annotations

from cmdattr.constants import HelpBehaviour
from cmdattr.help_text import DM_CONTEXT, GUILD_CONTEXT, apply_strike_texts, strike_text
from cmdattr.schemas import HelpOptions

PREAMBLE = "~~`Strikethrough commands`~~ are unavailable because they"


def test_permissions_only() -> None:
    options = HelpOptions(lacking_role=HelpBehaviour.HIDE, wrong_channel=HelpBehaviour.NOTHING)

    assert strike_text(options, GUILD_CONTEXT) == f"{PREAMBLE} require permissions."


def test_all_three_facets() -> None:
    text = strike_text(HelpOptions(), GUILD_CONTEXT)

    assert text == (
        f"{PREAMBLE} require permissions, require a specific role, or are limited to guild messages."
    )


def test_channel_only_has_no_conjunction() -> None:
    options = HelpOptions(lacking_role=HelpBehaviour.NOTHING, lacking_permissions=HelpBehaviour.HIDE)

    assert strike_text(options, DM_CONTEXT) == f"{PREAMBLE} are limited to direct messages."


def test_no_strike_facet_yields_none() -> None:
    options = HelpOptions(
        lacking_role=HelpBehaviour.HIDE,
        lacking_permissions=HelpBehaviour.HIDE,
        wrong_channel=HelpBehaviour.NOTHING,
    )

    assert strike_text(options, DM_CONTEXT) is None
    resolved = apply_strike_texts(options)
    assert resolved.strikethrough_commands_tip_in_dm is None
    assert resolved.strikethrough_commands_tip_in_guild is None


def test_only_empty_sentinels_are_generated() -> None:
    options = HelpOptions(strikethrough_commands_tip_in_dm="Some commands are hidden.")

    resolved = apply_strike_texts(options)

    assert resolved.strikethrough_commands_tip_in_dm == "Some commands are hidden."
    assert resolved.strikethrough_commands_tip_in_guild == strike_text(options, GUILD_CONTEXT)
