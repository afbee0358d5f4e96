# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.

"""Generate the strikethrough tip shown by help commands."""

from __future__ import annotations

from dataclasses import replace
from typing import Final

from .constants import HelpBehaviour
from .schemas import HelpOptions

DM_CONTEXT: Final[str] = "direct messages"
GUILD_CONTEXT: Final[str] = "guild messages"
_PREAMBLE: Final[str] = "~~`Strikethrough commands`~~ are unavailable because they"


def strike_text(options: HelpOptions, context: str) -> str | None:
    """Return the sentence explaining why commands are struck through.

    Facets are listed in a fixed order: lacking permissions, lacking role,
    then wrong channel.

    Args:
        options: Help options carrying the three behaviour facets.
        context: Channel label such as ``"guild messages"``.

    Returns:
        str | None: Generated sentence, or ``None`` when no facet is ``Strike``.
    """

    clauses: list[str] = []
    if options.lacking_permissions is HelpBehaviour.STRIKE:
        clauses.append("require permissions")
    if options.lacking_role is HelpBehaviour.STRIKE:
        clauses.append("require a specific role")
    if options.wrong_channel is HelpBehaviour.STRIKE:
        clauses.append(f"or are limited to {context}" if clauses else f"are limited to {context}")
    if not clauses:
        return None
    return f"{_PREAMBLE} {', '.join(clauses)}."


def apply_strike_texts(options: HelpOptions) -> HelpOptions:
    """Replace empty strikethrough tips with generated text.

    An explicitly written tip is kept as-is; only the empty sentinel is
    generated.

    Args:
        options: Finalised help options.

    Returns:
        HelpOptions: Options with both strikethrough tips resolved.
    """

    updates: dict[str, str | None] = {}
    if options.strikethrough_commands_tip_in_dm == "":
        updates["strikethrough_commands_tip_in_dm"] = strike_text(options, DM_CONTEXT)
    if options.strikethrough_commands_tip_in_guild == "":
        updates["strikethrough_commands_tip_in_guild"] = strike_text(options, GUILD_CONTEXT)
    return replace(options, **updates) if updates else options


__all__ = ["DM_CONTEXT", "GUILD_CONTEXT", "apply_strike_texts", "strike_text"]
