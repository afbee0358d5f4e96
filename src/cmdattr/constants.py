# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.

"""Named constants recognised inside command annotations."""

from __future__ import annotations

from enum import Enum, IntFlag
from typing import Final


class Permissions(IntFlag):
    """Discord permission bits addressable by name in ``required_permissions``."""

    CREATE_INVITE = 1 << 0
    KICK_MEMBERS = 1 << 1
    BAN_MEMBERS = 1 << 2
    ADMINISTRATOR = 1 << 3
    MANAGE_CHANNELS = 1 << 4
    MANAGE_GUILD = 1 << 5
    ADD_REACTIONS = 1 << 6
    VIEW_AUDIT_LOG = 1 << 7
    PRIORITY_SPEAKER = 1 << 8
    STREAM = 1 << 9
    READ_MESSAGES = 1 << 10
    SEND_MESSAGES = 1 << 11
    SEND_TTS_MESSAGES = 1 << 12
    MANAGE_MESSAGES = 1 << 13
    EMBED_LINKS = 1 << 14
    ATTACH_FILES = 1 << 15
    READ_MESSAGE_HISTORY = 1 << 16
    MENTION_EVERYONE = 1 << 17
    USE_EXTERNAL_EMOJIS = 1 << 18
    CONNECT = 1 << 20
    SPEAK = 1 << 21
    MUTE_MEMBERS = 1 << 22
    DEAFEN_MEMBERS = 1 << 23
    MOVE_MEMBERS = 1 << 24
    USE_VAD = 1 << 25
    CHANGE_NICKNAME = 1 << 26
    MANAGE_NICKNAMES = 1 << 27
    MANAGE_ROLES = 1 << 28
    MANAGE_WEBHOOKS = 1 << 29
    MANAGE_EMOJIS = 1 << 30

    @classmethod
    def from_name(cls, name: str) -> Permissions | None:
        """Return the permission named ``name`` or ``None`` when unknown."""

        return cls.__members__.get(name)


class HelpBehaviour(str, Enum):
    """How a restricted command is displayed in generated help listings."""

    STRIKE = "strike"
    HIDE = "hide"
    NOTHING = "nothing"

    @classmethod
    def from_str(cls, raw: str) -> HelpBehaviour | None:
        """Return the behaviour spelled ``raw`` or ``None`` when unknown."""

        try:
            return cls(raw)
        except ValueError:
            return None


class OnlyIn(str, Enum):
    """Channel context a command or group is restricted to."""

    DM = "dms"
    GUILD = "guilds"
    NONE = "none"

    @classmethod
    def from_str(cls, raw: str) -> OnlyIn | None:
        """Return the context spelled ``raw`` (``dms`` or ``guilds``) or ``None``."""

        if raw in {cls.DM.value, cls.GUILD.value}:
            return cls(raw)
        return None


COLOURS: Final[dict[str, int]] = {
    "BLITZ_BLUE": 0x6FC6E2,
    "BLUE": 0x3498DB,
    "BLURPLE": 0x7289DA,
    "DARK_BLUE": 0x206694,
    "DARK_GOLD": 0xC27C0E,
    "DARK_GREEN": 0x1F8B4C,
    "DARK_GREY": 0x607D8B,
    "DARK_MAGENTA": 0xAD1457,
    "DARK_ORANGE": 0xA84300,
    "DARK_PURPLE": 0x71368A,
    "DARK_RED": 0x992D22,
    "DARK_TEAL": 0x11806A,
    "DARKER_GREY": 0x546E7A,
    "FABLED_PINK": 0xFAB81ED,
    "FADED_PURPLE": 0x8882C4,
    "FOOYOO": 0x11CA80,
    "GOLD": 0xF1C40F,
    "KERBAL": 0xBADA55,
    "LIGHT_GREY": 0x979C9F,
    "LIGHTER_GREY": 0x95A5A6,
    "MAGENTA": 0xE91E63,
    "MEIBE_PINK": 0xE68397,
    "ORANGE": 0xE67E22,
    "PURPLE": 0x9B59B6,
    "RED": 0xE74C3C,
    "ROHRKATZE_BLUE": 0x7596FF,
    "ROSEWATER": 0xF6DBD8,
    "TEAL": 0x1ABC9C,
}

__all__ = [
    "COLOURS",
    "HelpBehaviour",
    "OnlyIn",
    "Permissions",
]
