# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.
"""Tests for the runtime marker names used by annotation sources."""

from __future__ import annotations

from cmdattr import markers
from cmdattr.markers import GroupLiteral, Permissions, group, group_options


def is_admin() -> bool:
    return True


def test_markers_leave_functions_unchanged() -> None:
    def ping() -> str:
        return "pong"

    decorated = markers.command(markers.owners_only(markers.aliases("p")(markers.checks(is_admin)(ping))))

    assert decorated is ping
    assert markers.command("ping")(ping) is ping
    assert markers.help(ping) is ping


def test_payload_markers_do_not_mistake_checks_for_functions() -> None:
    wrapper = markers.checks(is_admin)

    assert wrapper is not is_admin
    assert wrapper(is_admin) is is_admin


def test_every_option_has_a_marker() -> None:
    assert {"description", "usage", "sub", "embed_error_colour", "prefix", "default_command"} <= set(markers.MARKERS)
    assert set(markers.MARKERS) <= set(markers.__all__)


def test_group_literals_expose_options() -> None:
    admin = group({"name": "admin", "options": {"owners_only": True}, "commands": []})
    base = group_options("base", {"prefix": "b"})

    assert isinstance(admin, GroupLiteral)
    assert admin.name == "admin"
    assert admin.options == {"owners_only": True}
    assert base == {"prefix": "b"}
    assert group({"name": "bare", "commands": []}).options == {}


def test_permissions_are_reexported() -> None:
    assert Permissions.ADMINISTRATOR in Permissions.ADMINISTRATOR | Permissions.MANAGE_MESSAGES
