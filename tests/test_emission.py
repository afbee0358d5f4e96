# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.
"""Tests for the generated Python module and the JSON manifest."""

from __future__ import annotations

import ast
import json
from pathlib import Path

import pytest

from cmdattr.compiler import compile_modules
from cmdattr.config import CompilerConfig, OutputFormat
from cmdattr.emission import (
    GENERATED_HEADER,
    copied_imports,
    imported_names,
    is_valid_symbol,
    qualify_guard,
    resolve_relative,
)
from cmdattr.errors import ErrorKind

SOURCE = '''
from __future__ import annotations

import sys
from .checks import is_admin

@command("ping")
@aliases("p")
@checks(is_admin)
@required_permissions(MANAGE_MESSAGES, ADMINISTRATOR)
@only_in("guilds")
def ping(ctx: Context, msg: Message, args: Args) -> CommandResult:
    ...

if sys.platform == "linux":
    @command
    @description("Report system uptime")
    def uptime(ctx: Context, msg: Message, args: Args) -> CommandResult:
        ...

@help
@embed_error_colour(TEAL)
def show_help(
    ctx: Context,
    msg: Message,
    args: Args,
    options: HelpOptions,
    groups: list[CommandGroup],
    owners: set[UserId],
) -> CommandResult:
    ...

group({"name": "general", "options": {"prefix": "gen"}, "commands": [ping, uptime]})
'''


@pytest.fixture
def result(build):
    compiled = build(SOURCE)
    assert compiled.ok, compiled.diagnostics
    return compiled


def test_python_module_layout(result) -> None:
    text = result.render(CompilerConfig())

    assert text.startswith(GENERATED_HEADER + "\n")
    assert "from framework.standard import (" in text
    assert "import bot.commands as _source_0" in text
    assert "from bot.checks import is_admin" in text
    assert text.index("from bot.checks import is_admin") < text.index("from framework.standard import (")
    assert "from __future__ import annotations\n" in text
    ast.parse(text)


def test_python_command_record(result) -> None:
    text = result.render(CompilerConfig())

    assert "PING_COMMAND_OPTIONS = CommandOptions(" in text
    assert "    checks=(_source_0.is_admin,)," in text
    assert "    names=('ping', 'p')," in text
    assert "    required_permissions=Permissions.ADMINISTRATOR | Permissions.MANAGE_MESSAGES," in text
    assert "    only_in=OnlyIn.GUILD," in text
    assert "PING_COMMAND = Command(fun=_source_0.ping, options=PING_COMMAND_OPTIONS)" in text


def test_python_records_keep_their_conditions(result) -> None:
    text = result.render(CompilerConfig())

    assert "if sys.platform == 'linux':\n    UPTIME_COMMAND_OPTIONS = CommandOptions(" in text
    assert "        desc='Report system uptime'," in text
    assert "        required_permissions=Permissions(0)," in text


def test_python_help_and_group_records(result) -> None:
    text = result.render(CompilerConfig(framework_module="mybot.framework"))

    assert "from mybot.framework import (" in text
    assert "    embed_error_colour=Colour.TEAL," in text
    assert "    embed_success_colour=Colour.ROSEWATER," in text
    assert "SHOW_HELP_HELP_COMMAND = HelpCommand(fun=_source_0.show_help, options=SHOW_HELP_HELP_OPTIONS)" in text
    assert "    commands=(PING_COMMAND, UPTIME_COMMAND)," in text
    assert "    prefixes=('gen',)," in text
    assert "GENERAL_GROUP = CommandGroup(name='general', options=GENERAL_GROUP_OPTIONS)" in text
    assert text.index("PING_COMMAND =") < text.index("GENERAL_GROUP =")


def test_json_manifest(result) -> None:
    document = json.loads(result.render(CompilerConfig(output_format=OutputFormat.JSON)))

    assert document["version"] == 1
    assert document["framework_module"] == "framework.standard"
    ping, uptime = document["commands"]
    assert ping["function"] == "bot.commands:ping"
    assert ping["options"]["checks"] == ["bot.commands:is_admin"]
    assert ping["options"]["names"] == ["ping", "p"]
    assert ping["options"]["required_permissions"]["names"] == ["ADMINISTRATOR", "MANAGE_MESSAGES"]
    assert ping["options"]["only_in"] == "guilds"
    assert uptime["cfgs"] == ["sys.platform == 'linux'"]
    (help_command,) = document["help_commands"]
    assert help_command["options"]["embed_error_colour"]["name"] == "TEAL"
    (group,) = document["groups"]
    assert group["options"]["commands"] == ["PING_COMMAND", "UPTIME_COMMAND"]
    assert group["options"]["sub_groups"] == []


def test_invalid_symbol_is_reported(build) -> None:
    result = build(
        '''
@command("hello world")
def hello(ctx: Context, msg: Message, args: Args) -> CommandResult:
    ...
''',
    )

    (diagnostic,) = result.diagnostics
    assert diagnostic.kind is ErrorKind.MALFORMED_DECLARATION
    assert "`HELLO WORLD_COMMAND_OPTIONS` is not a Python identifier" in diagnostic.message
    assert result.artifacts == ()


@pytest.mark.parametrize(
    ("symbol", "expected"),
    [("PING_COMMAND", True), ("_42_COMMAND", True), ("42_COMMAND", False), ("class", False)],
)
def test_is_valid_symbol(symbol: str, expected: bool) -> None:
    assert is_valid_symbol(symbol) is expected


@pytest.mark.parametrize(
    ("module", "target", "level", "is_package", "expected"),
    [
        ("bot.commands", "checks", 1, False, "bot.checks"),
        ("bot.commands", None, 1, False, "bot"),
        ("bot.admin.commands", "shared", 2, False, "bot.shared"),
        ("bot", "checks", 1, True, "bot.checks"),
        ("commands", "checks", 1, False, None),
    ],
)
def test_resolve_relative(module: str, target: str | None, level: int, is_package: bool, expected: str | None) -> None:
    assert resolve_relative(module, target, level, is_package=is_package) == expected


def test_copied_imports_deduplicate_and_skip_escapes(parse_module) -> None:
    first = parse_module("from __future__ import annotations\nimport sys\nfrom . import helpers\n")
    second = parse_module(
        "import sys\nfrom ..outside import thing\n",
        path=Path("tools.py"),
        module_name="tools",
    )

    assert copied_imports([first, second]) == ["import sys", "from bot import helpers"]


def test_copied_imports_skip_the_marker_module(parse_module) -> None:
    source = parse_module("from cmdattr.markers import *\nimport cmdattr.markers\nimport os.path as osp\n")

    assert copied_imports([source]) == ["import os.path as osp"]
    assert imported_names(source) == frozenset({"osp"})


@pytest.mark.parametrize(
    ("test", "expected"),
    [
        ("sys.platform == 'linux'", "sys.platform == 'linux'"),
        ("DEBUG", "_source_0.DEBUG"),
        ("not (DEBUG and len(FEATURES) > 1)", "not (_source_0.DEBUG and len(_source_0.FEATURES) > 1)"),
        ("any((flag for flag in FLAGS))", "any((flag for flag in _source_0.FLAGS))"),
        ("Permissions", "_source_0.Permissions"),
    ],
)
def test_qualify_guard(test: str, expected: str) -> None:
    imported = frozenset({"sys", "Permissions"})

    assert qualify_guard(test, alias="_source_0", imported=imported) == expected


def test_guards_on_module_constants_read_the_source_module(build) -> None:
    result = build(
        '''
import sys

DEBUG = True

if DEBUG:
    @command
    def trace(ctx: Context, msg: Message, args: Args) -> CommandResult:
        ...
''',
    )

    text = result.render(CompilerConfig())

    assert "if _source_0.DEBUG:\n    TRACE_COMMAND_OPTIONS = CommandOptions(" in text
    assert result.commands[0].cfgs == ("DEBUG",)


def test_inherited_checks_keep_their_declaring_module(parse_module) -> None:
    base = parse_module(
        'from .checks import is_admin\n\nbase = group_options("base", {"checks": [is_admin]})\n',
        path=Path("bot") / "base.py",
        module_name="bot.base",
    )
    other = parse_module(
        '''
from .base import base

@command
def ping(ctx: Context, msg: Message, args: Args) -> CommandResult:
    ...

group({"name": "g", "options": {"inherit": base}, "commands": [ping]})
group({"name": "h", "options": {"inherit": base, "checks": [in_voice]}, "commands": [ping]})
''',
        path=Path("bot") / "other.py",
        module_name="bot.other",
    )

    result = compile_modules([base, other])

    assert result.ok, result.diagnostics
    inherited, local = result.groups
    assert inherited.options.checks == ("bot.base:is_admin",)
    assert local.options.checks == ("bot.other:in_voice",)
    text = result.render(CompilerConfig())
    assert "import bot.base as _source_0" in text
    assert "G_GROUP_OPTIONS = GroupOptions(" in text
    assert "    checks=(_source_0.is_admin,)," in text
    assert "    checks=(_source_1.in_voice,)," in text
    document = json.loads(result.render(CompilerConfig(output_format=OutputFormat.JSON)))
    assert [group["options"]["checks"] for group in document["groups"]] == [
        ["bot.base:is_admin"],
        ["bot.other:in_voice"],
    ]
