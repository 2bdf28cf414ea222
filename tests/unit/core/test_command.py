"""Unit tests for mdguide.core.command"""

import pytest

from mdguide.core.command import BeginDef, Def, EndDef, Section, command_name, parse_command
from mdguide.core.models import Token, TokenKind


def _html(raw: str) -> Token:
    return Token(kind=TokenKind.html, raw=raw)


@pytest.mark.parametrize("raw, expected", [
    ("<!-- def:intro -->", Def("intro")),
    ("<!-- def[hidden]:intro -->", Def("intro", hidden=True)),
    ("<!-- begin-def:steps_2 -->", BeginDef("steps_2")),
    ("<!-- begin-def[hidden]:steps -->", BeginDef("steps", hidden=True)),
    ("<!-- end-def -->", EndDef()),
    ("<!--section:usage-->", Section("usage")),
])
def test_parse_command_grammar(raw, expected):
    """parse_command recognizes every directive form, with or without inner spaces."""
    assert parse_command(_html(raw)) == expected


def test_parse_command_ignores_plain_comments():
    """A regular HTML comment is not a directive."""
    assert parse_command(_html("<!-- Just a note for editors -->")) is None


def test_parse_command_ignores_non_html_tokens():
    """Only html tokens can carry directives."""
    token = Token(kind=TokenKind.text, raw="<!-- def:intro -->", text="<!-- def:intro -->")
    assert parse_command(token) is None


def test_parse_command_ignores_other_html():
    """An html token that is not a comment is not a directive."""
    assert parse_command(_html('<img src="a.png">')) is None


def test_parse_command_unknown_command():
    """An unknown directive name is rejected."""
    with pytest.raises(ValueError, match="Unknown command 'somecommand'"):
        parse_command(_html("<!-- somecommand:key -->"))


def test_parse_command_invalid_identifier():
    """Identifiers are limited to lowercase letters, digits and underscores."""
    with pytest.raises(ValueError, match=r"Identifier \(key_with_INVALID_chars\) must contain only"):
        parse_command(_html("<!-- def:key_with_INVALID_chars -->"))


def test_parse_command_missing_identifier():
    """def requires an identifier."""
    with pytest.raises(ValueError, match="Command 'def' requires an identifier"):
        parse_command(_html("<!-- def -->"))


def test_parse_command_uses_fail_factory():
    """Errors are built by the supplied fail callable."""
    class Boom(Exception):
        pass

    with pytest.raises(Boom):
        parse_command(_html("<!-- bogus:key -->"), fail=Boom)


def test_command_name():
    """command_name returns the name as written in the source."""
    assert command_name(Def("a")) == "def"
    assert command_name(BeginDef("a")) == "begin-def"
    assert command_name(EndDef()) == "end-def"
    assert command_name(Section("a")) == "section"
