"""Directive grammar: commands embedded in HTML comments"""

import re
from dataclasses import dataclass
from typing import Callable, Optional, Union

from mdguide.core.models import Token, TokenKind


# def:<id>              register the single token that follows (and keep it in the output)
# def[hidden]:<id>      register the single token that follows (but drop it from the output)
# begin-def:<id>        register every token up to the matching `end-def`
# begin-def[hidden]:<id>
# end-def
# section:<id>          set the scope for the current heading level
COMMAND_RE = re.compile(r'<!--\s*([a-z-]+)(\[hidden\])?:?(\w+)?\s*-->')
IDENTIFIER_RE = re.compile(r'^[a-z0-9]+(?:_+[a-z0-9]+)*$')


@dataclass(frozen=True)
class Def:
    id: str
    hidden: bool = False


@dataclass(frozen=True)
class BeginDef:
    id: str
    hidden: bool = False


@dataclass(frozen=True)
class EndDef:
    pass


@dataclass(frozen=True)
class Section:
    id: str


Command = Union[Def, BeginDef, EndDef, Section]


def command_name(command: Command) -> str:
    """Return the directive name as written in the source (`begin-def`, ...)."""
    match command:
        case Def():
            return 'def'
        case BeginDef():
            return 'begin-def'
        case EndDef():
            return 'end-def'
        case Section():
            return 'section'


def parse_command(token: Token, fail: Callable[[str], Exception] = ValueError) -> Optional[Command]:
    """Return the command held by an html comment token, or None for any other token.

    `fail` builds the exception raised for malformed directives, which lets the
    caller attach page and scope details to the message.
    """
    if token.kind is not TokenKind.html:
        return None

    raw = token.raw.strip()
    if not raw.startswith('<!--'):
        return None

    m = COMMAND_RE.match(raw)
    if not m:
        return None

    name, hidden, ident = m.group(1), m.group(2) == '[hidden]', m.group(3)
    if ident and not IDENTIFIER_RE.match(ident):
        raise fail(f"Identifier ({ident}) must contain only lowercase letters, digits, and underscores")

    match name:
        case 'def':
            return Def(_require_id(name, ident, fail), hidden)
        case 'begin-def':
            return BeginDef(_require_id(name, ident, fail), hidden)
        case 'end-def':
            return EndDef()
        case 'section':
            return Section(_require_id(name, ident, fail))
        case _:
            raise fail(f"Unknown command '{name}'")


def _require_id(name: str, ident: Optional[str], fail: Callable[[str], Exception]) -> str:
    if not ident:
        raise fail(f"Command '{name}' requires an identifier")
    return ident
