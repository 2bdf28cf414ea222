"""Directive processor: registers and substitutes text blocks while walking the token tree.

In `add` mode (base language) every `def`/`begin-def` block is registered in
the context's BlockStore and the source tokens are kept. In `translate` mode
the captured tokens are replaced by the lexed translation, or kept as they
are (with a warning) when no translation exists.

The walk is a pure transform: `process_tokens` returns a new token list and
never mutates its input.
"""

import logging
import re
from dataclasses import dataclass, field, replace
from typing import Literal, Optional

from mdguide.core.command import BeginDef, Command, Def, EndDef, Section, command_name, parse_command
from mdguide.core.context import Context
from mdguide.core.emit import PERMALINK_ICON, block_source_text, inline_markdown
from mdguide.core.lexer import lex_blocks, lex_inline
from mdguide.core.models import CONTAINER_KINDS, Token, TokenKind


logger = logging.getLogger(__name__)

Mode = Literal['add', 'translate']

SECTION_NUMBER_RE = re.compile(r'^\d+\.')

# Kinds with nothing to register or translate inside them
LEAF_KINDS = frozenset({
    TokenKind.html, TokenKind.image, TokenKind.code, TokenKind.hr,
    TokenKind.codespan, TokenKind.escape, TokenKind.softbreak,
})
BLOCK_CONTAINER_KINDS = frozenset({TokenKind.blockquote, TokenKind.list_item})

LINE_BREAK_MESSAGE = (
    "Detected two or more spaces at the end of a text line. "
    "Markdown interprets this as a line break, which can be surprising. "
    "If the spaces were added unintentionally, remove the extra spaces. "
    "If you do want a line break, use an explicit HTML 'br' tag instead."
)


@dataclass
class ProcessState:
    mode:            Mode
    current_level:   int = 0                  # 0 until the first heading
    current_command: Optional[Command] = None
    def_tokens:      list[Token] = field(default_factory=list)
    parsing_table:   bool = False


def process_tokens(context: Context, state: ProcessState, tokens, inline: bool = False) -> list[Token]:
    """Process one level of tokens and return the tokens to keep at that level.

    `inline` tells whether the tokens are the children of a paragraph-like
    token, which decides how translated text is lexed.
    """
    out: list[Token] = []
    for token in tokens:
        command = parse_command(token, context.error)
        if command is not None:
            out.extend(_process_command(context, state, command, inline))
        else:
            out.extend(_process_token(context, state, token, inline))

    if state.current_command is not None:
        raise context.error(
            f"Command '{command_name(state.current_command)}' was not resolved or closed"
        )
    return out


def _process_command(context: Context, state: ProcessState, command: Command, inline: bool) -> list[Token]:
    current = state.current_command
    if current is not None:
        if not isinstance(command, EndDef):
            raise context.error(
                f"Unexpected command '{command_name(command)}' "
                f"while current command '{command_name(current)}' (id={current.id}) is in effect"
            )
    elif isinstance(command, EndDef):
        raise context.error("Saw 'end-def' without corresponding 'begin-def'")

    match command:
        case Section(id=scope):
            context.set_scope(scope, state.current_level)
            return []
        case Def() | BeginDef():
            state.current_command = command
            return []
        case EndDef():
            if not state.def_tokens:
                raise context.error("Saw 'end-def' but no tokens were included")
            if not isinstance(current, BeginDef):
                raise context.error("Saw 'end-def' without corresponding 'begin-def'")
            tokens = add_block_for_tokens(context, state.mode, current.id, state.def_tokens, inline)
            state.def_tokens = []
            state.current_command = None
            return [] if current.hidden else tokens


def _process_token(context: Context, state: ProcessState, token: Token, inline: bool) -> list[Token]:
    match state.current_command:
        case Def(id=block_id, hidden=hidden):
            # A `def` applies to the single token that follows it
            state.current_command = None
            tokens = add_block_for_tokens(context, state.mode, block_id, [token], inline)
            return [] if hidden else tokens
        case BeginDef():
            state.def_tokens.append(token)
            return []
    return [_walk(context, state, token)]


def _walk(context: Context, state: ProcessState, token: Token) -> Token:
    """Recurse into a token that is not captured by any command."""
    match token.kind:
        case TokenKind.text:
            _check_for_missing_def(context, state, token)
            return token
        case TokenKind.heading:
            state.current_level = token.depth
            children = process_tokens(context, state, token.children, inline=True)
            if not inline_markdown(children, context.error).strip():
                # Headings holding only directives become a bare anchor
                return anchor_token(context)
            return replace(token, children=_with_heading_anchor(context, children))
        case TokenKind.list:
            items = tuple(
                replace(item, children=tuple(process_tokens(context, state, item.children)))
                for item in token.children
            )
            return replace(token, children=items)
        case TokenKind.table:
            state.parsing_table = True
            header = tuple(_walk_children(context, state, cell, inline=True) for cell in token.header)
            rows = tuple(
                tuple(_walk_children(context, state, cell, inline=True) for cell in row)
                for row in token.rows
            )
            state.parsing_table = False
            return replace(token, header=header, rows=rows)
        case TokenKind.br:
            raise context.error(LINE_BREAK_MESSAGE)

    if token.kind in CONTAINER_KINDS:
        return _walk_children(context, state, token, inline=token.kind not in BLOCK_CONTAINER_KINDS)
    if token.kind in LEAF_KINDS:
        return token
    raise context.error(f"Unhandled token type {token.kind.value}")


def _walk_children(context: Context, state: ProcessState, token: Token, inline: bool) -> Token:
    return replace(token, children=tuple(process_tokens(context, state, token.children, inline)))


def add_block_for_tokens(
    context: Context,
    mode: Mode,
    local_id: str,
    tokens: list[Token],
    inline: bool = False,
    ) -> list[Token]:
    """Register (add) or substitute (translate) the block captured by a def."""
    if mode == 'add':
        context.add_block(local_id, block_source_text(tokens, context.error))
        return list(tokens)

    full_id = context.get_full_block_id(local_id)
    text = context.get_translated_block_text(full_id)
    if not text:
        logger.warning("No translation found for lang=%s id=%s", context.lang, full_id)
        return list(tokens)

    preset = context.settings.parser_config
    if inline:
        return lex_inline(text, preset=preset)
    # Without the trailing blank line the lexer can merge the last block into what follows
    suffix = '\n\n' if len(tokens) > 1 else ''
    return lex_blocks(text + suffix, preset=preset)


def anchor_token(context: Context) -> Token:
    return Token(kind=TokenKind.html, raw=f'<a name="{context.get_scope_string()}"></a>')


def _with_heading_anchor(context: Context, children: list[Token]) -> tuple[Token, ...]:
    if not context.settings.section_links:
        return tuple(children)
    scope = context.get_scope_string()
    link = Token(kind=TokenKind.html, raw=f'<a class="heading-link" href="#{scope}">{PERMALINK_ICON}</a>')
    return (anchor_token(context), *children, link)


def _check_for_missing_def(context: Context, state: ProcessState, token: Token) -> None:
    """Warn about untranslatable text on pages that are meant to be translated."""
    if not context.settings.warn_on_missing_def or state.mode != 'add':
        return
    if not context.is_current_page_translated():
        return

    text = token.raw.strip()
    ignored = (
        not text
        or text.startswith(':')                       # `:block_id:` replacement
        or SECTION_NUMBER_RE.match(text)
        or context.get_scope_string().endswith('footnotes')
        or state.parsing_table                        # ranges are localized by the serializer
    )
    if not ignored:
        logger.warning(
            "Found text on translated page that is not part of 'def': page=%s text=%s",
            context.current_page, text,
        )
