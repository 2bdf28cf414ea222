"""markdown-it tokenization into the immutable Token tree"""

import re
from functools import lru_cache
from typing import Any, Optional

from markdown_it import MarkdownIt
from markdown_it.tree import SyntaxTreeNode

from mdguide.core.models import LexedPage, Token, TokenKind


DEFAULT_PRESET = 'gfm-like'

# A leading HTML comment followed by more content in the same html block,
# e.g. `<!-- def:intro -->Hello` on a single line.
LEADING_COMMENT_RE = re.compile(r'^(\s*<!--.*?-->)(.*)$', re.DOTALL)
ALIGN_RE = re.compile(r'text-align:\s*(left|right|center)')


@lru_cache(maxsize=None)
def make_parser(preset: str = DEFAULT_PRESET) -> MarkdownIt:
    """Build a MarkdownIt instance for the given preset name.

    `text_join` is disabled so escapes and entities keep their source form.
    """
    md = MarkdownIt(preset, options_update={"linkify": False})
    md.disable("text_join", ignoreInvalid=True)
    return md


def lex_page(markdown: str, preset: str = DEFAULT_PRESET) -> LexedPage:
    """Lex a full page; the returned env carries the reference link table."""
    env: dict[str, Any] = {}
    tokens = lex_blocks(markdown, env, preset)
    return LexedPage(tokens=tokens, env=env)


def lex_blocks(markdown: str, env: Optional[dict] = None, preset: str = DEFAULT_PRESET) -> list[Token]:
    """Lex block-level Markdown into a list of block tokens."""
    env = {} if env is None else env
    root = SyntaxTreeNode(make_parser(preset).parse(markdown, env))
    return _convert_blocks(root.children, env, preset)


def lex_inline(markdown: str, env: Optional[dict] = None, preset: str = DEFAULT_PRESET) -> list[Token]:
    """Lex a single line of inline Markdown into a list of inline tokens."""
    env = {} if env is None else env
    root = SyntaxTreeNode(make_parser(preset).parseInline(markdown, env))
    tokens: list[Token] = []
    for node in root.children:
        tokens.extend(_convert_inline(node.children))
    return tokens


def _convert_blocks(nodes: list, env: dict, preset: str) -> list[Token]:
    tokens: list[Token] = []
    for node in nodes:
        tokens.extend(_convert_block(node, env, preset))
    return tokens


def _inline_node(node):
    """Return the `inline` child of a heading/paragraph/cell node, if any."""
    for child in node.children:
        if child.type == 'inline':
            return child
    return None


def _inline_parts(node) -> tuple[str, tuple[Token, ...]]:
    """Return (inline source, inline child tokens) for a node wrapping an inline token."""
    inline = _inline_node(node)
    if inline is None:
        return '', ()
    return inline.content, tuple(_convert_inline(inline.children))


def _convert_block(node, env: dict, preset: str) -> list[Token]:
    t = node.type

    if t == 'heading':
        raw, children = _inline_parts(node)
        return [Token(kind=TokenKind.heading, depth=int(node.tag[1:]), raw=raw, children=children)]

    if t == 'paragraph':
        raw, children = _inline_parts(node)
        return [Token(kind=TokenKind.paragraph, raw=raw, children=children)]

    if t in ('bullet_list', 'ordered_list'):
        items = tuple(
            Token(kind=TokenKind.list_item, children=tuple(_convert_blocks(item.children, env, preset)))
            for item in node.children
        )
        paragraphs = [c for item in node.children for c in item.children if c.type == 'paragraph']
        loose = any(not p.hidden for p in paragraphs)
        return [Token(kind=TokenKind.list, ordered=(t == 'ordered_list'), loose=loose, children=items)]

    if t == 'blockquote':
        return [Token(kind=TokenKind.blockquote, children=tuple(_convert_blocks(node.children, env, preset)))]

    if t == 'table':
        return [_convert_table(node)]

    if t in ('fence', 'code_block'):
        markup = node.markup if t == 'fence' else '```'
        info = node.info if t == 'fence' else ''
        content = node.content if node.content.endswith('\n') else node.content + '\n'
        return [Token(
            kind=TokenKind.code,
            raw=f"{markup}{info}\n{content}{markup}",
            text=node.content,
            markup=markup,
            info=info,
        )]

    if t == 'hr':
        return [Token(kind=TokenKind.hr, raw='---')]

    if t == 'html_block':
        m = LEADING_COMMENT_RE.match(node.content)
        if m and m.group(2).strip():
            comment = Token(kind=TokenKind.html, raw=m.group(1).strip())
            return [comment, *lex_blocks(m.group(2).strip(), env, preset)]
        return [Token(kind=TokenKind.html, raw=node.content.rstrip('\n'))]

    raise ValueError(f"Unhandled markdown-it block type '{t}'")


def _convert_table(node) -> Token:
    header: tuple[Token, ...] = ()
    rows: list[tuple[Token, ...]] = []
    align: tuple[Optional[str], ...] = ()
    for section in node.children:
        for tr in section.children:
            cells = tuple(
                Token(kind=TokenKind.table_cell, raw=raw, children=children)
                for raw, children in (_inline_parts(cell) for cell in tr.children)
            )
            if section.type == 'thead':
                header = cells
                align = tuple(_cell_align(cell) for cell in tr.children)
            else:
                rows.append(cells)
    return Token(kind=TokenKind.table, header=header, rows=tuple(rows), align=align)


def _cell_align(cell) -> Optional[str]:
    m = ALIGN_RE.search(cell.attrGet('style') or '')
    return m.group(1) if m else None


def _convert_inline(nodes: list) -> list[Token]:
    tokens: list[Token] = []
    for node in nodes:
        # markdown-it leaves an empty text token before emphasis that follows an inline comment
        if node.type == 'text' and not node.content:
            continue
        tokens.append(_convert_inline_node(node))
    return tokens


def _convert_inline_node(node) -> Token:
    t = node.type

    if t == 'text':
        return Token(kind=TokenKind.text, raw=node.content, text=node.content)
    if t == 'text_special':
        if node.info == 'escape':
            return Token(kind=TokenKind.escape, raw=node.markup, text=node.content)
        # Entities stay in their source form (`&quot;`)
        return Token(kind=TokenKind.text, raw=node.markup, text=node.markup)
    if t == 'softbreak':
        return Token(kind=TokenKind.softbreak, raw='\n')
    if t == 'hardbreak':
        return Token(kind=TokenKind.br, raw='  \n')
    if t == 'code_inline':
        return Token(kind=TokenKind.codespan, text=node.content, markup=node.markup)
    if t == 'html_inline':
        return Token(kind=TokenKind.html, raw=node.content)
    if t in ('em', 'strong', 's'):
        kind = {'em': TokenKind.em, 'strong': TokenKind.strong, 's': TokenKind.strike}[t]
        return Token(kind=kind, markup=node.markup, children=tuple(_convert_inline(node.children)))
    if t == 'link':
        return Token(
            kind=TokenKind.link,
            href=node.attrGet('href') or '',
            title=node.attrGet('title') or '',
            markup=node.markup,
            children=tuple(_convert_inline(node.children)),
        )
    if t == 'image':
        return Token(
            kind=TokenKind.image,
            href=node.attrGet('src') or '',
            title=node.attrGet('title') or '',
            text=node.content,
            children=tuple(_convert_inline(node.children)),
        )

    raise ValueError(f"Unhandled markdown-it inline type '{t}'")
