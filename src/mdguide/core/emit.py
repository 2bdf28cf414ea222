"""Token tree to Markdown serialization, block text extraction, and plain text"""

import re
from typing import Callable, Iterable

from mdguide.core.models import Token, TokenKind
from mdguide.core.ranges import format_range


Fail = Callable[[str], Exception]

INDENT = '    '
PERMALINK_ICON = '&#128279;'

CLICKABLE_IMG_RE = re.compile(r'^<img class="clickable"(.*)src="(.*)"(.*)>(\s*)$')
ALIGN_MARKERS = {'left': ':--', 'right': '--:', 'center': ':-:'}
DEFAULT_MARKUP = {TokenKind.em: '_', TokenKind.strong: '**', TokenKind.strike: '~~'}

INLINE_KINDS = frozenset({
    TokenKind.text, TokenKind.escape, TokenKind.softbreak, TokenKind.br, TokenKind.codespan,
    TokenKind.html, TokenKind.em, TokenKind.strong, TokenKind.strike, TokenKind.link, TokenKind.image,
})
# Captured tokens of these kinds are joined without a separator
BASIC_KINDS = INLINE_KINDS


def join_lines(raw: str) -> str:
    """Collapse a multi-line paragraph into one line of single-space separated text."""
    return ' '.join(line.strip() for line in raw.split('\n') if line.strip())


# --- serialization ---

def markdown_from_tokens(tokens: Iterable[Token], lang: str = 'en', fail: Fail = ValueError) -> str:
    """Serialize block tokens back to Markdown; every block is followed by a blank line."""
    return ''.join(_block_markdown(t, lang, fail) for t in tokens)


def inline_markdown(tokens: Iterable[Token], fail: Fail = ValueError) -> str:
    return ''.join(_inline_markdown(t, fail) for t in tokens)


def _block_markdown(token: Token, lang: str, fail: Fail, source: bool = False) -> str:
    match token.kind:
        case TokenKind.heading:
            body = join_lines(token.raw) if source else inline_markdown(token.children, fail)
            return f"{'#' * token.depth} {body}\n\n"
        case TokenKind.paragraph:
            body = join_lines(token.raw) if source else inline_markdown(token.children, fail)
            return f"{body}\n\n"
        case TokenKind.list:
            return _list_markdown(token, 0, lang, fail, source) + '\n\n'
        case TokenKind.blockquote:
            inner = markdown_from_tokens(token.children, lang, fail).rstrip('\n')
            return '\n'.join(f"> {line}" if line else '>' for line in inner.split('\n')) + '\n\n'
        case TokenKind.table:
            return _table_markdown(token, lang, fail) + '\n'
        case TokenKind.code | TokenKind.hr:
            return f"{token.raw}\n\n"
        case TokenKind.html:
            return f"{clickable_image(token.raw)}\n\n"
    raise fail(f"Unhandled token type '{token.kind.value}': {token.raw}")


def _list_markdown(token: Token, level: int, lang: str, fail: Fail, source: bool) -> str:
    sep = '\n\n' if token.loose else '\n'
    marker = '1.' if token.ordered else '-'
    items = [
        f"{INDENT * level}{marker} {_item_markdown(item, level, sep, lang, fail, source)}".rstrip()
        for item in token.children
    ]
    return sep.join(items)


def _item_markdown(item: Token, level: int, sep: str, lang: str, fail: Fail, source: bool) -> str:
    parts: list[str] = []
    for i, child in enumerate(item.children):
        if child.kind is TokenKind.list:
            parts.append(sep + _list_markdown(child, level + 1, lang, fail, source))
        elif i == 0:
            parts.append(_block_markdown(child, lang, fail, source).rstrip('\n'))
        else:
            body = _block_markdown(child, lang, fail, source).rstrip('\n')
            parts.append('\n\n' + _indent(body, INDENT * (level + 1)))
    return ''.join(parts)


def _indent(text: str, prefix: str) -> str:
    return '\n'.join(prefix + line if line else line for line in text.split('\n'))


def _table_markdown(token: Token, lang: str, fail: Fail) -> str:
    align = token.align or (None,) * len(token.header)
    lines = [
        _table_row(_cell_markdown(cell, fail) for cell in token.header),
        '|' + '|'.join(ALIGN_MARKERS.get(a, '--') for a in align) + '|',
    ]
    for row in token.rows:
        lines.append(_table_row(format_range(_cell_markdown(cell, fail), lang) for cell in row))
    return '\n'.join(lines) + '\n'


def _table_row(cells: Iterable[str]) -> str:
    return '| ' + ' | '.join(cells) + ' |'


def _cell_markdown(cell: Token, fail: Fail) -> str:
    # Escaped pipes come out of the lexer as literal text
    return inline_markdown(cell.children, fail).replace('|', '\\|')


def _inline_markdown(token: Token, fail: Fail) -> str:
    match token.kind:
        case TokenKind.text:
            return token.text
        case TokenKind.escape | TokenKind.softbreak | TokenKind.br:
            return token.raw
        case TokenKind.codespan:
            return _codespan(token)
        case TokenKind.html:
            return clickable_image(token.raw)
        case TokenKind.em | TokenKind.strong | TokenKind.strike:
            markup = token.markup or DEFAULT_MARKUP[token.kind]
            return f"{markup}{inline_markdown(token.children, fail)}{markup}"
        case TokenKind.link:
            if token.markup == 'autolink':
                return f"<{token.href}>"
            return f"[{inline_markdown(token.children, fail)}]({token.href}{_title(token.title)})"
        case TokenKind.image:
            return f"![{inline_markdown(token.children, fail)}]({token.href}{_title(token.title)})"
    raise fail(f"Unhandled token type '{token.kind.value}': {token.raw}")


def _codespan(token: Token) -> str:
    markup = token.markup or '`'
    text = token.text
    padded = (
        text.startswith('`') or text.endswith('`')
        or (text.startswith(' ') and text.endswith(' ') and text.strip())
    )
    return f"{markup} {text} {markup}" if padded else f"{markup}{text}{markup}"


def _title(title: str) -> str:
    if not title:
        return ''
    return ' "' + title.replace('"', '\\"') + '"'


def clickable_image(raw: str) -> str:
    """Wrap `<img class="clickable" ...>` in a link to the image source."""
    m = CLICKABLE_IMG_RE.match(raw)
    if not m:
        return raw
    url = m.group(2)
    return f'<a href="{url}"><img{m.group(1)}src="{url}"{m.group(3)}></a>{m.group(4)}'


# --- block text extraction ---

def block_source_text(tokens: Iterable[Token], fail: Fail = ValueError) -> str:
    """Flatten the tokens captured by a def into the Markdown string stored for translation.

    Paragraph lines are joined into one line. Runs of inline tokens are
    concatenated as is; anything involving blocks is separated by blank lines.
    """
    parts: list[str] = []
    basic_only = True
    for token in tokens:
        text = _source_text(token, fail)
        if not text:
            continue
        parts.append(text)
        if token.kind not in BASIC_KINDS:
            basic_only = False
    return ('' if basic_only else '\n\n').join(parts).strip()


def _source_text(token: Token, fail: Fail) -> str:
    match token.kind:
        case TokenKind.paragraph:
            return join_lines(token.raw)
        case TokenKind.list:
            return _list_markdown(token, 0, 'en', fail, source=True)
        case TokenKind.html:
            return token.raw.rstrip('\n')
        case TokenKind.softbreak:
            return ' '
    if token.kind in INLINE_KINDS:
        return _inline_markdown(token, fail)
    raise fail(f"Unhandled token type '{token.kind.value}': {token.raw}")


# --- plain text ---

def plain_text_from_tokens(tokens: Iterable[Token]) -> str:
    """Visible text of the tokens with markup removed, on a single line."""
    return re.sub(r'\s+', ' ', _plain_text(tokens)).strip()


def _plain_text(tokens: Iterable[Token]) -> str:
    parts: list[str] = []
    for token in tokens:
        match token.kind:
            case TokenKind.text:
                if token.text != PERMALINK_ICON:
                    parts.append(token.text)
            case TokenKind.escape:
                parts.append(token.text)
            case TokenKind.codespan:
                parts.append(token.text)
            case TokenKind.softbreak:
                parts.append(' ')
            case TokenKind.heading | TokenKind.paragraph | TokenKind.table_cell:
                parts.append(' ' + _plain_text(token.children) + ' ')
            case TokenKind.link | TokenKind.strong | TokenKind.em | TokenKind.strike:
                parts.append(_plain_text(token.children))
            case TokenKind.blockquote | TokenKind.list | TokenKind.list_item:
                parts.append(' ' + _plain_text(token.children) + ' ')
            case _:
                # html, images, code blocks, tables and rules carry no searchable prose
                pass
    return ''.join(parts)
