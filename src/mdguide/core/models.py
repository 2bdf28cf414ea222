"""Data models for the token tree, blocks, and page artifacts"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Optional

from pydantic import BaseModel, ConfigDict


class TokenKind(str, Enum):
    text       = "text"
    heading    = "heading"
    paragraph  = "paragraph"
    list       = "list"
    list_item  = "list_item"
    table      = "table"
    table_cell = "table_cell"
    link       = "link"
    strong     = "strong"
    em         = "em"
    strike     = "strike"
    blockquote = "blockquote"
    code       = "code"
    codespan   = "codespan"
    html       = "html"
    image      = "image"
    escape     = "escape"
    softbreak  = "softbreak"
    br         = "br"
    hr         = "hr"


# Kinds that own child tokens which the directive processor descends into.
CONTAINER_KINDS = frozenset({
    TokenKind.paragraph, TokenKind.link, TokenKind.strong, TokenKind.em,
    TokenKind.strike, TokenKind.blockquote, TokenKind.list_item, TokenKind.table_cell,
})


@dataclass(frozen=True)
class Token:
    """A node in the Markdown token tree.

    Tokens are never mutated once built; transforms return new tokens with
    `dataclasses.replace`. `raw` holds the source form of the token (inline
    source for paragraphs, headings and table cells; literal markup for html).
    """
    kind:     TokenKind
    raw:      str = ""
    text:     str = ""
    children: tuple["Token", ...] = ()
    depth:    int = 0                 # heading level (1-6)
    ordered:  bool = False
    loose:    bool = False
    href:     str = ""
    title:    str = ""
    markup:   str = ""
    info:     str = ""                # fence language
    header:   tuple["Token", ...] = ()
    rows:     tuple[tuple["Token", ...], ...] = ()
    align:    tuple[Optional[str], ...] = ()


class Block(BaseModel):
    """A translatable text block registered under its qualified id."""
    model_config = ConfigDict(frozen=True)

    id:      str
    text:    str                    # plain Markdown
    context: Optional[str] = None   # emitted as a translator comment


class MarkdownPage(BaseModel):
    """Canonical (possibly translated) Markdown for one page."""
    raw: str
    frontmatter: dict[str, Any] = {}


class HtmlPage(BaseModel):
    base_name: str
    rel_path:  str
    body:      str


@dataclass
class LexedPage:
    """Internal lex result: token tree plus the markdown-it env (link table)."""
    tokens: list[Token]
    env:    dict[str, Any] = field(default_factory=dict)

    @property
    def links(self) -> dict[str, dict]:
        return self.env.get("references", {})
