"""Search index: page/section/chunk records plus a prebuilt lunr index"""

import json
import re
from dataclasses import dataclass, field
from typing import Optional

from lunr.builder import Builder
from lunr.index import Index
from lunr.query import Query, QueryPresence
from lunr.stop_word_filter import stop_word_filter
from lunr.trimmer import trimmer

from mdguide.core.emit import plain_text_from_tokens
from mdguide.core.lexer import lex_blocks
from mdguide.core.models import TokenKind


SUB_TAG_RE = re.compile(r'</?sub>')
SUP_TAG_RE = re.compile(r'<sup>(.*)</sup>')
ANCHOR_NAME_RE = re.compile(r'<a name="(\w+)">')
BARE_KEY_RE = re.compile(r'^(?:[A-Za-z_$][\w$]*|0|[1-9]\d*)$')
QUERY_SPLIT_RE = re.compile(r'(?:\s+|-)')


@dataclass
class SearchSection:
    title:  str
    anchor: str


@dataclass
class SearchPage:
    title:    str
    path:     str
    boost:    float = 1.0
    sections: dict[int, SearchSection] = field(default_factory=dict)


@dataclass
class Chunk:
    id:         str
    page:       int
    section:    Optional[int]
    text:       str
    boost:      float = 1.0
    is_heading: bool = False


class SearchIndex:
    """Collects searchable text for one language, in document order."""

    def __init__(self, lang: str, changelog_boost: float = 0.5, heading_boost: float = 2.0) -> None:
        self.lang = lang
        self.changelog_boost = changelog_boost
        self.heading_boost = heading_boost
        self.pages: dict[int, SearchPage] = {}
        self.chunks: list[Chunk] = []
        self._page_id = 0
        self._section_id: Optional[int] = None

    def add_markdown_page(self, markdown: str, path: str) -> None:
        """Segment a page's final Markdown into page, section and chunk records."""
        # Subscripts are flattened so `CO<sub>2</sub>` is indexed as CO2
        markdown = SUB_TAG_RE.sub('', markdown)
        markdown = SUP_TAG_RE.sub(lambda m: f"^{m.group(1)}", markdown)

        for token in lex_blocks(markdown):
            if token.kind is TokenKind.heading:
                title = plain_text_from_tokens(token.children)
                if token.depth == 1:
                    boost = self.changelog_boost if 'changelog' in path else 1.0
                    self._start_page(title, path, boost)
                else:
                    m = ANCHOR_NAME_RE.search(token.raw)
                    self._start_section(title, f"#{m.group(1)}" if m else '')
                self._add_chunk(title, boost=self.heading_boost, is_heading=True)
            elif token.kind is TokenKind.list:
                for item in token.children:
                    self._add_chunk(plain_text_from_tokens(item.children))
            else:
                self._add_chunk(plain_text_from_tokens([token]))

    def _start_page(self, title: str, path: str, boost: float) -> None:
        self._page_id += 1
        self._section_id = None
        self.pages[self._page_id] = SearchPage(title=title, path=path, boost=boost)

    def _start_section(self, title: str, anchor: str) -> None:
        page = self.pages.get(self._page_id)
        if page is None:
            return
        self._section_id = 1 if self._section_id is None else self._section_id + 1
        page.sections[self._section_id] = SearchSection(title=title, anchor=anchor)

    def _add_chunk(self, text: str, boost: float = 1.0, is_heading: bool = False) -> None:
        if not text:
            return
        page = self.pages.get(self._page_id)
        page_boost = page.boost if page else 1.0
        self.chunks.append(Chunk(
            id=str(len(self.chunks) + 1),
            page=self._page_id,
            section=self._section_id,
            text=text,
            boost=page_boost * boost,
            is_heading=is_heading,
        ))

    # --- serialization ---

    def build_index(self) -> Index:
        """Build the lunr index over all chunks.

        No stemmer is configured so prefix queries keep working while typing.
        """
        builder = Builder()
        builder.pipeline.add(trimmer, stop_word_filter)
        builder.ref('id')
        builder.field('t')
        for chunk in self.chunks:
            builder.add({'id': chunk.id, 't': chunk.text}, {'boost': chunk.boost})
        return builder.build()

    def page_data(self) -> dict[str, dict]:
        return {
            str(page_id): {
                't': page.title,
                'p': page.path,
                's': {str(sid): {'t': s.title, 'a': s.anchor} for sid, s in page.sections.items()},
            }
            for page_id, page in self.pages.items()
        }

    def chunk_data(self) -> dict[str, dict]:
        data = {}
        for chunk in self.chunks:
            raw: dict = {'p': chunk.page}
            if chunk.section is not None:
                raw['s'] = chunk.section
            raw['t'] = chunk.text
            if chunk.is_heading:
                raw['h'] = True
            data[chunk.id] = raw
        return data

    def get_index_js_content(self) -> str:
        """Render the three script declarations loaded by the search page."""
        # lunr cannot build an index without documents
        index_data = self.build_index().serialize() if self.chunks else {}
        return '\n'.join([
            _declaration('searchPageData', self.page_data()),
            _declaration('searchChunkData', self.chunk_data()),
            _declaration('searchIndexSerializedData', index_data),
        ])

    # --- querying ---

    def query(self, text: str, index: Optional[Index] = None) -> list[dict]:
        """Run a search the way the browser client does; returns lunr results."""
        if not self.chunks:
            return []
        index = index or self.build_index()
        terms = [t for t in query_terms(text) if len(t) >= 2]
        if not terms:
            return []

        q = index.create_query()
        for term in terms:
            q.term(term, use_pipeline=True, boost=100)
            if len(term) >= 3:
                q.term(
                    term, use_pipeline=False, boost=10,
                    wildcard=Query.WILDCARD_TRAILING, presence=QueryPresence.REQUIRED,
                )
        return index.query(q)


def query_terms(text: str) -> list[str]:
    """Strip quotes and split the query on whitespace and dashes."""
    text = re.sub(r'[\'"]', '', text).strip().lower()
    return [t for t in QUERY_SPLIT_RE.split(text) if t]


def _js_literal(obj) -> str:
    """JSON with identifier and integer keys left unquoted."""
    if isinstance(obj, dict):
        items = []
        for key, value in obj.items():
            key = str(key)
            if not BARE_KEY_RE.match(key):
                key = json.dumps(key, ensure_ascii=False)
            items.append(f"{key}:{_js_literal(value)}")
        return '{' + ','.join(items) + '}'
    if isinstance(obj, (list, tuple)):
        return '[' + ','.join(_js_literal(value) for value in obj) + ']'
    return json.dumps(obj, ensure_ascii=False)


def _declaration(name: str, obj) -> str:
    return f"var {name} = {_js_literal(obj)};"
