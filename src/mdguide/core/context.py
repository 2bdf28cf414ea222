"""Per-language build context: block store, translations, scopes, and error scoping"""

from pathlib import Path
from typing import Optional

from mdguide.config import BASE_LANG, Settings
from mdguide.core.blocks import SCOPE_SEPARATOR, BlockStore
from mdguide.core.models import Block
from mdguide.core.search import SearchIndex
from mdguide.core.toc import Toc


class BuildError(ValueError):
    """A build-fatal error; the message carries page/language/scope details."""


class Context:
    """Holds the blocks, translations, TOC, and search index for one language.

    The base BlockStore is shared by reference between the English context and
    every context derived from it.
    """

    def __init__(
        self,
        settings: Settings,
        lang: str = BASE_LANG,
        blocks: Optional[BlockStore] = None,
        translated_blocks: Optional[dict[str, str]] = None,
        ) -> None:
        self.settings = settings
        self.lang = lang
        self.blocks = blocks if blocks is not None else BlockStore()
        self.translated_blocks = translated_blocks or {}
        self.toc = Toc()
        self.search_index = SearchIndex(
            lang, changelog_boost=settings.changelog_boost, heading_boost=settings.heading_boost,
        )
        self._current_page: Optional[str] = None
        self._scopes: list[str] = []

    @property
    def is_base(self) -> bool:
        return self.lang == BASE_LANG

    def out_dir(self, project_dir: Path) -> Path:
        """Return <out_dir>/<lang>/latest, resolved against the project directory."""
        return (Path(project_dir) / self.settings.out_dir / self.lang / 'latest').resolve()

    def derive(self, lang: str, translated_blocks: dict[str, str]) -> "Context":
        """Create a context for another language that shares the base blocks."""
        return Context(self.settings, lang, self.blocks, translated_blocks)

    # --- page and scope ---

    def set_current_page(self, page_path: Optional[str]) -> None:
        """Set (or clear) the page being parsed and reset the scope stack."""
        self._current_page = page_path
        self._scopes.clear()

    @property
    def current_page(self) -> Optional[str]:
        return self._current_page

    def is_current_page_translated(self) -> bool:
        if self.settings.langs and self._current_page:
            return self._current_page not in self.settings.untranslated
        return False

    def get_scoped_message(self, message: str) -> str:
        """Append page and scope details to the message."""
        if not self._current_page:
            return message
        parts = []
        if not self.is_base:
            parts.append(f"lang={self.lang}")
        parts.append(f"page={self._current_page}")
        if scope := self.get_scope_string():
            parts.append(f"scope={scope}")
        return f"{message} ({' '.join(parts)})"

    def error(self, message: str) -> BuildError:
        return BuildError(self.get_scoped_message(message))

    def get_scope_string(self) -> str:
        return SCOPE_SEPARATOR.join(s for s in self._scopes if s)

    def set_scope(self, scope: str, level: int) -> None:
        """Set the scope for a heading level (1-based).

        Skipped levels are padded with empty placeholders, which are dropped
        when building ids.
        """
        level = max(level, 1)
        if level > len(self._scopes):
            self._scopes.extend([''] * (level - len(self._scopes) - 1))
            self._scopes.append(scope)
        else:
            del self._scopes[level:]
            self._scopes[level - 1] = scope

    def get_full_block_id(self, local_id: str) -> str:
        return SCOPE_SEPARATOR.join([*(s for s in self._scopes if s), local_id])

    # --- blocks ---

    def add_block(self, local_id: str, text: str, context: Optional[str] = None) -> None:
        full_id = self.get_full_block_id(local_id)
        try:
            self.blocks.add(Block(id=full_id, text=text, context=context))
        except ValueError as e:
            raise self.error(str(e)) from e

    def get_base_block_text(self, block_id: str) -> Optional[str]:
        return self.blocks.text(block_id)

    def get_translated_block_text(self, block_id: str) -> Optional[str]:
        return self.translated_blocks.get(block_id)

    def get_block_text(self, block_id: str) -> Optional[str]:
        """Translated text if available, otherwise the base text."""
        return self.get_translated_block_text(block_id) or self.get_base_block_text(block_id)
