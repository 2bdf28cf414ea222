"""Registry of base-language text blocks keyed by qualified block id"""

from typing import Iterator, Optional

from mdguide.core.models import Block


SCOPE_SEPARATOR = '__'

# The glossary page is listed both in `defs` (so earlier pages can refer to its
# definitions) and in `pages`, so its blocks are registered twice.
REPARSED_SCOPE = 'glossary'


class DuplicateBlockError(ValueError):
    pass


class BlockStore:
    """Base-language blocks, populated once in `add` mode and read-only afterwards."""

    def __init__(self) -> None:
        self._blocks: dict[str, Block] = {}

    def __contains__(self, block_id: str) -> bool:
        return block_id in self._blocks

    def __iter__(self) -> Iterator[Block]:
        return iter(self._blocks.values())

    def __len__(self) -> int:
        return len(self._blocks)

    def ids(self) -> list[str]:
        return list(self._blocks)

    def get(self, block_id: str) -> Optional[Block]:
        return self._blocks.get(block_id)

    def text(self, block_id: str) -> Optional[str]:
        block = self._blocks.get(block_id)
        return block.text if block else None

    def add(self, block: Block) -> bool:
        """Register a block. Returns False when a reparsed glossary block is skipped.

        Raises DuplicateBlockError for any other re-definition and ValueError when
        the text still contains an HTML comment (a directive leaked into content).
        """
        if block.id in self._blocks:
            if block.id.startswith(REPARSED_SCOPE):
                return False
            raise DuplicateBlockError(f"Block already defined for '{block.id}'")

        if '<!--' in block.text:
            raise ValueError(
                f"Block for '{block.id}' contains an unexpected HTML comment, "
                "which should not be included in translation files"
            )

        self._blocks[block.id] = block
        return True
