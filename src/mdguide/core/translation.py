"""Gettext catalogs: read translated strings, write the base-language catalog"""

from pathlib import Path
from typing import Iterable

import polib

from mdguide.core.models import Block
from mdguide.core.utils.fs import write_output_file


def read_po_file(po_path: Path) -> dict[str, str]:
    """Return {block_id: translated text} from a catalog keyed by block id.

    The header entry, obsolete entries and untranslated entries are skipped.
    """
    # polib parses a path that does not exist as catalog content
    if not Path(po_path).is_file():
        raise FileNotFoundError(f"Translation file not found: {po_path}")
    po = polib.pofile(str(po_path), encoding='utf-8')
    return {
        entry.msgid: entry.msgstr
        for entry in po
        if entry.msgid and entry.msgstr and not entry.obsolete
    }


def build_base_po(blocks: Iterable[Block]) -> polib.POFile:
    """Build the base catalog: one entry per block, msgid = block id, msgstr = base text."""
    po = polib.POFile(wrapwidth=0)
    seen: set[str] = set()
    for block in blocks:
        if block.id in seen:
            raise ValueError(f"More than one string with id={block.id}")
        seen.add(block.id)

        # Trailing whitespace (e.g. left by nested lists) is noise for translators
        text = '\n'.join(line.rstrip() for line in block.text.split('\n'))
        po.append(polib.POEntry(msgid=block.id, msgstr=text, comment=block.context or ''))
    return po


def write_base_po_file(po_path: Path, blocks: Iterable[Block]) -> None:
    write_output_file(po_path, str(build_base_po(blocks)) + '\n')
