"""Unit tests for reading and writing gettext catalogs"""

import polib
import pytest

from mdguide.core.models import Block
from mdguide.core.translation import build_base_po, read_po_file, write_base_po_file


DE_PO = """\
msgid ""
msgstr ""
"Content-Type: text/plain; charset=UTF-8\\n"

msgid "intro"
msgstr "Hallo **Welt**."

msgid "steps"
msgstr ""
"1. Eins\\n"
"1. Zwei"

msgid "outro"
msgstr ""

#~ msgid "old"
#~ msgstr "Alt"
"""


def test_read_po_file(tmp_path):
    """Translated entries are returned by id; empty and obsolete entries are skipped."""
    po_path = tmp_path / "docs.po"
    po_path.write_text(DE_PO, encoding="utf-8")
    assert read_po_file(po_path) == {
        "intro": "Hallo **Welt**.",
        "steps": "1. Eins\n1. Zwei",
    }


def test_read_po_file_missing(tmp_path):
    """A missing catalog is an error."""
    with pytest.raises(FileNotFoundError):
        read_po_file(tmp_path / "missing.po")


def test_build_base_po():
    """Each block becomes one entry with the block id as msgid."""
    po = build_base_po([
        Block(id="intro", text="Hello"),
        Block(id="steps", text="- one  \n- two", context="Keep the list short"),
    ])
    assert [(e.msgid, e.msgstr) for e in po] == [("intro", "Hello"), ("steps", "- one\n- two")]
    assert po[1].comment == "Keep the list short"


def test_build_base_po_duplicate():
    """Two blocks with the same id cannot be written."""
    with pytest.raises(ValueError, match="More than one string with id=intro"):
        build_base_po([Block(id="intro", text="a"), Block(id="intro", text="b")])


def test_write_base_po_file(tmp_path):
    """The written catalog can be read back, creating parent directories as needed."""
    po_path = tmp_path / "localization" / "en" / "docs.po"
    write_base_po_file(po_path, [
        Block(id="intro", text="Hello **world**."),
        Block(id="block_1", text="A.\n\nB."),
    ])
    assert po_path.read_text(encoding="utf-8").endswith("\n")
    assert read_po_file(po_path) == {"intro": "Hello **world**.", "block_1": "A.\n\nB."}
    assert len(polib.pofile(str(po_path))) == 2
