"""Root test configuration: sample guide projects written to tmp_path"""

import textwrap
from pathlib import Path

import pytest


CONFIG_YAML = """\
app_name: Test Guide
version: 2.0.0
langs:
  - [de, 2.0.0]
defs:
  - strings.md
pages:
  - index.md
  - "-"
  - guide.md
"""

STRINGS_MD = """\
<!-- def:search_placeholder -->
Search the guide
"""

INDEX_MD = """\
# <!-- section:index --><!-- def:title -->Test Guide

<!-- def:intro -->
Welcome to the guide.
"""

GUIDE_MD = """\
# <!-- section:guide --><!-- def:title -->Guide

## <!-- section:usage --><!-- def:title -->Usage

<!-- def:body -->
Use :search_placeholder: to find things.
"""

DE_PO = """\
msgid ""
msgstr ""
"Content-Type: text/plain; charset=UTF-8\\n"

msgid "search_placeholder"
msgstr "Anleitung durchsuchen"

msgid "index__title"
msgstr "Testanleitung"

msgid "index__intro"
msgstr "Willkommen."

msgid "guide__title"
msgstr "Anleitung"

msgid "guide__usage__title"
msgstr "Verwendung"

msgid "guide__usage__body"
msgstr "Benutze :search_placeholder: zum Suchen."
"""


def write_project(root: Path, files: dict[str, str]) -> Path:
    for rel_path, content in files.items():
        path = root / rel_path
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(textwrap.dedent(content), encoding="utf-8")
    return root


@pytest.fixture(name="project_dir")
def project_dir_fixture(tmp_path):
    """English + German guide with one defs page and two content pages."""
    return write_project(tmp_path, {
        "config.yaml": CONFIG_YAML,
        "strings.md": STRINGS_MD,
        "index.md": INDEX_MD,
        "guide.md": GUIDE_MD,
        "localization/de/docs.po": DE_PO,
    })
