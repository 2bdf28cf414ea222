"""Shared fixtures for core unit tests"""

import pytest

from mdguide.config import LangConfig, Settings
from mdguide.core.context import Context


PAGE = "page_1.md"

SAMPLE_MD = """\
# <!-- section:page_1 --><!-- def:title -->Page 1

<!-- def:intro -->
This is the first page.

## <!-- section:section_1 --><!-- def:title -->Section 1

<!-- begin-def:steps -->

1. Open the guide
2. Read the page

<!-- end-def -->

<!-- def[hidden]:note -->
A note for translators only.

Untranslated footer.
"""

SAMPLE_FM_MD = """\
---
title: Test Doc
tags: [a, b]
---

# <!-- section:page_1 -->Title

Body content.
"""


@pytest.fixture(name="settings")
def settings_fixture():
    return Settings(pages=[PAGE])


@pytest.fixture(name="en_context")
def en_context_fixture(settings):
    return Context(settings, "en")


@pytest.fixture(name="translated_settings")
def translated_settings_fixture():
    return Settings(pages=[PAGE], langs=[LangConfig(code="de", version="1.0.0")])


@pytest.fixture(name="de_context")
def de_context_fixture(en_context):
    """German context sharing the English blocks; tests fill in the translations."""
    return en_context.derive("de", {})


@pytest.fixture(name="sample_md")
def sample_md_fixture():
    return SAMPLE_MD


@pytest.fixture(name="sample_fm_md")
def sample_fm_md_fixture():
    return SAMPLE_FM_MD
