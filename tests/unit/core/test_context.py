"""Unit tests for Context scopes, scoped messages, and the block store"""

import pytest

from mdguide.core.blocks import BlockStore, DuplicateBlockError
from mdguide.core.context import BuildError, Context
from mdguide.core.models import Block


PAGE = "page_1.md"


def test_scope_levels(en_context):
    """Each heading level replaces its scope and drops the deeper ones."""
    en_context.set_current_page(PAGE)
    en_context.set_scope("a", 1)
    en_context.set_scope("b", 2)
    en_context.set_scope("c", 3)
    assert en_context.get_full_block_id("x") == "a__b__c__x"

    en_context.set_scope("d", 2)
    assert en_context.get_scope_string() == "a__d"
    assert en_context.get_full_block_id("x") == "a__d__x"


def test_skipped_scope_level(en_context):
    """A skipped heading level leaves no empty segment in the id."""
    en_context.set_current_page(PAGE)
    en_context.set_scope("a", 1)
    en_context.set_scope("c", 3)
    assert en_context.get_full_block_id("x") == "a__c__x"


def test_set_current_page_resets_scopes(en_context):
    """Scopes never leak from one page into the next."""
    en_context.set_current_page(PAGE)
    en_context.set_scope("a", 1)
    en_context.set_current_page("page_2.md")
    assert en_context.get_full_block_id("x") == "x"


def test_scoped_message_base_lang(en_context):
    """English messages carry page and scope but no lang."""
    en_context.set_current_page(PAGE)
    assert en_context.get_scoped_message("Oops") == "Oops (page=page_1.md)"
    en_context.set_scope("a", 1)
    en_context.set_scope("b", 2)
    assert en_context.get_scoped_message("Oops") == "Oops (page=page_1.md scope=a__b)"


def test_scoped_message_translated_lang(de_context):
    """Messages for other languages name the language first."""
    de_context.set_current_page("p.md")
    de_context.set_scope("a", 1)
    assert de_context.get_scoped_message("Oops") == "Oops (lang=de page=p.md scope=a)"


def test_scoped_message_without_page(en_context):
    """Outside of a page the message is returned unchanged."""
    assert en_context.get_scoped_message("Oops") == "Oops"


def test_error_is_value_error(en_context):
    """context.error builds a BuildError, which is a ValueError."""
    en_context.set_current_page(PAGE)
    err = en_context.error("Oops")
    assert isinstance(err, BuildError)
    assert isinstance(err, ValueError)
    assert str(err) == "Oops (page=page_1.md)"


def test_add_block_uses_scope(en_context):
    """add_block qualifies the local id with the current scope."""
    en_context.set_current_page(PAGE)
    en_context.set_scope("page_1", 1)
    en_context.add_block("intro", "Hello")
    assert en_context.get_base_block_text("page_1__intro") == "Hello"


def test_add_block_duplicate_is_scoped_error(en_context):
    """Registering the same id twice fails with page details."""
    en_context.set_current_page(PAGE)
    en_context.add_block("intro", "Hello")
    with pytest.raises(BuildError, match=r"Block already defined for 'intro' \(page=page_1.md\)"):
        en_context.add_block("intro", "Hello again")


def test_derived_context_shares_blocks(en_context):
    """A derived context reads the base blocks and its own translations."""
    en_context.add_block("intro", "Hello")
    en_context.add_block("outro", "Bye")
    de = en_context.derive("de", {"intro": "Hallo"})
    assert de.blocks is en_context.blocks
    assert not de.is_base
    assert de.get_block_text("intro") == "Hallo"
    assert de.get_block_text("outro") == "Bye"
    assert de.get_translated_block_text("outro") is None


def test_is_current_page_translated(translated_settings):
    """Pages count as translated only when languages exist and the page is not listed as untranslated."""
    context = Context(translated_settings.model_copy(update={"untranslated": ["changelog.md"]}))
    context.set_current_page(PAGE)
    assert context.is_current_page_translated()
    context.set_current_page("changelog.md")
    assert not context.is_current_page_translated()


def test_out_dir(en_context, tmp_path):
    """out_dir appends <lang>/latest to the configured output directory."""
    assert en_context.out_dir(tmp_path) == (tmp_path / "public" / "en" / "latest").resolve()


def test_block_store_reparsed_glossary():
    """Glossary blocks may be registered again without error."""
    store = BlockStore()
    assert store.add(Block(id="glossary__page__def", text="A page."))
    assert not store.add(Block(id="glossary__page__def", text="A page."))
    assert len(store) == 1


def test_block_store_duplicate():
    """Any other re-definition is an error."""
    store = BlockStore()
    store.add(Block(id="intro", text="Hello"))
    with pytest.raises(DuplicateBlockError):
        store.add(Block(id="intro", text="Hello"))


def test_block_store_rejects_comments():
    """A directive that leaked into block text is rejected."""
    store = BlockStore()
    with pytest.raises(ValueError, match="unexpected HTML comment"):
        store.add(Block(id="intro", text="Hello <!-- def:x -->"))


def test_block_store_order():
    """Blocks iterate in registration order."""
    store = BlockStore()
    for block_id in ("b", "a", "c"):
        store.add(Block(id=block_id, text=block_id))
    assert store.ids() == ["b", "a", "c"]
    assert [b.id for b in store] == ["b", "a", "c"]
    assert "a" in store
    assert store.get("z") is None
