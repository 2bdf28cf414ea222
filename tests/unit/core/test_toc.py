"""Unit tests for mdguide.core.toc"""

from mdguide.core.toc import Toc, TocSection, TocSeparator


def test_toc_pages_and_separators():
    """Pages keep their order; separators are kept between pages."""
    toc = Toc()
    toc.add_page("index.html", "index", "Home", [])
    toc.add_separator()
    toc.add_page("guide.html", "guide", "Guide", [TocSection("Usage", "guide.html#guide__usage")])
    assert [p.base_name for p in toc.pages] == ["index", "guide"]
    assert isinstance(toc.items[1], TocSeparator)
    assert toc.pages[1].sections[0].rel_path == "guide.html#guide__usage"


def test_toc_skips_redundant_separators():
    """Leading and repeated separators are dropped."""
    toc = Toc()
    toc.add_separator()
    toc.add_page("index.html", "index", "Home", [])
    toc.add_separator()
    toc.add_separator()
    assert len(toc.items) == 2
