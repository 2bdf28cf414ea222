"""Unit tests for mdguide.core.ranges"""

import pytest

from mdguide.core.ranges import RangeLocale, format_range, register_locale


@pytest.mark.parametrize("text, lang, expected", [
    ("**+$0.01 to -$0.01**", "de", "**+0,01&nbsp;$ bis -0,01&nbsp;$**"),
    ("$1 to $2", "nb", "$&nbsp;1 til $&nbsp;2"),
    ("$1.5 to $20", "es", "del $1.5 al $20"),
    ("10% to 20%", "es", "del 10% al 20%"),
    ("**-5.5% to 5.5%**", "cs", "**-5,5&nbsp;% až 5,5&nbsp;%**"),
    ("2.5 to 3 billion", "it", "da 2,5 a 3 miliardi"),
    ("Up to 50.5%", "de", "Up to 50,5&nbsp;%"),
])
def test_format_range(text, lang, expected):
    """Ranges and percentages are rewritten for the target language."""
    assert format_range(text, lang) == expected


@pytest.mark.parametrize("lang", ["en", "fr"])
def test_format_range_unchanged(lang):
    """English and languages without a locale are left as is."""
    assert format_range("**+$0.01 to -$0.01**", lang) == "**+$0.01 to -$0.01**"


def test_format_range_no_match():
    """Text without a range is returned unchanged."""
    assert format_range("Carbon price", "de") == "Carbon price"


def test_format_range_first_match_only():
    """Only the first range in a cell is rewritten."""
    assert format_range("$1 to $2, $3 to $4", "de") == "1&nbsp;$ bis 2&nbsp;$, $3 to $4"


def test_register_locale():
    """New languages can be registered at runtime."""
    register_locale("xx", RangeLocale(
        decimal_comma=True,
        dollar_range="{s1}{v1} $ -> {s2}{v2} $",
        percent_range="{s1}{v1} % -> {s2}{v2} %",
        billions_range="{v1} -> {v2} G",
        percent="{s}{v} %",
    ))
    assert format_range("$1.25 to $2", "xx") == "1,25 $ -> 2 $"
