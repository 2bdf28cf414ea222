"""Locale formatting of numeric ranges in table cells.

Table cells in slider-settings tables carry English ranges such as
`**+$0.01 to -$0.01**`. For other languages the decimal separator, the
position of the unit, and the connecting word are rewritten, e.g. German:
`**+0,01&nbsp;$ bis -0,01&nbsp;$**`. Each language registers one
`RangeLocale`; languages without an entry (English included) are returned
unchanged.
"""

import re
from dataclasses import dataclass
from typing import Optional


# Groups: open emphasis, sign1, value1, sign2, value2, close emphasis
DOLLAR_RANGE_RE  = re.compile(r'(\*?\*?)([+-]?)\$(\d+\.?\d{0,2})\s+to\s+([+-]?)\$(\d+\.?\d{0,2})(\*?\*?)')
PERCENT_RANGE_RE = re.compile(r'(\*?\*?)([+-]?)(\d+\.?\d{0,2})%\s+to\s+([+-]?)(\d+\.?\d{0,2})%(\*?\*?)')
# Groups: open, value1, value2, close
BILLIONS_RANGE_RE = re.compile(r'(\*?\*?)(\d+\.?\d{0,2})\s+to\s+(\d+\.?\d{0,2}) billion(\*?\*?)')
# Groups: open, sign, value, close
PERCENT_RE = re.compile(r'(\*?\*?)([+-]?)(\d+\.?\d{0,2})%(\*?\*?)')


@dataclass(frozen=True)
class RangeLocale:
    """Templates use {s1}/{v1}/{s2}/{v2} for signs and values ({s}/{v} for a single percentage)."""
    decimal_comma:  bool
    dollar_range:   str
    percent_range:  str
    billions_range: str
    percent:        str

    def num(self, value: str) -> str:
        return value.replace('.', ',', 1) if self.decimal_comma else value


LOCALES: dict[str, RangeLocale] = {
    'cs': RangeLocale(
        decimal_comma=True,
        dollar_range='{s1}{v1}&nbsp;$ až {s2}{v2}&nbsp;$',
        percent_range='{s1}{v1}&nbsp;% až {s2}{v2}&nbsp;%',
        billions_range='{v1} až {v2} miliardy',
        percent='{s}{v}%',
    ),
    'de': RangeLocale(
        decimal_comma=True,
        dollar_range='{s1}{v1}&nbsp;$ bis {s2}{v2}&nbsp;$',
        percent_range='{s1}{v1}&nbsp;% bis {s2}{v2}&nbsp;%',
        billions_range='{v1} bis {v2} Milliarden',
        percent='{s}{v}&nbsp;%',
    ),
    'es': RangeLocale(
        decimal_comma=False,
        dollar_range='del {s1}${v1} al {s2}${v2}',
        percent_range='del {s1}{v1}% al {s2}{v2}%',
        billions_range='{v1} a {v2} mil millones',
        percent='{s}{v}%',
    ),
    'it': RangeLocale(
        decimal_comma=True,
        dollar_range='da {s1}${v1} a {s2}${v2}',
        percent_range='da {s1}{v1}% a {s2}{v2}%',
        billions_range='da {v1} a {v2} miliardi',
        percent='{s}{v}%',
    ),
    'nb': RangeLocale(
        decimal_comma=True,
        dollar_range='{s1}$&nbsp;{v1} til {s2}$&nbsp;{v2}',
        percent_range='{s1}{v1}&nbsp;% til {s2}{v2}&nbsp;%',
        billions_range='{v1} til {v2} milliarder',
        percent='{s}{v}&nbsp;%',
    ),
    'pt': RangeLocale(
        decimal_comma=True,
        dollar_range='{s1}$&nbsp;{v1} a {s2}$&nbsp;{v2}',
        percent_range='{s1}{v1}% a {s2}{v2}%',
        billions_range='{v1} a {v2} bilhões',
        percent='{s}{v}%',
    ),
}


def register_locale(lang: str, locale: RangeLocale) -> None:
    LOCALES[lang] = locale


def format_range(text: str, lang: str) -> str:
    """Rewrite the first range (or percentage) in the cell text for the target language."""
    locale: Optional[RangeLocale] = LOCALES.get(lang)
    if locale is None:
        return text

    def signed_range(template: str):
        def repl(m: re.Match) -> str:
            body = template.format(
                s1=m.group(2), v1=locale.num(m.group(3)), s2=m.group(4), v2=locale.num(m.group(5)),
            )
            return f"{m.group(1)}{body}{m.group(6)}"
        return repl

    def billions(m: re.Match) -> str:
        body = locale.billions_range.format(v1=locale.num(m.group(2)), v2=locale.num(m.group(3)))
        return f"{m.group(1)}{body}{m.group(4)}"

    def percent(m: re.Match) -> str:
        body = locale.percent.format(s=m.group(2), v=locale.num(m.group(3)))
        return f"{m.group(1)}{body}{m.group(4)}"

    for pattern, repl in (
        (DOLLAR_RANGE_RE, signed_range(locale.dollar_range)),
        (PERCENT_RANGE_RE, signed_range(locale.percent_range)),
        (BILLIONS_RANGE_RE, billions),
        (PERCENT_RE, percent),
    ):
        if pattern.search(text):
            return pattern.sub(repl, text, count=1)
    return text
