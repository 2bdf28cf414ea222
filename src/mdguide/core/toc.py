"""Table of contents for one language"""

from dataclasses import dataclass, field
from typing import Union


@dataclass
class TocSection:
    title:    str
    rel_path: str       # page path plus anchor


@dataclass
class TocPage:
    rel_path:  str
    base_name: str
    title:     str
    sections:  list[TocSection] = field(default_factory=list)


@dataclass
class TocSeparator:
    pass


TocItem = Union[TocPage, TocSeparator]


class Toc:
    def __init__(self) -> None:
        self.items: list[TocItem] = []

    @property
    def pages(self) -> list[TocPage]:
        return [item for item in self.items if isinstance(item, TocPage)]

    def add_page(self, rel_path: str, base_name: str, title: str, sections: list[TocSection]) -> None:
        self.items.append(TocPage(rel_path, base_name, title, sections))

    def add_separator(self) -> None:
        # Pages skipped for lagging translations can leave adjacent separators
        if not self.items or isinstance(self.items[-1], TocSeparator):
            return
        self.items.append(TocSeparator())
