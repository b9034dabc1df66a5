"""Thin typed query layer over BeautifulSoup documents."""

from __future__ import annotations

from bs4 import BeautifulSoup, Tag


class Element:
    def __init__(self, tag: Tag) -> None:
        self.tag = tag

    def select(self, selector: str) -> list["Element"]:
        return [Element(found) for found in self.tag.select(selector)]

    def select_one(self, selector: str) -> "Element | None":
        found = self.tag.select_one(selector)
        return Element(found) if found is not None else None

    def attr(self, name: str) -> str | None:
        value = self.tag.get(name)
        if isinstance(value, list):
            return " ".join(value)
        return value

    def text(self) -> str:
        return self.tag.get_text()

    def cell_text(self, column: int) -> str:
        """Text of the 1-based ``column``th cell of a table row, or ``""``."""
        cell = self.select_one(f"td:nth-child({column})")
        return cell.text() if cell is not None else ""


def parse_html(markup: str) -> Element:
    return Element(BeautifulSoup(markup, "html.parser"))
