from __future__ import annotations

import csv
import html
import io
from typing import Iterable, List

HEADER_ROW_TOKEN = "@headerRow"
BODY_ROW_TOKEN = "@bodyRow"

SONGS_CAPTION = "Glazbeni proizvodi Elvisa Presleya"


def _escape(text: str) -> str:
    return html.escape(str(text or ""), quote=True)


class HTMLTable:
    """
    HTML table built by string substitution.

    Rows are written into placeholder tokens; the body token always sits after the last
    body row until `get_table()` erases it.
    """

    def __init__(self, caption: str) -> None:
        self.table = (
            f"<table><caption>{_escape(caption)}</caption>"
            f"<thead>{HEADER_ROW_TOKEN}</thead><tbody>{BODY_ROW_TOKEN}</tbody></table>"
        )

    def add_header_row(self, data: Iterable[str]) -> None:
        content = "".join(f"<th>{_escape(cell)}</th>" for cell in data)
        self.table = self.table.replace(HEADER_ROW_TOKEN, self._create_row(content), 1)

    def add_body_row(self, data: Iterable[str]) -> None:
        content = "".join(f"<td>{_escape(cell)}</td>" for cell in data)
        self.table = self.table.replace(BODY_ROW_TOKEN, f"{self._create_row(content)}{BODY_ROW_TOKEN}", 1)

    def get_table(self) -> str:
        return self.table.replace(BODY_ROW_TOKEN, "").replace(HEADER_ROW_TOKEN, "")

    @staticmethod
    def _create_row(contents: str) -> str:
        return f"<tr>{contents}</tr>"


def parse_rows(text: str, delimiter: str = ";") -> List[List[str]]:
    reader = csv.reader(io.StringIO(text), delimiter=delimiter)
    return [[cell.strip() for cell in row] for row in reader if any(cell.strip() for cell in row)]


def songs_table(text: str, caption: str = SONGS_CAPTION) -> str:
    """Render the semicolon-delimited songs file; the first row is the header."""
    rows = parse_rows(text)
    table = HTMLTable(caption)
    if rows:
        table.add_header_row(rows[0])
    for row in rows[1:]:
        table.add_body_row(row)
    return table.get_table()
