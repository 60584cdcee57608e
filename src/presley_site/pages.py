from __future__ import annotations

import html
import re
from dataclasses import dataclass
from datetime import datetime
from pathlib import Path
from typing import Mapping

from presley_site.cookies import Design

INDEX_PAGE = "index.html"
LOGIN_PAGE = "prijava.html"
FORM_PAGE = "obrazac.html"
SONGS_PAGE = "podaci/popis.html"
BOOKS_PAGE = "podaci/pregled.html"
AUTHOR_PAGE = "ostalo/o_autoru.html"
MULTIMEDIA_PAGE = "ostalo/multimedija.html"
CREATIVE_PAGE = "ostalo/kreativna.html"
DESIGN_PAGE = "ostalo/dizajn.html"

SONGS_DATA = "datoteke/songs.csv"
MULTIMEDIA_DATA = "datoteke/multimedia.json"

EXPIRATION_FORMAT = "%d.%m.%Y. %H:%M:%S"


@dataclass(frozen=True)
class PageTemplates:
    """Templates read once at startup; data pages substitute fragments into them."""

    songs: str
    multimedia: str


def read_page(root: Path, relative: str) -> str:
    return (root / relative).read_text(encoding="utf-8")


def load_templates(root: Path) -> PageTemplates:
    return PageTemplates(songs=read_page(root, SONGS_PAGE), multimedia=read_page(root, MULTIMEDIA_PAGE))


def substitute(page: str, tokens: Mapping[str, str]) -> str:
    """Replace the first `@<name>` token for every entry of `tokens`."""
    for name, value in tokens.items():
        page = page.replace(f"@{name}", value, 1)
    return page


def format_expiration(expiration_ms: int) -> str:
    return datetime.fromtimestamp(int(expiration_ms) / 1000).strftime(EXPIRATION_FORMAT)


def _fill_element(page: str, element_id: str, value: str) -> str:
    pattern = re.compile(r'(<(\w+)\b[^>]*\bid="' + re.escape(element_id) + r'"[^>]*>)(.*?)(</\2>)', re.DOTALL)

    def _fill(m: "re.Match[str]") -> str:
        return m.group(1) + m.group(3).replace("{}", html.escape(value), 1) + m.group(4)

    return pattern.sub(_fill, page, count=1)


def fill_greeting(page: str, user: str, expiration_ms: int) -> str:
    page = _fill_element(page, "hello", user)
    return _fill_element(page, "goodbye", format_expiration(expiration_ms))


def design_style(design: Design) -> str:
    return (
        '<style id="custom-design">'
        f":root{{--primary:{design.primary_color};--secondary:{design.secondary_color};}}"
        f"header > h1{{font-size:{design.title_size}px;}}"
        f"body{{text-transform:{design.text_transform};opacity:{design.opacity}%;}}"
        "</style>"
    )


def apply_design(page: str, design: Design) -> str:
    style = design_style(design)
    if "</head>" in page:
        return page.replace("</head>", f"{style}</head>", 1)
    return style + page
