from __future__ import annotations

import html
import re

# English shape names (as used in the `shape` attribute) to Croatian.
SHAPE_NAMES = {"poly": "Višekut", "circle": "Krug", "rect": "Pravokutnik"}

UNKNOWN_SHAPE = "Nemoguće identificirati oblik..."

_AREA_TAG_RE = re.compile(r"<area\b([^>]*?)(/?)>", re.IGNORECASE)
_ATTR_RE = re.compile(r'\b([a-zA-Z-]+)\s*=\s*"([^"]*)"')


def format_area_coords(shape: str, coords: str) -> str:
    values = [c.strip() for c in str(coords or "").split(",")]
    if shape == "circle":
        x, y, r = (values + ["", "", ""])[:3]
        return f" X<sub>1</sub>: {x}, Y<sub>1</sub>: {y}, R: {r}"
    if shape in {"rect", "poly"}:
        parts = []
        for index, value in enumerate(values):
            axis = "X" if index % 2 == 0 else "Y"
            parts.append(f" {axis}<sub>{index // 2 + 1}</sub>={value}")
        return ",".join(parts)
    return UNKNOWN_SHAPE


def describe_area(shape: str, coords: str) -> str:
    return f"{SHAPE_NAMES.get(shape, shape)}:{format_area_coords(shape, coords)}."


def annotate_areas(page: str) -> str:
    """Add a `data-description` attribute to every image-map `<area>` that lacks one."""

    def _annotate(m: "re.Match[str]") -> str:
        attrs = dict((k.lower(), v) for k, v in _ATTR_RE.findall(m.group(1)))
        if "data-description" in attrs:
            return m.group(0)
        description = html.escape(describe_area(attrs.get("shape", ""), attrs.get("coords", "")), quote=True)
        return f'<area{m.group(1)} data-description="{description}"{m.group(2)}>'

    return _AREA_TAG_RE.sub(_annotate, page)
