from __future__ import annotations

import html
import json
import random
from dataclasses import dataclass
from typing import Dict, Iterator, List, Optional, Tuple

BAR_TOP_PADDING = 10
BAR_MARGIN = 10
LABEL_FONT = "11pt -apple-system, BlinkMacSystemFont, Segoe UI, Roboto, Oxygen, Ubuntu, Cantarell, Open Sans, Helvetica Neue, sans-serif"


class FrequencyTable:
    """Lowercase name -> accumulated integer value, in insertion order."""

    def __init__(self, entries: Optional[Dict[str, int]] = None) -> None:
        self._entries: Dict[str, int] = {}
        for name, value in (entries or {}).items():
            self.add(name, value)

    def add(self, name: str, value: int) -> int:
        key = str(name).lower()
        self._entries[key] = self._entries.get(key, 0) + int(value)
        return self._entries[key]

    def __len__(self) -> int:
        return len(self._entries)

    def __iter__(self) -> Iterator[Tuple[str, int]]:
        return iter(self._entries.items())

    def __getitem__(self, name: str) -> int:
        return self._entries[str(name).lower()]

    def as_dict(self) -> Dict[str, int]:
        return dict(self._entries)

    def to_json(self) -> str:
        return json.dumps(self._entries, ensure_ascii=False, separators=(",", ":"))

    @classmethod
    def from_json(cls, text: Optional[str]) -> "FrequencyTable":
        """Rebuild the table carried by the statistics form. Blank input gives an empty table."""
        if not str(text or "").strip():
            return cls()
        data = json.loads(str(text))
        if not isinstance(data, dict):
            raise ValueError("frequency table must be a JSON object")
        try:
            return cls({str(k): int(v) for k, v in data.items()})
        except OverflowError as e:
            raise ValueError(f"frequency table holds a non-finite value: {e}") from e


@dataclass(frozen=True)
class Bar:
    label: str
    value: int
    x: float
    y: float
    width: float
    height: float
    color: str
    text_color: str


def text_color_for(color: str) -> str:
    """Black on light fills, white on dark ones."""
    r = int(color[1:3], 16)
    g = int(color[3:5], 16)
    b = int(color[5:7], 16)
    return "#000000" if (r * 0.299 + g * 0.587 + b * 0.114) > 186 else "#FFFFFF"


def random_color(rng: random.Random) -> str:
    return f"#{rng.randrange(0xFFFFFF):06x}"


def layout_bars(
    table: FrequencyTable,
    width: int,
    height: int,
    rng: Optional[random.Random] = None,
) -> List[Bar]:
    """
    Lay the table out as vertical bars over a `width` x `height` canvas.

    Bars extend to the bottom edge; the tallest bar starts `BAR_TOP_PADDING` below the top.
    """
    if not len(table):
        return []
    rng = rng or random.Random()
    count = len(table)
    bar_width = (width - (count + 1) * BAR_MARGIN) / count
    max_value = max(value for _, value in table) or 1

    bars: List[Bar] = []
    for index, (name, value) in enumerate(table, start=1):
        color = random_color(rng)
        top = height - value / max_value * height + BAR_TOP_PADDING
        left = BAR_MARGIN * index + (index - 1) * bar_width
        bars.append(
            Bar(
                label=f"{name} [{value}]",
                value=value,
                x=left,
                y=top,
                width=bar_width,
                height=height,
                color=color,
                text_color=text_color_for(color),
            )
        )
    return bars


def render_chart(bars: List[Bar], width: int, height: int) -> str:
    """Inline SVG bar chart with rotated labels and a border."""
    parts = [
        f'<svg id="userCanvas" class="mb-3" xmlns="http://www.w3.org/2000/svg" '
        f'width="{width}" height="{height}" viewBox="0 0 {width} {height}">'
    ]
    for index, bar in enumerate(bars, start=1):
        parts.append(
            f'<rect x="{bar.x:.2f}" y="{bar.y:.2f}" width="{bar.width:.2f}" height="{bar.height:.2f}" fill="{bar.color}"/>'
        )
        # Rotated -90deg, so the label runs upwards from the bottom of the bar.
        text_x = -height + BAR_TOP_PADDING
        text_y = index * BAR_MARGIN + (index - 0.5) * bar.width
        parts.append(
            f'<text transform="rotate(-90)" x="{text_x:.2f}" y="{text_y:.2f}" fill="{bar.text_color}" '
            f'dominant-baseline="middle" style="font: {LABEL_FONT}">{html.escape(bar.label)}</text>'
        )
    parts.append(f'<rect x="0" y="0" width="{width}" height="{height}" fill="none" stroke="#000000" stroke-width="5"/>')
    parts.append("</svg>")
    return "".join(parts)
