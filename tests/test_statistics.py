from __future__ import annotations

import random

import pytest

from presley_site.statistics import (
    BAR_MARGIN,
    BAR_TOP_PADDING,
    FrequencyTable,
    layout_bars,
    render_chart,
    text_color_for,
)


def test_frequency_table_accumulates_lowercase_names():
    table = FrequencyTable()
    table.add("Elvis", 10)
    table.add("ELVIS", 5)
    table.add("Priscilla", 3)
    assert table.as_dict() == {"elvis": 15, "priscilla": 3}
    assert table["Elvis"] == 15
    assert len(table) == 2


def test_frequency_table_json_round_trip():
    table = FrequencyTable({"a": 1, "b": 2})
    assert FrequencyTable.from_json(table.to_json()).as_dict() == {"a": 1, "b": 2}
    assert len(FrequencyTable.from_json("")) == 0
    with pytest.raises(ValueError):
        FrequencyTable.from_json("[1, 2]")


@pytest.mark.parametrize("text", ['{"a": 1e400}', '{"a": NaN}', '{"a": "x"}'])
def test_frequency_table_rejects_non_integer_values(text):
    with pytest.raises(ValueError):
        FrequencyTable.from_json(text)


def test_layout_bars_geometry():
    table = FrequencyTable({"a": 50, "b": 100})
    bars = layout_bars(table, 600, 300, rng=random.Random(1))
    width = (600 - 3 * BAR_MARGIN) / 2
    assert [b.label for b in bars] == ["a [50]", "b [100]"]
    assert bars[0].width == pytest.approx(width)
    assert bars[0].x == pytest.approx(BAR_MARGIN)
    assert bars[1].x == pytest.approx(2 * BAR_MARGIN + width)
    assert bars[0].y == pytest.approx(300 - 150 + BAR_TOP_PADDING)
    assert bars[1].y == pytest.approx(BAR_TOP_PADDING)
    assert all(len(b.color) == 7 and b.color.startswith("#") for b in bars)


def test_layout_bars_empty_table():
    assert layout_bars(FrequencyTable(), 600, 300) == []


def test_text_color_contrast():
    assert text_color_for("#ffffff") == "#000000"
    assert text_color_for("#000000") == "#FFFFFF"
    assert text_color_for("#ff0000") == "#FFFFFF"


def test_render_chart_svg():
    bars = layout_bars(FrequencyTable({"rock": 3, "<pop>": 1}), 400, 200, rng=random.Random(7))
    svg = render_chart(bars, 400, 200)
    assert svg.startswith('<svg id="userCanvas"')
    assert svg.count("<text") == 2
    assert "&lt;pop&gt; [1]" in svg
    assert svg.endswith("</svg>")
