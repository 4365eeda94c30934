"""SVG export（`gridsvg.export.svg`）のテスト。"""

from __future__ import annotations

import xml.etree.ElementTree as ET
from pathlib import Path

import pytest

from gridsvg.core.assemble import assemble
from gridsvg.core.model import GridCollection, GridSpec, Rect
from gridsvg.core.runtime_config import set_config_path
from gridsvg.export.svg import SvgParams, _fmt_float, export_svg, svg_text

_NS = {"svg": "http://www.w3.org/2000/svg"}


@pytest.fixture(autouse=True)
def _reset_runtime_config(monkeypatch, tmp_path: Path) -> None:
    monkeypatch.chdir(tmp_path)
    monkeypatch.setenv("HOME", str(tmp_path / "home"))
    set_config_path(None)
    yield
    set_config_path(None)


def _document(**kwargs):  # type: ignore[no-untyped-def]
    collection = GridCollection(
        bounds=Rect(min_x=0.0, max_x=100.0, min_y=0.0, max_y=50.0),
        **kwargs,
    )
    return assemble(collection)


def test_svg_text_structure_uses_bounds_for_canvas_and_clip_for_clip_path() -> None:
    doc = _document(
        clip=Rect(min_x=10.0, max_x=90.0, min_y=5.0, max_y=45.0),
        grids=(
            GridSpec(cx=50.0, cy=25.0, step=20.0, theta=0.0),
            GridSpec(cx=50.0, cy=25.0, step=10.0, theta=90.0, stroke="red", stroke_width=0.5),
        ),
    )

    root = ET.fromstring(svg_text(doc, params=SvgParams()))

    assert root.get("viewBox") == "0 0 100 50"
    rect = root.find("svg:defs/svg:clipPath/svg:rect", _NS)
    assert rect is not None
    assert (rect.get("x"), rect.get("y"), rect.get("width"), rect.get("height")) == (
        "10",
        "5",
        "80",
        "40",
    )
    assert root.find("svg:defs/svg:clipPath", _NS).get("id") == "viewable-area"

    groups = root.findall("svg:g", _NS)
    assert len(groups) == 2
    assert groups[0].get("clip-path") == "url(#viewable-area)"
    assert groups[0].get("stroke") == "black"
    assert groups[0].get("stroke-width") is None
    assert groups[1].get("stroke") == "red"
    assert groups[1].get("stroke-width") == "0.5"

    for group, grp_doc in zip(groups, doc.groups):
        lines = group.findall("svg:line", _NS)
        assert len(lines) == len(grp_doc.segments)


def test_svg_text_lines_follow_segment_order() -> None:
    """theta=0 / step=20 の参照例: x = -10, 10, ..., 110 の鉛直線が昇順に並ぶ。"""
    doc = assemble(
        GridCollection(
            bounds=Rect(min_x=0.0, max_x=100.0, min_y=0.0, max_y=100.0),
            grids=(GridSpec(cx=50.0, cy=50.0, step=20.0, theta=0.0),),
        )
    )

    root = ET.fromstring(svg_text(doc, params=SvgParams()))
    lines = root.findall("svg:g/svg:line", _NS)

    assert [(ln.get("x1"), ln.get("y1"), ln.get("x2"), ln.get("y2")) for ln in lines] == [
        (x, "0", x, "100") for x in ("-10", "10", "30", "50", "70", "90", "110")
    ]


def test_svg_text_escapes_attribute_values() -> None:
    doc = _document(stroke='a"b<c', grids=(GridSpec(step=10.0),))

    text = svg_text(doc, params=SvgParams(clip_path_id="clip&1"))
    root = ET.fromstring(text)

    assert root.find("svg:g", _NS).get("stroke") == 'a"b<c'
    assert root.find("svg:g", _NS).get("clip-path") == "url(#clip&1)"


def test_svg_text_without_grids_is_valid_svg() -> None:
    root = ET.fromstring(svg_text(_document(), params=SvgParams()))

    assert root.findall("svg:g", _NS) == []


@pytest.mark.parametrize(
    ("value", "decimals", "expected"),
    [
        (10.0, None, "10"),
        (-3.5, None, "-3.5"),
        (0.1, None, "0.1"),
        (-0.0, None, "0"),
        (1.0 / 3.0, None, "0.3333333333333333"),
        (1.0 / 3.0, 3, "0.333"),
        (2.5, 0, "2"),
        (12.5, 3, "12.5"),
        (10.0, 3, "10"),
        (-0.0001, 2, "0"),
    ],
)
def test_fmt_float(value: float, decimals: int | None, expected: str) -> None:
    assert _fmt_float(value, decimals=decimals) == expected


def test_svg_text_applies_decimals() -> None:
    doc = _document(grids=(GridSpec(cx=50.0, cy=25.0, step=7.0, theta=30.0),))

    root = ET.fromstring(svg_text(doc, params=SvgParams(decimals=2)))

    for ln in root.findall("svg:g/svg:line", _NS):
        for attr in ("x1", "y1", "x2", "y2"):
            text = ln.get(attr)
            assert len(text.partition(".")[2]) <= 2


def test_svg_text_rejects_invalid_params() -> None:
    with pytest.raises(ValueError):
        svg_text(_document(), params=SvgParams(decimals=-1))
    with pytest.raises(ValueError):
        svg_text(_document(), params=SvgParams(clip_path_id="  "))


def test_export_svg_writes_file_and_is_deterministic(tmp_path: Path) -> None:
    doc = _document(grids=(GridSpec(cx=1.0, cy=2.0, step=3.0, theta=123.0),))

    a = export_svg(doc, tmp_path / "out" / "a.svg", params=SvgParams())
    b = export_svg(doc, tmp_path / "out" / "b.svg", params=SvgParams())

    assert a == tmp_path / "out" / "a.svg"
    assert a.read_bytes() == b.read_bytes()
    assert a.read_bytes().endswith(b"</svg>\n")


def test_export_svg_uses_config_when_params_is_none(tmp_path: Path) -> None:
    config_path = tmp_path / "config.yaml"
    config_path.write_text(
        "\n".join(
            [
                "version: 1",
                "export:",
                "  svg:",
                "    decimals: 1",
                "    clip_path_id: frame",
                "",
            ]
        ),
        encoding="utf-8",
    )
    set_config_path(config_path)

    doc = _document(grids=(GridSpec(cx=50.0, cy=25.0, step=7.0, theta=30.0),))
    out = export_svg(doc, tmp_path / "cfg.svg")
    root = ET.fromstring(out.read_text(encoding="utf-8"))

    assert root.find("svg:defs/svg:clipPath", _NS).get("id") == "frame"
    assert root.find("svg:g", _NS).get("clip-path") == "url(#frame)"
    for ln in root.findall("svg:g/svg:line", _NS):
        assert len(ln.get("x1").partition(".")[2]) <= 1
