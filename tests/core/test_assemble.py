"""コレクション組み立て（`gridsvg.core.assemble.assemble`）のテスト群。"""

from __future__ import annotations

import math

import numpy as np
import pytest

from gridsvg.core import assemble as assemble_module
from gridsvg.core.assemble import (
    DEFAULT_STROKE,
    assemble,
    effective_viewport,
    resolve_stroke,
    resolve_stroke_width,
)
from gridsvg.core.errors import InvalidGrid, InvalidViewport
from gridsvg.core.model import GridCollection, GridSpec, Rect

BOUNDS = Rect(min_x=0.0, max_x=100.0, min_y=0.0, max_y=100.0)


@pytest.mark.parametrize(
    "rect",
    [
        Rect(min_x=10.0, max_x=10.0, min_y=0.0, max_y=1.0),
        Rect(min_x=11.0, max_x=10.0, min_y=0.0, max_y=1.0),
        Rect(min_x=0.0, max_x=1.0, min_y=5.0, max_y=5.0),
        Rect(min_x=0.0, max_x=1.0, min_y=6.0, max_y=-6.0),
        Rect(min_x=math.nan, max_x=1.0, min_y=0.0, max_y=1.0),
        Rect(min_x=0.0, max_x=math.inf, min_y=0.0, max_y=1.0),
        Rect(min_x=-math.inf, max_x=1.0, min_y=0.0, max_y=1.0),
        Rect(min_x=0.0, max_x=1.0, min_y=-math.inf, max_y=math.inf),
    ],
)
def test_assemble_rejects_invalid_bounds_and_clip(rect: Rect) -> None:
    """bounds / clip のどちらが不正（非有限値を含む）でも InvalidViewport。"""
    with pytest.raises(InvalidViewport):
        assemble(GridCollection(bounds=rect))
    with pytest.raises(InvalidViewport):
        assemble(GridCollection(bounds=BOUNDS, clip=rect))


def test_assemble_validates_before_any_projection(monkeypatch) -> None:
    """矩形が不正なら射影を 1 回も呼ばない。"""
    calls: list[GridSpec] = []

    def _fake_project(grid, viewport):  # type: ignore[no-untyped-def]
        calls.append(grid)
        raise AssertionError("project は呼ばれないはず")

    monkeypatch.setattr(assemble_module, "project", _fake_project)

    bad_clip = Rect(min_x=0.0, max_x=1.0, min_y=2.0, max_y=1.0)
    with pytest.raises(InvalidViewport):
        assemble(GridCollection(bounds=BOUNDS, clip=bad_clip, grids=(GridSpec(step=1.0),)))
    assert calls == []


def test_assemble_fails_whole_document_on_zero_step() -> None:
    """step=0 のグリッドが 1 つでもあれば全体が InvalidGrid になる。"""
    collection = GridCollection(
        bounds=BOUNDS,
        grids=(GridSpec(step=10.0), GridSpec(step=0.0), GridSpec(step=5.0)),
    )

    with pytest.raises(InvalidGrid, match=r"grids\[1\]"):
        assemble(collection)


def test_resolve_stroke_fallback_chain() -> None:
    """線色は grid → collection → black の順。"""
    with_default = GridCollection(bounds=BOUNDS, stroke="blue")
    without_default = GridCollection(bounds=BOUNDS)

    assert resolve_stroke(GridSpec(stroke="red"), with_default) == "red"
    assert resolve_stroke(GridSpec(), with_default) == "blue"
    assert resolve_stroke(GridSpec(), without_default) == DEFAULT_STROKE == "black"


def test_resolve_stroke_width_fallback_chain() -> None:
    """線幅は grid → collection → None の順。"""
    with_default = GridCollection(bounds=BOUNDS, stroke_width=2.0)
    without_default = GridCollection(bounds=BOUNDS)

    assert resolve_stroke_width(GridSpec(stroke_width=0.5), with_default) == 0.5
    assert resolve_stroke_width(GridSpec(), with_default) == 2.0
    assert resolve_stroke_width(GridSpec(), without_default) is None


def test_assemble_preserves_grid_order_and_styles() -> None:
    collection = GridCollection(
        bounds=BOUNDS,
        stroke="gray",
        stroke_width=1.5,
        grids=(
            GridSpec(cx=50.0, cy=50.0, step=20.0, theta=0.0, stroke="red"),
            GridSpec(cx=50.0, cy=50.0, step=25.0, theta=90.0, stroke_width=0.25),
            GridSpec(cx=0.0, cy=0.0, step=10.0, theta=30.0),
        ),
    )

    doc = assemble(collection)

    assert [(g.stroke, g.stroke_width) for g in doc.groups] == [
        ("red", 1.5),
        ("gray", 0.25),
        ("gray", 1.5),
    ]
    # 1 つ目は鉛直線、2 つ目は水平線。
    e0 = doc.groups[0].segments.endpoints
    e1 = doc.groups[1].segments.endpoints
    np.testing.assert_array_equal(e0[:, 0], e0[:, 2])
    np.testing.assert_array_equal(e1[:, 1], e1[:, 3])
    assert doc.segment_count == sum(len(g.segments) for g in doc.groups)


def test_assemble_uses_clip_for_extent_and_bounds_for_canvas() -> None:
    """キャンバスは bounds、線分の範囲は clip で決まる。"""
    clip = Rect(min_x=20.0, max_x=60.0, min_y=30.0, max_y=70.0)
    collection = GridCollection(
        bounds=BOUNDS,
        clip=clip,
        grids=(
            GridSpec(cx=50.0, cy=50.0, step=10.0, theta=0.0),
            GridSpec(cx=50.0, cy=50.0, step=10.0, theta=90.0),
        ),
    )

    doc = assemble(collection)

    assert doc.bounds == BOUNDS
    assert doc.clip == clip
    assert doc.viewport == clip

    vertical = doc.groups[0].segments.endpoints
    np.testing.assert_array_equal(vertical[:, 1], 30.0)
    np.testing.assert_array_equal(vertical[:, 3], 70.0)
    # 両端の余白線を除けば clip の x 範囲に収まる。
    assert vertical[0, 0] < 20.0 and vertical[-1, 0] > 60.0
    assert np.all((vertical[1:-1, 0] >= 20.0 - 10.0) & (vertical[1:-1, 0] <= 60.0 + 10.0))

    horizontal = doc.groups[1].segments.endpoints
    np.testing.assert_array_equal(horizontal[:, 0], 20.0)
    np.testing.assert_array_equal(horizontal[:, 2], 60.0)


def test_effective_viewport_defaults_to_bounds() -> None:
    assert effective_viewport(GridCollection(bounds=BOUNDS)) == BOUNDS


def test_assemble_with_no_grids_yields_no_groups() -> None:
    doc = assemble(GridCollection(bounds=BOUNDS))

    assert doc.groups == ()
    assert doc.segment_count == 0
    assert doc.viewport == BOUNDS


def test_assemble_reports_too_many_lines_with_grid_index() -> None:
    """線数上限を超えるグリッドも grids[i] 付きの InvalidGrid になる。"""
    collection = GridCollection(
        bounds=BOUNDS,
        grids=(GridSpec(step=10.0), GridSpec(cx=50.0, cy=50.0, step=1e-7)),
    )

    with pytest.raises(InvalidGrid, match=r"grids\[1\]"):
        assemble(collection)
