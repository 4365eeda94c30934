# どこで: `src/gridsvg/core/assemble.py`。
# 何を: GridCollection を検証し、グリッドごとに射影とスタイル解決を行って GridDocument を組み立てる。
# なぜ: 検証点を 1 箇所にまとめ、書き出し層には解決済みの値だけを渡すため。

from __future__ import annotations

import logging

from gridsvg.core.errors import InvalidGrid
from gridsvg.core.model import (
    GridCollection,
    GridDocument,
    GridSpec,
    Rect,
    SegmentGroup,
    validate_rect,
)
from gridsvg.core.projection import project

logger = logging.getLogger(__name__)

DEFAULT_STROKE = "black"


def resolve_stroke(grid: GridSpec, collection: GridCollection) -> str:
    """線色を grid → collection → `"black"` の順で解決する。"""

    if grid.stroke is not None:
        return str(grid.stroke)
    if collection.stroke is not None:
        return str(collection.stroke)
    return DEFAULT_STROKE


def resolve_stroke_width(grid: GridSpec, collection: GridCollection) -> float | None:
    """線幅を grid → collection の順で解決する。どちらも無ければ None。"""

    if grid.stroke_width is not None:
        return float(grid.stroke_width)
    if collection.stroke_width is not None:
        return float(collection.stroke_width)
    return None


def effective_viewport(collection: GridCollection) -> Rect:
    """線の範囲計算に使う矩形（clip があれば clip、無ければ bounds）を返す。"""

    return collection.clip if collection.clip is not None else collection.bounds


def assemble(collection: GridCollection) -> GridDocument:
    """GridCollection を GridDocument に組み立てる。

    Notes
    -----
    - bounds / clip の検証はここで 1 回だけ行い、失敗時は射影を 1 つも実行しない。
    - 出力キャンバスは常に bounds。線分の範囲は実効ビューポートで決まる。
    - 1 グリッドでも InvalidGrid なら全体を失敗させる（部分出力はしない）。

    Raises
    ------
    InvalidViewport
        bounds または clip が `min < max` を満たさない場合。
    InvalidGrid
        いずれかのグリッドが射影できない場合。
    """

    validate_rect(collection.bounds, name="bounds")
    if collection.clip is not None:
        validate_rect(collection.clip, name="clip")

    viewport = effective_viewport(collection)

    groups: list[SegmentGroup] = []
    for i, grid in enumerate(collection.grids):
        try:
            segments = project(grid, viewport)
        except InvalidGrid as exc:
            raise InvalidGrid(f"grids[{i}]: {exc}") from exc

        stroke = resolve_stroke(grid, collection)
        stroke_width = resolve_stroke_width(grid, collection)
        logger.debug(
            "grids[%d]: theta=%s step=%s -> %d segments (stroke=%s, stroke_width=%s)",
            i,
            grid.theta,
            grid.step,
            len(segments),
            stroke,
            stroke_width,
        )
        groups.append(
            SegmentGroup(stroke=stroke, stroke_width=stroke_width, segments=segments)
        )

    return GridDocument(
        bounds=collection.bounds,
        clip=collection.clip,
        viewport=viewport,
        groups=tuple(groups),
    )


__all__ = [
    "DEFAULT_STROKE",
    "assemble",
    "effective_viewport",
    "resolve_stroke",
    "resolve_stroke_width",
]
