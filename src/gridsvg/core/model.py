"""
どこで: `src/gridsvg/core/model.py`。
何を: 入力（Rect / GridSpec / GridCollection）と出力（GridSegments / SegmentGroup / GridDocument）の値型を定義する。
なぜ: 射影・組み立て・書き出しの各層が、同じ不変データだけを受け渡すようにするため。
"""

from __future__ import annotations

import math
from dataclasses import dataclass

import numpy as np

from gridsvg.core.errors import InvalidViewport


@dataclass(frozen=True, slots=True)
class Rect:
    """軸平行な矩形。

    Notes
    -----
    `min < max` の不変条件はコンストラクタでは検証しない。
    検証はドキュメント単位で `validate_rect()` が 1 回だけ行う。
    """

    min_x: float
    max_x: float
    min_y: float
    max_y: float

    @property
    def width(self) -> float:
        return float(self.max_x) - float(self.min_x)

    @property
    def height(self) -> float:
        return float(self.max_y) - float(self.min_y)


def validate_rect(rect: Rect, *, name: str) -> None:
    """`rect` が `min_x < max_x` かつ `min_y < max_y` を満たすか検証する。

    Raises
    ------
    InvalidViewport
        座標に非有限値（NaN / ±inf）が含まれる場合。
        いずれかの軸で `min >= max` の場合。
    """

    for key, value in (
        ("min_x", rect.min_x),
        ("max_x", rect.max_x),
        ("min_y", rect.min_y),
        ("max_y", rect.max_y),
    ):
        if not math.isfinite(float(value)):
            raise InvalidViewport(
                f"{name}: {key} は有限値である必要があります: {key}={value}"
            )
    if not (rect.min_x < rect.max_x):
        raise InvalidViewport(
            f"{name}: min_x は max_x より小さい必要があります: "
            f"min_x={rect.min_x}, max_x={rect.max_x}"
        )
    if not (rect.min_y < rect.max_y):
        raise InvalidViewport(
            f"{name}: min_y は max_y より小さい必要があります: "
            f"min_y={rect.min_y}, max_y={rect.max_y}"
        )


@dataclass(frozen=True, slots=True)
class GridSpec:
    """無限に続く平行線群 1 つ分の指定。

    Parameters
    ----------
    cx, cy : float
        基準中心点の座標。
    step : float
        隣接する線の間隔。符号は内部で正規化される。0 は不可。
    center_position : float
        中心点が最寄りの線からどれだけずれているか（step 単位）。
        整数なら中心点は線上、0.5 なら 2 本の線のちょうど中間。
    theta : float
        鉛直方向から時計回りの回転角 [deg]。任意の実数（360 で剰余）。
    stroke : str or None
        線色の上書き。
    stroke_width : float or None
        線幅の上書き。
    """

    cx: float = 0.0
    cy: float = 0.0
    step: float = 0.0
    center_position: float = 0.0
    theta: float = 0.0
    stroke: str | None = None
    stroke_width: float | None = None


@dataclass(frozen=True, slots=True)
class GridCollection:
    """入力ドキュメント全体。

    `bounds` は出力キャンバス（viewBox）、`clip` は線の範囲計算に使う領域。
    `clip` が無い場合は `bounds` を使う。
    """

    bounds: Rect
    clip: Rect | None = None
    stroke: str | None = None
    stroke_width: float | None = None
    grids: tuple[GridSpec, ...] = ()


@dataclass(frozen=True, slots=True)
class GridSegments:
    """1 グリッド分の線分列（スタイル無し）。

    Parameters
    ----------
    endpoints : np.ndarray
        float64 型 shape (N, 4) の配列。各行は `[x1, y1, x2, y2]`。
    indices : np.ndarray
        int64 型 shape (N,) の線インデックス。昇順。

    Notes
    -----
    配列は writeable=False に固定して保持する。
    """

    endpoints: np.ndarray
    indices: np.ndarray

    def __post_init__(self) -> None:
        endpoints = np.asarray(self.endpoints, dtype=np.float64)
        indices = np.asarray(self.indices, dtype=np.int64)

        if endpoints.ndim != 2 or endpoints.shape[1] != 4:
            raise ValueError(
                f"endpoints は shape (N,4) である必要がある: shape={endpoints.shape}"
            )
        if indices.ndim != 1 or indices.shape[0] != endpoints.shape[0]:
            raise ValueError(
                "indices は endpoints と同じ長さの 1 次元配列である必要がある"
                f": shape={indices.shape}"
            )

        endpoints.setflags(write=False)
        indices.setflags(write=False)
        object.__setattr__(self, "endpoints", endpoints)
        object.__setattr__(self, "indices", indices)

    def __len__(self) -> int:
        return int(self.endpoints.shape[0])

    def pairs(self) -> list[tuple[tuple[float, float], tuple[float, float]]]:
        """`((x1, y1), (x2, y2))` のリストとして返す。"""

        return [
            ((float(x1), float(y1)), (float(x2), float(y2)))
            for x1, y1, x2, y2 in self.endpoints.tolist()
        ]


@dataclass(frozen=True, slots=True)
class SegmentGroup:
    """スタイル解決済みの 1 グリッド分の出力。

    `stroke_width` が None の場合は書き出し側の既定に任せる。
    """

    stroke: str
    stroke_width: float | None
    segments: GridSegments


@dataclass(frozen=True, slots=True)
class GridDocument:
    """書き出し層へ渡す組み立て結果。

    Attributes
    ----------
    bounds:
        出力キャンバス（viewBox）の矩形。
    clip:
        入力で明示された clip（無ければ None）。
    viewport:
        線分の範囲計算に使った実効ビューポート（clip または bounds）。
    groups:
        入力グリッド順の SegmentGroup 列。
    """

    bounds: Rect
    clip: Rect | None
    viewport: Rect
    groups: tuple[SegmentGroup, ...]

    @property
    def segment_count(self) -> int:
        return sum(len(g.segments) for g in self.groups)


__all__ = [
    "GridCollection",
    "GridDocument",
    "GridSegments",
    "GridSpec",
    "Rect",
    "SegmentGroup",
    "validate_rect",
]
