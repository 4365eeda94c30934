"""
どこで: `src/gridsvg/core/projection.py`。
何を: 無限の平行線群（GridSpec）を矩形ビューポートに射影し、境界上の端点を持つ線分列を返す。
なぜ: 角度正規化・軸選択・インデックス範囲の導出を 1 箇所に閉じ込め、純関数として検証できるようにするため。
"""

from __future__ import annotations

import math

import numpy as np

from gridsvg.core.errors import InvalidGrid
from gridsvg.core.model import GridSegments, GridSpec, Rect

# 1/sqrt(2)。sqrt(0.5) は正しく丸められるので定数表記と同じ値になる。
_FRAC_1_SQRT_2 = math.sqrt(0.5)

# 1 グリッドあたりの線数の上限。これを超える指定は InvalidGrid とする。
MAX_LINES_PER_GRID = 1_000_000

# --- 射影の前提（概要）---
#
# 線群は「180° 回転 + step の符号反転」で不変なので、theta は [0, 180) へ畳み込める。
# さらに theta が [45, 135) なら「水平寄り」、それ以外は「鉛直寄り」として扱い、
# 常に絶対値の大きい方の三角関数で割る（0 に近い値で割らない）。
#
# 水平寄り:
#   x = min_x / max_x の 2 本の縦線上で、基準線の y 切片 (y0, y1) を求める。
#   線 i は (min_x, y0 + dy*i) - (max_x, y1 + dy*i)。dy = |step / sin|。
# 鉛直寄り:
#   x/y を入れ替えた対称形。dx = |step / cos|。
#
# インデックス範囲は ±1 の余白を足してから int()（0 方向への切り捨て）で整数化する。
# 余白を先に足すので、丸め誤差があってもビューポートより狭くはならない。


def normalize_angle(theta: float, step: float) -> tuple[float, float]:
    """theta を [0, 180) へ畳み込み、必要なら step の符号を反転して返す。

    Notes
    -----
    - 剰余は Python の `%`（除数が正なら結果は常に非負）を使う。
    - `-1e-20 % 360.0` のように剰余が丸めで 360.0 ちょうどになる場合は 0 とみなす。
    """

    t = float(theta) % 360.0
    if t >= 360.0:
        t = 0.0
    s = float(step)
    if t >= 180.0:
        t -= 180.0
        s = -s
    return t, s


def cos_sin_degrees(theta: float) -> tuple[float, float]:
    """[0, 180) の角度 [deg] について (cos, sin) を返す。

    0/45/90/135 度では閉じた形の厳密値を返す。
    """

    t = float(theta)
    if not (0.0 <= t < 180.0):
        raise ValueError(f"theta は [0, 180) の範囲である必要がある: theta={t}")

    if t == 0.0:
        return 1.0, 0.0
    if t == 45.0:
        return _FRAC_1_SQRT_2, _FRAC_1_SQRT_2
    if t == 90.0:
        return 0.0, 1.0
    if t == 135.0:
        return -_FRAC_1_SQRT_2, _FRAC_1_SQRT_2

    rad = math.radians(t)
    return math.cos(rad), math.sin(rad)


def index_range(lower: float, upper: float, spacing: float) -> tuple[int, int]:
    """`[lower, upper]` を間隔 `spacing` で覆う線インデックスの閉区間を返す。

    Parameters
    ----------
    lower : float
        ビューポート下端から、基準線の切片の大きい方を引いた値。
    upper : float
        ビューポート上端から、基準線の切片の小さい方を引いた値。
    spacing : float
        軸方向へ射影した線間隔（正）。
    """

    # ±1 を足してから切り捨てる。順序を入れ替えると被覆が 1 本欠けうる。
    lo = lower / spacing - 1.0
    hi = upper / spacing + 1.0
    if not (math.isfinite(lo) and math.isfinite(hi)):
        raise InvalidGrid(
            f"インデックス範囲が有限になりません: lower={lower}, upper={upper}, spacing={spacing}"
        )
    return int(lo), int(hi)


def _line_indices(min_idx: int, max_idx: int) -> np.ndarray:
    """`min_idx..=max_idx` の線インデックス配列を返す。線数が上限を超えたら InvalidGrid。"""

    count = max_idx - min_idx + 1
    if count > MAX_LINES_PER_GRID:
        raise InvalidGrid(
            f"線数が上限を超えています: {count} > {MAX_LINES_PER_GRID}"
            "（step がビューポートに対して小さすぎます）"
        )
    return np.arange(min_idx, max_idx + 1, dtype=np.int64)


def _validate_grid(grid: GridSpec) -> None:
    """射影前にグリッド指定を検証する。"""

    for name in ("cx", "cy", "step", "center_position", "theta"):
        value = float(getattr(grid, name))
        if not math.isfinite(value):
            raise InvalidGrid(f"{name} は有限値である必要があります: {name}={value}")
    if float(grid.step) == 0.0:
        raise InvalidGrid("step は 0 以外である必要があります: step=0")


def project(grid: GridSpec, viewport: Rect) -> GridSegments:
    """グリッドをビューポートへ射影し、線インデックス昇順の線分列を返す。

    Parameters
    ----------
    grid : GridSpec
        射影するグリッド。
    viewport : Rect
        線の範囲計算に使う矩形。`min < max` は呼び出し側で検証済みとする。

    Returns
    -------
    GridSegments
        端点がビューポート境界上にある線分列。

    Raises
    ------
    InvalidGrid
        `step == 0`、または数値フィールドが非有限の場合。
        線数が `MAX_LINES_PER_GRID` を超える場合。
    """

    _validate_grid(grid)

    theta, step = normalize_angle(grid.theta, grid.step)
    cos, sin = cos_sin_degrees(theta)

    # 中心点を線に垂直な方向へ step * center_position だけ戻し、0 番目の線の位置にする。
    center_position = float(grid.center_position)
    cx = float(grid.cx) - cos * step * center_position
    cy = float(grid.cy) - sin * step * center_position

    min_x, max_x = float(viewport.min_x), float(viewport.max_x)
    min_y, max_y = float(viewport.min_y), float(viewport.max_y)

    if 45.0 <= theta < 135.0:
        # 水平寄り
        assert sin >= _FRAC_1_SQRT_2
        cot = cos / sin
        # x = min_x / x = max_x への射影
        y0 = cy + cot * (cx - min_x)
        y1 = cy + cot * (cx - max_x)
        dy = abs(step / sin)
        min_idx, max_idx = index_range(min_y - max(y0, y1), max_y - min(y0, y1), dy)

        indices = _line_indices(min_idx, max_idx)
        offsets = dy * indices.astype(np.float64)
        endpoints = np.empty((indices.shape[0], 4), dtype=np.float64)
        endpoints[:, 0] = min_x
        endpoints[:, 1] = y0 + offsets
        endpoints[:, 2] = max_x
        endpoints[:, 3] = y1 + offsets
    else:
        # 鉛直寄り
        assert abs(cos) >= _FRAC_1_SQRT_2
        tan = sin / cos
        # y = min_y / y = max_y への射影
        x0 = cx + tan * (cy - min_y)
        x1 = cx + tan * (cy - max_y)
        dx = abs(step / cos)
        min_idx, max_idx = index_range(min_x - max(x0, x1), max_x - min(x0, x1), dx)

        indices = _line_indices(min_idx, max_idx)
        offsets = dx * indices.astype(np.float64)
        endpoints = np.empty((indices.shape[0], 4), dtype=np.float64)
        endpoints[:, 0] = x0 + offsets
        endpoints[:, 1] = min_y
        endpoints[:, 2] = x1 + offsets
        endpoints[:, 3] = max_y

    return GridSegments(endpoints=endpoints, indices=indices)


__all__ = [
    "MAX_LINES_PER_GRID",
    "cos_sin_degrees",
    "index_range",
    "normalize_angle",
    "project",
]
