# どこで: `src/gridsvg/core/errors.py`。
# 何を: 入力ドキュメント/グリッド/ビューポートの不正を表す例外階層を定義する。
# なぜ: CLI 側で「入力が悪い」失敗だけを捕まえ、終了コードへ落とせるようにするため。

from __future__ import annotations


class GridError(ValueError):
    """gridsvg の入力不正を表す基底例外。"""


class InvalidViewport(GridError):
    """矩形が `min < max` を満たさない（bounds / clip 共通）。"""


class InvalidGrid(GridError):
    """グリッド指定が射影できない（step == 0 や非有限値）。"""


class DocumentError(GridError):
    """入力ドキュメントの形（キー・型）が不正。"""


__all__ = ["DocumentError", "GridError", "InvalidGrid", "InvalidViewport"]
