# どこで: `src/gridsvg/core/loader.py`。
# 何を: YAML の入力ドキュメントを読み、GridCollection を構築する。
# なぜ: 入力形式の解釈（キー名・既定値・型チェック）を射影ロジックから切り離すため。

"""入力ドキュメント（YAML）の読み込み。

期待する形::

    bounds: {min-x: 0, max-x: 100, min-y: 0, max-y: 100}
    clip: {min-x: 10, max-x: 90, min-y: 10, max-y: 90}   # 任意
    stroke: "#333"                                        # 任意
    stroke-width: 0.5                                     # 任意
    grids:
      - {cx: 50, cy: 50, step: 10, theta: 30}
      - {step: 7, center-position: 0.5, stroke: red}

キーは kebab-case が正。snake_case（`min_x` 等）も同じキーとして受理する。

パース方針
----------
- Rect は 4 キー必須。未知キーはエラー。
- Grid の各フィールドは省略可（数値は 0.0、スタイルは None）。未知キーは警告して無視する。
- トップレベルの未知キーも警告して無視する。
- Rect の `min < max` はここでは検証しない（`assemble()` の責務）。
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Any

import yaml

from gridsvg.core.errors import DocumentError
from gridsvg.core.model import GridCollection, GridSpec, Rect

logger = logging.getLogger(__name__)

_RECT_KEYS = ("min_x", "max_x", "min_y", "max_y")
_GRID_FLOAT_KEYS = ("cx", "cy", "step", "center_position", "theta")
_GRID_KEYS = frozenset((*_GRID_FLOAT_KEYS, "stroke", "stroke_width"))
_TOP_KEYS = frozenset(("bounds", "clip", "stroke", "stroke_width", "grids"))


def _normalize_key(key: Any) -> str:
    """`min-x` / `min_x` を同じキー `min_x` に正規化する。"""

    return str(key).strip().replace("-", "_")


def _as_mapping(value: Any, *, key: str) -> dict[str, Any]:
    """任意値を mapping として解釈し、キーを正規化した dict を返す。"""

    if not isinstance(value, dict):
        raise DocumentError(f"{key} は mapping である必要があります: got={value!r}")

    out: dict[str, Any] = {}
    for raw_key, item in value.items():
        k = _normalize_key(raw_key)
        if k in out:
            raise DocumentError(f"{key}: キーが重複しています: {raw_key!r}")
        out[k] = item
    return out


def _as_float(value: Any, *, key: str) -> float:
    """任意値を float として解釈して返す（bool は拒否する）。"""

    if isinstance(value, bool) or not isinstance(value, (int, float)):
        raise DocumentError(f"{key} は数値である必要があります: got={value!r}")
    return float(value)


def _as_optional_float(value: Any, *, key: str) -> float | None:
    if value is None:
        return None
    return _as_float(value, key=key)


def _as_optional_str(value: Any, *, key: str) -> str | None:
    if value is None:
        return None
    if not isinstance(value, str):
        raise DocumentError(f"{key} は文字列である必要があります: got={value!r}")
    return value


def _warn_unknown_keys(mapping: dict[str, Any], known: frozenset[str], *, key: str) -> None:
    unknown = sorted(k for k in mapping if k not in known)
    if unknown:
        logger.warning("%s: 未知のキーを無視します: %s", key, ", ".join(unknown))


def parse_rect(value: Any, *, key: str) -> Rect:
    """Rect の mapping を解釈して返す。"""

    mapping = _as_mapping(value, key=key)
    unknown = sorted(k for k in mapping if k not in _RECT_KEYS)
    if unknown:
        raise DocumentError(f"{key}: 未知のキーがあります: {', '.join(unknown)}")
    missing = [k for k in _RECT_KEYS if k not in mapping]
    if missing:
        raise DocumentError(f"{key}: 必須キーが不足しています: {', '.join(missing)}")

    return Rect(
        min_x=_as_float(mapping["min_x"], key=f"{key}.min-x"),
        max_x=_as_float(mapping["max_x"], key=f"{key}.max-x"),
        min_y=_as_float(mapping["min_y"], key=f"{key}.min-y"),
        max_y=_as_float(mapping["max_y"], key=f"{key}.max-y"),
    )


def parse_grid(value: Any, *, key: str) -> GridSpec:
    """Grid の mapping を解釈して返す。省略されたフィールドは既定値になる。"""

    mapping = _as_mapping(value, key=key)
    _warn_unknown_keys(mapping, _GRID_KEYS, key=key)

    floats: dict[str, float] = {}
    for name in _GRID_FLOAT_KEYS:
        raw = mapping.get(name)
        floats[name] = 0.0 if raw is None else _as_float(raw, key=f"{key}.{name}")

    return GridSpec(
        **floats,
        stroke=_as_optional_str(mapping.get("stroke"), key=f"{key}.stroke"),
        stroke_width=_as_optional_float(
            mapping.get("stroke_width"), key=f"{key}.stroke-width"
        ),
    )


def parse_collection(data: Any, *, source: str) -> GridCollection:
    """YAML から得た Python 値を GridCollection に変換する。"""

    top = _as_mapping(data, key=source)
    _warn_unknown_keys(top, _TOP_KEYS, key=source)

    if top.get("bounds") is None:
        raise DocumentError(f"{source}: bounds が未設定です")
    bounds = parse_rect(top["bounds"], key="bounds")
    clip = None if top.get("clip") is None else parse_rect(top["clip"], key="clip")

    raw_grids = top.get("grids")
    if raw_grids is None:
        raw_grids = []
    if not isinstance(raw_grids, list):
        raise DocumentError(f"grids は配列である必要があります: got={raw_grids!r}")
    grids = tuple(parse_grid(g, key=f"grids[{i}]") for i, g in enumerate(raw_grids))

    return GridCollection(
        bounds=bounds,
        clip=clip,
        stroke=_as_optional_str(top.get("stroke"), key="stroke"),
        stroke_width=_as_optional_float(top.get("stroke_width"), key="stroke-width"),
        grids=grids,
    )


def load_collection_text(text: str, *, source: str = "<string>") -> GridCollection:
    """YAML テキストから GridCollection を構築する。

    Raises
    ------
    DocumentError
        YAML として読めない、または形が不正な場合。
    """

    try:
        data = yaml.safe_load(text)
    except yaml.YAMLError as exc:
        raise DocumentError(f"YAML の読み込みに失敗しました: source={source}: {exc}") from exc

    if data is None:
        raise DocumentError(f"入力ドキュメントが空です: source={source}")
    return parse_collection(data, source=source)


def load_collection(path: str | Path) -> GridCollection:
    """UTF-8 の YAML ファイルを読み、GridCollection を返す。"""

    p = Path(path)
    text = p.read_text(encoding="utf-8")
    return load_collection_text(text, source=str(p))


__all__ = [
    "load_collection",
    "load_collection_text",
    "parse_collection",
    "parse_grid",
    "parse_rect",
]
