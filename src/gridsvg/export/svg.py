"""
どこで: `src/gridsvg/export/svg.py`。
何を: 組み立て済みの GridDocument を SVG として保存する関数を提供する。
なぜ: 射影・組み立てを純粋に保ち、マークアップとファイル出力をこの層だけに閉じ込めるため。
"""

from __future__ import annotations

from dataclasses import dataclass
from html import escape
from pathlib import Path

from gridsvg.core.model import GridDocument, Rect, SegmentGroup
from gridsvg.core.runtime_config import runtime_config

_SVG_NS = "http://www.w3.org/2000/svg"

# --- 出力の形 ---
#
# <svg viewBox="bounds">
#   <defs><clipPath id="..."><rect = 実効ビューポート/></clipPath></defs>
#   <g clip-path="url(#...)" stroke="..." [stroke-width="..."]>   ← グリッド 1 つにつき 1 個
#     <line x1 y1 x2 y2/> ...                                     ← 線インデックス昇順
#   </g>
# </svg>
#
# キャンバス（viewBox）は常に bounds。clip は線の範囲とクリップパスにだけ効く。
# 同一入力から同一バイト列が出るよう、数値は _fmt_float で固定の規則に従って文字列化する。


@dataclass(frozen=True, slots=True)
class SvgParams:
    """SVG 生成パラメータ。

    Parameters
    ----------
    decimals : int or None
        数値出力の小数点以下の桁数（末尾の 0 は落とす）。None の場合は最短表記。
    clip_path_id : str
        `<clipPath>` の id。
    """

    decimals: int | None = None
    clip_path_id: str = "viewable-area"


def _fmt_float(value: float, *, decimals: int | None) -> str:
    """小数を SVG 属性用の文字列にして返す。

    Notes
    -----
    - `decimals=None`: 整数値は `10`、それ以外は `repr()` の最短表記。
    - `decimals=n`: 固定 n 桁で丸めた後、末尾の `0` と `.` を落とす。
    - どちらの場合も `-0` は `0` に正規化する。
    """

    v = float(value)
    if decimals is None:
        if v == 0.0:
            return "0"
        if v.is_integer():
            return str(int(v))
        return repr(v)

    text = f"{v:.{int(decimals)}f}"
    if "." in text:
        text = text.rstrip("0").rstrip(".")
    if text in ("", "-0"):
        return "0"
    return text


def _attr(value: str) -> str:
    return escape(str(value), quote=True)


def _rect_attrs(rect: Rect, *, decimals: int | None) -> str:
    return (
        f'x="{_fmt_float(rect.min_x, decimals=decimals)}" '
        f'y="{_fmt_float(rect.min_y, decimals=decimals)}" '
        f'width="{_fmt_float(rect.width, decimals=decimals)}" '
        f'height="{_fmt_float(rect.height, decimals=decimals)}"'
    )


def _group_lines(
    group: SegmentGroup, *, clip_ref: str, decimals: int | None
) -> list[str]:
    attrs = f'clip-path="{_attr(clip_ref)}" stroke="{_attr(group.stroke)}"'
    if group.stroke_width is not None:
        attrs += f' stroke-width="{_fmt_float(group.stroke_width, decimals=decimals)}"'

    lines = [f"  <g {attrs}>"]
    for x1, y1, x2, y2 in group.segments.endpoints.tolist():
        lines.append(
            f'    <line x1="{_fmt_float(x1, decimals=decimals)}"'
            f' y1="{_fmt_float(y1, decimals=decimals)}"'
            f' x2="{_fmt_float(x2, decimals=decimals)}"'
            f' y2="{_fmt_float(y2, decimals=decimals)}"/>'
        )
    lines.append("  </g>")
    return lines


def _params_from_config() -> SvgParams:
    cfg = runtime_config().svg
    return SvgParams(decimals=cfg.decimals, clip_path_id=str(cfg.clip_path_id))


def svg_text(document: GridDocument, *, params: SvgParams | None = None) -> str:
    """GridDocument を SVG テキストにして返す（末尾改行付き）。

    `params` が None の場合は `config.yaml`（`export.svg`）の設定値を使う。
    """

    p = params if params is not None else _params_from_config()
    decimals = p.decimals
    if decimals is not None and int(decimals) < 0:
        raise ValueError("decimals は 0 以上である必要がある")
    if not str(p.clip_path_id).strip():
        raise ValueError("clip_path_id は空でない必要がある")

    bounds = document.bounds
    view_box = " ".join(
        _fmt_float(v, decimals=decimals)
        for v in (bounds.min_x, bounds.min_y, bounds.width, bounds.height)
    )
    clip_id = str(p.clip_path_id)

    lines: list[str] = [
        f'<svg xmlns="{_SVG_NS}" viewBox="{view_box}">',
        "  <defs>",
        f'    <clipPath id="{_attr(clip_id)}">',
        f"      <rect {_rect_attrs(document.viewport, decimals=decimals)}/>",
        "    </clipPath>",
        "  </defs>",
    ]
    for group in document.groups:
        lines.extend(_group_lines(group, clip_ref=f"url(#{clip_id})", decimals=decimals))
    lines.append("</svg>")

    return "\n".join(lines) + "\n"


def export_svg(
    document: GridDocument,
    path: str | Path,
    *,
    params: SvgParams | None = None,
) -> Path:
    """GridDocument を SVG として保存する。

    Returns
    -------
    Path
        保存先パス。
    """

    _path = Path(path)
    text = svg_text(document, params=params)
    _path.parent.mkdir(parents=True, exist_ok=True)
    with _path.open("w", encoding="utf-8", newline="\n") as f:
        f.write(text)
    return _path


__all__ = ["SvgParams", "export_svg", "svg_text"]
