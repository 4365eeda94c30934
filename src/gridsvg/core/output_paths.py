# どこで: `src/gridsvg/core/output_paths.py`。
# 何を: 入力ドキュメントのパスから、既定の SVG 出力先パスを決める。
# なぜ: 出力先を省略した CLI 実行でも、入力の隣に同名で保存できるようにするため。

from __future__ import annotations

from pathlib import Path

SVG_SUFFIX = ".svg"


def default_output_path(input_path: str | Path) -> Path:
    """入力と同じディレクトリ・同じ stem で拡張子だけ `.svg` にしたパスを返す。

    Notes
    -----
    - 拡張子は末尾の 1 つだけを置き換える（`a.grid.yaml` → `a.grid.svg`）。
    - 拡張子が無ければ付与する（`grid` → `grid.svg`）。
    - 入力自体が `.svg` の場合は上書きになるため ValueError とする。
    """

    p = Path(input_path)
    if not p.name:
        raise ValueError(f"入力パスにファイル名がありません: {input_path!r}")
    if p.suffix.lower() == SVG_SUFFIX:
        raise ValueError(
            f"入力が {SVG_SUFFIX} のため既定の出力先が入力と同じになります"
            f"（出力先を明示してください）: {p}"
        )
    return p.with_suffix(SVG_SUFFIX)


__all__ = ["SVG_SUFFIX", "default_output_path"]
