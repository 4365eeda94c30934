# どこで: `src/gridsvg/__main__.py`。
# 何を: `python -m gridsvg INPUT [OUTPUT]` の CLI エントリポイントを提供する。
# なぜ: YAML のグリッド定義から SVG を 1 コマンドで生成できるようにするため。

from __future__ import annotations

import argparse
import logging
import sys
from pathlib import Path

from gridsvg.core.assemble import assemble
from gridsvg.core.errors import GridError
from gridsvg.core.loader import load_collection
from gridsvg.core.output_paths import default_output_path
from gridsvg.core.runtime_config import runtime_config, set_config_path
from gridsvg.export.svg import SvgParams, export_svg

logger = logging.getLogger("gridsvg")


def _parse_args(argv: list[str]) -> argparse.Namespace:
    p = argparse.ArgumentParser(
        prog="python -m gridsvg",
        description="YAML のグリッド定義を、ビューポートで切り取った線分の SVG に変換する。",
    )
    p.add_argument("input", help="入力 YAML のパス")
    p.add_argument(
        "output",
        nargs="?",
        default=None,
        help="出力 SVG のパス（省略時: 入力と同名で拡張子 .svg）",
    )
    p.add_argument(
        "--config",
        default=None,
        help="config.yaml のパス（指定した場合は探索より優先）",
    )
    p.add_argument(
        "--decimals",
        type=int,
        default=None,
        help="数値出力の小数点以下の桁数（既定: config.yaml の export.svg.decimals）",
    )
    p.add_argument(
        "-v",
        "--verbose",
        action="store_true",
        help="DEBUG ログを出す",
    )

    args = p.parse_args(argv)
    if args.decimals is not None and int(args.decimals) < 0:
        p.error("--decimals は 0 以上である必要があります")
    return args


def _configure_logging(level: int) -> None:
    logging.basicConfig(
        level=level,
        format="%(levelname)s %(name)s: %(message)s",
        stream=sys.stderr,
    )


def main(argv: list[str] | None = None) -> int:
    if argv is None:
        argv = sys.argv[1:]

    args = _parse_args(argv)

    try:
        if args.config is not None:
            set_config_path(args.config)
        cfg = runtime_config()
    except (OSError, RuntimeError, ValueError) as exc:
        print(f"error: {exc}", file=sys.stderr)
        return 1

    _configure_logging(logging.DEBUG if args.verbose else cfg.log_level)
    logger.debug("config: %s", cfg.config_path or "<packaged default>")

    input_path = Path(str(args.input))
    decimals = cfg.svg.decimals if args.decimals is None else int(args.decimals)
    params = SvgParams(decimals=decimals, clip_path_id=cfg.svg.clip_path_id)

    try:
        out_path = (
            default_output_path(input_path) if args.output is None else Path(str(args.output))
        )
        collection = load_collection(input_path)
        logger.debug("loaded %s: %d grids", input_path, len(collection.grids))
        document = assemble(collection)
        export_svg(document, out_path, params=params)
    except GridError as exc:
        print(f"error: {input_path}: {exc}", file=sys.stderr)
        return 1
    except (OSError, ValueError) as exc:
        print(f"error: {exc}", file=sys.stderr)
        return 1

    logger.info(
        "wrote %s (%d groups, %d segments)",
        out_path,
        len(document.groups),
        document.segment_count,
    )
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
