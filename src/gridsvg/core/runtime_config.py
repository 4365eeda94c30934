# どこで: `src/gridsvg/core/runtime_config.py`。
# 何を: config.yaml による実行時設定（探索・ロード・キャッシュ）を提供する。
# なぜ: SVG の数値表記やログレベルを、入力ドキュメントとは独立にユーザーが指定できるようにするため。

"""実行時設定（`config.yaml`）の探索・ロード・キャッシュを担当する。

このモジュールは、以下を提供する:

- `config.yaml` を「同梱デフォルト → ユーザー設定（任意）」の順に適用して `RuntimeConfig` を構築
- 探索パス（CWD / HOME）と、明示指定（`set_config_path()`）の両方に対応
- 1 回ロードした結果をプロセス内でキャッシュ（設定を切り替える場合は `set_config_path()` で破棄）

実装メモ
--------
- ユーザー設定の適用は `dict.update()`（トップレベルの浅い上書き）で行う。
  ネストした mapping は「部分的にマージ」されず「丸ごと置換」される。
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from importlib import resources
from pathlib import Path
from typing import Any

import yaml


@dataclass(frozen=True, slots=True)
class SvgExportConfig:
    """SVG 出力設定（`config.yaml` の `export.svg`）。"""

    decimals: int | None
    clip_path_id: str


@dataclass(frozen=True, slots=True)
class RuntimeConfig:
    """gridsvg の実行時設定。

    Attributes
    ----------
    config_path:
        実際に採用されたユーザー設定ファイルのパス。
        ユーザー設定が無い場合は None（同梱デフォルトのみで動作）。
    svg:
        SVG 出力設定。
    log_level:
        CLI が `logging.basicConfig()` に渡すログレベル（数値）。
    """

    config_path: Path | None
    svg: SvgExportConfig
    log_level: int


# `set_config_path()` で指定される「明示 config」のパス。
_EXPLICIT_CONFIG_PATH: Path | None = None
# `runtime_config()` のプロセス内キャッシュ。
_CONFIG_CACHE: RuntimeConfig | None = None


def set_config_path(path: str | Path | None) -> None:
    """以降の設定探索で使う明示 config パスを設定する。

    Notes
    -----
    - `path` を None にすると明示指定を解除し、既定の探索に戻る。
    - 設定が変わるため、`runtime_config()` のキャッシュを破棄する。
    """

    global _EXPLICIT_CONFIG_PATH, _CONFIG_CACHE
    if path is None:
        _EXPLICIT_CONFIG_PATH = None
        _CONFIG_CACHE = None
        return
    _EXPLICIT_CONFIG_PATH = Path(str(path)).expanduser()
    _CONFIG_CACHE = None


def _default_config_candidates() -> tuple[Path, ...]:
    """既定の `config.yaml` 探索候補を返す。

    探索順（先勝ち）:
    - `./.gridsvg/config.yaml`
    - `~/.config/gridsvg/config.yaml`
    """

    cwd = Path.cwd()
    home = Path.home()
    return (
        cwd / ".gridsvg" / "config.yaml",
        home / ".config" / "gridsvg" / "config.yaml",
    )


def _as_mapping(value: Any, *, key: str) -> dict[str, Any]:
    """任意値を mapping として解釈し、dict に正規化して返す。"""

    if value is None:
        return {}
    if isinstance(value, dict):
        return dict(value)
    raise RuntimeError(f"{key} は mapping である必要があります: got={value!r}")


def _as_int(value: Any, *, key: str) -> int | None:
    """任意値を int として解釈して返す。"""

    if value is None:
        return None
    if isinstance(value, bool):
        raise RuntimeError(f"{key} は整数である必要があります: got={value!r}")
    try:
        return int(value)
    except (TypeError, ValueError) as exc:
        raise RuntimeError(f"{key} は整数である必要があります: got={value!r}") from exc


def _as_optional_str(value: Any) -> str | None:
    """任意値を「空なら None / それ以外は str」へ変換する。"""

    if value is None:
        return None
    s = str(value).strip()
    return None if not s else s


def _as_log_level(value: Any, *, key: str) -> int:
    """`INFO` / `debug` / `20` のような値をログレベル（数値）に変換する。"""

    if isinstance(value, int) and not isinstance(value, bool):
        return int(value)
    name = _as_optional_str(value)
    if name is None:
        return logging.WARNING
    level = logging.getLevelName(name.upper())
    if not isinstance(level, int):
        raise ValueError(f"{key} は logging のレベル名である必要があります: got={value!r}")
    return level


def _load_yaml_text(text: str, *, source: str) -> dict[str, Any]:
    """YAML テキストを読み、トップレベル mapping を dict として返す。"""

    try:
        data = yaml.safe_load(text)
    except yaml.YAMLError as exc:
        raise RuntimeError(f"config.yaml の読み込みに失敗しました: source={source}") from exc

    if data is None:
        return {}
    if not isinstance(data, dict):
        raise RuntimeError(f"config.yaml は mapping である必要があります: source={source}")

    return dict(data)


def _load_yaml_config(path: Path) -> dict[str, Any]:
    """UTF-8 の YAML ファイルを読み、dict を返す。"""

    text = path.read_text(encoding="utf-8")
    return _load_yaml_text(text, source=str(path))


def _load_packaged_default_config() -> dict[str, Any]:
    """同梱デフォルト config（`gridsvg/resource/default_config.yaml`）をロードする。"""

    blob = (
        resources.files("gridsvg")
        .joinpath("resource", "default_config.yaml")
        .read_text(encoding="utf-8")
    )
    return _load_yaml_text(blob, source="gridsvg/resource/default_config.yaml")


def runtime_config() -> RuntimeConfig:
    """実行時設定をロードして返す（キャッシュ）。

    読み込み元の優先順位（後勝ち）:
    1) 同梱 `gridsvg/resource/default_config.yaml`
    2) 探索で見つかった `config.yaml`（任意）
    3) `set_config_path()` で明示指定された `config.yaml`（任意）
    """

    global _CONFIG_CACHE
    if _CONFIG_CACHE is not None:
        return _CONFIG_CACHE

    explicit_path = _EXPLICIT_CONFIG_PATH
    if explicit_path is not None and not explicit_path.is_file():
        raise FileNotFoundError(f"config.yaml が見つかりません: {explicit_path}")

    discovered_path: Path | None = None
    for p in _default_config_candidates():
        if p.is_file():
            discovered_path = p
            break

    payload = _load_packaged_default_config()
    if discovered_path is not None:
        payload.update(_load_yaml_config(discovered_path))
    if explicit_path is not None:
        payload.update(_load_yaml_config(explicit_path))

    version = _as_int(payload.get("version"), key="version")
    if version is None:
        raise RuntimeError(
            "config.yaml の version が未設定です（同梱 default_config.yaml を確認してください）"
        )
    if version != 1:
        raise RuntimeError(f"未対応の config.yaml version です: got={version}")

    export = _as_mapping(payload.get("export"), key="export")
    svg = _as_mapping(export.get("svg"), key="export.svg")

    decimals = _as_int(svg.get("decimals"), key="export.svg.decimals")
    if decimals is not None and decimals < 0:
        raise ValueError(f"export.svg.decimals は 0 以上である必要があります: got={decimals}")

    clip_path_id = _as_optional_str(svg.get("clip_path_id"))
    if clip_path_id is None:
        raise RuntimeError(
            "export.svg.clip_path_id が未設定です（同梱 default_config.yaml を確認してください）"
        )

    log = _as_mapping(payload.get("log"), key="log")
    log_level = _as_log_level(log.get("level"), key="log.level")

    cfg = RuntimeConfig(
        config_path=explicit_path or discovered_path,
        svg=SvgExportConfig(decimals=decimals, clip_path_id=clip_path_id),
        log_level=log_level,
    )
    _CONFIG_CACHE = cfg
    return cfg


__all__ = [
    "RuntimeConfig",
    "SvgExportConfig",
    "runtime_config",
    "set_config_path",
]
