# どこで: `src/glosskit/core/parameters/persistence.py`。
# 何を: AssetConfig の JSON 永続化（path 算出 / load / save）を提供する。
# なぜ: 調整した設定を再起動後に復元できるようにするため。

from __future__ import annotations

import json
import logging
from pathlib import Path

from glosskit.core.runtime_config import output_root_dir

from .codec import decode_asset_config, encode_asset_config
from .config import AssetConfig

_logger = logging.getLogger(__name__)

STORAGE_KEY = "glosskit.asset-config"


def default_config_path() -> Path:
    """設定の既定保存パスを返す。

    Notes
    -----
    パスは `{output_root}/asset_store/{STORAGE_KEY}.json`。
    """

    return output_root_dir() / "asset_store" / f"{STORAGE_KEY}.json"


def load_asset_config(path: Path | None = None) -> AssetConfig:
    """JSON ファイルから AssetConfig をロードして返す。無い/壊れている場合は既定値を返す。"""

    _path = Path(path) if path is not None else default_config_path()
    try:
        payload = _path.read_text(encoding="utf-8")
    except FileNotFoundError:
        return AssetConfig()
    except OSError as exc:
        _logger.warning("設定ファイルを読めません（既定値で起動）: path=%s error=%s", _path, exc)
        return AssetConfig()

    try:
        obj = json.loads(payload)
    except ValueError:
        # 破損した JSON は利便性のため無視して起動する。
        _logger.warning("設定ファイルが壊れています（既定値で起動）: path=%s", _path)
        return AssetConfig()

    if not isinstance(obj, dict):
        return decode_asset_config(obj)
    return decode_asset_config(obj.get(STORAGE_KEY))


def save_asset_config(config: AssetConfig, path: Path | None = None) -> Path:
    """AssetConfig を JSON として保存する（親ディレクトリは作成する）。

    同じファイルに STORAGE_KEY 以外のキーがあれば保持する。
    """

    _path = Path(path) if path is not None else default_config_path()
    document: dict[str, object] = {}
    try:
        existing = json.loads(_path.read_text(encoding="utf-8"))
        if isinstance(existing, dict):
            document = existing
    except (OSError, ValueError):
        document = {}

    document[STORAGE_KEY] = encode_asset_config(config)
    _path.parent.mkdir(parents=True, exist_ok=True)
    _path.write_text(json.dumps(document, ensure_ascii=False, indent=2) + "\n", encoding="utf-8")
    return _path


__all__ = ["STORAGE_KEY", "default_config_path", "load_asset_config", "save_asset_config"]
