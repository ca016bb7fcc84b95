# どこで: `src/glosskit/core/parameters/__init__.py`。
# 何を: 設定値・変換・永続化の公開エイリアスをまとめる。
# なぜ: controller や UI 層から最小インポートで使えるようにするため。

from .codec import decode_asset_config, dumps_asset_config, encode_asset_config, loads_asset_config
from .config import AssetConfig, ButtonConfig, NinePatchConfig, StatePatch
from .persistence import STORAGE_KEY, default_config_path, load_asset_config, save_asset_config

__all__ = [
    "AssetConfig",
    "ButtonConfig",
    "NinePatchConfig",
    "STORAGE_KEY",
    "StatePatch",
    "decode_asset_config",
    "default_config_path",
    "dumps_asset_config",
    "encode_asset_config",
    "load_asset_config",
    "loads_asset_config",
    "save_asset_config",
]
