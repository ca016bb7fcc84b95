# どこで: `src/glosskit/core/parameters/codec.py`。
# 何を: AssetConfig と JSON 化可能なフラット dict の相互変換を提供する。
# なぜ: 永続化仕様を設定本体から分離し、壊れた/古い payload でもフィールド単位で復元できるようにするため。

from __future__ import annotations

import json
import logging
import os
from collections.abc import Callable
from dataclasses import fields
from typing import Any

from glosskit.core.color import normalize_hex
from glosskit.core.nine_slice import SliceInsets
from glosskit.core.palette import STATES, coerce_border_width
from glosskit.core.text_layout import Anchor, PaddingInsets

from .coerce import (
    clamp_int,
    coerce_choice,
    coerce_float,
    coerce_name,
    coerce_non_negative_float,
    coerce_non_negative_int,
    coerce_text,
    normalize_dimension,
)
from .config import (
    BLEND_MODES,
    FLEX_ALIGNMENTS,
    FONT_SIZE_MAX,
    FONT_SIZE_MIN,
    RADIUS_MAX,
    RADIUS_MIN,
    AssetConfig,
    ButtonConfig,
    NinePatchConfig,
    StatePatch,
)

_logger = logging.getLogger(__name__)

SCHEMA_VERSION = 1
_SIDES = ("top", "right", "bottom", "left")


def _color(value: object, fallback: str) -> str:
    if not isinstance(value, str):
        return fallback
    return normalize_hex(value, fallback)


def _source(value: object, fallback: str | None) -> str | None:
    if value is None:
        return None
    if isinstance(value, os.PathLike):
        value = os.fspath(value)
    if isinstance(value, str):
        return value.strip() or None
    return fallback


BUTTON_FIELD_COERCERS: dict[str, Callable[[object, Any], Any]] = {
    "text": coerce_text,
    "width": normalize_dimension,
    "height": normalize_dimension,
    "radius": lambda v, fb: clamp_int(v, RADIUS_MIN, RADIUS_MAX, fb),
    "font_family": coerce_name,
    "font_size": lambda v, fb: clamp_int(v, FONT_SIZE_MIN, FONT_SIZE_MAX, fb),
    "align_horizontal": lambda v, fb: coerce_choice(v, FLEX_ALIGNMENTS, fb),
    "align_vertical": lambda v, fb: coerce_choice(v, FLEX_ALIGNMENTS, fb),
    "color_normal": _color,
    "color_hover": _color,
    "color_active": _color,
    "text_color": _color,
    "noise_color": _color,
    # 100 超は clamp せず保持し、生成側でノイズ無効として扱う
    "noise_amount": lambda v, fb: coerce_float(v, fb),
    "noise_blend": lambda v, fb: coerce_choice(v, BLEND_MODES, fb),
    "border_width": lambda v, fb: coerce_border_width(v, fb) if not isinstance(v, bool) else fb,
    "border_color": _color,
}

NINE_PATCH_FIELD_COERCERS: dict[str, Callable[[object, Any], Any]] = {
    "text": coerce_text,
    "font_family": coerce_name,
    "font_size": lambda v, fb: clamp_int(v, FONT_SIZE_MIN, FONT_SIZE_MAX, fb),
    "horizontal_anchor": lambda v, fb: Anchor.coerce(v, fb),
    "vertical_anchor": lambda v, fb: Anchor.coerce(v, fb),
    "text_color": _color,
}


def _slices(value: object, fallback: SliceInsets) -> SliceInsets:
    # スカラーは 4 辺共通、dict は辺ごと（欠けた辺は現在値）。
    if isinstance(value, SliceInsets):
        return value
    if isinstance(value, dict):
        return SliceInsets(
            **{side: coerce_non_negative_int(value.get(side), getattr(fallback, side)) for side in _SIDES}
        )
    parsed = coerce_non_negative_int(value, -1)
    if parsed < 0:
        return fallback
    return SliceInsets(top=parsed, right=parsed, bottom=parsed, left=parsed)


def _padding(value: object, fallback: PaddingInsets) -> PaddingInsets:
    if isinstance(value, PaddingInsets):
        return value
    if isinstance(value, dict):
        return PaddingInsets(
            **{side: coerce_non_negative_float(value.get(side), getattr(fallback, side)) for side in _SIDES}
        )
    parsed = coerce_non_negative_float(value, -1.0)
    if parsed < 0.0:
        return fallback
    return PaddingInsets(top=parsed, right=parsed, bottom=parsed, left=parsed)


STATE_PATCH_FIELD_COERCERS: dict[str, Callable[[object, Any], Any]] = {
    "source": _source,
    "slices": _slices,
    "padding": _padding,
}


def _plain(value: Any) -> Any:
    return value.value if isinstance(value, Anchor) else value


def encode_asset_config(config: AssetConfig) -> dict[str, Any]:
    """AssetConfig を JSON 化可能なフラット dict（`button.width` 形式のキー）へ変換して返す。"""

    out: dict[str, Any] = {"version": SCHEMA_VERSION}
    for f in fields(ButtonConfig):
        out[f"button.{f.name}"] = getattr(config.button, f.name)

    np_cfg = config.nine_patch
    for name in NINE_PATCH_FIELD_COERCERS:
        out[f"nine_patch.{name}"] = _plain(getattr(np_cfg, name))

    for state in STATES:
        patch = np_cfg.patch(state)
        prefix = f"nine_patch.{state.value}"
        out[f"{prefix}.source"] = patch.source
        for side in _SIDES:
            out[f"{prefix}.slices.{side}"] = getattr(patch.slices, side)
            out[f"{prefix}.padding.{side}"] = getattr(patch.padding, side)
    return out


def decode_asset_config(obj: object) -> AssetConfig:
    """フラット dict から AssetConfig を復元して返す。

    各フィールドを独立に検証し、不正なものだけ既定値へ戻す。dict 以外は既定値全体を返す。
    """

    defaults = AssetConfig()
    if not isinstance(obj, dict):
        _logger.warning("設定 payload が dict ではないため既定値を使います: type=%s", type(obj).__name__)
        return defaults

    dropped: list[str] = []

    def _field(key: str, coerce: Callable[[object, Any], Any], default: Any) -> Any:
        if key not in obj:
            return default
        raw = obj[key]
        value = coerce(raw, default)
        if value == default and raw != _plain(default) and raw != default:
            dropped.append(key)
        return value

    button_kwargs = {
        name: _field(f"button.{name}", coerce, getattr(defaults.button, name))
        for name, coerce in BUTTON_FIELD_COERCERS.items()
    }
    np_defaults = defaults.nine_patch
    np_kwargs: dict[str, Any] = {
        name: _field(f"nine_patch.{name}", coerce, getattr(np_defaults, name))
        for name, coerce in NINE_PATCH_FIELD_COERCERS.items()
    }

    for state in STATES:
        prefix = f"nine_patch.{state.value}"
        base = np_defaults.patch(state)
        source = _field(f"{prefix}.source", _source, base.source)
        slices = SliceInsets(
            **{
                side: _field(f"{prefix}.slices.{side}", coerce_non_negative_int, getattr(base.slices, side))
                for side in _SIDES
            }
        )
        padding = PaddingInsets(
            **{
                side: _field(f"{prefix}.padding.{side}", coerce_non_negative_float, getattr(base.padding, side))
                for side in _SIDES
            }
        )
        np_kwargs[state.value] = StatePatch(source=source, slices=slices, padding=padding)

    if dropped:
        _logger.warning("不正な設定値を既定値へ戻しました: %s", ", ".join(sorted(dropped)))

    return AssetConfig(button=ButtonConfig(**button_kwargs), nine_patch=NinePatchConfig(**np_kwargs))


def dumps_asset_config(config: AssetConfig) -> str:
    """AssetConfig を JSON 文字列へ変換して返す。"""

    return json.dumps(encode_asset_config(config), ensure_ascii=False, sort_keys=True)


def loads_asset_config(payload: str) -> AssetConfig:
    """JSON 文字列から AssetConfig を復元して返す。"""

    return decode_asset_config(json.loads(payload))


__all__ = [
    "BUTTON_FIELD_COERCERS",
    "NINE_PATCH_FIELD_COERCERS",
    "SCHEMA_VERSION",
    "STATE_PATCH_FIELD_COERCERS",
    "decode_asset_config",
    "dumps_asset_config",
    "encode_asset_config",
    "loads_asset_config",
]
