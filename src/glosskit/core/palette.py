"""
どこで: `src/glosskit/core/palette.py`。
何を: 操作状態（normal/hover/active）ごとの色ランプと、ボーダー由来の色トークンを導出する。
なぜ: 1 つのベース色から光沢グラデーション（上/下/単色）を決める規則を 1 箇所に閉じるため。
"""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass
from enum import Enum

from glosskit.core.color import adjust_lightness, normalize_hex, to_rgba

TOP_LIGHTNESS_DELTA = 12
BOTTOM_LIGHTNESS_DELTA = -18

BORDER_WIDTH_MAX = 16
BORDER_HIGHLIGHT_DELTA = 40
BORDER_SHADOW_DELTA = -35
BORDER_GLOW_ALPHA = 0.45

NO_COLOR = "none"


class InteractionState(str, Enum):
    """ボタン等の操作状態。"""

    NORMAL = "normal"
    HOVER = "hover"
    ACTIVE = "active"

    @classmethod
    def coerce(cls, value: object, default: "InteractionState | None" = None) -> "InteractionState | None":
        """文字列/列挙値を InteractionState へ変換する。不明なら default を返す。"""

        if isinstance(value, cls):
            return value
        try:
            return cls(str(value).strip().lower())
        except ValueError:
            return default


STATES: tuple[InteractionState, ...] = (
    InteractionState.NORMAL,
    InteractionState.HOVER,
    InteractionState.ACTIVE,
)


@dataclass(frozen=True, slots=True)
class StateRamp:
    """1 状態分の色ランプ（グラデーション上端/下端/単色）。"""

    top: str
    bottom: str
    solid: str


def derive_ramp(base: object) -> StateRamp:
    """ベース色から StateRamp を導出して返す。"""

    solid = normalize_hex(base)
    return StateRamp(
        top=adjust_lightness(solid, TOP_LIGHTNESS_DELTA),
        bottom=adjust_lightness(solid, BOTTOM_LIGHTNESS_DELTA),
        solid=solid,
    )


def derive_ramps(colors: Mapping[InteractionState, object]) -> dict[InteractionState, StateRamp]:
    """状態ごとのベース色から、状態ごとに独立した StateRamp を導出して返す。

    欠けている状態は既定色（白）から導出する。戻り値は毎回新しい dict。
    """

    return {state: derive_ramp(colors.get(state)) for state in STATES}


def coerce_border_width(value: object, fallback: int = 0) -> int:
    """ボーダー幅を 0..16 の整数へ正規化して返す。数値化できなければ fallback。"""

    try:
        width = int(float(str(value).strip()))
    except (TypeError, ValueError, OverflowError):
        return int(fallback)
    return 0 if width < 0 else BORDER_WIDTH_MAX if width > BORDER_WIDTH_MAX else width


@dataclass(frozen=True, slots=True)
class BorderSpec:
    """ボーダー指定。width は構築時に 0..16 へ clamp される。"""

    width: int
    color: str

    def __post_init__(self) -> None:
        object.__setattr__(self, "width", coerce_border_width(self.width))
        object.__setattr__(self, "color", normalize_hex(self.color))


@dataclass(frozen=True, slots=True)
class BorderTokens:
    """ボーダー由来の色トークン。幅 0 のときは色がすべて "none"。"""

    color: str
    highlight: str
    shadow: str
    glow: str
    overlay_opacity: float


def derive_border(spec: BorderSpec) -> BorderTokens:
    """BorderSpec から BorderTokens を導出して返す。"""

    if spec.width <= 0:
        return BorderTokens(
            color=NO_COLOR,
            highlight=NO_COLOR,
            shadow=NO_COLOR,
            glow=NO_COLOR,
            overlay_opacity=0.0,
        )
    return BorderTokens(
        color=spec.color,
        highlight=adjust_lightness(spec.color, BORDER_HIGHLIGHT_DELTA),
        shadow=adjust_lightness(spec.color, BORDER_SHADOW_DELTA),
        glow=to_rgba(spec.color, BORDER_GLOW_ALPHA),
        overlay_opacity=1.0,
    )


__all__ = [
    "BorderSpec",
    "BorderTokens",
    "InteractionState",
    "STATES",
    "StateRamp",
    "coerce_border_width",
    "derive_border",
    "derive_ramp",
    "derive_ramps",
]
