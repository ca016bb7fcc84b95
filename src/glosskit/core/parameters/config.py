"""
どこで: `src/glosskit/core/parameters/config.py`。
何を: ボタン/ナインパッチの設定値（不変 dataclass）と既定値を定義する。
なぜ: ハンドラ間で共有される可変状態を持たず、各描画呼び出しへ明示的な値として渡すため。
"""

from __future__ import annotations

from dataclasses import dataclass, field, replace

from glosskit.core.color import normalize_hex
from glosskit.core.nine_slice import SliceInsets
from glosskit.core.palette import BorderSpec, InteractionState
from glosskit.core.text_layout import Anchor, PaddingInsets

DEFAULT_LABEL = "Кнопка"
DEFAULT_FONT_FAMILY = "Inter"

BUTTON_WIDTH_DEFAULT = 176.0
BUTTON_HEIGHT_DEFAULT = 48.0
RADIUS_MIN, RADIUS_MAX, RADIUS_DEFAULT = 0, 120, 6
FONT_SIZE_MIN, FONT_SIZE_MAX, FONT_SIZE_DEFAULT = 8, 120, 16

FLEX_ALIGNMENTS = ("flex-start", "center", "flex-end")
BLEND_MODES = (
    "normal",
    "multiply",
    "screen",
    "overlay",
    "soft-light",
    "hard-light",
    "color-dodge",
    "color-burn",
    "darken",
    "lighten",
)


@dataclass(frozen=True, slots=True)
class ButtonConfig:
    """グラデーションボタン（CSS トークン出力）の設定。"""

    text: str = ""
    width: float = BUTTON_WIDTH_DEFAULT
    height: float = BUTTON_HEIGHT_DEFAULT
    radius: int = RADIUS_DEFAULT
    font_family: str = DEFAULT_FONT_FAMILY
    font_size: int = FONT_SIZE_DEFAULT
    align_horizontal: str = "center"
    align_vertical: str = "center"
    color_normal: str = "#3366ff"
    color_hover: str = "#4d7cff"
    color_active: str = "#2952cc"
    text_color: str = "#ffffff"
    noise_color: str = "#ffffff"
    noise_amount: float = 12.0
    noise_blend: str = "overlay"
    border_width: int = 0
    border_color: str = "#1a1a2e"

    def state_color(self, state: InteractionState) -> str:
        """状態のベース色（正規化済み）を返す。"""

        raw = {
            InteractionState.NORMAL: self.color_normal,
            InteractionState.HOVER: self.color_hover,
            InteractionState.ACTIVE: self.color_active,
        }[state]
        return normalize_hex(raw)

    def state_colors(self) -> dict[InteractionState, str]:
        return {s: self.state_color(s) for s in InteractionState}

    def border(self) -> BorderSpec:
        return BorderSpec(width=self.border_width, color=self.border_color)


@dataclass(frozen=True, slots=True)
class StatePatch:
    """1 状態分のナインパッチ入力（ソース画像・スライス・余白）。"""

    source: str | None = None
    slices: SliceInsets = field(default_factory=SliceInsets)
    padding: PaddingInsets = field(default_factory=lambda: PaddingInsets(top=8, right=16, bottom=8, left=16))


@dataclass(frozen=True, slots=True)
class NinePatchConfig:
    """ナインパッチ（状態ごとの画像 + 共有テキスト設定）の設定。"""

    normal: StatePatch = field(default_factory=StatePatch)
    hover: StatePatch = field(default_factory=StatePatch)
    active: StatePatch = field(default_factory=StatePatch)
    text: str = DEFAULT_LABEL
    font_family: str = DEFAULT_FONT_FAMILY
    font_size: int = FONT_SIZE_DEFAULT
    horizontal_anchor: Anchor = Anchor.CENTER
    vertical_anchor: Anchor = Anchor.CENTER
    text_color: str = "#ffffff"

    def patch(self, state: InteractionState) -> StatePatch:
        return getattr(self, state.value)

    def with_patch(self, state: InteractionState, **changes: object) -> "NinePatchConfig":
        """state の StatePatch だけを差し替えた新しい設定を返す（他状態は共有しない）。"""

        updated = replace(self.patch(state), **changes)  # type: ignore[arg-type]
        return replace(self, **{state.value: updated})


@dataclass(frozen=True, slots=True)
class AssetConfig:
    """永続化・描画の単位となる設定全体。"""

    button: ButtonConfig = field(default_factory=ButtonConfig)
    nine_patch: NinePatchConfig = field(default_factory=NinePatchConfig)


__all__ = [
    "AssetConfig",
    "BLEND_MODES",
    "BUTTON_HEIGHT_DEFAULT",
    "BUTTON_WIDTH_DEFAULT",
    "ButtonConfig",
    "DEFAULT_FONT_FAMILY",
    "DEFAULT_LABEL",
    "FLEX_ALIGNMENTS",
    "FONT_SIZE_DEFAULT",
    "FONT_SIZE_MAX",
    "FONT_SIZE_MIN",
    "NinePatchConfig",
    "RADIUS_DEFAULT",
    "RADIUS_MAX",
    "RADIUS_MIN",
    "StatePatch",
]
