# どこで: `src/glosskit/core/tokens.py`。
# 何を: ButtonConfig から表示層へ渡すスタイルトークン（レイヤー名 → {プロパティ: 値}）を組み立てる。
# なぜ: エンジンが表示ツリーへ直接触れず、キー/値の写像だけを出力するようにするため。

from __future__ import annotations

from glosskit.core.color import normalize_hex
from glosskit.core.noise import NoiseTokens
from glosskit.core.palette import STATES, derive_border, derive_ramps
from glosskit.core.parameters.config import DEFAULT_LABEL, ButtonConfig

StyleTokens = dict[str, dict[str, str]]

_TEXT_ALIGN = {"flex-start": "left", "center": "center", "flex-end": "right"}


def display_label(text: object) -> str:
    """表示用ラベルを返す。空なら既定ラベル。"""

    trimmed = str(text if text is not None else "").strip()
    return trimmed or DEFAULT_LABEL


def _px(value: float) -> str:
    v = float(value)
    return f"{int(v)}px" if v.is_integer() else f"{v:g}px"


def font_stack(family: str) -> str:
    return f"'{family.strip()}', sans-serif"


def build_button_tokens(config: ButtonConfig, noise: NoiseTokens | None = None) -> StyleTokens:
    """ボタン用のスタイルトークンを返す。

    Returns
    -------
    dict[str, dict[str, str]]
        `button`（本体）/ `gloss`（光沢レイヤー）/ `noise`（ノイズレイヤー）/ `label` の 4 レイヤー。
    """

    button: dict[str, str] = {}
    for state, ramp in derive_ramps(config.state_colors()).items():
        button[f"--{state.value}-top"] = ramp.top
        button[f"--{state.value}-bottom"] = ramp.bottom
        button[f"--{state.value}-solid"] = ramp.solid
    button["--btn-text-color"] = normalize_hex(config.text_color)

    radius = _px(config.radius)
    button["width"] = _px(config.width)
    button["height"] = _px(config.height)
    button["border-radius"] = radius
    button["font-size"] = _px(config.font_size)
    button["font-family"] = font_stack(config.font_family)
    button["justify-content"] = config.align_horizontal
    button["align-items"] = config.align_vertical
    button["text-align"] = _TEXT_ALIGN.get(config.align_horizontal, "center")

    border = derive_border(config.border())
    button["--border-width"] = _px(config.border().width)
    button["--border-color"] = border.color
    button["--border-highlight"] = border.highlight
    button["--border-shadow"] = border.shadow
    button["--border-glow"] = border.glow
    button["--border-overlay-opacity"] = f"{border.overlay_opacity:g}"

    noise_tokens = noise or NoiseTokens(background_image="none", opacity="0", mix_blend_mode=config.noise_blend)
    noise_layer = noise_tokens.as_dict()
    noise_layer["border-radius"] = radius

    label = display_label(config.text)
    return {
        "button": button,
        "gloss": {"border-radius": radius},
        "noise": noise_layer,
        "label": {"text": label, "aria-label": label},
    }


def state_class(state: object) -> str:
    """状態の CSS クラス名（`state-normal` など）を返す。不明な状態は normal。"""

    for s in STATES:
        if s.value == str(getattr(state, "value", state)):
            return f"state-{s.value}"
    return "state-normal"


__all__ = ["StyleTokens", "build_button_tokens", "display_label", "font_stack", "state_class"]
