from __future__ import annotations

from glosskit.core.noise import NoiseTokens
from glosskit.core.palette import InteractionState
from glosskit.core.parameters.config import DEFAULT_LABEL, ButtonConfig
from glosskit.core.tokens import build_button_tokens, display_label, font_stack, state_class


def test_default_button_tokens() -> None:
    tokens = build_button_tokens(ButtonConfig())
    assert set(tokens) == {"button", "gloss", "noise", "label"}

    button = tokens["button"]
    assert button["--normal-top"] == "#7094ff"
    assert button["--normal-solid"] == "#3366ff"
    assert button["--hover-solid"] == "#4d7cff"
    assert button["--active-solid"] == "#2952cc"
    assert button["--btn-text-color"] == "#ffffff"
    assert button["width"] == "176px"
    assert button["height"] == "48px"
    assert button["border-radius"] == "6px"
    assert button["font-size"] == "16px"
    assert button["font-family"] == "'Inter', sans-serif"
    assert button["justify-content"] == "center"
    assert button["align-items"] == "center"
    assert button["text-align"] == "center"

    assert tokens["gloss"] == {"border-radius": "6px"}
    assert tokens["label"] == {"text": DEFAULT_LABEL, "aria-label": DEFAULT_LABEL}


def test_zero_border_width_tokens_are_none() -> None:
    button = build_button_tokens(ButtonConfig(border_width=0))["button"]
    assert button["--border-width"] == "0px"
    assert button["--border-color"] == "none"
    assert button["--border-highlight"] == "none"
    assert button["--border-shadow"] == "none"
    assert button["--border-glow"] == "none"
    assert button["--border-overlay-opacity"] == "0"


def test_visible_border_tokens() -> None:
    button = build_button_tokens(ButtonConfig(border_width=3, border_color="#3366ff"))["button"]
    assert button["--border-width"] == "3px"
    assert button["--border-color"] == "#3366ff"
    assert button["--border-highlight"] == "#ffffff"
    assert button["--border-glow"] == "rgba(51, 102, 255, 0.45)"
    assert button["--border-overlay-opacity"] == "1"


def test_fractional_dimensions_keep_decimals() -> None:
    button = build_button_tokens(ButtonConfig(width=120.5))["button"]
    assert button["width"] == "120.5px"


def test_alignment_maps_to_text_align() -> None:
    button = build_button_tokens(ButtonConfig(align_horizontal="flex-end", align_vertical="flex-start"))["button"]
    assert button["justify-content"] == "flex-end"
    assert button["align-items"] == "flex-start"
    assert button["text-align"] == "right"


def test_noise_layer_tokens_follow_noise_and_radius() -> None:
    noise = NoiseTokens(background_image="url(data:x)", opacity="0.12", mix_blend_mode="screen")
    tokens = build_button_tokens(ButtonConfig(radius=10), noise)
    assert tokens["noise"] == {
        "background-image": "url(data:x)",
        "opacity": "0.12",
        "mix-blend-mode": "screen",
        "background-size": "128px 128px",
        "border-radius": "10px",
    }


def test_missing_noise_defaults_to_off() -> None:
    tokens = build_button_tokens(ButtonConfig(noise_blend="multiply"))
    assert tokens["noise"]["background-image"] == "none"
    assert tokens["noise"]["opacity"] == "0"
    assert tokens["noise"]["mix-blend-mode"] == "multiply"


def test_display_label_trims_and_defaults() -> None:
    assert display_label("  Купить  ") == "Купить"
    assert display_label("   ") == DEFAULT_LABEL
    assert display_label(None) == DEFAULT_LABEL


def test_font_stack_and_state_class() -> None:
    assert font_stack(" Noto Sans ") == "'Noto Sans', sans-serif"
    assert state_class(InteractionState.HOVER) == "state-hover"
    assert state_class("active") == "state-active"
    assert state_class("pressed") == "state-normal"
