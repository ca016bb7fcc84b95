# どこで: `src/glosskit/core/noise.py`。
# 何を: ベース色と強度からタイル可能な RGBA ノイズを生成し、呼び出し側のキャッシュ規則を提供する。
# なぜ: 光沢ボタンの「粒子感」を、見た目を保ったまま不要な再生成なしで更新できるようにするため。

from __future__ import annotations

import logging
import math
from dataclasses import dataclass

import numpy as np

from glosskit.core.bitmap import to_data_url
from glosskit.core.color import hex_to_rgb

_logger = logging.getLogger(__name__)

NOISE_SIZE = 128
NOISE_VARIATION = 80.0
DEFAULT_BLEND_MODE = "overlay"


def generate_noise(
    base_color: object,
    intensity: float,
    *,
    rng: np.random.Generator | None = None,
) -> np.ndarray:
    """ノイズビットマップ（shape (128, 128, 4), uint8）を生成して返す。

    Parameters
    ----------
    base_color : object
        粒子の基準色。
    intensity : float
        不透明度の上限（0..1 へ clamp される）。
    rng : numpy.random.Generator or None, optional
        乱数源。None なら毎回シードなしの Generator を使う。

    Notes
    -----
    画素ごとに 1 つの変動量 `(rand - 0.5) * 80` を R/G/B へ共通に加える（単色の粒子）。
    alpha は別の乱数から `floor(rand * intensity * 255)` で独立に決める。
    """

    try:
        amount = float(intensity)
    except (TypeError, ValueError):
        amount = 0.0
    if not math.isfinite(amount):
        amount = 0.0
    amount = min(1.0, max(0.0, amount))

    gen = rng if rng is not None else np.random.default_rng()
    r, g, b = hex_to_rgb(base_color)

    # 画素ごとに [variation, alpha] の順で乱数を引く。
    draws = gen.random((NOISE_SIZE, NOISE_SIZE, 2))
    variation = (draws[..., 0] - 0.5) * NOISE_VARIATION

    out = np.empty((NOISE_SIZE, NOISE_SIZE, 4), dtype=np.uint8)
    for i, base in enumerate((r, g, b)):
        out[..., i] = np.clip(np.rint(base + variation), 0, 255).astype(np.uint8)
    alpha = np.floor(draws[..., 1] * amount * 255.0)
    out[..., 3] = np.clip(alpha, 0, 255).astype(np.uint8)
    return out


def parse_noise_amount(value: object) -> float | None:
    """UI のノイズ量（百分率）を強度 0..1 へ変換して返す。

    数値化できない値、または (0, 1] の外になる値は None（ノイズ無効）を返す。
    """

    if isinstance(value, (int, float)) and not isinstance(value, bool):
        raw = float(value)
    else:
        text = str(value if value is not None else "").strip()
        if not text:
            return None
        try:
            raw = float(text)
        except ValueError:
            return None
    if not math.isfinite(raw):
        return None
    amount = raw / 100.0
    if amount <= 0.0 or amount > 1.0:
        return None
    return amount


@dataclass(frozen=True, slots=True)
class NoiseTokens:
    """ノイズレイヤーへ適用するスタイル値。"""

    background_image: str
    opacity: str
    mix_blend_mode: str
    background_size: str = f"{NOISE_SIZE}px {NOISE_SIZE}px"

    def as_dict(self) -> dict[str, str]:
        return {
            "background-image": self.background_image,
            "opacity": self.opacity,
            "mix-blend-mode": self.mix_blend_mode,
            "background-size": self.background_size,
        }


class NoiseLayer:
    """ノイズビットマップを保持し、必要なときだけ再生成するキャッシュ。

    再生成は `force=True` かキャッシュが空のときだけ行う。
    強度が無効（0 以下など）のときは乱数を消費せずにキャッシュを捨てる。
    """

    def __init__(self, *, rng: np.random.Generator | None = None) -> None:
        self._rng = rng
        self._bitmap: np.ndarray | None = None
        self._data_url = ""
        self.generation_count = 0

    @property
    def bitmap(self) -> np.ndarray | None:
        return self._bitmap

    def clear(self) -> None:
        self._bitmap = None
        self._data_url = ""

    def update(
        self,
        color: object,
        amount_percent: object,
        blend_mode: str = DEFAULT_BLEND_MODE,
        *,
        force: bool = False,
    ) -> NoiseTokens:
        """現在の入力からノイズレイヤーのトークンを返す（必要なら再生成する）。"""

        blend = str(blend_mode or DEFAULT_BLEND_MODE)
        amount = parse_noise_amount(amount_percent)
        if amount is None:
            self.clear()
            return NoiseTokens(background_image="none", opacity="0", mix_blend_mode=blend)

        if force or self._bitmap is None:
            self._bitmap = generate_noise(color, amount, rng=self._rng)
            self._data_url = to_data_url(self._bitmap)
            self.generation_count += 1
            _logger.debug("noise を再生成しました: amount=%.2f count=%d", amount, self.generation_count)

        return NoiseTokens(
            background_image=f"url({self._data_url})",
            opacity=f"{amount:.2f}",
            mix_blend_mode=blend,
        )


__all__ = [
    "DEFAULT_BLEND_MODE",
    "NOISE_SIZE",
    "NoiseLayer",
    "NoiseTokens",
    "generate_noise",
    "parse_noise_amount",
]
