"""
どこで: `src/glosskit/core/nine_patch.py`。
何を: 1 状態分のナインパッチ描画（計測 → 合成 → テキスト描画）を非同期に実行する。
なぜ: フォント待ち・画像欠落があっても必ず何かを描き、最後に完了した描画がキャンバスに残るようにするため。

状態遷移は `IDLE → MEASURING → COMPOSITING → DRAWN`。失敗は DRAWN（degraded）へ進み、
エラーで止まる終端状態は持たない。
"""

from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass
from enum import Enum

import numpy as np

from glosskit.core.bitmap import encode_png, new_bitmap
from glosskit.core.font_resolver import FontSource, FontStatus, LocalFontSource, await_font_ready
from glosskit.core.nine_slice import composite, normalize_slices
from glosskit.core.palette import InteractionState
from glosskit.core.parameters.config import NinePatchConfig
from glosskit.core.text_layout import (
    TextMetrics,
    TextPlacement,
    draw_text,
    fit_canvas_size,
    measure_text,
    place_text,
)

_logger = logging.getLogger(__name__)


class RenderPhase(str, Enum):
    IDLE = "idle"
    MEASURING = "measuring"
    COMPOSITING = "compositing"
    DRAWN = "drawn"


@dataclass(frozen=True, slots=True)
class NinePatchRender:
    """1 回分の描画結果。"""

    state: InteractionState
    bitmap: np.ndarray
    size: tuple[int, int]
    metrics: TextMetrics
    placement: TextPlacement
    font: FontStatus
    composited: bool
    text_drawn: bool

    @property
    def degraded(self) -> bool:
        return self.font.degraded or not self.composited

    def png_bytes(self) -> bytes:
        return encode_png(self.bitmap)


async def next_frame() -> None:
    """描画前に 1 フレーム分だけ制御を返す。"""

    await asyncio.sleep(0)


class NinePatchRenderer:
    """1 状態分のナインパッチキャンバスを所有し、描画のたびに上書きする。"""

    def __init__(
        self,
        state: InteractionState,
        *,
        font_source: FontSource | None = None,
        font_timeout: float | None = None,
    ) -> None:
        self.state = state
        self.phase = RenderPhase.IDLE
        self._font_source = font_source if font_source is not None else LocalFontSource()
        self._font_timeout = font_timeout
        self._last: NinePatchRender | None = None

    @property
    def last(self) -> NinePatchRender | None:
        """最後に完了した描画結果（未描画なら None）。"""

        return self._last

    async def render(self, config: NinePatchConfig, source: np.ndarray | None) -> NinePatchRender:
        """config と source（読み込み失敗時は None）から描画して結果を返す。

        呼び出し時点の config の値だけを使う。途中で新しい描画が始まっても取り消さず、
        完了した順にキャンバスを上書きする。
        """

        patch = config.patch(self.state)

        self.phase = RenderPhase.MEASURING
        font = await await_font_ready(
            self._font_source,
            config.font_family,
            config.font_size,
            timeout=self._font_timeout,
        )
        await next_frame()
        metrics = measure_text(config.text, font.path, config.font_size)

        source_size: tuple[int, int] | None = None
        slices = patch.slices
        if source is not None:
            sh, sw = source.shape[:2]
            source_size = (int(sw), int(sh))
            slices = normalize_slices(patch.slices, sw, sh)
        size = fit_canvas_size(metrics, patch.padding, slices, source_size)
        placement = place_text(metrics, size, patch.padding, config.horizontal_anchor, config.vertical_anchor)

        self.phase = RenderPhase.COMPOSITING
        composited = source is not None
        if composited:
            canvas = composite(source, size[0], size[1], slices)
        else:
            _logger.warning("ソース画像が無いため合成を省略します: state=%s", self.state.value)
            canvas = new_bitmap(*size)

        try:
            text_drawn = draw_text(canvas, metrics, font.path, placement, config.text_color)
        except Exception:  # テキスト描画の失敗は degraded として DRAWN へ進む
            _logger.exception("テキスト描画に失敗しました: state=%s", self.state.value)
            text_drawn = False

        result = NinePatchRender(
            state=self.state,
            bitmap=canvas,
            size=size,
            metrics=metrics,
            placement=placement,
            font=font,
            composited=composited,
            text_drawn=text_drawn,
        )
        self._last = result
        self.phase = RenderPhase.DRAWN
        return result


__all__ = ["NinePatchRender", "NinePatchRenderer", "RenderPhase", "next_frame"]
