from __future__ import annotations

import asyncio
import io
from pathlib import Path

import numpy as np
from PIL import Image

from glosskit.core.nine_patch import NinePatchRenderer, RenderPhase
from glosskit.core.nine_slice import SliceInsets
from glosskit.core.palette import InteractionState
from glosskit.core.parameters.config import NinePatchConfig
from glosskit.core.text_layout import Anchor, PaddingInsets

NORMAL = InteractionState.NORMAL


class _StaticSource:
    """常に同じフォントを返す FontSource。load 中の renderer の phase を記録する。"""

    def __init__(self, path: Path | None, renderer_ref: list | None = None) -> None:
        self.path = path
        self.renderer_ref = renderer_ref if renderer_ref is not None else []
        self.seen_phases: list[RenderPhase] = []

    async def load(self, family: str, size: float) -> bool:
        for renderer in self.renderer_ref:
            self.seen_phases.append(renderer.phase)
        return self.path is not None

    def resolve(self, family: str) -> Path | None:
        return self.path


def _config(**patch_changes) -> NinePatchConfig:
    cfg = NinePatchConfig(text="Параметр", font_family="Glosstest", font_size=20)
    changes = {"padding": PaddingInsets(top=16, right=24, bottom=16, left=24)}
    changes.update(patch_changes)
    return cfg.with_patch(NORMAL, **changes)


def _source(size: int = 30) -> np.ndarray:
    src = np.zeros((size, size, 4), dtype=np.uint8)
    src[..., 0] = 40
    src[..., 3] = 255
    return src


def test_render_without_source_draws_text_on_transparent_canvas(test_font_path: Path) -> None:
    renderer = NinePatchRenderer(NORMAL, font_source=_StaticSource(test_font_path))
    assert renderer.phase is RenderPhase.IDLE
    assert renderer.last is None

    result = asyncio.run(renderer.render(_config(), None))

    assert renderer.phase is RenderPhase.DRAWN
    assert renderer.last is result
    assert result.size == (144, 52)
    assert result.bitmap.shape == (52, 144, 4)
    assert result.composited is False
    assert result.text_drawn is True
    assert result.font.ready is True
    assert result.degraded is True
    assert result.bitmap[..., 3].any()


def test_render_with_source_composites_then_draws_text(test_font_path: Path) -> None:
    renderer = NinePatchRenderer(NORMAL, font_source=_StaticSource(test_font_path))
    config = _config(slices=SliceInsets(10, 10, 10, 10))

    result = asyncio.run(renderer.render(config, _source()))

    assert result.size == (144, 52)
    assert result.composited is True
    assert result.text_drawn is True
    assert result.degraded is False
    # 余白部分はソース画像の色、テキスト部分は白
    assert tuple(result.bitmap[2, 2]) == (40, 0, 0, 255)
    assert tuple(result.bitmap[20, 26]) == (255, 255, 255, 255)


def test_render_canvas_is_at_least_source_size(test_font_path: Path) -> None:
    renderer = NinePatchRenderer(NORMAL, font_source=_StaticSource(test_font_path))
    result = asyncio.run(renderer.render(_config(), _source(200)))
    assert result.size == (200, 200)


def test_render_with_missing_font_degrades_to_fallback_metrics() -> None:
    renderer = NinePatchRenderer(NORMAL, font_source=_StaticSource(None))
    result = asyncio.run(renderer.render(_config(), _source()))

    assert renderer.phase is RenderPhase.DRAWN
    assert result.font.degraded is True
    assert result.font.reason == "not-found"
    assert result.metrics.exact is False
    assert result.text_drawn is False
    assert result.composited is True
    assert result.degraded is True


def test_render_passes_through_measuring_phase(test_font_path: Path) -> None:
    ref: list = []
    source = _StaticSource(test_font_path, ref)
    renderer = NinePatchRenderer(NORMAL, font_source=source)
    ref.append(renderer)

    asyncio.run(renderer.render(_config(), None))
    assert source.seen_phases == [RenderPhase.MEASURING]


def test_render_uses_only_its_own_state_patch(test_font_path: Path) -> None:
    config = _config().with_patch(InteractionState.HOVER, padding=PaddingInsets(top=40, right=40, bottom=40, left=40))
    normal = NinePatchRenderer(NORMAL, font_source=_StaticSource(test_font_path))
    hover = NinePatchRenderer(InteractionState.HOVER, font_source=_StaticSource(test_font_path))

    a = asyncio.run(normal.render(config, None))
    b = asyncio.run(hover.render(config, None))
    assert a.size == (144, 52)
    assert b.size == (176, 100)


def test_new_render_replaces_last_result(test_font_path: Path) -> None:
    renderer = NinePatchRenderer(NORMAL, font_source=_StaticSource(test_font_path))
    first = asyncio.run(renderer.render(_config(), None))
    second_config = NinePatchConfig(
        text="AB",
        font_family="Glosstest",
        font_size=20,
        horizontal_anchor=Anchor.START,
    )
    second = asyncio.run(renderer.render(second_config, None))

    assert renderer.last is second
    assert second is not first
    # 既定の余白 8/16/8/16 + "AB"(24x20)
    assert second.size == (56, 36)
    assert second.placement.text_align == "left"


def test_png_bytes_round_trip(test_font_path: Path) -> None:
    renderer = NinePatchRenderer(NORMAL, font_source=_StaticSource(test_font_path))
    result = asyncio.run(renderer.render(_config(), None))
    with Image.open(io.BytesIO(result.png_bytes())) as im:
        assert im.size == (144, 52)
        assert np.array_equal(np.array(im), result.bitmap)


def test_render_with_unknown_family_uses_default_family_font(font_config: Path) -> None:
    renderer = NinePatchRenderer(NORMAL)
    config = NinePatchConfig(text="AB", font_family="NoSuchFamily", font_size=20)

    result = asyncio.run(renderer.render(config, None))

    assert result.font.degraded is True
    assert result.font.reason == "not-found"
    assert result.metrics.exact is True
    assert result.text_drawn is True
    assert result.size == (56, 36)
