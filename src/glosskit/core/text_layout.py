"""
どこで: `src/glosskit/core/text_layout.py`。
何を: テキストの計測、スライス/余白を考慮したキャンバス自動サイズ、アンカー配置、グリフのラスタライズを提供する。
なぜ: ナインパッチ上のラベルがパディングで切れず、指定どおりの位置に描かれることを保証するため。
"""

from __future__ import annotations

import logging
import math
from collections import OrderedDict
from dataclasses import dataclass
from enum import Enum
from pathlib import Path
from typing import Any, Iterable

import numpy as np

from glosskit.core.bitmap import blend_over
from glosskit.core.color import hex_to_rgb
from glosskit.core.nine_slice import SliceInsets

_logger = logging.getLogger(__name__)

# フォントが使えないときの近似値（em 比）。
FALLBACK_ADVANCE_EM = 0.55
FALLBACK_LINE_HEIGHT_EM = 1.25
FALLBACK_ASCENT_RATIO = 0.8

SUPERSAMPLE = 4


class Anchor(str, Enum):
    """水平/垂直アンカー。"""

    START = "start"
    CENTER = "center"
    END = "end"

    @classmethod
    def coerce(cls, value: object, default: "Anchor") -> "Anchor":
        if isinstance(value, cls):
            return value
        text = str(value).strip().lower()
        # UI 側の flex 表記も受け付ける。
        text = {"flex-start": "start", "flex-end": "end", "middle": "center"}.get(text, text)
        try:
            return cls(text)
        except ValueError:
            return default


_TEXT_ALIGN = {Anchor.START: "left", Anchor.CENTER: "center", Anchor.END: "right"}
_BASELINE = {Anchor.START: "top", Anchor.CENTER: "middle", Anchor.END: "bottom"}


def _non_negative_float(value: object) -> float:
    try:
        v = float(str(value).strip())
    except (TypeError, ValueError):
        return 0.0
    if not math.isfinite(v) or v < 0.0:
        return 0.0
    return v


@dataclass(frozen=True, slots=True)
class PaddingInsets:
    """テキスト安全領域の余白（上限なし、負値は 0）。"""

    top: float = 0.0
    right: float = 0.0
    bottom: float = 0.0
    left: float = 0.0

    def __post_init__(self) -> None:
        for name in ("top", "right", "bottom", "left"):
            object.__setattr__(self, name, _non_negative_float(getattr(self, name)))

    @property
    def horizontal(self) -> float:
        return self.left + self.right

    @property
    def vertical(self) -> float:
        return self.top + self.bottom


@dataclass(frozen=True, slots=True)
class TextMetrics:
    """1 行テキストの計測結果（px）。exact=False はフォント無しの近似値。"""

    text: str
    size: float
    width: float
    ascent: float
    descent: float
    exact: bool

    @property
    def height(self) -> float:
        return self.ascent + self.descent


class _LRU:
    """単純な上限付き LRU キャッシュ（キー: str）。"""

    def __init__(self, maxsize: int = 4096) -> None:
        self.maxsize = int(maxsize)
        self._od: "OrderedDict[str, Any]" = OrderedDict()

    def get(self, key: str) -> Any | None:
        value = self._od.get(key)
        if value is not None:
            self._od.move_to_end(key)
        return value

    def set(self, key: str, value: Any) -> None:
        self._od[key] = value
        self._od.move_to_end(key)
        if len(self._od) > self.maxsize:
            self._od.popitem(last=False)


class GlyphCache:
    """TTFont と平坦化済みグリフコマンドのキャッシュ。"""

    def __init__(self) -> None:
        self._fonts: dict[str, Any] = {}
        self._glyphs = _LRU(maxsize=4096)

    def get_font(self, path: Path) -> Any:
        """TTFont を取得する（キャッシュ）。`.ttc` は先頭の subfont を使う。"""
        from fontTools.ttLib import TTFont  # type: ignore[import-untyped]

        resolved = Path(path).resolve()
        key = str(resolved)
        cached = self._fonts.get(key)
        if cached is not None:
            return cached
        if resolved.suffix.lower() == ".ttc":
            font = TTFont(resolved, fontNumber=0)
        else:
            font = TTFont(resolved)
        self._fonts[key] = font
        return font

    def glyph_commands(self, *, char: str, font_path: Path, seg_len_units: float) -> tuple:
        """平坦化済みのグリフコマンド（`RecordingPen.value` 互換タプル）を返す。"""
        from fontPens.flattenPen import FlattenPen  # type: ignore[import-untyped]
        from fontTools.pens.recordingPen import (  # type: ignore[import-untyped]
            DecomposingRecordingPen,
            RecordingPen,
        )

        resolved = Path(font_path).resolve()
        key = f"{resolved}|{char}|{round(float(seg_len_units), 6)}"
        cached = self._glyphs.get(key)
        if cached is not None:
            return cached

        tt_font = self.get_font(resolved)
        cmap = tt_font.getBestCmap() or {}
        glyph_name = cmap.get(ord(char))
        glyph_set = tt_font.getGlyphSet()
        glyph = glyph_set.get(glyph_name) if glyph_name is not None else None
        if glyph is None:
            _logger.warning("Character '%s' (U+%04X) not found in font '%s'", char, ord(char), str(resolved))
            self._glyphs.set(key, tuple())
            return tuple()

        rec = DecomposingRecordingPen(glyph_set)
        try:
            glyph.draw(rec)
        except rec.MissingComponentError:  # type: ignore[attr-defined]
            _logger.warning("Glyph '%s' has missing components in font '%s'", glyph_name, str(resolved))
            self._glyphs.set(key, tuple())
            return tuple()

        flat = RecordingPen()
        rec.replay(FlattenPen(flat, approximateSegmentLength=float(seg_len_units), segmentLines=True))
        result = tuple(flat.value)
        self._glyphs.set(key, result)
        return result


GLYPH_CACHE = GlyphCache()


def _units_per_em(tt_font: Any) -> float:
    return float(tt_font["head"].unitsPerEm)  # type: ignore[index]


def _char_advance_units(char: str, tt_font: Any) -> float:
    cmap = tt_font.getBestCmap()
    if cmap is None:
        return 0.0
    glyph_name = cmap.get(ord(char))
    if glyph_name is None:
        if char == " ":
            return _units_per_em(tt_font) * 0.25
        return 0.0
    try:
        return float(tt_font["hmtx"].metrics[glyph_name][0])  # type: ignore[index]
    except (KeyError, IndexError):
        return 0.0


def _vertical_metrics_units(tt_font: Any) -> tuple[float, float]:
    """(ascent, descent) をフォント単位で返す。descent は正値。"""

    try:
        hhea = tt_font["hhea"]
        ascent = float(hhea.ascent)
        descent = float(-hhea.descent)
    except KeyError:
        ascent = descent = 0.0
    if ascent + descent <= 0.0:
        upem = _units_per_em(tt_font)
        ascent = upem * FALLBACK_LINE_HEIGHT_EM * FALLBACK_ASCENT_RATIO
        descent = upem * FALLBACK_LINE_HEIGHT_EM * (1.0 - FALLBACK_ASCENT_RATIO)
    return ascent, max(0.0, descent)


def _single_line(text: str) -> str:
    return " ".join(str(text).splitlines())


def measure_text(text: str, font_path: Path | None, size: float) -> TextMetrics:
    """`text` を `size` px で計測して返す。

    font_path が None、または読み込めない場合は近似値
    （1 文字 0.55em、行高 `size * 1.25`）を返す。
    """

    line = _single_line(text)
    px = max(0.0, float(size))
    if font_path is not None:
        try:
            tt_font = GLYPH_CACHE.get_font(font_path)
            scale = px / _units_per_em(tt_font)
            width = sum(_char_advance_units(ch, tt_font) for ch in line) * scale
            ascent, descent = _vertical_metrics_units(tt_font)
            return TextMetrics(
                text=line,
                size=px,
                width=width,
                ascent=ascent * scale,
                descent=descent * scale,
                exact=True,
            )
        except Exception as exc:  # フォント破損時は近似値で続行
            _logger.warning("フォントを計測に使えません（近似値で続行）: font=%s error=%s", font_path, exc)

    line_height = px * FALLBACK_LINE_HEIGHT_EM
    return TextMetrics(
        text=line,
        size=px,
        width=len(line) * px * FALLBACK_ADVANCE_EM,
        ascent=line_height * FALLBACK_ASCENT_RATIO,
        descent=line_height * (1.0 - FALLBACK_ASCENT_RATIO),
        exact=False,
    )


def fit_canvas_size(
    metrics: TextMetrics,
    padding: PaddingInsets,
    slices: SliceInsets,
    source_size: tuple[int, int] | None = None,
) -> tuple[int, int]:
    """キャンバスの自動サイズ (width, height) を返す。

    軸ごとに「スライス最小サイズ」「ソース実寸（指定時）」「テキスト + 余白」の最大を取り、
    整数ピクセルへ切り上げる。
    """

    width = max(float(slices.horizontal), metrics.width + padding.horizontal)
    height = max(float(slices.vertical), metrics.height + padding.vertical)
    if source_size is not None:
        width = max(width, float(source_size[0]))
        height = max(height, float(source_size[1]))
    return int(math.ceil(width - 1e-9)), int(math.ceil(height - 1e-9))


@dataclass(frozen=True, slots=True)
class TextPlacement:
    """テキストの配置結果。

    anchor_x/anchor_y は text_align/baseline 規則での基準点、
    origin_x/baseline_y はグリフ列の描画原点（左端/ベースライン）。
    """

    anchor_x: float
    anchor_y: float
    text_align: str
    baseline: str
    origin_x: float
    baseline_y: float


def place_text(
    metrics: TextMetrics,
    canvas_size: tuple[int, int],
    padding: PaddingInsets,
    horizontal: Anchor,
    vertical: Anchor,
) -> TextPlacement:
    """余白を除いた領域内でテキストの配置を決めて返す。"""

    width, height = (float(v) for v in canvas_size)
    content_w = width - padding.horizontal
    content_h = height - padding.vertical

    if horizontal is Anchor.START:
        anchor_x = padding.left
        origin_x = anchor_x
    elif horizontal is Anchor.END:
        anchor_x = width - padding.right
        origin_x = anchor_x - metrics.width
    else:
        anchor_x = padding.left + content_w / 2.0
        origin_x = anchor_x - metrics.width / 2.0

    if vertical is Anchor.START:
        anchor_y = padding.top
        baseline_y = anchor_y + metrics.ascent
    elif vertical is Anchor.END:
        anchor_y = height - padding.bottom
        baseline_y = anchor_y - metrics.descent
    else:
        anchor_y = padding.top + content_h / 2.0
        baseline_y = anchor_y + (metrics.ascent - metrics.descent) / 2.0

    return TextPlacement(
        anchor_x=anchor_x,
        anchor_y=anchor_y,
        text_align=_TEXT_ALIGN[horizontal],
        baseline=_BASELINE[vertical],
        origin_x=origin_x,
        baseline_y=baseline_y,
    )


def _commands_to_polylines(
    commands: Iterable,
    *,
    x: float,
    baseline: float,
    scale: float,
) -> list[np.ndarray]:
    """グリフコマンドをキャンバス座標（Y+下）の閉ポリライン列へ変換して返す。"""

    polylines: list[np.ndarray] = []
    current: list[tuple[float, float]] = []

    def flush() -> None:
        nonlocal current
        if len(current) >= 3:
            arr = np.asarray(current, dtype=np.float64)
            arr[:, 0] = x + arr[:, 0] * scale
            # フォント座標（Y+上）を描画座標（Y+下）へ反転
            arr[:, 1] = baseline - arr[:, 1] * scale
            polylines.append(arr)
        current = []

    for cmd_type, cmd_values in commands:
        if cmd_type == "moveTo":
            flush()
            px, py = cmd_values[0]
            current.append((float(px), float(py)))
        elif cmd_type == "lineTo":
            px, py = cmd_values[0]
            current.append((float(px), float(py)))
        elif cmd_type in ("closePath", "endPath"):
            flush()
    flush()
    return polylines


def rasterize_polygons(polylines: list[np.ndarray], width: int, height: int) -> np.ndarray:
    """閉ポリライン列を偶奇規則で塗り、被覆率（shape (H, W), 0..1）を返す。

    縦横 SUPERSAMPLE 倍のサンプル点で内外判定し、平均を被覆率とする。
    """

    w = max(0, int(width))
    h = max(0, int(height))
    coverage = np.zeros((h, w), dtype=np.float64)
    if w == 0 or h == 0 or not polylines:
        return coverage

    starts = []
    ends = []
    for poly in polylines:
        starts.append(poly)
        ends.append(np.roll(poly, -1, axis=0))
    p0 = np.concatenate(starts, axis=0)
    p1 = np.concatenate(ends, axis=0)
    keep = p0[:, 1] != p1[:, 1]
    x0, y0 = p0[keep, 0], p0[keep, 1]
    x1, y1 = p1[keep, 0], p1[keep, 1]
    if x0.size == 0:
        return coverage

    lo = np.minimum(y0, y1)
    hi = np.maximum(y0, y1)
    slope = (x1 - x0) / (y1 - y0)

    ss = SUPERSAMPLE
    sub_w = w * ss
    row_start = max(0, int(math.floor(float(lo.min()))))
    row_end = min(h, int(math.ceil(float(hi.max()))))
    for row in range(row_start, row_end):
        acc = np.zeros(sub_w, dtype=np.float64)
        for k in range(ss):
            sy = row + (k + 0.5) / ss
            active = (lo <= sy) & (hi > sy)
            if not np.any(active):
                continue
            xs = np.sort(x0[active] + (sy - y0[active]) * slope[active])
            n = xs.size - (xs.size % 2)
            if n == 0:
                continue
            # サブ列中心 (c + 0.5) / ss が [xa, xb) に入る列を塗る。
            ca = np.clip(np.ceil(xs[0:n:2] * ss - 0.5), 0, sub_w).astype(np.int64)
            cb = np.clip(np.ceil(xs[1:n:2] * ss - 0.5), 0, sub_w).astype(np.int64)
            marks = np.zeros(sub_w + 1, dtype=np.int64)
            np.add.at(marks, ca, 1)
            np.add.at(marks, cb, -1)
            acc += np.cumsum(marks[:-1]) > 0
        coverage[row] = acc.reshape(w, ss).sum(axis=1) / float(ss * ss)
    return coverage


def draw_text(
    canvas: np.ndarray,
    metrics: TextMetrics,
    font_path: Path | None,
    placement: TextPlacement,
    color: object,
) -> bool:
    """配置済みテキストを canvas へ描画する。描画したら True を返す。

    フォントが無い/読めない場合は何も描かずに False を返す。
    """

    if font_path is None or not metrics.text:
        return False
    try:
        tt_font = GLYPH_CACHE.get_font(font_path)
        upem = _units_per_em(tt_font)
    except Exception as exc:
        _logger.warning("フォントを描画に使えません（テキスト描画を省略）: font=%s error=%s", font_path, exc)
        return False

    scale = metrics.size / upem
    # 1px の 1/4 程度の精度で曲線を平坦化する。
    seg_len_units = max(1.0, 0.25 / scale) if scale > 0 else upem
    polylines: list[np.ndarray] = []
    pen_x = placement.origin_x
    for ch in metrics.text:
        if not ch.isspace():
            cmds = GLYPH_CACHE.glyph_commands(char=ch, font_path=font_path, seg_len_units=seg_len_units)
            if cmds:
                polylines.extend(
                    _commands_to_polylines(cmds, x=pen_x, baseline=placement.baseline_y, scale=scale)
                )
        pen_x += _char_advance_units(ch, tt_font) * scale

    h, w = canvas.shape[:2]
    coverage = rasterize_polygons(polylines, w, h)
    blend_over(canvas, hex_to_rgb(color), coverage, 0, 0)
    return bool(polylines)


__all__ = [
    "Anchor",
    "GLYPH_CACHE",
    "GlyphCache",
    "PaddingInsets",
    "TextMetrics",
    "TextPlacement",
    "draw_text",
    "fit_canvas_size",
    "measure_text",
    "place_text",
    "rasterize_polygons",
]
