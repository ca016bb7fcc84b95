"""
どこで: `src/glosskit/core/nine_slice.py`。
何を: ソース画像を 9 領域へ分割し、角は等倍・辺は 1 軸・中央は 2 軸に伸縮して任意サイズへ描画する。
なぜ: パネルやボタンの枠装飾を歪ませずに、テキスト量に応じてサイズだけを変えられるようにするため。
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import NamedTuple

import numpy as np

from glosskit.core.bitmap import new_bitmap, paste, resize_bitmap

_logger = logging.getLogger(__name__)


def _non_negative_int(value: object) -> int:
    try:
        v = int(float(str(value).strip()))
    except (TypeError, ValueError, OverflowError):
        return 0
    return v if v > 0 else 0


@dataclass(frozen=True, slots=True)
class SliceInsets:
    """ナインスライスの境界（各辺からのピクセル距離）。"""

    top: int = 0
    right: int = 0
    bottom: int = 0
    left: int = 0

    def __post_init__(self) -> None:
        for name in ("top", "right", "bottom", "left"):
            object.__setattr__(self, name, _non_negative_int(getattr(self, name)))

    @property
    def horizontal(self) -> int:
        return self.left + self.right

    @property
    def vertical(self) -> int:
        return self.top + self.bottom


def normalize_slices(insets: SliceInsets, source_width: int, source_height: int) -> SliceInsets:
    """ソース画像の実寸に合わせて insets を正規化して返す。

    各値は対応する寸法以下に収め、さらに `left + right <= width`、
    `top + bottom <= height` となるよう right/bottom を削る（left/top を優先）。
    """

    w = max(0, int(source_width))
    h = max(0, int(source_height))
    left = min(insets.left, w)
    top = min(insets.top, h)
    right = min(insets.right, w, w - left)
    bottom = min(insets.bottom, h, h - top)
    return SliceInsets(top=top, right=right, bottom=bottom, left=left)


class Rect(NamedTuple):
    x: int
    y: int
    w: int
    h: int

    @property
    def empty(self) -> bool:
        return self.w <= 0 or self.h <= 0


class SliceRegion(NamedTuple):
    """1 領域分の転送元/転送先矩形。"""

    name: str
    src: Rect
    dst: Rect


_ROW_NAMES = ("top", "middle", "bottom")
_COL_NAMES = ("left", "center", "right")


def slice_regions(
    source_size: tuple[int, int],
    target_size: tuple[int, int],
    insets: SliceInsets,
) -> list[SliceRegion]:
    """9 領域（行優先: 左上 → 右下）の転送元/転送先矩形を返す。

    insets は正規化済みである前提。伸縮後の幅/高さが負になる領域は幅 0 として返す。
    """

    sw, sh = (int(v) for v in source_size)
    tw, th = (int(v) for v in target_size)

    src_cols = ((0, insets.left), (insets.left, sw - insets.right), (sw - insets.right, sw))
    src_rows = ((0, insets.top), (insets.top, sh - insets.bottom), (sh - insets.bottom, sh))
    dst_cols = ((0, insets.left), (insets.left, tw - insets.right), (tw - insets.right, tw))
    dst_rows = ((0, insets.top), (insets.top, th - insets.bottom), (th - insets.bottom, th))

    regions: list[SliceRegion] = []
    for ri, row_name in enumerate(_ROW_NAMES):
        sy0, sy1 = src_rows[ri]
        dy0, dy1 = dst_rows[ri]
        for ci, col_name in enumerate(_COL_NAMES):
            sx0, sx1 = src_cols[ci]
            dx0, dx1 = dst_cols[ci]
            name = "center" if (row_name, col_name) == ("middle", "center") else f"{row_name}-{col_name}"
            regions.append(
                SliceRegion(
                    name=name,
                    src=Rect(sx0, sy0, max(0, sx1 - sx0), max(0, sy1 - sy0)),
                    dst=Rect(dx0, dy0, max(0, dx1 - dx0), max(0, dy1 - dy0)),
                )
            )
    return regions


def composite(
    source: np.ndarray | None,
    target_width: int,
    target_height: int,
    insets: SliceInsets,
) -> np.ndarray:
    """ソース画像をナインスライスで (target_width, target_height) へ描画して返す。

    Parameters
    ----------
    source : np.ndarray or None
        RGBA ソース（shape (H, W, 4)）。None（読み込み失敗）のときは透明キャンバスを返す。
    target_width, target_height : int
        出力サイズ。
    insets : SliceInsets
        境界指定。描画時にソース実寸で再正規化する（設定が古い画像に対するものでもよい）。

    Returns
    -------
    np.ndarray
        shape (target_height, target_width, 4) の RGBA。
    """

    canvas = new_bitmap(target_width, target_height)
    if source is None:
        _logger.warning("ソース画像が無いため nine-slice 描画を省略します")
        return canvas

    src = np.asarray(source, dtype=np.uint8)
    if src.ndim != 3 or src.shape[2] != 4:
        _logger.warning("ソース画像の形状が不正なため nine-slice 描画を省略します: shape=%s", src.shape)
        return canvas

    sh, sw = src.shape[:2]
    normalized = normalize_slices(insets, sw, sh)
    th, tw = canvas.shape[:2]

    for region in slice_regions((sw, sh), (tw, th), normalized):
        if region.src.empty or region.dst.empty:
            continue
        s = region.src
        d = region.dst
        patch = src[s.y : s.y + s.h, s.x : s.x + s.w]
        if (s.w, s.h) != (d.w, d.h):
            patch = resize_bitmap(patch, d.w, d.h)
        paste(canvas, patch, d.x, d.y)
    return canvas


__all__ = [
    "Rect",
    "SliceInsets",
    "SliceRegion",
    "composite",
    "normalize_slices",
    "slice_regions",
]
