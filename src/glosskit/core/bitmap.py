# どこで: `src/glosskit/core/bitmap.py`。
# 何を: RGBA ビットマップ（numpy 配列）の生成・読み込み・PNG 化・リサンプル・合成を提供する。
# なぜ: ノイズ/ナインスライス/テキスト描画が同じ画素表現を共有できるようにするため。

from __future__ import annotations

import base64
import io
import logging
from pathlib import Path

import numpy as np
from PIL import Image, UnidentifiedImageError

_logger = logging.getLogger(__name__)


def new_bitmap(width: int, height: int) -> np.ndarray:
    """完全透明な RGBA ビットマップ（shape (H, W, 4), uint8）を返す。"""

    w = max(0, int(width))
    h = max(0, int(height))
    return np.zeros((h, w, 4), dtype=np.uint8)


def as_rgba_bitmap(image: Image.Image) -> np.ndarray:
    """PIL 画像を RGBA の uint8 配列へ変換して返す。"""

    rgba = image if image.mode == "RGBA" else image.convert("RGBA")
    return np.array(rgba, dtype=np.uint8)


def load_bitmap(source: str | Path | bytes | None) -> np.ndarray | None:
    """画像ファイル（またはバイト列）を RGBA ビットマップとして読み込む。

    読み込めない場合は警告を出して None を返す（呼び出し側は描画を省略する）。
    """

    if source is None:
        return None
    try:
        if isinstance(source, (bytes, bytearray)):
            with Image.open(io.BytesIO(bytes(source))) as im:
                return as_rgba_bitmap(im)
        with Image.open(Path(source)) as im:
            return as_rgba_bitmap(im)
    except (OSError, UnidentifiedImageError, ValueError) as exc:
        label = "<bytes>" if isinstance(source, (bytes, bytearray)) else str(source)
        _logger.warning("画像を読み込めません: source=%s error=%s", label, exc)
        return None


def encode_png(bitmap: np.ndarray) -> bytes:
    """RGBA ビットマップを PNG バイト列へエンコードして返す。"""

    arr = np.ascontiguousarray(bitmap, dtype=np.uint8)
    if arr.ndim != 3 or arr.shape[2] != 4:
        raise ValueError("bitmap は shape (H, W, 4) の配列である必要がある")
    buf = io.BytesIO()
    Image.fromarray(arr).save(buf, format="PNG")
    return buf.getvalue()


def to_data_url(bitmap: np.ndarray) -> str:
    """RGBA ビットマップを `data:image/png;base64,...` 形式で返す。"""

    payload = base64.b64encode(encode_png(bitmap)).decode("ascii")
    return f"data:image/png;base64,{payload}"


def resize_bitmap(region: np.ndarray, width: int, height: int) -> np.ndarray:
    """領域をバイリニアで (width, height) へ拡縮して返す。同サイズならコピーを返す。"""

    w = int(width)
    h = int(height)
    if region.shape[1] == w and region.shape[0] == h:
        return region.copy()
    im = Image.fromarray(np.ascontiguousarray(region, dtype=np.uint8))
    return np.array(im.resize((w, h), resample=Image.Resampling.BILINEAR), dtype=np.uint8)


def paste(canvas: np.ndarray, region: np.ndarray, x: int, y: int) -> None:
    """canvas の (x, y) へ region を上書きする（はみ出しは切り捨てる）。"""

    ch, cw = canvas.shape[:2]
    rh, rw = region.shape[:2]
    x0 = max(0, int(x))
    y0 = max(0, int(y))
    x1 = min(cw, int(x) + rw)
    y1 = min(ch, int(y) + rh)
    if x1 <= x0 or y1 <= y0:
        return
    canvas[y0:y1, x0:x1] = region[y0 - int(y) : y1 - int(y), x0 - int(x) : x1 - int(x)]


def blend_over(
    canvas: np.ndarray,
    rgb: tuple[int, int, int],
    coverage: np.ndarray,
    x: int,
    y: int,
) -> None:
    """単色 rgb を coverage（0..1, shape (h, w)）で canvas 上へ source-over 合成する。"""

    ch, cw = canvas.shape[:2]
    mh, mw = coverage.shape[:2]
    x0 = max(0, int(x))
    y0 = max(0, int(y))
    x1 = min(cw, int(x) + mw)
    y1 = min(ch, int(y) + mh)
    if x1 <= x0 or y1 <= y0:
        return

    src_a = coverage[y0 - int(y) : y1 - int(y), x0 - int(x) : x1 - int(x)].astype(np.float64)
    src_a = np.clip(src_a, 0.0, 1.0)[..., None]
    dst = canvas[y0:y1, x0:x1].astype(np.float64) / 255.0
    dst_rgb = dst[..., :3]
    dst_a = dst[..., 3:4]
    src_rgb = np.asarray(rgb, dtype=np.float64) / 255.0

    out_a = src_a + dst_a * (1.0 - src_a)
    safe = np.where(out_a > 0.0, out_a, 1.0)
    out_rgb = (src_rgb * src_a + dst_rgb * dst_a * (1.0 - src_a)) / safe

    out = np.concatenate([out_rgb, out_a], axis=2)
    canvas[y0:y1, x0:x1] = np.clip(np.rint(out * 255.0), 0, 255).astype(np.uint8)


__all__ = [
    "as_rgba_bitmap",
    "blend_over",
    "encode_png",
    "load_bitmap",
    "new_bitmap",
    "paste",
    "resize_bitmap",
    "to_data_url",
]
