from __future__ import annotations

import numpy as np
import pytest

from glosskit.core.nine_slice import Rect, SliceInsets, composite, normalize_slices, slice_regions


def _quadrant_source(width: int = 30, height: int = 30, inset: int = 10) -> np.ndarray:
    """角/辺/中央を色で塗り分けたソース画像を返す。"""

    src = np.zeros((height, width, 4), dtype=np.uint8)
    src[..., 3] = 255
    # 中央帯は緑、角は赤、辺は青
    src[:, :, 1] = 255
    for ys in (slice(0, inset), slice(height - inset, height)):
        for xs in (slice(0, inset), slice(width - inset, width)):
            src[ys, xs] = (255, 0, 0, 255)
    src[0:inset, inset : width - inset] = (0, 0, 255, 255)
    src[height - inset : height, inset : width - inset] = (0, 0, 255, 255)
    src[inset : height - inset, 0:inset] = (0, 0, 255, 255)
    src[inset : height - inset, width - inset : width] = (0, 0, 255, 255)
    return src


def test_slice_insets_reject_negative_and_non_numeric() -> None:
    insets = SliceInsets(top=-3, right="7", bottom="x", left=4.9)  # type: ignore[arg-type]
    assert insets == SliceInsets(top=0, right=7, bottom=0, left=4)
    assert insets.horizontal == 11
    assert insets.vertical == 0


def test_normalize_slices_keeps_sums_within_source() -> None:
    normalized = normalize_slices(SliceInsets(top=20, right=20, bottom=20, left=20), 30, 30)
    assert normalized == SliceInsets(top=20, right=10, bottom=10, left=20)
    assert normalized.horizontal <= 30
    assert normalized.vertical <= 30


def test_normalize_slices_clamps_each_value_to_dimension() -> None:
    normalized = normalize_slices(SliceInsets(top=100, right=0, bottom=5, left=100), 40, 20)
    assert normalized == SliceInsets(top=20, right=0, bottom=0, left=40)


def test_slice_regions_layout() -> None:
    regions = slice_regions((30, 30), (100, 60), SliceInsets(10, 10, 10, 10))
    by_name = {r.name: r for r in regions}
    assert len(regions) == 9
    assert [r.name for r in regions] == [
        "top-left",
        "top-center",
        "top-right",
        "middle-left",
        "center",
        "middle-right",
        "bottom-left",
        "bottom-center",
        "bottom-right",
    ]
    # 角は等倍
    assert by_name["top-left"].src == Rect(0, 0, 10, 10)
    assert by_name["top-left"].dst == Rect(0, 0, 10, 10)
    assert by_name["bottom-right"].dst == Rect(90, 50, 10, 10)
    # 辺は 1 軸だけ伸びる
    assert by_name["top-center"].dst == Rect(10, 0, 80, 10)
    assert by_name["middle-left"].dst == Rect(0, 10, 10, 40)
    # 中央は 2 軸に伸びる
    assert by_name["center"].src == Rect(10, 10, 10, 10)
    assert by_name["center"].dst == Rect(10, 10, 80, 40)


def test_slice_regions_shrinking_below_insets_collapses_middle() -> None:
    regions = {r.name: r for r in slice_regions((30, 30), (15, 15), SliceInsets(10, 10, 10, 10))}
    assert regions["center"].dst.empty
    assert regions["top-center"].dst.w == 0


def test_composite_preserves_corners_and_stretches_edges() -> None:
    src = _quadrant_source()
    out = composite(src, 100, 60, SliceInsets(10, 10, 10, 10))

    assert out.shape == (60, 100, 4)
    # 角は等倍コピー
    assert np.array_equal(out[0:10, 0:10], src[0:10, 0:10])
    assert np.array_equal(out[50:60, 90:100], src[20:30, 20:30])
    # 上辺は横方向にだけ伸びる（単色なので値は変わらない）
    assert np.all(out[0:10, 10:90] == np.array([0, 0, 255, 255], dtype=np.uint8))
    # 中央は両方向に伸びる
    assert np.all(out[10:50, 10:90] == np.array([0, 255, 0, 255], dtype=np.uint8))


def test_composite_with_zero_insets_scales_whole_image() -> None:
    src = np.full((4, 4, 4), 200, dtype=np.uint8)
    src[..., 3] = 255
    out = composite(src, 12, 8, SliceInsets())
    assert out.shape == (8, 12, 4)
    assert np.all(out[..., :3] == 200)
    assert np.all(out[..., 3] == 255)


def test_composite_renormalizes_oversized_insets() -> None:
    src = _quadrant_source()
    out = composite(src, 50, 50, SliceInsets(100, 100, 100, 100))
    assert out.shape == (50, 50, 4)
    # left/top 優先で右/下は 0 になり、全体が左上角として等倍コピーされる
    assert np.array_equal(out[0:30, 0:30], src)


@pytest.mark.parametrize("source", [None, np.zeros((4, 4, 3), dtype=np.uint8)])
def test_composite_without_usable_source_is_transparent(source) -> None:
    out = composite(source, 20, 10, SliceInsets(2, 2, 2, 2))
    assert out.shape == (10, 20, 4)
    assert not out.any()


def test_composite_shrinks_center_and_edges_into_smaller_target() -> None:
    src = _quadrant_source(100, 100, 10)
    regions = {r.name: r for r in slice_regions((100, 100), (50, 50), SliceInsets(10, 10, 10, 10))}
    assert regions["center"].src == Rect(10, 10, 80, 80)
    assert regions["center"].dst == Rect(10, 10, 30, 30)

    out = composite(src, 50, 50, SliceInsets(10, 10, 10, 10))

    assert out.shape == (50, 50, 4)
    assert np.array_equal(out[0:10, 0:10], src[0:10, 0:10])
    assert np.array_equal(out[40:50, 40:50], src[90:100, 90:100])
    assert np.all(out[10:40, 10:40] == np.array([0, 255, 0, 255], dtype=np.uint8))
    assert np.all(out[0:10, 10:40] == np.array([0, 0, 255, 255], dtype=np.uint8))
