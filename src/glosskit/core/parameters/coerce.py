# どこで: `src/glosskit/core/parameters/coerce.py`。
# 何を: UI 入力（任意の文字列）を設定値へ変換・clamp するユーティリティを提供する。
# なぜ: 不正入力を例外にせず「直前の有効値 or 既定値」へ落とす規則を 1 箇所に閉じるため。

from __future__ import annotations

import math
import re
from collections.abc import Sequence

_LEADING_INT_RE = re.compile(r"^[+-]?\d+")


def parse_int_prefix(value: object) -> int | None:
    """先頭の整数部分を読んで返す（`"12px"` → 12）。読めなければ None。"""

    if isinstance(value, bool):
        return None
    if isinstance(value, int):
        return value
    if isinstance(value, float):
        return int(value) if math.isfinite(value) else None
    m = _LEADING_INT_RE.match(str(value if value is not None else "").strip())
    if m is None:
        return None
    return int(m.group(0))


def clamp_int(value: object, lo: int, hi: int, fallback: int) -> int:
    """整数として読めれば [lo, hi] へ clamp、読めなければ fallback を返す。"""

    parsed = parse_int_prefix(value)
    if parsed is None:
        return int(fallback)
    return lo if parsed < lo else hi if parsed > hi else parsed


def coerce_float(
    value: object,
    fallback: float,
    *,
    lo: float | None = None,
    hi: float | None = None,
) -> float:
    """数値として読めれば（必要なら clamp して）返す。読めなければ fallback。"""

    if isinstance(value, bool):
        return float(fallback)
    try:
        parsed = float(str(value).strip()) if isinstance(value, str) else float(value)  # type: ignore[arg-type]
    except (TypeError, ValueError):
        return float(fallback)
    if not math.isfinite(parsed):
        return float(fallback)
    if lo is not None and parsed < lo:
        parsed = lo
    if hi is not None and parsed > hi:
        parsed = hi
    return parsed


def normalize_dimension(value: object, fallback: float) -> float:
    """幅/高さ入力を正の数値へ変換する。空・非数・0 以下なら fallback を返す。"""

    text = str(value if value is not None else "").strip()
    if not text or isinstance(value, bool):
        return float(fallback)
    try:
        parsed = float(text)
    except ValueError:
        return float(fallback)
    if not math.isfinite(parsed) or parsed <= 0.0:
        return float(fallback)
    return parsed


def coerce_non_negative_int(value: object, fallback: int) -> int:
    """0 以上の整数へ変換する。負値/非数は fallback を返す。"""

    if isinstance(value, bool):
        return int(fallback)
    if isinstance(value, float) and not math.isfinite(value):
        return int(fallback)
    parsed = value if isinstance(value, int) else parse_int_prefix(value)
    if parsed is None or parsed < 0:
        return int(fallback)
    return int(parsed)


def coerce_non_negative_float(value: object, fallback: float) -> float:
    """0 以上の数値へ変換する。負値/非数は fallback を返す。"""

    parsed = coerce_float(value, float("nan"))
    if math.isnan(parsed) or parsed < 0.0:
        return float(fallback)
    return parsed


def coerce_choice(value: object, choices: Sequence[str], fallback: str) -> str:
    """choices に含まれる文字列ならそれを、そうでなければ fallback を返す。"""

    if isinstance(value, str):
        text = value.strip()
        if text in choices:
            return text
    return fallback


def coerce_text(value: object, fallback: str) -> str:
    """文字列ならそのまま、それ以外は fallback を返す。"""

    return value if isinstance(value, str) else fallback


def coerce_name(value: object, fallback: str) -> str:
    """前後空白を除いた非空文字列を返す。空や非文字列は fallback。"""

    if isinstance(value, str) and value.strip():
        return value.strip()
    return fallback


__all__ = [
    "clamp_int",
    "coerce_choice",
    "coerce_float",
    "coerce_name",
    "coerce_non_negative_float",
    "coerce_non_negative_int",
    "coerce_text",
    "normalize_dimension",
    "parse_int_prefix",
]
