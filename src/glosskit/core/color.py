"""
どこで: `src/glosskit/core/color.py`。
何を: HEX の正規化、RGB/HSL 相互変換、明度調整、rgba() 文字列化を提供する。
なぜ: 状態ごとの色ランプ・ノイズ・テキスト色がすべて同じ色表現を前提にできるようにするため。

ここの関数はすべて総関数で、不正入力は例外ではなく既定値へ落とす。
"""

from __future__ import annotations

import math
import re
from typing import NamedTuple

DEFAULT_COLOR = "#ffffff"

_HEX6_RE = re.compile(r"^#[0-9a-fA-F]{6}$")


class HSL(NamedTuple):
    """HSL 表現。h は度（0..360 未満）、s/l は百分率（0..100）。"""

    h: float
    s: float
    l: float  # noqa: E741


def _round_half_up(value: float) -> int:
    # Python の round() は偶数丸めなので、0.5 は常に切り上げる。
    return int(math.floor(value + 0.5))


def _clamp(value: float, lo: float, hi: float) -> float:
    return lo if value < lo else hi if value > hi else value


def _finite(value: object, default: float = 0.0) -> float:
    """有限の float へ変換する。数値化できない値や NaN/inf は default。"""

    try:
        v = float(value)  # type: ignore[arg-type]
    except (TypeError, ValueError):
        return default
    return v if math.isfinite(v) else default


def normalize_hex(value: object, fallback: str = DEFAULT_COLOR) -> str:
    """入力を `#rrggbb`（小文字）へ正規化して返す。

    Parameters
    ----------
    value : object
        色指定。前後空白・`#` 省略・3 桁短縮形（`abc`）を許容する。
    fallback : str, optional
        正規化できない場合に返す色。これ自体も正規化される。

    Returns
    -------
    str
        常に `#` + 6 桁の小文字 HEX。

    Notes
    -----
    `normalize_hex(normalize_hex(x)) == normalize_hex(x)` が常に成り立つ。
    """

    if fallback != DEFAULT_COLOR:
        fallback = normalize_hex(fallback, DEFAULT_COLOR)

    if value is None:
        return fallback
    text = str(value).strip()
    if not text:
        return fallback
    if not text.startswith("#"):
        text = "#" + text
    if len(text) == 4:
        text = "#" + text[1] * 2 + text[2] * 2 + text[3] * 2
    if _HEX6_RE.match(text) is None:
        return fallback
    return text.lower()


def hex_to_rgb(color: object) -> tuple[int, int, int]:
    """`#rrggbb` を (r, g, b)（各 0..255）へ変換して返す。"""

    value = int(normalize_hex(color)[1:], 16)
    return (value >> 16) & 255, (value >> 8) & 255, value & 255


def rgb_to_hex(r: float, g: float, b: float) -> str:
    """(r, g, b) を `#rrggbb` へ変換して返す。各チャネルは 0..255 へ clamp する。"""

    def _part(component: float) -> str:
        return f"{int(_clamp(int(component), 0, 255)):02x}"

    return "#" + _part(r) + _part(g) + _part(b)


def hex_to_hsl(color: object, *, precise: bool = False) -> HSL:
    """色を HSL へ変換して返す。

    max/min 分解による標準アルゴリズム。max が複数チャネルで一致する場合は
    赤 → 緑 → 青 の順で優先する。無彩色（max == min）は h=0, s=0。

    Parameters
    ----------
    color : object
        色指定（`normalize_hex` で正規化される）。
    precise : bool, optional
        False（既定）なら各成分を整数へ丸める。True なら丸めない。
    """

    r, g, b = hex_to_rgb(color)
    rn = r / 255.0
    gn = g / 255.0
    bn = b / 255.0
    mx = max(rn, gn, bn)
    mn = min(rn, gn, bn)
    h = 0.0
    s = 0.0
    lum = (mx + mn) / 2.0

    if mx != mn:
        d = mx - mn
        s = d / (2.0 - mx - mn) if lum > 0.5 else d / (mx + mn)
        if mx == rn:
            h = (gn - bn) / d + (6.0 if gn < bn else 0.0)
        elif mx == gn:
            h = (bn - rn) / d + 2.0
        else:
            h = (rn - gn) / d + 4.0
        h /= 6.0

    if precise:
        return HSL(h * 360.0 % 360.0, s * 100.0, lum * 100.0)
    return HSL(_round_half_up(h * 360.0) % 360, _round_half_up(s * 100.0), _round_half_up(lum * 100.0))


def _hue_to_rgb(p: float, q: float, t: float) -> float:
    if t < 0.0:
        t += 1.0
    if t > 1.0:
        t -= 1.0
    if t < 1.0 / 6.0:
        return p + (q - p) * 6.0 * t
    if t < 1.0 / 2.0:
        return q
    if t < 2.0 / 3.0:
        return p + (q - p) * (2.0 / 3.0 - t) * 6.0
    return p


def hsl_to_hex(h: float, s: float, l: float) -> str:  # noqa: E741
    """HSL を `#rrggbb` へ変換して返す。

    h は 360 の剰余へ折り返し（負値も可）、s/l は 0..100 へ clamp する。
    数値化できない成分（NaN を含む）は 0 とみなす。
    """

    hn = (_finite(h) % 360.0) / 360.0
    sn = _clamp(_finite(s), 0.0, 100.0) / 100.0
    ln = _clamp(_finite(l), 0.0, 100.0) / 100.0

    if sn == 0.0:
        gray = _round_half_up(ln * 255.0)
        return rgb_to_hex(gray, gray, gray)

    q = ln * (1.0 + sn) if ln < 0.5 else ln + sn - ln * sn
    p = 2.0 * ln - q

    r = _hue_to_rgb(p, q, hn + 1.0 / 3.0)
    g = _hue_to_rgb(p, q, hn)
    b = _hue_to_rgb(p, q, hn - 1.0 / 3.0)
    return rgb_to_hex(_round_half_up(r * 255.0), _round_half_up(g * 255.0), _round_half_up(b * 255.0))


def adjust_lightness(color: object, delta: float) -> str:
    """明度を `delta` ポイント増減した色を返す（結果の明度は 0..100 に収まる）。

    数値化できない delta は 0 とみなす。
    """

    h, s, lum = hex_to_hsl(color)
    return hsl_to_hex(h, s, lum + _finite(delta))


def to_rgba(color: object, alpha: object) -> str:
    """`rgba(r, g, b, a)` 形式の文字列を返す。

    alpha は 0..1 へ clamp し小数 2 桁へ丸める。数値化できない値は 0 とみなす。
    """

    try:
        a = float(alpha)  # type: ignore[arg-type]
    except (TypeError, ValueError):
        a = 0.0
    if not math.isfinite(a):
        a = 0.0
    a = round(_clamp(a, 0.0, 1.0), 2)
    r, g, b = hex_to_rgb(color)
    return f"rgba({r}, {g}, {b}, {a:g})"


__all__ = [
    "DEFAULT_COLOR",
    "HSL",
    "adjust_lightness",
    "hex_to_hsl",
    "hex_to_rgb",
    "hsl_to_hex",
    "normalize_hex",
    "rgb_to_hex",
    "to_rgba",
]
