from __future__ import annotations

from pathlib import Path

import pytest
from fontTools.fontBuilder import FontBuilder
from fontTools.pens.ttGlyphPen import TTGlyphPen

from glosskit.core.font_resolver import clear_font_cache
from glosskit.core.runtime_config import set_config_path

# テスト用フォント: 全グリフが「穴あきの箱」、advance=600 / upem=1000 / ascent=800 / descent=200。
TEST_FONT_FAMILY = "Glosstest"
TEST_FONT_UPEM = 1000
TEST_FONT_ADVANCE = 600
TEST_FONT_SPACE_ADVANCE = 250
TEST_FONT_ASCENT = 800
TEST_FONT_DESCENT = 200
TEST_FONT_CHARS = "ABXПараметрКнопка"


def _box(pen: TTGlyphPen, x0: int, y0: int, x1: int, y1: int, *, reverse: bool = False) -> None:
    points = [(x0, y0), (x0, y1), (x1, y1), (x1, y0)]
    if reverse:
        points.reverse()
    pen.moveTo(points[0])
    for p in points[1:]:
        pen.lineTo(p)
    pen.closePath()


def build_test_font(path: Path) -> Path:
    chars = sorted(set(TEST_FONT_CHARS))
    names = {c: f"uni{ord(c):04X}" for c in chars}

    glyphs = {".notdef": TTGlyphPen(None).glyph(), "space": TTGlyphPen(None).glyph()}
    for name in names.values():
        pen = TTGlyphPen(None)
        _box(pen, 50, 0, 550, 700)
        _box(pen, 200, 200, 400, 500, reverse=True)
        glyphs[name] = pen.glyph()

    fb = FontBuilder(TEST_FONT_UPEM, isTTF=True)
    fb.setupGlyphOrder([".notdef", "space", *names.values()])
    fb.setupCharacterMap({0x20: "space", **{ord(c): n for c, n in names.items()}})
    fb.setupGlyf(glyphs)
    metrics = {".notdef": (TEST_FONT_ADVANCE, 0), "space": (TEST_FONT_SPACE_ADVANCE, 0)}
    metrics.update({n: (TEST_FONT_ADVANCE, 50) for n in names.values()})
    fb.setupHorizontalMetrics(metrics)
    fb.setupHorizontalHeader(ascent=TEST_FONT_ASCENT, descent=-TEST_FONT_DESCENT)
    fb.setupNameTable({"familyName": TEST_FONT_FAMILY, "styleName": "Regular"})
    fb.setupOS2(
        sTypoAscender=TEST_FONT_ASCENT,
        sTypoDescender=-TEST_FONT_DESCENT,
        usWinAscent=TEST_FONT_ASCENT,
        usWinDescent=TEST_FONT_DESCENT,
    )
    fb.setupPost()
    path.parent.mkdir(parents=True, exist_ok=True)
    fb.save(str(path))
    return path


@pytest.fixture(scope="session")
def test_font_path(tmp_path_factory: pytest.TempPathFactory) -> Path:
    return build_test_font(tmp_path_factory.mktemp("fonts") / f"{TEST_FONT_FAMILY}-Regular.ttf")


@pytest.fixture(autouse=True)
def _isolate_runtime_config(tmp_path: Path, monkeypatch: pytest.MonkeyPatch):
    # config の探索先（cwd / HOME）を tmp_path へ閉じ込める。
    monkeypatch.chdir(tmp_path)
    monkeypatch.setenv("HOME", str(tmp_path))
    set_config_path(None)
    clear_font_cache()
    yield
    set_config_path(None)
    clear_font_cache()


@pytest.fixture
def font_config(tmp_path: Path, test_font_path: Path) -> Path:
    """テスト用フォントのディレクトリを font_dirs に持つ config.yaml を有効にする。"""

    cfg_path = tmp_path / "config.yaml"
    cfg_path.write_text(
        "\n".join(
            [
                "version: 1",
                "paths:",
                '  output_dir: "out"',
                "  font_dirs:",
                f'    - "{test_font_path.parent.as_posix()}"',
                "fonts:",
                f'  default_family: "{TEST_FONT_FAMILY}"',
                "",
            ]
        ),
        encoding="utf-8",
    )
    set_config_path(cfg_path)
    return cfg_path
