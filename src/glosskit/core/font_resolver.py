# どこで: `src/glosskit/core/font_resolver.py`。
# 何を: フォントファミリ名の実体ファイル解決、GUI 用候補列挙、読み込み待ち（タイムアウト付き）を提供する。
# なぜ: エンジン側は「準備完了か」と「ファミリ名」だけに依存し、取得経路の詳細から切り離すため。

from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Protocol

from glosskit.core.runtime_config import runtime_config

_logger = logging.getLogger(__name__)

_FONT_EXTENSIONS = (".ttf", ".otf", ".ttc")


@dataclass(frozen=True, slots=True)
class FontChoice:
    """フォント候補（GUI 表示用）。"""

    stem: str
    value: str
    is_ttc: bool
    search_key: str


_FONT_FILES_CACHE: dict[tuple[str, ...], tuple[Path, ...]] = {}


def _search_dirs() -> tuple[Path, ...]:
    cfg = runtime_config()
    dirs: list[Path] = []
    for d in cfg.font_dirs:
        try:
            dirs.append(Path(d).expanduser())
        except (TypeError, ValueError):
            continue
    return tuple(dirs)


def _list_font_files(*, dirs: tuple[Path, ...]) -> tuple[Path, ...]:
    key = tuple(str(d) for d in dirs)
    cached = _FONT_FILES_CACHE.get(key)
    if cached is not None:
        return cached

    seen: list[Path] = []
    for root in dirs:
        if not root.is_dir():
            continue
        for ext in _FONT_EXTENSIONS:
            for fp in root.glob(f"**/*{ext}"):
                try:
                    resolved = fp.resolve()
                except OSError:
                    continue
                if resolved.is_file():
                    seen.append(resolved)

    out = tuple(sorted(set(seen)))
    _FONT_FILES_CACHE[key] = out
    return out


def clear_font_cache() -> None:
    """フォントファイル列挙のキャッシュを破棄する（font_dirs を変えた後に呼ぶ）。"""

    _FONT_FILES_CACHE.clear()


def resolve_font_path(font: str) -> Path:
    """`font` 指定（パス / ファイル名 / ファミリ名の部分一致）を実体ファイルへ解決して返す。"""

    raw = str(font).strip()
    if not raw:
        raw = runtime_config().default_font_family

    # 0) 直接パス（絶対/相対）を許容
    direct_path = Path(raw).expanduser()
    if direct_path.is_file():
        return direct_path.resolve()

    # 1) 探索ディレクトリ直下のファイル名一致
    dirs = _search_dirs()
    for d in dirs:
        fp = d / raw
        if fp.is_file():
            return fp.resolve()

    # 2) 部分一致（安定順: dirs の順 → ファイル名の安定ソート）
    files = _list_font_files(dirs=dirs)
    key = raw.lower().replace(" ", "")
    for fp in files:
        name = fp.name.lower().replace(" ", "")
        stem = fp.stem.lower().replace(" ", "")
        if key in name or key in stem:
            return fp

    searched = ", ".join(str(d) for d in dirs) if dirs else "(none)"
    cfg = runtime_config()
    example_yaml = "paths:\n  font_dirs:\n    - \"~/Fonts\"\n"
    hint = (
        f"フォントが見つかりません: font={raw!r}。"
        " 実在パスを渡すか、config.yaml の `paths.font_dirs` を設定してください"
        "（例: ./.glosskit/config.yaml または ~/.config/glosskit/config.yaml）。"
        f"\n\n{example_yaml}\nsearched_dirs={searched}, config_path={cfg.config_path}"
    )
    raise FileNotFoundError(hint)


def find_font_path(font: str) -> Path | None:
    """`resolve_font_path` の非送出版。見つからなければ None を返す。"""

    try:
        return resolve_font_path(font)
    except FileNotFoundError:
        return None


def list_font_choices() -> tuple[FontChoice, ...]:
    """GUI 用のフォント候補列を返す。"""

    files = _list_font_files(dirs=_search_dirs())
    by_value: dict[str, FontChoice] = {}
    for fp in files:
        value = fp.name
        if value in by_value:
            continue
        by_value[value] = FontChoice(
            stem=fp.stem,
            value=value,
            is_ttc=fp.suffix.lower() == ".ttc",
            search_key=f"{value} {fp.stem}".lower(),
        )
    return tuple(by_value[v] for v in sorted(by_value.keys(), key=str))


class FontSource(Protocol):
    """フォント解決の協調相手。エンジンは ready 信号とファミリ名にだけ依存する。"""

    async def load(self, family: str, size: float) -> bool: ...

    def resolve(self, family: str) -> Path | None: ...


class LocalFontSource:
    """`font_dirs` 探索でフォントを解決する FontSource。"""

    async def load(self, family: str, size: float) -> bool:
        path = await asyncio.to_thread(find_font_path, family)
        return path is not None

    def resolve(self, family: str) -> Path | None:
        return find_font_path(family)


@dataclass(frozen=True, slots=True)
class FontStatus:
    """フォント待ちの結果。degraded=True なら現在解決できるフォントで続行する。"""

    family: str
    path: Path | None
    ready: bool
    degraded: bool
    reason: str = ""


async def await_font_ready(
    source: FontSource,
    family: str,
    size: float,
    *,
    timeout: float | None = None,
) -> FontStatus:
    """フォントの準備完了を最大 timeout 秒だけ待ち、FontStatus を返す。

    タイムアウト・読み込みエラーは例外にせず degraded として返す。
    family を解決できない場合、path は既定ファミリ（`fonts.default_family`）のフォントになる。
    """

    limit = float(timeout) if timeout is not None else runtime_config().font_ready_timeout_s
    name = str(family).strip()
    reason = ""
    try:
        ready = bool(await asyncio.wait_for(source.load(name, float(size)), timeout=limit))
        if not ready:
            reason = "not-found"
    except asyncio.TimeoutError:
        ready = False
        reason = "timeout"
    except Exception as exc:  # 協調相手の失敗は描画を止めない
        ready = False
        reason = f"error: {exc}"

    try:
        path = source.resolve(name)
    except Exception as exc:
        _logger.warning("フォント解決に失敗しました: family=%r error=%s", name, exc)
        path = None
    if path is None:
        # 要求ファミリが無くても既定ファミリで文字は描く
        path = find_font_path(runtime_config().default_font_family)

    if not ready:
        _logger.warning(
            "フォントの準備を待てませんでした（現在のフォントで続行）: family=%r reason=%s",
            name,
            reason,
        )
    return FontStatus(family=name, path=path, ready=ready, degraded=not ready, reason=reason)


__all__ = [
    "FontChoice",
    "FontSource",
    "FontStatus",
    "LocalFontSource",
    "await_font_ready",
    "clear_font_cache",
    "find_font_path",
    "list_font_choices",
    "resolve_font_path",
]
