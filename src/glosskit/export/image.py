"""
どこで: `src/glosskit/export/image.py`。
何を: 描画済みビットマップを PNG ファイルとして書き出し、ファイル名の正規化を提供する。
なぜ: 書き出し失敗をユーザー向けの 1 件の通知へまとめ、メモリ上の状態を壊さずに再試行できるようにするため。
"""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass
from pathlib import Path

import numpy as np

from glosskit.core.bitmap import encode_png
from glosskit.core.runtime_config import output_root_dir

_logger = logging.getLogger(__name__)

EXPORT_FAILED_NOTICE = "画像を保存できませんでした。もう一度お試しください。"
DEFAULT_FILE_BASE = "button"


@dataclass(frozen=True, slots=True)
class ExportResult:
    """書き出し結果。ok=False のとき notice をユーザーへ表示する。"""

    ok: bool
    path: Path | None
    notice: str = ""


def sanitize_file_name(base: object, state: object) -> str:
    """ラベル文字列と状態名から `{base}-{state}.png` 形式のファイル名を返す。

    小文字化し、空白を `-` に置換、`[a-z0-9-_.]` 以外を捨てる。空になったら `button`。
    """

    trimmed = str(base if base is not None else "").strip().lower()
    latinised = re.sub(r"[^a-z0-9\-_.]", "", re.sub(r"\s+", "-", trimmed))
    safe_base = latinised or DEFAULT_FILE_BASE
    state_name = str(getattr(state, "value", state))
    return f"{safe_base}-{state_name}.png"


def default_export_dir() -> Path:
    """PNG の既定書き出し先 `{output_root}/png` を返す。"""

    return output_root_dir() / "png"


def export_png(bitmap: np.ndarray | None, path: str | Path) -> ExportResult:
    """ビットマップを PNG として保存する（親ディレクトリは作成する）。

    失敗は例外にせず ExportResult(ok=False) とユーザー向け通知で返す。
    """

    _path = Path(path)
    if bitmap is None:
        _logger.error("書き出すビットマップがありません: path=%s", _path)
        return ExportResult(ok=False, path=None, notice=EXPORT_FAILED_NOTICE)
    try:
        data = encode_png(bitmap)
        _path.parent.mkdir(parents=True, exist_ok=True)
        _path.write_bytes(data)
    except (OSError, ValueError):
        _logger.exception("画像の書き出しに失敗しました: path=%s", _path)
        return ExportResult(ok=False, path=None, notice=EXPORT_FAILED_NOTICE)
    _logger.info("画像を書き出しました: path=%s bytes=%d", _path, len(data))
    return ExportResult(ok=True, path=_path)


__all__ = [
    "EXPORT_FAILED_NOTICE",
    "ExportResult",
    "default_export_dir",
    "export_png",
    "sanitize_file_name",
]
