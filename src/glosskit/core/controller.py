# どこで: `src/glosskit/core/controller.py`。
# 何を: 現在の AssetConfig を唯一所有し、入力差分の適用・トークン再計算・ナインパッチ再描画・保存/書き出しを仲介する。
# なぜ: 複数ハンドラが共有の可変状態を読み書きする構造をやめ、変更経路を 1 箇所に集めるため。

from __future__ import annotations

import asyncio
import logging
from collections.abc import Mapping
from dataclasses import fields, replace
from pathlib import Path
from typing import Any

import numpy as np

from glosskit.core.bitmap import load_bitmap
from glosskit.core.font_resolver import FontSource
from glosskit.core.nine_patch import NinePatchRender, NinePatchRenderer
from glosskit.core.noise import NoiseLayer, NoiseTokens
from glosskit.core.palette import STATES, InteractionState
from glosskit.core.parameters.codec import (
    BUTTON_FIELD_COERCERS,
    NINE_PATCH_FIELD_COERCERS,
    STATE_PATCH_FIELD_COERCERS,
)
from glosskit.core.parameters.config import AssetConfig, ButtonConfig
from glosskit.core.parameters.persistence import load_asset_config, save_asset_config
from glosskit.core.tokens import StyleTokens, build_button_tokens
from glosskit.export.image import ExportResult, default_export_dir, export_png, sanitize_file_name

_logger = logging.getLogger(__name__)

# 値が変わったらノイズを再生成するフィールド（ブレンドモードだけの変更では再生成しない）。
NOISE_REGENERATING_FIELDS = frozenset({"noise_color", "noise_amount", "color_normal"})
_NOISE_FIELDS = NOISE_REGENERATING_FIELDS | {"noise_blend"}


class AssetController:
    """設定の適用と再描画をまとめるコントローラ。

    Parameters
    ----------
    config : AssetConfig or None, optional
        初期設定。None なら既定値。
    font_source : FontSource or None, optional
        フォント解決の協調相手。None なら `font_dirs` 探索。
    rng : numpy.random.Generator or None, optional
        ノイズ生成の乱数源（テスト用）。
    """

    def __init__(
        self,
        config: AssetConfig | None = None,
        *,
        font_source: FontSource | None = None,
        font_timeout: float | None = None,
        rng: np.random.Generator | None = None,
        store_path: Path | None = None,
    ) -> None:
        self._config = config if config is not None else AssetConfig()
        self._store_path = store_path
        self.noise = NoiseLayer(rng=rng)
        self._renderers = {
            s: NinePatchRenderer(s, font_source=font_source, font_timeout=font_timeout) for s in STATES
        }
        self._sources: dict[InteractionState, np.ndarray | None] = {}
        self._noise_tokens = self._update_noise(force=True)
        self._tokens = build_button_tokens(self._config.button, self._noise_tokens)

    @property
    def config(self) -> AssetConfig:
        return self._config

    @property
    def tokens(self) -> StyleTokens:
        return self._tokens

    def _update_noise(self, *, force: bool) -> NoiseTokens:
        b = self._config.button
        return self.noise.update(b.noise_color, b.noise_amount, b.noise_blend, force=force)

    # --- button ---------------------------------------------------------------

    def apply_button(self, **changes: Any) -> StyleTokens:
        """ButtonConfig のフィールドを差し替え、トークンを再計算して返す。

        値はフィールドごとの coerce を通し、不正値は直前の値を保つ。
        """

        current = self._config.button
        known = {f.name for f in fields(ButtonConfig)}
        coerced: dict[str, Any] = {}
        for name, raw in changes.items():
            if name not in known:
                raise KeyError(f"未知の button フィールドです: {name!r}")
            coerced[name] = BUTTON_FIELD_COERCERS[name](raw, getattr(current, name))

        updated = replace(current, **coerced)
        changed = {name for name in coerced if getattr(current, name) != getattr(updated, name)}
        self._config = replace(self._config, button=updated)

        if changed & _NOISE_FIELDS:
            force = bool(changed & NOISE_REGENERATING_FIELDS)
            self._noise_tokens = self._update_noise(force=force)
        self._tokens = build_button_tokens(updated, self._noise_tokens)
        return self._tokens

    def apply_input(self, field_name: str, raw: object) -> StyleTokens:
        """UI 入力 1 件（任意の文字列）を適用する。"""

        return self.apply_button(**{field_name: raw})

    def refresh_noise(self) -> StyleTokens:
        """ノイズを強制的に作り直す。"""

        self._noise_tokens = self._update_noise(force=True)
        self._tokens = build_button_tokens(self._config.button, self._noise_tokens)
        return self._tokens

    # --- nine patch -----------------------------------------------------------

    def apply_nine_patch(self, state: InteractionState | None = None, **changes: Any) -> AssetConfig:
        """ナインパッチ設定を差し替える。

        state を指定すると、その状態の StatePatch（source / slices / padding）だけを変える。
        state が None のときは共有フィールド（text / font_family / ...）を変える。
        """

        np_cfg = self._config.nine_patch
        if state is not None:
            current = np_cfg.patch(state)
            patch_changes: dict[str, Any] = {}
            for name, raw in changes.items():
                coerce = STATE_PATCH_FIELD_COERCERS.get(name)
                if coerce is None:
                    raise KeyError(f"未知の nine_patch 状態フィールドです: {name!r}")
                patch_changes[name] = coerce(raw, getattr(current, name))
            if "source" in patch_changes:
                self._sources.pop(state, None)
            np_cfg = np_cfg.with_patch(state, **patch_changes)
        else:
            coerced: dict[str, Any] = {}
            for name, raw in changes.items():
                coerce = NINE_PATCH_FIELD_COERCERS.get(name)
                if coerce is None:
                    raise KeyError(f"未知の nine_patch フィールドです: {name!r}")
                coerced[name] = coerce(raw, getattr(np_cfg, name))
            np_cfg = replace(np_cfg, **coerced)
        self._config = replace(self._config, nine_patch=np_cfg)
        return self._config

    def set_source_bitmap(self, state: InteractionState, bitmap: np.ndarray | None) -> None:
        """読み込み済みのソース画像を直接与える（None は読み込み失敗扱い）。"""

        self._sources[state] = bitmap

    def _source_for(self, state: InteractionState) -> np.ndarray | None:
        if state in self._sources:
            return self._sources[state]
        bitmap = load_bitmap(self._config.nine_patch.patch(state).source)
        self._sources[state] = bitmap
        return bitmap

    def renderer(self, state: InteractionState) -> NinePatchRenderer:
        return self._renderers[state]

    async def render_nine_patch(self, state: InteractionState) -> NinePatchRender:
        """現在の設定で state のナインパッチを描画して返す。"""

        return await self._renderers[state].render(self._config.nine_patch, self._source_for(state))

    async def render_all(self) -> Mapping[InteractionState, NinePatchRender]:
        """全状態を描画して返す。"""

        results = await asyncio.gather(*(self.render_nine_patch(s) for s in STATES))
        return dict(zip(STATES, results))

    # --- persistence / export -------------------------------------------------

    def save(self) -> Path:
        return save_asset_config(self._config, self._store_path)

    def load(self) -> AssetConfig:
        """保存済み設定を読み込み、トークンとノイズを作り直す。"""

        self._config = load_asset_config(self._store_path)
        self._sources.clear()
        self.noise.clear()
        self._noise_tokens = self._update_noise(force=True)
        self._tokens = build_button_tokens(self._config.button, self._noise_tokens)
        return self._config

    def export_png(self, state: InteractionState, directory: Path | None = None) -> ExportResult:
        """state の最後の描画結果を PNG として書き出す。失敗時は通知付きの結果を返す。"""

        last = self._renderers[state].last
        out_dir = Path(directory) if directory is not None else default_export_dir()
        path = out_dir / sanitize_file_name(self._config.nine_patch.text, state)
        if last is None:
            _logger.warning("未描画の状態は書き出せません: state=%s", state.value)
            return export_png(None, path)
        return export_png(last.bitmap, path)


__all__ = ["AssetController", "NOISE_REGENERATING_FIELDS"]
