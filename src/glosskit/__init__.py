# どこで: `src/glosskit/__init__.py`。
# 何を: ルート `glosskit` パッケージを定義する。
# なぜ: import 起点を `glosskit` に統一するため。

from __future__ import annotations

from glosskit.core.controller import AssetController
from glosskit.core.palette import InteractionState

__all__ = ["AssetController", "InteractionState"]
