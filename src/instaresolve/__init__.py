"""instaresolve - 把 Instagram 帖子 id 解析为结构化数据。

推荐用法::

    from instaresolve import AppConfig, PostResolver

    resolver = PostResolver.from_config(AppConfig.from_env())
    record = resolver.resolve("ABC123")
"""

from __future__ import annotations

from .cache import MemoryStore, RecordCache
from .config import AppConfig, ConfigError, load_config
from .resolver import PostResolver, StrategySlot
from .scraper.structs import MediaItem, MediaType, PostRecord

__all__ = [
    "AppConfig",
    "ConfigError",
    "MediaItem",
    "MediaType",
    "MemoryStore",
    "PostRecord",
    "PostResolver",
    "RecordCache",
    "StrategySlot",
    "load_config",
]
