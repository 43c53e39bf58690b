"""帖子数据缓存。

键为 `post:{post_id}`，值为 PostRecord 的 JSON，写入后固定 TTL 过期。
并发写同一个键时不做协调，后写者覆盖。
"""

from __future__ import annotations

import logging
import math
import threading
import time
from collections.abc import Callable
from typing import Protocol

from pydantic import ValidationError

from .config import DEFAULT_CACHE_TTL
from .scraper.structs import PostRecord

logger = logging.getLogger(__name__)

Clock = Callable[[], float]


class KeyValueStore(Protocol):
    def get(self, key: str) -> str | None: ...

    def put(self, key: str, value: str, ttl_seconds: int) -> None: ...


class MemoryStore:
    """进程内带过期时间的 KV 存储。"""

    def __init__(self, clock: Clock | None = None) -> None:
        self._clock = clock or time.monotonic
        self._lock = threading.Lock()
        self._data: dict[str, tuple[float, str]] = {}
        # 最早的过期时间；到达之前写入无需清理
        self._next_sweep = math.inf

    def get(self, key: str) -> str | None:
        now = self._clock()
        with self._lock:
            entry = self._data.get(key)
            if entry is None:
                return None
            expires_at, value = entry
            if now >= expires_at:
                del self._data[key]
                return None
            return value

    def put(self, key: str, value: str, ttl_seconds: int) -> None:
        """写入键值；顺带清理已过期的条目，避免只写不读的键一直占用内存。"""
        now = self._clock()
        expires_at = now + ttl_seconds
        with self._lock:
            if now >= self._next_sweep:
                self._sweep(now)
            self._data[key] = (expires_at, value)
            self._next_sweep = min(self._next_sweep, expires_at)

    def _sweep(self, now: float) -> None:
        before = len(self._data)
        self._data = {k: entry for k, entry in self._data.items() if entry[0] > now}
        self._next_sweep = min((entry[0] for entry in self._data.values()), default=math.inf)
        logger.debug("清理过期缓存 %d 条，剩余 %d 条", before - len(self._data), len(self._data))

    def expires_at(self, key: str) -> float | None:
        with self._lock:
            entry = self._data.get(key)
            return entry[0] if entry else None

    def __len__(self) -> int:
        with self._lock:
            return len(self._data)


def cache_key(post_id: str) -> str:
    return f"post:{post_id}"


class RecordCache:
    """PostRecord 的读写接口；其他组件不直接操作底层存储。"""

    def __init__(self, store: KeyValueStore | None = None, ttl_seconds: int = DEFAULT_CACHE_TTL) -> None:
        if ttl_seconds <= 0:
            raise ValueError("ttl_seconds 必须 > 0")
        self._store: KeyValueStore = store if store is not None else MemoryStore()
        self.ttl_seconds = ttl_seconds

    @property
    def store(self) -> KeyValueStore:
        return self._store

    def get(self, post_id: str) -> PostRecord | None:
        raw = self._store.get(cache_key(post_id))
        if raw is None:
            return None
        try:
            return PostRecord.from_json(raw)
        except ValidationError as exc:
            logger.warning("缓存数据无法解析，忽略: %s (%s)", post_id, exc)
            return None

    def set(self, record: PostRecord) -> None:
        self._store.put(cache_key(record.post_id), record.to_json(), self.ttl_seconds)
