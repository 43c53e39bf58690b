"""帖子解析编排：缓存 -> embed 页面 -> GraphQL -> 私有 API -> 保留的缩略图兜底。"""

from __future__ import annotations

import logging
import time
from collections.abc import Callable, Sequence
from dataclasses import dataclass

from .cache import MemoryStore, RecordCache
from .config import AppConfig
from .scraper.base import BaseStrategy
from .scraper.embed_page import EmbedPageStrategy
from .scraper.graphql import GraphQLStrategy
from .scraper.papi import PrivateApiStrategy
from .scraper.relay import RoutedFetcher
from .scraper.share import ShareResolver
from .scraper.structs import PostRecord, StrategyResult
from .utils.instagram import extract_post_id, normalize_post_id

logger = logging.getLogger(__name__)

Clock = Callable[[], float]


@dataclass(frozen=True)
class StrategySlot:
    """编排中的一个策略位置。

    distrust_thumbnail 为 True 时，仅含一张无尺寸图片的结果只作为兜底候选保留，
    继续寻找更完整的数据源。
    """

    strategy: BaseStrategy
    distrust_thumbnail: bool = False


def is_usable(result: StrategyResult, distrust_thumbnail: bool) -> bool:
    """结果能否直接采用；否则只作为低可信度的兜底候选。"""
    if result.video_blocked:
        return False
    if not result.record.media:
        return False
    if distrust_thumbnail and result.record.is_thumbnail_only:
        return False
    return True


class PostResolver:
    """按顺序尝试各抓取策略，结果写入缓存。

    各策略依次串行执行，前一个拿到可用数据后不再调用后续策略。
    单个策略的任何异常都只记录日志，视为"该策略无数据"。
    """

    def __init__(
        self,
        slots: Sequence[StrategySlot],
        cache: RecordCache,
        *,
        share_resolver: ShareResolver | None = None,
        max_resolve_seconds: float = 0,
        clock: Clock | None = None,
    ) -> None:
        self._slots = tuple(slots)
        self._cache = cache
        self._share_resolver = share_resolver
        self._max_resolve_seconds = max_resolve_seconds
        self._clock = clock or time.monotonic

    @classmethod
    def from_config(cls, config: AppConfig, cache: RecordCache | None = None) -> PostResolver:
        fetcher = RoutedFetcher.from_config(config)
        cookie = config.instagram.cookie or None
        slots = [
            StrategySlot(EmbedPageStrategy(fetcher, cookie=cookie), distrust_thumbnail=True),
            StrategySlot(GraphQLStrategy(fetcher, doc_id=config.instagram.graphql_doc_id)),
            StrategySlot(PrivateApiStrategy(fetcher, cookie=cookie)),
        ]
        if cache is None:
            cache = RecordCache(MemoryStore(), ttl_seconds=config.cache.ttl_seconds)
        return cls(
            slots,
            cache,
            share_resolver=ShareResolver(fetcher),
            max_resolve_seconds=config.resolver.max_resolve_seconds,
        )

    @property
    def cache(self) -> RecordCache:
        return self._cache

    def resolve(self, post_id: str) -> PostRecord | None:
        """解析帖子；所有来源都失败时返回 None。"""
        logger.info("开始解析 post_id=%s", post_id)

        cached = self._read_cache(post_id)
        if cached is not None:
            logger.info("缓存命中: %s", post_id)
            return cached
        logger.info("缓存未命中: %s", post_id)

        started = self._clock()
        fallback: PostRecord | None = None

        for slot in self._slots:
            name = slot.strategy.name
            if self._budget_exhausted(started):
                logger.warning("解析超出时间预算 (%.1fs)，不再尝试 %s", self._max_resolve_seconds, name)
                break

            try:
                result = slot.strategy.attempt(post_id)
            except Exception as exc:  # noqa: BLE001
                logger.warning("%s 处理失败: %s", name, exc)
                continue

            if result is None:
                logger.info("%s 无数据: %s", name, post_id)
                continue

            record = result.record
            if is_usable(result, slot.distrust_thumbnail):
                logger.info(
                    "%s 成功: %s (username=%s media_count=%d is_video=%s)",
                    name,
                    post_id,
                    record.username,
                    len(record.media),
                    record.is_video,
                )
                self._write_cache(record)
                return record

            if result.video_blocked:
                logger.info("%s 提示视频无法内嵌播放，继续尝试: %s", name, post_id)
            else:
                logger.info("%s 只拿到缩略图或空数据，继续尝试: %s", name, post_id)
            if fallback is None:
                fallback = record

        if fallback is not None:
            logger.info("回退到保留的兜底数据: %s", post_id)
            self._write_cache(fallback)
            return fallback

        logger.info("所有来源均失败: %s", post_id)
        return None

    def resolve_share(self, path: str) -> str | None:
        if self._share_resolver is None:
            return None
        return self._share_resolver.resolve_share(path)

    def resolve_identifier(self, raw: str) -> tuple[str, PostRecord | None]:
        """接受 shortcode、数字 id、帖子 URL/路径或 `share/...` 路径。

        Returns:
            (post_id, record)；分享链接无法解析时 post_id 为原始输入，record 为 None
        """
        value = raw.strip()
        path = value.split("instagram.com", 1)[-1] if "instagram.com" in value else value
        path = path.split("?", 1)[0]

        segments = [s for s in path.split("/") if s]
        if "share" in segments:
            # 兼容 /share/XYZ 与 /p/share/XYZ 两种形式
            share_path = "/".join(segments[segments.index("share") :])
            post_id = self.resolve_share(share_path)
            if post_id is None:
                logger.info("分享链接无法解析: %s", raw)
                return value, None
        else:
            post_id = extract_post_id(path) or path.strip("/")

        if not post_id:
            logger.info("帖子 id 为空，跳过解析: %r", raw)
            return "", None

        post_id = normalize_post_id(post_id)
        return post_id, self.resolve(post_id)

    def _budget_exhausted(self, started: float) -> bool:
        if self._max_resolve_seconds <= 0:
            return False
        return self._clock() - started >= self._max_resolve_seconds

    def _read_cache(self, post_id: str) -> PostRecord | None:
        try:
            return self._cache.get(post_id)
        except Exception as exc:  # noqa: BLE001
            logger.warning("读取缓存失败: %s", exc)
            return None

    def _write_cache(self, record: PostRecord) -> None:
        try:
            self._cache.set(record)
        except Exception as exc:  # noqa: BLE001
            logger.warning("写入缓存失败: %s", exc)
