"""Scraper 包 - 多来源抓取 Instagram 帖子数据。

包含三个抓取策略（embed 页面、GraphQL 查询接口、私有 API）、
文本解析器、分享链接解析器，以及可经中继转发的统一请求入口。
编排逻辑见 `instaresolve.resolver`。
"""

from __future__ import annotations

from .base import BaseStrategy
from .embed_page import EmbedPageStrategy
from .graphql import GraphQLStrategy
from .papi import PrivateApiStrategy
from .relay import RoutedFetcher
from .share import ShareResolver
from .structs import BlockedError, FetchError, FetchResponse, MediaItem, MediaType, PostRecord, StrategyResult

__all__ = [
    "BaseStrategy",
    "BlockedError",
    "EmbedPageStrategy",
    "FetchError",
    "FetchResponse",
    "GraphQLStrategy",
    "MediaItem",
    "MediaType",
    "PostRecord",
    "PrivateApiStrategy",
    "RoutedFetcher",
    "ShareResolver",
    "StrategyResult",
]
