"""抓取策略基类。"""

from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from collections.abc import Callable

from .relay import RoutedFetcher
from .structs import FetchError, FetchResponse, StrategyResult

logger = logging.getLogger(__name__)

# 判断直连响应是否可用；返回 False 时改走中继
AcceptFn = Callable[[FetchResponse], bool]


class BaseStrategy(ABC):
    """抓取策略抽象基类。

    所有策略共享同一个 RoutedFetcher，对外只暴露 attempt。
    attempt 返回 None 表示"本策略没有拿到数据"，不会抛出异常。
    """

    name: str = "base"

    def __init__(self, fetcher: RoutedFetcher) -> None:
        self.fetcher = fetcher

    @abstractmethod
    def attempt(self, post_id: str) -> StrategyResult | None:
        """尝试抓取并解析帖子数据。"""
        ...

    def _fetch_with_relay_fallback(
        self,
        url: str,
        method: str,
        headers: dict[str, str],
        body: str | None = None,
        *,
        accept: AcceptFn,
    ) -> FetchResponse | None:
        """先直连；失败、非 200 或被 accept 拒绝时，原样经 RoutedFetcher 重发。

        Returns:
            可用的响应；两次都失败时返回 None
        """
        try:
            resp = self.fetcher.fetch_direct(url, method, headers, body)
            logger.info("[%s] 直连 status=%d len=%d", self.name, resp.status_code, len(resp.text))
            logger.debug("[%s] 直连响应: %s", self.name, resp.preview())
            if resp.ok and accept(resp):
                return resp
            logger.info("[%s] 直连结果不可用，改走中继", self.name)
        except FetchError as exc:
            logger.warning("[%s] 直连失败: %s，改走中继", self.name, exc)

        try:
            resp = self.fetcher.fetch(url, method, headers, body)
        except FetchError as exc:
            logger.warning("[%s] 中继请求失败: %s", self.name, exc)
            return None

        logger.info("[%s] 中继 status=%d len=%d", self.name, resp.status_code, len(resp.text))
        logger.debug("[%s] 中继响应: %s", self.name, resp.preview())
        if not resp.ok:
            return None
        return resp
