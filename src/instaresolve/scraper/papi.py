"""Instagram 私有 API（移动端接口）抓取策略。

使用 `https://i.instagram.com/api/v1/media/{media_id}/info/`，需要有效的会话 Cookie。
未配置 Cookie 时直接跳过。
"""

from __future__ import annotations

import json
import logging

from instaresolve.utils.instagram import code_to_mediaid

from .base import BaseStrategy
from .extractors import parse_papi_item
from .headers import build_papi_headers
from .relay import RoutedFetcher
from .structs import FetchResponse, StrategyResult

logger = logging.getLogger(__name__)

PAPI_URL = "https://i.instagram.com/api/v1/media/{media_id}/info/"

# 直连响应中出现这些标记时改走中继
_REJECT_MARKERS = ("not-logged-in", "Page Not Found")


def normalize_session_cookie(raw: str) -> str:
    """还原被 URL 编码的冒号；只给了 sessionid 值时补上 `sessionid=` 前缀。"""
    decoded = raw.strip().replace("%3A", ":").replace("%3a", ":")
    return decoded if "=" in decoded else f"sessionid={decoded}"


def build_session_cookie(raw: str) -> str:
    """构建完整 Cookie，并从 sessionid 中解析出 ds_user_id。

    sessionid 格式: `{user_id}:{token}:{version}:{hash}`
    """
    cookie = normalize_session_cookie(raw)
    if cookie.startswith("sessionid="):
        user_id = cookie[len("sessionid=") :].split(":", 1)[0]
        return f"{cookie}; ds_user_id={user_id}"
    return cookie


def _accept_direct(resp: FetchResponse) -> bool:
    return not any(marker in resp.text for marker in _REJECT_MARKERS)


class PrivateApiStrategy(BaseStrategy):
    name = "papi"

    def __init__(self, fetcher: RoutedFetcher, cookie: str | None = None) -> None:
        super().__init__(fetcher)
        self._cookie = build_session_cookie(cookie) if cookie else None

    @property
    def enabled(self) -> bool:
        return self._cookie is not None

    def attempt(self, post_id: str) -> StrategyResult | None:
        if self._cookie is None:
            logger.info("[papi] 未配置会话 Cookie，跳过")
            return None

        logger.debug("[papi] Cookie 前缀: %s", self._cookie[:50])

        media_id = code_to_mediaid(post_id)
        if media_id is None:
            logger.info("[papi] 无法将 shortcode %s 转换为 media id", post_id)
            return None

        url = PAPI_URL.format(media_id=media_id)
        logger.info("[papi] 请求 media_id=%d shortcode=%s", media_id, post_id)

        resp = self._fetch_with_relay_fallback(
            url,
            "GET",
            build_papi_headers(self._cookie),
            accept=_accept_direct,
        )
        if resp is None:
            return None

        try:
            payload = json.loads(resp.text)
        except ValueError as exc:
            logger.info("[papi] JSON 解析失败: %s", exc)
            return None

        items = payload.get("items") if isinstance(payload, dict) else None
        if not isinstance(items, list) or not items:
            logger.info("[papi] 响应中没有 items")
            return None

        record = parse_papi_item(items[0], post_id)
        if record is None:
            return None
        return StrategyResult(record=record)
