"""公开 embed 页面抓取策略。

embed 页面无需登录、成本最低。依次尝试三种解析方式：内嵌 JSON、
contextJSON、HTML 标记兜底；最后一种只能拿到缩略图。
"""

from __future__ import annotations

import logging

from .base import BaseStrategy
from .extractors import from_context_json, from_embedded_json, from_html_markup
from .headers import build_embed_headers
from .papi import normalize_session_cookie
from .relay import RoutedFetcher
from .structs import FetchError, StrategyResult

logger = logging.getLogger(__name__)

EMBED_URL = "https://www.instagram.com/p/{post_id}/embed/captioned/?_fb_noscript=1"

_VIDEO_BLOCKED_MARKERS = ("WatchOnInstagram", "EmbeddedMediaVideo")

# 按顺序尝试的解析方式
_EXTRACTORS = (
    ("JSON", from_embedded_json),
    ("contextJSON", from_context_json),
    ("HTML", from_html_markup),
)


def is_video_blocked(html: str) -> bool:
    """页面提示视频无法内嵌播放。"""
    return any(marker in html for marker in _VIDEO_BLOCKED_MARKERS)


class EmbedPageStrategy(BaseStrategy):
    name = "embed_page"

    def __init__(self, fetcher: RoutedFetcher, cookie: str | None = None) -> None:
        super().__init__(fetcher)
        # 携带会话 Cookie 有助于绕过登录墙
        self._cookie = normalize_session_cookie(cookie) if cookie else None

    def attempt(self, post_id: str) -> StrategyResult | None:
        url = EMBED_URL.format(post_id=post_id)
        try:
            resp = self.fetcher.fetch(url, "GET", build_embed_headers(self._cookie))
        except FetchError as exc:
            logger.warning("[embed_page] 请求失败: %s", exc)
            return None

        html = resp.text
        logger.info("[embed_page] status=%d html_len=%d post_id=%s", resp.status_code, len(html), post_id)

        if not resp.ok:
            logger.info("[embed_page] 非 200 响应，前 500 字符: %s", resp.preview(500))
            return None

        video_blocked = is_video_blocked(html)
        logger.info("[embed_page] video_blocked=%s post_id=%s", video_blocked, post_id)

        for label, extractor in _EXTRACTORS:
            record = extractor(html, post_id)
            if record is not None:
                logger.info("[embed_page] %s 解析成功: %s", label, post_id)
                return StrategyResult(record=record, video_blocked=video_blocked)
            logger.info("[embed_page] %s 解析失败: %s", label, post_id)

        logger.info(
            "[embed_page] 所有解析方式失败: %s (shortcode_media=%s EmbeddedMedia=%s login=%s)",
            post_id,
            "shortcode_media" in html,
            "EmbeddedMedia" in html,
            "login" in html.lower(),
        )
        return None
