"""分享链接解析：手动跟随重定向链，拿到真实的帖子 id。"""

from __future__ import annotations

import logging
from urllib.parse import urljoin, urlparse

from instaresolve.utils.instagram import extract_post_id

from .relay import RoutedFetcher
from .structs import FetchError

logger = logging.getLogger(__name__)

SHARE_BASE_URL = "https://www.instagram.com/"
MAX_REDIRECTS = 5

_SHARE_HEADERS = {"User-Agent": "curl/8.0"}


def _post_id_from_url(url: str) -> str | None:
    try:
        path = urlparse(url).path
    except ValueError:
        return None
    return extract_post_id(path)


class ShareResolver:
    """跟随 `/share/...` 链接的重定向（最多 MAX_REDIRECTS 跳）。

    任何失败都降级为 None，由调用方重定向到帖子原始页面。
    """

    def __init__(self, fetcher: RoutedFetcher, max_redirects: int = MAX_REDIRECTS) -> None:
        self.fetcher = fetcher
        self.max_redirects = max_redirects

    def resolve_share(self, path: str) -> str | None:
        current_url = urljoin(SHARE_BASE_URL, path.lstrip("/"))

        for hop in range(self.max_redirects):
            try:
                resp = self.fetcher.fetch_direct(
                    current_url,
                    "GET",
                    dict(_SHARE_HEADERS),
                    allow_redirects=False,
                )
            except FetchError as exc:
                logger.warning("分享链接请求失败: %s", exc)
                return None

            if 300 <= resp.status_code < 400:
                location = resp.headers.get("Location") or resp.headers.get("location")
                if not location:
                    logger.info("重定向缺少 Location: %s", current_url)
                    return None

                try:
                    resolved = urljoin(current_url, location)
                except ValueError:
                    logger.info("无法解析重定向地址: %s", location)
                    return None

                post_id = _post_id_from_url(resolved)
                if post_id:
                    logger.info("分享链接解析成功 (第 %d 跳): %s", hop + 1, post_id)
                    return post_id

                current_url = resolved
                continue

            # 非重定向响应：尝试从当前 URL 中提取
            return _post_id_from_url(current_url)

        logger.info("分享链接超过最大重定向次数 %d: %s", self.max_redirects, path)
        return None
