"""统一的 HTTP 请求入口：直连，或经 Bright Data REST 中继转发。

配置了中继凭据时，所有请求都被包装为 JSON 提交到中继的 `/request` 接口，
调用方（各抓取策略）无需感知是否走了中继。
"""

from __future__ import annotations

import json
import logging
from typing import TYPE_CHECKING

import requests

from .structs import FetchError, FetchResponse

if TYPE_CHECKING:
    from instaresolve.config import AppConfig

logger = logging.getLogger(__name__)

RELAY_ENDPOINT = "https://api.brightdata.com/request"
DEFAULT_ZONE = "residential"
RELAY_COUNTRY = "us"

# 允许透传给中继的请求头
FORWARD_HEADERS: tuple[str, ...] = (
    "User-Agent",
    "Accept",
    "Accept-Language",
    "Cookie",
    "Content-Type",
    "Origin",
    "Referer",
    "X-Ig-App-Id",
    "X-Fb-Lsd",
    "X-Asbd-Id",
    "X-Fb-Friendly-Name",
    "X-Requested-With",
    "Sec-Fetch-Dest",
    "Sec-Fetch-Mode",
    "Sec-Fetch-Site",
    "Sec-Ch-Ua",
    "Sec-Ch-Ua-Mobile",
    "Sec-Ch-Ua-Platform",
)


def extract_zone(username: str) -> str | None:
    """从中继用户名中解析 zone 名。

    用户名格式: `brd-customer-XXXX-zone-ZONE_NAME[-...]`，zone 名截止到下一个 `-`。
    """
    idx = username.find("-zone-")
    if idx < 0:
        return None

    rest = username[idx + len("-zone-") :]
    end = rest.find("-")
    zone = rest if end < 0 else rest[:end]
    return zone or None


def forwarded_headers(headers: dict[str, str]) -> dict[str, str]:
    """按白名单筛选请求头（大小写不敏感），保持白名单中的规范写法。"""
    lowered = {key.lower(): value for key, value in headers.items()}
    return {key: lowered[key.lower()] for key in FORWARD_HEADERS if key.lower() in lowered}


def build_relay_payload(
    zone: str,
    url: str,
    method: str,
    headers: dict[str, str] | None = None,
    body: str | None = None,
) -> dict[str, object]:
    payload: dict[str, object] = {
        "zone": zone,
        "url": url,
        "format": "raw",
        "method": method.upper(),
        "country": RELAY_COUNTRY,
    }
    forwarded = forwarded_headers(headers or {})
    if forwarded:
        payload["headers"] = forwarded
    if body is not None:
        payload["body"] = body
    return payload


class RoutedFetcher:
    """对所有抓取策略暴露同一个 fetch 原语。"""

    def __init__(
        self,
        *,
        relay_username: str | None = None,
        relay_password: str | None = None,
        timeout: float = 15,
        verify_ssl: bool = True,
        session: requests.Session | None = None,
    ) -> None:
        self.timeout = timeout
        self.verify_ssl = verify_ssl
        self._session = session or requests.Session()
        self._relay_username = relay_username or None
        self._relay_password = relay_password or None

    @classmethod
    def from_config(cls, config: AppConfig, session: requests.Session | None = None) -> RoutedFetcher:
        relay = config.relay
        if not relay.enabled:
            logger.info("未配置完整的中继凭据，所有请求直连")
        return cls(
            relay_username=relay.username if relay.enabled else None,
            relay_password=relay.password if relay.enabled else None,
            timeout=config.http.timeout,
            verify_ssl=config.http.verify_ssl,
            session=session,
        )

    @property
    def relay_enabled(self) -> bool:
        return bool(self._relay_username and self._relay_password)

    def fetch(
        self,
        url: str,
        method: str = "GET",
        headers: dict[str, str] | None = None,
        body: str | None = None,
    ) -> FetchResponse:
        """发送请求；有中继凭据时经中继转发，否则直连。

        Raises:
            FetchError: 网络层失败（连接错误、超时等）
        """
        if self.relay_enabled:
            return self._fetch_via_relay(url, method, headers or {}, body)

        logger.debug("未配置中继，直连: %s", url)
        return self.fetch_direct(url, method, headers, body)

    def fetch_direct(
        self,
        url: str,
        method: str = "GET",
        headers: dict[str, str] | None = None,
        body: str | None = None,
        *,
        allow_redirects: bool = True,
    ) -> FetchResponse:
        try:
            resp = self._session.request(
                method.upper(),
                url,
                headers=headers,
                data=body.encode("utf-8") if body is not None else None,
                timeout=self.timeout,
                verify=self.verify_ssl,
                allow_redirects=allow_redirects,
            )
        except requests.RequestException as exc:
            raise FetchError(f"直连请求失败: {url}: {exc}") from exc

        return FetchResponse(
            status_code=resp.status_code,
            text=resp.text,
            url=resp.url,
            headers=dict(resp.headers),
        )

    def _fetch_via_relay(
        self,
        url: str,
        method: str,
        headers: dict[str, str],
        body: str | None,
    ) -> FetchResponse:
        assert self._relay_username is not None and self._relay_password is not None

        zone = extract_zone(self._relay_username) or DEFAULT_ZONE
        payload = build_relay_payload(zone, url, method, headers, body)
        payload_str = json.dumps(payload)

        logger.info("经中继转发: %s (zone=%s)", url, zone)
        logger.debug("中继 payload: %s", payload_str[:300])
        logger.debug("中继鉴权: Bearer %s...", self._relay_password[:10])

        try:
            resp = self._session.post(
                RELAY_ENDPOINT,
                data=payload_str.encode("utf-8"),
                headers={
                    "Authorization": f"Bearer {self._relay_password}",
                    "Content-Type": "application/json",
                },
                timeout=self.timeout,
                verify=self.verify_ssl,
            )
        except requests.RequestException as exc:
            raise FetchError(f"中继请求失败: {url}: {exc}") from exc

        logger.info("中继响应 status=%d", resp.status_code)
        # 中继以 raw 格式返回目标站点的响应体
        return FetchResponse(
            status_code=resp.status_code,
            text=resp.text,
            url=url,
            headers=dict(resp.headers),
        )
