"""统一请求入口（直连 / Bright Data 中继）测试。"""

from __future__ import annotations

import json

import pytest
import requests
import responses

from instaresolve.config import AppConfig, RelayConfig
from instaresolve.scraper.relay import (
    DEFAULT_ZONE,
    RELAY_ENDPOINT,
    RoutedFetcher,
    build_relay_payload,
    extract_zone,
    forwarded_headers,
)
from instaresolve.scraper.structs import FetchError


class TestExtractZone:
    """测试从用户名中解析 zone。"""

    def test_zone_with_suffix(self) -> None:
        assert extract_zone("brd-customer-hl_123-zone-resi_zone-country-us") == "resi_zone"

    def test_zone_at_end(self) -> None:
        assert extract_zone("brd-customer-hl_123-zone-isp") == "isp"

    def test_no_zone(self) -> None:
        assert extract_zone("brd-customer-hl_123") is None
        assert extract_zone("brd-customer-hl_123-zone-") is None


class TestRelayPayload:
    """测试中继请求体构建。"""

    def test_header_allowlist(self) -> None:
        headers = {
            "user-agent": "UA",
            "Cookie": "sessionid=1",
            "Priority": "u=1, i",
            "Sec-Ch-Ua-Full-Version-List": "x",
        }

        assert forwarded_headers(headers) == {"User-Agent": "UA", "Cookie": "sessionid=1"}

    def test_payload_fields(self) -> None:
        payload = build_relay_payload("resi", "https://a.com/x", "post", {"Accept": "*/*"}, "a=1")

        assert payload == {
            "zone": "resi",
            "url": "https://a.com/x",
            "format": "raw",
            "method": "POST",
            "country": "us",
            "headers": {"Accept": "*/*"},
            "body": "a=1",
        }

    def test_payload_omits_empty_parts(self) -> None:
        payload = build_relay_payload("resi", "https://a.com/x", "GET", {"Priority": "u=1"})

        assert "headers" not in payload
        assert "body" not in payload


class TestRoutedFetcher:
    """测试直连与中继两条路径。"""

    def test_from_config(self, relay_app_config: AppConfig) -> None:
        fetcher = RoutedFetcher.from_config(relay_app_config)

        assert fetcher.relay_enabled is True
        assert fetcher.timeout == 5

    def test_from_config_with_partial_credentials(self) -> None:
        """只配置了用户名时中继不启用，请求直连。"""
        config = AppConfig(relay=RelayConfig(username="brd-customer-hl_123-zone-resi"))

        assert config.relay.enabled is False
        assert RoutedFetcher.from_config(config).relay_enabled is False

    def test_relay_requires_both_credentials(self) -> None:
        assert RoutedFetcher(relay_username="brd-customer-x-zone-y").relay_enabled is False
        assert RoutedFetcher(relay_password="token").relay_enabled is False

    @responses.activate
    def test_direct_fetch(self, direct_fetcher: RoutedFetcher) -> None:
        url = "https://www.instagram.com/p/ABC123/"
        responses.add(responses.GET, url, body="<html>ok</html>", status=200, headers={"X-Test": "1"})

        resp = direct_fetcher.fetch(url, headers={"User-Agent": "UA"})

        assert resp.ok is True
        assert resp.text == "<html>ok</html>"
        assert resp.url == url
        assert resp.headers["X-Test"] == "1"
        assert responses.calls[0].request.headers["User-Agent"] == "UA"

    @responses.activate
    def test_direct_non_200_is_returned(self, direct_fetcher: RoutedFetcher) -> None:
        url = "https://www.instagram.com/p/ABC123/"
        responses.add(responses.GET, url, body="nope", status=429)

        resp = direct_fetcher.fetch(url)

        assert resp.status_code == 429
        assert resp.ok is False

    @responses.activate
    def test_direct_connection_error(self, direct_fetcher: RoutedFetcher) -> None:
        url = "https://www.instagram.com/p/ABC123/"
        responses.add(responses.GET, url, body=requests.exceptions.ConnectionError("refused"))

        with pytest.raises(FetchError):
            direct_fetcher.fetch(url)

    @responses.activate
    def test_relay_fetch(self, relay_fetcher: RoutedFetcher) -> None:
        """中继请求：Bearer 鉴权、zone 解析、请求头白名单与请求体透传。"""
        responses.add(responses.POST, RELAY_ENDPOINT, body='{"data":{}}', status=200)
        target = "https://www.instagram.com/api/graphql"

        resp = relay_fetcher.fetch(
            target,
            "POST",
            {"User-Agent": "UA", "X-Fb-Lsd": "lsd", "Priority": "u=1, i"},
            "doc_id=1",
        )

        assert resp.ok is True
        assert resp.text == '{"data":{}}'
        assert resp.url == target

        assert len(responses.calls) == 1
        request = responses.calls[0].request
        assert request.headers["Authorization"] == "Bearer secret-token-abcdef"
        assert request.headers["Content-Type"] == "application/json"
        payload = json.loads(request.body)
        assert payload == {
            "zone": "resi_zone",
            "url": target,
            "format": "raw",
            "method": "POST",
            "country": "us",
            "headers": {"User-Agent": "UA", "X-Fb-Lsd": "lsd"},
            "body": "doc_id=1",
        }

    @responses.activate
    def test_relay_default_zone(self) -> None:
        responses.add(responses.POST, RELAY_ENDPOINT, body="ok", status=200)
        fetcher = RoutedFetcher(relay_username="brd-customer-hl_123", relay_password="token")

        fetcher.fetch("https://www.instagram.com/")

        payload = json.loads(responses.calls[0].request.body)
        assert payload["zone"] == DEFAULT_ZONE
        assert payload["method"] == "GET"
        assert "body" not in payload

    @responses.activate
    def test_relay_connection_error(self, relay_fetcher: RoutedFetcher) -> None:
        responses.add(responses.POST, RELAY_ENDPOINT, body=requests.exceptions.Timeout())

        with pytest.raises(FetchError):
            relay_fetcher.fetch("https://www.instagram.com/")

    @responses.activate
    def test_fetch_direct_ignores_relay(self, relay_fetcher: RoutedFetcher) -> None:
        url = "https://www.instagram.com/p/ABC123/"
        responses.add(responses.GET, url, body="direct", status=200)

        resp = relay_fetcher.fetch_direct(url)

        assert resp.text == "direct"
        assert responses.calls[0].request.url == url
