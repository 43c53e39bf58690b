"""共享测试 fixtures 和配置。"""

from __future__ import annotations

import json
from pathlib import Path
from typing import Any

import pytest

from instaresolve.cache import MemoryStore, RecordCache
from instaresolve.config import AppConfig, HttpConfig, InstagramConfig, RelayConfig
from instaresolve.scraper.relay import RoutedFetcher


class FakeClock:
    """可手动推进的时钟。"""

    def __init__(self, start: float = 1000.0) -> None:
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


# ============================================================
# 配置相关 Fixtures
# ============================================================


@pytest.fixture
def sample_app_config() -> AppConfig:
    """创建测试用应用配置（无中继、无 Cookie）。"""
    return AppConfig(http=HttpConfig(timeout=5, verify_ssl=True))


@pytest.fixture
def relay_app_config() -> AppConfig:
    """创建配置了中继与会话 Cookie 的应用配置。"""
    return AppConfig(
        http=HttpConfig(timeout=5),
        relay=RelayConfig(username="brd-customer-hl_123-zone-resi_zone-country-us", password="secret-token-abcdef"),
        instagram=InstagramConfig(cookie="12345%3Atoken%3A1%3Ahash"),
    )


@pytest.fixture
def direct_fetcher() -> RoutedFetcher:
    return RoutedFetcher(timeout=5)


@pytest.fixture
def relay_fetcher() -> RoutedFetcher:
    return RoutedFetcher(
        relay_username="brd-customer-hl_123-zone-resi_zone",
        relay_password="secret-token-abcdef",
        timeout=5,
    )


@pytest.fixture
def fake_clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def record_cache(fake_clock: FakeClock) -> RecordCache:
    return RecordCache(MemoryStore(clock=fake_clock), ttl_seconds=86400)


# ============================================================
# 上游响应样例
# ============================================================


def make_shortcode_media(
    username: str = "alice",
    *,
    is_video: bool = False,
    display_url: str = "https://cdn.example.com/img.jpg",
    video_url: str | None = None,
    width: int | None = 1080,
    height: int | None = 1080,
    children: list[dict[str, Any]] | None = None,
    caption: str | None = "hello world",
) -> dict[str, Any]:
    node: dict[str, Any] = {
        "owner": {"username": username},
        "is_video": is_video,
        "display_url": display_url,
        "taken_at_timestamp": 1700000000,
        "edge_media_preview_like": {"count": 42},
        "edge_media_to_comment": {"count": 7},
    }
    if width is not None and height is not None:
        node["dimensions"] = {"width": width, "height": height}
    if video_url is not None:
        node["video_url"] = video_url
        node["video_view_count"] = 1234
    if caption is not None:
        node["edge_media_to_caption"] = {"edges": [{"node": {"text": caption}}]}
    if children is not None:
        node["edge_sidecar_to_children"] = {"edges": [{"node": child} for child in children]}
    return node


def make_embed_html(media: dict[str, Any]) -> str:
    """构造内嵌 shortcode_media JSON 的 embed 页面。"""
    blob = json.dumps({"shortcode_media": media})
    return f'<html><body><script>window.__additionalDataLoaded("extra",{blob});</script></body></html>'


THUMBNAIL_EMBED_HTML = """
<html><body>
<div class="Embed">
  <a class="UsernameText" href="https://www.instagram.com/bob/">bob</a>
  <img class="EmbeddedMediaImage" alt="post" src="https://cdn.example.com/thumb.jpg?a=1&amp;b=2" />
  <div class="Caption"><a class="CaptionUsername" href="/bob/">bob</a> sunset &amp; sea<br/></div>
</div>
</body></html>
"""


@pytest.fixture
def thumbnail_embed_html() -> str:
    return THUMBNAIL_EMBED_HTML


# ============================================================
# 路径相关 Fixtures
# ============================================================


@pytest.fixture
def sample_config_path(tmp_path: Path) -> Path:
    """创建临时测试配置文件并返回路径。"""
    config_content = """
http:
  timeout: 10
  verify_ssl: false

relay:
  username: "brd-customer-hl_1-zone-resi"
  password: "token-xyz"

instagram:
  cookie: "999:abc:1:def"
  graphql_doc_id: "123456"

cache:
  ttl_seconds: 600

resolver:
  max_resolve_seconds: 20
"""
    config_path = tmp_path / "test_config.yaml"
    config_path.write_text(config_content, encoding="utf-8")
    return config_path


# ============================================================
# Pytest Hooks
# ============================================================


def pytest_addoption(parser: pytest.Parser) -> None:
    """注册 --run-functional 选项，用于控制真实功能测试执行。"""
    parser.addoption(
        "--run-functional",
        action="store_true",
        default=False,
        help="运行带 functional 标记的真实功能测试，默认跳过以避免访问 Instagram",
    )


def pytest_configure(config: pytest.Config) -> None:
    """注册 pytest 标记。"""
    config.addinivalue_line(
        "markers",
        "functional: 需要访问真实 Instagram / 中继服务的功能测试",
    )


def pytest_collection_modifyitems(config: pytest.Config, items: list[pytest.Item]) -> None:
    """默认跳过 functional 测试，除非显式传入 --run-functional。"""
    if config.getoption("--run-functional"):
        return

    skip_marker = pytest.mark.skip(reason="缺少 --run-functional，因此跳过真实功能测试")
    for item in items:
        if "functional" in item.keywords:
            item.add_marker(skip_marker)
