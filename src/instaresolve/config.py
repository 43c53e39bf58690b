from __future__ import annotations

import os
from collections.abc import Mapping
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

import yaml

DEFAULT_GRAPHQL_DOC_ID = "25531498899829322"
DEFAULT_CACHE_TTL = 86400


class ConfigError(ValueError):
    """配置文件内容非法。"""


@dataclass
class HttpConfig:
    # 每个出站请求的超时（秒）
    timeout: float = 15
    # 正常情况下应保持为 True
    verify_ssl: bool = True


@dataclass
class RelayConfig:
    # Bright Data 代理用户名，格式 brd-customer-XXX-zone-ZONE_NAME
    username: str = ""
    # REST 接口的 Bearer token
    password: str = ""

    @property
    def enabled(self) -> bool:
        return bool(self.username and self.password)


@dataclass
class InstagramConfig:
    # sessionid 原值或完整 Cookie 串；为空时跳过私有 API
    cookie: str = ""
    graphql_doc_id: str = DEFAULT_GRAPHQL_DOC_ID


@dataclass
class CacheConfig:
    ttl_seconds: int = DEFAULT_CACHE_TTL


@dataclass
class ResolverConfig:
    # 单次解析的总时间预算（秒），0 表示不限制
    max_resolve_seconds: float = 45


@dataclass
class AppConfig:
    http: HttpConfig = field(default_factory=HttpConfig)
    relay: RelayConfig = field(default_factory=RelayConfig)
    instagram: InstagramConfig = field(default_factory=InstagramConfig)
    cache: CacheConfig = field(default_factory=CacheConfig)
    resolver: ResolverConfig = field(default_factory=ResolverConfig)

    @classmethod
    def from_env(cls, environ: Mapping[str, str] | None = None) -> AppConfig:
        """仅从环境变量构建配置。"""
        config = cls()
        _apply_env(config, os.environ if environ is None else environ)
        return config


def _section(raw: dict[str, Any], key: str) -> dict[str, Any]:
    value = raw.get(key) or {}
    if not isinstance(value, dict):
        raise ConfigError(f"配置段 {key} 必须是映射")
    return value


def _env(environ: Mapping[str, str], name: str) -> str | None:
    value = environ.get(name)
    if value is None:
        return None
    value = value.strip()
    return value or None


def _apply_env(config: AppConfig, environ: Mapping[str, str]) -> None:
    """环境变量优先于配置文件中的密钥类字段。"""
    config.relay.username = _env(environ, "PROXY_USERNAME") or config.relay.username
    config.relay.password = _env(environ, "PROXY_PASSWORD") or config.relay.password
    config.instagram.cookie = _env(environ, "IG_COOKIE") or config.instagram.cookie
    config.instagram.graphql_doc_id = _env(environ, "GRAPHQL_DOC_ID") or config.instagram.graphql_doc_id


def _positive_float(value: Any, key: str) -> float:
    try:
        number = float(value)
    except (TypeError, ValueError) as exc:
        raise ConfigError(f"{key} 必须是数字") from exc
    if number <= 0:
        raise ConfigError(f"{key} 必须 > 0")
    return number


def _positive_int(value: Any, key: str) -> int:
    # 取整后再校验，0.5 之类的值不能变成 0
    number = int(_positive_float(value, key))
    if number <= 0:
        raise ConfigError(f"{key} 必须 >= 1")
    return number


def load_config(path: str | Path, environ: Mapping[str, str] | None = None) -> AppConfig:
    path = Path(path)
    if not path.exists():
        raise FileNotFoundError(f"配置文件不存在: {path}")

    with path.open("r", encoding="utf-8") as f:
        raw = yaml.safe_load(f) or {}

    if not isinstance(raw, dict):
        raise ConfigError(f"配置文件顶层必须是映射: {path}")

    http_raw = _section(raw, "http")
    relay_raw = _section(raw, "relay")
    instagram_raw = _section(raw, "instagram")
    cache_raw = _section(raw, "cache")
    resolver_raw = _section(raw, "resolver")

    http = HttpConfig(
        timeout=_positive_float(http_raw.get("timeout", 15), "http.timeout"),
        verify_ssl=bool(http_raw.get("verify_ssl", True)),
    )

    relay = RelayConfig(
        username=str(relay_raw.get("username") or "").strip(),
        password=str(relay_raw.get("password") or "").strip(),
    )

    instagram = InstagramConfig(
        cookie=str(instagram_raw.get("cookie") or "").strip(),
        graphql_doc_id=str(instagram_raw.get("graphql_doc_id") or DEFAULT_GRAPHQL_DOC_ID).strip(),
    )

    cache = CacheConfig(
        ttl_seconds=_positive_int(cache_raw.get("ttl_seconds", DEFAULT_CACHE_TTL), "cache.ttl_seconds"),
    )

    # 0 表示关闭时间预算
    budget = resolver_raw.get("max_resolve_seconds", 45)
    try:
        budget = float(budget)
    except (TypeError, ValueError) as exc:
        raise ConfigError("resolver.max_resolve_seconds 必须是数字") from exc
    if budget < 0:
        raise ConfigError("resolver.max_resolve_seconds 不能为负数")

    config = AppConfig(
        http=http,
        relay=relay,
        instagram=instagram,
        cache=cache,
        resolver=ResolverConfig(max_resolve_seconds=budget),
    )
    _apply_env(config, os.environ if environ is None else environ)
    return config
