"""Instagram 内部 GraphQL 查询接口抓取策略。

数据中心 IP 直连通常只能拿到 null，因此直连失败后经中继重发同一请求。
"""

from __future__ import annotations

import json
import logging
from urllib.parse import urlencode

from .base import BaseStrategy
from .extractors import parse_shortcode_media
from .headers import GRAPHQL_FORM_FIELDS, GRAPHQL_VARIABLE_KNOBS, build_graphql_headers
from .relay import RoutedFetcher
from .structs import BlockedError, FetchResponse, PostRecord, StrategyResult

logger = logging.getLogger(__name__)

GRAPHQL_URL = "https://www.instagram.com/api/graphql"

_LOGIN_MARKERS = ("require_login", "not-logged-in")


def build_variables(post_id: str) -> str:
    variables: dict[str, object] = {"shortcode": post_id}
    variables.update(GRAPHQL_VARIABLE_KNOBS)
    return json.dumps(variables, separators=(",", ":"))


def build_graphql_body(post_id: str, doc_id: str) -> str:
    """构建 form-encoded 请求体，包含真实浏览器会话会带上的全部字段。"""
    fields = list(GRAPHQL_FORM_FIELDS)
    fields.extend(
        [
            ("variables", build_variables(post_id)),
            ("server_timestamps", "true"),
            ("doc_id", doc_id),
        ]
    )
    return urlencode(fields)


def parse_graphql_response(text: str, post_id: str) -> PostRecord:
    """解析 GraphQL 响应。

    Raises:
        BlockedError: 要求登录，或 media 字段为 null（通常是 IP 被封）
        ValueError: JSON 无法解析或结构不符
    """
    if any(marker in text for marker in _LOGIN_MARKERS):
        raise BlockedError("GraphQL 响应要求登录")

    payload = json.loads(text)
    data = payload.get("data") if isinstance(payload, dict) else None
    if not isinstance(data, dict):
        raise ValueError("GraphQL 响应缺少 data 字段")

    logger.debug("[graphql] data keys: %s", list(data))

    key = "xdt_shortcode_media" if "xdt_shortcode_media" in data else "shortcode_media"
    if key not in data:
        raise ValueError("GraphQL 响应缺少 shortcode_media 字段")

    node = data[key]
    if node is None:
        raise BlockedError("GraphQL media 字段为 null（可能被 IP 封禁）")

    record = parse_shortcode_media(node, post_id)
    if record is None:
        raise ValueError("GraphQL shortcode_media 结构不符")
    return record


def _try_parse(text: str, post_id: str) -> PostRecord | None:
    try:
        return parse_graphql_response(text, post_id)
    except BlockedError as exc:
        logger.info("[graphql] %s", exc)
    except ValueError as exc:
        logger.info("[graphql] 解析失败: %s", exc)
    return None


class GraphQLStrategy(BaseStrategy):
    name = "graphql"

    def __init__(self, fetcher: RoutedFetcher, doc_id: str) -> None:
        super().__init__(fetcher)
        self.doc_id = doc_id

    def attempt(self, post_id: str) -> StrategyResult | None:
        logger.info("[graphql] 请求 %s doc_id=%s", post_id, self.doc_id)
        body = build_graphql_body(post_id, self.doc_id)

        # 直连响应在 accept 中已解析成功时直接复用
        accepted: list[PostRecord] = []

        def accept(resp: FetchResponse) -> bool:
            record = _try_parse(resp.text, post_id)
            if record is None:
                return False
            accepted.append(record)
            return True

        resp = self._fetch_with_relay_fallback(
            GRAPHQL_URL,
            "POST",
            build_graphql_headers(),
            body,
            accept=accept,
        )
        if resp is None:
            return None
        if accepted:
            return StrategyResult(record=accepted[0])

        record = _try_parse(resp.text, post_id)
        if record is None:
            return None
        return StrategyResult(record=record)
