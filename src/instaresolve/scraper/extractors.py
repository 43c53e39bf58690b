"""把上游返回的 HTML / JSON 解析为 PostRecord。

三种 embed 页面解析方式（内嵌 JSON、二次编码的 contextJSON、HTML 标记兜底）
最终都汇聚到 `parse_shortcode_media`；私有 API 的 item 结构由 `parse_papi_item` 处理。
"""

from __future__ import annotations

import json
import logging
from typing import Any

from .structs import MediaItem, MediaType, PostRecord
from .text_scan import attr_from_class, extract_balanced_object, extract_string_literal, text_after_marker, text_from_class

logger = logging.getLogger(__name__)


def _get_path(node: Any, *keys: str | int) -> Any:
    """沿路径安全取值，任意一层缺失都返回 None。"""
    current = node
    for key in keys:
        if isinstance(key, int):
            if not isinstance(current, list) or len(current) <= key:
                return None
        elif not isinstance(current, dict):
            return None
        current = current[key] if isinstance(key, int) else current.get(key)
        if current is None:
            return None
    return current


def _as_int(value: Any) -> int | None:
    # bool 是 int 的子类，需要排除
    if isinstance(value, bool) or not isinstance(value, int) or value < 0:
        return None
    return value


def _as_str(value: Any) -> str | None:
    return value if isinstance(value, str) else None


# ============================================================
# shortcode_media 结构
# ============================================================


def media_from_node(node: dict[str, Any]) -> MediaItem:
    """把单个媒体节点转换为 MediaItem。"""
    dimensions = node.get("dimensions")
    width = _as_int(_get_path(dimensions, "width"))
    height = _as_int(_get_path(dimensions, "height"))

    if node.get("is_video") is True:
        return MediaItem(
            type=MediaType.VIDEO,
            url=_as_str(node.get("video_url")) or "",
            thumbnail_url=_as_str(node.get("display_url")),
            width=width,
            height=height,
        )

    return MediaItem(
        type=MediaType.IMAGE,
        url=_as_str(node.get("display_url")) or "",
        width=width,
        height=height,
    )


def build_media_list(node: dict[str, Any]) -> list[MediaItem]:
    """轮播图返回每个子节点一项（保持原顺序），否则返回节点本身一项。"""
    edges = _get_path(node, "edge_sidecar_to_children", "edges")
    if isinstance(edges, list):
        items: list[MediaItem] = []
        for edge in edges:
            child = _get_path(edge, "node")
            if isinstance(child, dict):
                items.append(media_from_node(child))
        return items

    return [media_from_node(node)]


def parse_shortcode_media(node: Any, post_id: str) -> PostRecord | None:
    """解析 `shortcode_media` 节点；缺少作者用户名时视为无效数据。"""
    if not isinstance(node, dict):
        return None

    username = _as_str(_get_path(node, "owner", "username"))
    if username is None:
        return None

    return PostRecord(
        post_id=post_id,
        username=username,
        caption=_as_str(_get_path(node, "edge_media_to_caption", "edges", 0, "node", "text")),
        media=build_media_list(node),
        like_count=_as_int(_get_path(node, "edge_media_preview_like", "count")),
        comment_count=_as_int(_get_path(node, "edge_media_to_comment", "count")),
        is_video=node.get("is_video") is True,
        video_view_count=_as_int(node.get("video_view_count")),
        timestamp=_as_int(node.get("taken_at_timestamp")) or 0,
    )


# ============================================================
# embed 页面的三种解析方式
# ============================================================


def from_embedded_json(html: str, post_id: str) -> PostRecord | None:
    """解析页面中内嵌的 `"shortcode_media":{...}` JSON 对象。"""
    raw = extract_balanced_object(html, "shortcode_media")
    if raw is None:
        return None

    try:
        node = json.loads(raw)
    except ValueError as exc:
        logger.debug("shortcode_media JSON 解析失败: %s", exc)
        return None

    return parse_shortcode_media(node, post_id)


def from_context_json(html: str, post_id: str) -> PostRecord | None:
    """解析二次编码的 `"contextJSON":"..."`，其中 gql_data 与 shortcode_media 同构。"""
    literal = extract_string_literal(html, "contextJSON")
    if literal is None:
        return None

    try:
        inner = json.loads(literal)
        context = json.loads(inner) if isinstance(inner, str) else None
    except ValueError as exc:
        logger.debug("contextJSON 解析失败: %s", exc)
        return None

    gql_data = _get_path(context, "gql_data")
    if not isinstance(gql_data, dict):
        return None

    node = gql_data.get("shortcode_media") or gql_data.get("xdt_shortcode_media")
    if node is None:
        return None

    logger.info("contextJSON 中找到 gql_data: %s", post_id)
    return parse_shortcode_media(node, post_id)


def from_html_markup(html: str, post_id: str) -> PostRecord | None:
    """从 embed 页面的 HTML 标记中抓取基础信息。

    只能拿到一张无尺寸的缩略图，永远不会有视频地址。
    """
    image_url = attr_from_class(html, "EmbeddedMediaImage", "src")
    if image_url is None:
        return None

    return PostRecord(
        post_id=post_id,
        username=text_from_class(html, "UsernameText") or "unknown",
        caption=text_after_marker(html, "CaptionUsername"),
        media=[MediaItem(type=MediaType.IMAGE, url=image_url)],
    )


# ============================================================
# 私有 API item 结构
# ============================================================


def parse_papi_media(node: dict[str, Any]) -> MediaItem | None:
    """解析私有 API 中的单个媒体节点，取第一个（最高清）版本。"""
    poster = _as_str(_get_path(node, "image_versions2", "candidates", 0, "url"))

    video_versions = node.get("video_versions")
    if isinstance(video_versions, list) and video_versions:
        best = video_versions[0] if isinstance(video_versions[0], dict) else {}
        return MediaItem(
            type=MediaType.VIDEO,
            url=_as_str(best.get("url")) or "",
            thumbnail_url=poster,
            width=_as_int(best.get("width")),
            height=_as_int(best.get("height")),
        )

    best = _get_path(node, "image_versions2", "candidates", 0)
    if not isinstance(best, dict):
        return None

    return MediaItem(
        type=MediaType.IMAGE,
        url=_as_str(best.get("url")) or "",
        width=_as_int(best.get("width")),
        height=_as_int(best.get("height")),
    )


def parse_papi_item(item: Any, post_id: str) -> PostRecord | None:
    """解析 `/api/v1/media/{id}/info/` 响应中 items 的第一项。"""
    if not isinstance(item, dict):
        return None

    carousel = item.get("carousel_media")
    if isinstance(carousel, list):
        nodes = [child for child in carousel if isinstance(child, dict)]
    else:
        nodes = [item]

    media = [m for m in (parse_papi_media(n) for n in nodes) if m is not None]
    is_video = "video_versions" in item or any(m.type == MediaType.VIDEO for m in media)

    record = PostRecord(
        post_id=post_id,
        username=_as_str(_get_path(item, "user", "username")) or "unknown",
        caption=_as_str(_get_path(item, "caption", "text")),
        media=media,
        like_count=_as_int(item.get("like_count")),
        comment_count=_as_int(item.get("comment_count")),
        is_video=is_video,
        video_view_count=_as_int(item.get("view_count")),
        timestamp=_as_int(item.get("taken_at")) or 0,
    )
    logger.info(
        "私有 API 解析完成: username=%s media_count=%d is_video=%s",
        record.username,
        len(record.media),
        record.is_video,
    )
    return record
