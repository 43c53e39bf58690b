"""从 PostRecord 中选取媒体、生成跳转目标与 oEmbed 数据。"""

from __future__ import annotations

from .scraper.structs import MediaItem, MediaType, PostRecord

PROVIDER_NAME = "instaresolve"


def canonical_post_url(post_id: str) -> str:
    return f"https://www.instagram.com/p/{post_id}/"


def select_media(record: PostRecord, index: int | None = None) -> MediaItem | None:
    """按 1 起始的序号选取媒体，越界时夹到有效范围；未指定时取第一项。"""
    if not record.media:
        return None
    position = (index or 1) - 1
    position = min(max(position, 0), len(record.media) - 1)
    return record.media[position]


def image_target(record: PostRecord, number: int) -> str | None:
    """第 number 个（1 起始）媒体的图片地址；视频返回封面，无封面返回 None。"""
    if number < 1 or number > len(record.media):
        return None
    item = record.media[number - 1]
    if item.type == MediaType.IMAGE:
        return item.url or None
    return item.thumbnail_url


def video_target(record: PostRecord, number: int) -> str | None:
    """第 number 个（1 起始）媒体的视频地址；不是视频时返回 None。"""
    if number < 1 or number > len(record.media):
        return None
    item = record.media[number - 1]
    if item.type == MediaType.VIDEO:
        return item.url or None
    return None


def _format_number(value: int) -> str:
    return f"{value:,}"


def stats_summary(record: PostRecord, index: int | None = None) -> str:
    """生成形如 `1,234 likes, 56 comments, Slide 2/3` 的统计摘要。"""
    parts: list[str] = []
    if record.is_video and record.video_view_count is not None:
        parts.append(f"{_format_number(record.video_view_count)} views")
    if record.like_count is not None:
        parts.append(f"{_format_number(record.like_count)} likes")
    if record.comment_count is not None:
        parts.append(f"{_format_number(record.comment_count)} comments")
    if len(record.media) > 1:
        parts.append(f"Slide {index or 1}/{len(record.media)}")
    return ", ".join(parts)


def build_oembed(text: str, url: str, host: str) -> dict[str, str]:
    """oEmbed 响应体；host 为本服务对外的域名。"""
    return {
        "author_name": text,
        "author_url": url,
        "provider_name": PROVIDER_NAME,
        "provider_url": f"https://{host}",
        "title": "Instagram",
        "type": "link",
        "version": "1.0",
    }
