"""Instagram 标识符工具：shortcode 与数字 media id 互转、从 URL 路径提取帖子 id。"""

from __future__ import annotations

INSTAGRAM_ALPHABET = "ABCDEFGHIJKLMNOPQRSTUVWXYZabcdefghijklmnopqrstuvwxyz0123456789-_"
_ALPHABET_INDEX = {ch: i for i, ch in enumerate(INSTAGRAM_ALPHABET)}

# 路径中紧跟帖子 id 的段
POST_PATH_SEGMENTS = frozenset({"p", "reel", "tv", "reels"})

# media id 为 u64
_MAX_MEDIA_ID = 2**64 - 1


def mediaid_to_code(media_id: int) -> str:
    """数字 media id 转 shortcode（64 进制）。"""
    if media_id < 0:
        raise ValueError("media_id 不能为负数")
    if media_id == 0:
        return INSTAGRAM_ALPHABET[0]

    chars: list[str] = []
    while media_id > 0:
        media_id, remainder = divmod(media_id, 64)
        chars.append(INSTAGRAM_ALPHABET[remainder])
    return "".join(reversed(chars))


def code_to_mediaid(code: str) -> int | None:
    """shortcode 转数字 media id；含非法字符或溢出时返回 None。"""
    media_id = 0
    for ch in code:
        pos = _ALPHABET_INDEX.get(ch)
        if pos is None:
            return None
        media_id = media_id * 64 + pos
        if media_id > _MAX_MEDIA_ID:
            return None
    return media_id


def extract_post_id(path: str) -> str | None:
    """从 `/p/ID/`、`/reel/ID`、`/tv/ID/extra` 等路径中提取帖子 id。"""
    segments = [s for s in path.split("/") if s]
    for i, segment in enumerate(segments):
        if segment in POST_PATH_SEGMENTS:
            return segments[i + 1] if i + 1 < len(segments) else None
    return None


def normalize_post_id(raw: str) -> str:
    """纯数字的 story id 转为 shortcode，其余原样返回。"""
    if raw.isascii() and raw.isdigit():
        media_id = int(raw)
        if media_id <= _MAX_MEDIA_ID:
            return mediaid_to_code(media_id)
    return raw
