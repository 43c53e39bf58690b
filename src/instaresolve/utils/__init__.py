from __future__ import annotations

from .bot_detect import is_bot
from .instagram import code_to_mediaid, extract_post_id, mediaid_to_code, normalize_post_id

__all__ = [
    "code_to_mediaid",
    "extract_post_id",
    "is_bot",
    "mediaid_to_code",
    "normalize_post_id",
]
