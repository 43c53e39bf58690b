"""通用数据结构定义。"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from enum import Enum

from pydantic import BaseModel, ConfigDict, Field

logger = logging.getLogger(__name__)


class FetchError(RuntimeError):
    """抓取过程中出现的异常（连接失败、超时等）。"""


class BlockedError(FetchError):
    """上游返回登录墙、IP 封禁标记或空数据字段。"""


class MediaType(str, Enum):
    IMAGE = "image"
    VIDEO = "video"


class MediaItem(BaseModel):
    """帖子中的单个媒体。

    Attributes:
        type: 图片或视频
        url: 图片地址；视频时为可播放的视频地址
        thumbnail_url: 视频封面，图片时不使用
        width: 宽度（可能缺失）
        height: 高度（可能缺失）
    """

    model_config = ConfigDict(frozen=True)

    type: MediaType
    url: str
    thumbnail_url: str | None = None
    width: int | None = None
    height: int | None = None


class PostRecord(BaseModel):
    """归一化后的帖子数据，所有抓取策略都输出这一结构。

    media 的顺序即轮播图的展示顺序，不做任何重排。
    """

    model_config = ConfigDict(frozen=True)

    post_id: str
    username: str
    caption: str | None = None
    media: list[MediaItem] = Field(default_factory=list)
    like_count: int | None = None
    comment_count: int | None = None
    is_video: bool = False
    video_view_count: int | None = None
    timestamp: int = 0

    @property
    def is_thumbnail_only(self) -> bool:
        """是否为 HTML 兜底解析的结果：仅一张无尺寸的图片。"""
        if len(self.media) != 1:
            return False
        item = self.media[0]
        return item.type == MediaType.IMAGE and item.width is None and item.height is None

    def to_json(self) -> str:
        return self.model_dump_json(exclude_none=True)

    @classmethod
    def from_json(cls, raw: str | bytes) -> PostRecord:
        return cls.model_validate_json(raw)


@dataclass
class FetchResponse:
    """一次 HTTP 请求的结果（直连或经中继）。"""

    status_code: int
    text: str
    url: str
    headers: dict[str, str] = field(default_factory=dict)

    @property
    def ok(self) -> bool:
        return self.status_code == 200

    def preview(self, limit: int = 200) -> str:
        return self.text[:limit]


@dataclass
class StrategyResult:
    """单个抓取策略的输出。

    video_blocked 仅由 embed 页面设置：页面提示视频无法内嵌播放。
    """

    record: PostRecord
    video_blocked: bool = False
