"""HTML/JSON 文本扫描工具。

embed 页面的内容不规则且随时变化，这里不用正则，而是用显式的字符下标状态机
（普通 / 字符串内 / 转义待处理）定位 JSON 对象和字符串字面量。
"""

from __future__ import annotations

import logging

logger = logging.getLogger(__name__)

# 扫描状态
_NORMAL = 0
_IN_STRING = 1
_ESCAPE = 2

_HTML_ENTITIES: tuple[tuple[str, str], ...] = (
    ("&amp;", "&"),
    ("&lt;", "<"),
    ("&gt;", ">"),
    ("&quot;", '"'),
    ("&#x27;", "'"),
    ("&#39;", "'"),
)


def extract_balanced_object(text: str, field: str) -> str | None:
    """定位 `"field":` 之后的第一个 JSON 对象，返回完整的对象子串。

    字符串字面量里的花括号不计入深度，转义字符后的引号不结束字符串。

    Args:
        text: 原始 HTML
        field: JSON 字段名（不含引号）

    Returns:
        `{...}` 子串；找不到字段或对象未闭合时返回 None
    """
    needle = f'"{field}":'
    start = text.find(needle)
    if start < 0:
        return None

    obj_start = text.find("{", start + len(needle))
    if obj_start < 0:
        return None

    state = _NORMAL
    depth = 0
    i = obj_start
    length = len(text)

    while i < length:
        ch = text[i]
        if state == _ESCAPE:
            state = _IN_STRING
        elif state == _IN_STRING:
            if ch == "\\":
                state = _ESCAPE
            elif ch == '"':
                state = _NORMAL
        elif ch == '"':
            state = _IN_STRING
        elif ch == "{":
            depth += 1
        elif ch == "}":
            depth -= 1
            if depth == 0:
                return text[obj_start : i + 1]
        i += 1

    logger.debug("字段 %s 的 JSON 对象未闭合", field)
    return None


def extract_string_literal(text: str, field: str) -> str | None:
    """定位 `"field":"...` 并返回包含首尾引号的字符串字面量。

    值本身是 JSON 字符串（可能是二次编码的 JSON 文档），因此按引号/转义扫描，
    不做花括号计数。
    """
    needle = f'"{field}":"'
    start = text.find(needle)
    if start < 0:
        return None

    literal_start = start + len(needle) - 1
    state = _IN_STRING
    i = literal_start + 1
    length = len(text)

    while i < length:
        ch = text[i]
        if state == _ESCAPE:
            state = _IN_STRING
        elif ch == "\\":
            state = _ESCAPE
        elif ch == '"':
            return text[literal_start : i + 1]
        i += 1

    logger.debug("字段 %s 的字符串字面量未闭合", field)
    return None


def unescape_entities(value: str) -> str:
    """还原常见的 HTML 实体。"""
    for entity, char in _HTML_ENTITIES:
        value = value.replace(entity, char)
    return value


def attr_from_class(html: str, marker: str, attr: str) -> str | None:
    """找到带有 marker（通常是 CSS 类名）的标签，读取其属性值。

    从 marker 位置向前回溯到标签起点 `<`，再向后截取到标签结束 `>`，
    在这段标签文本中查找 `attr="..."`。
    """
    marker_pos = html.find(marker)
    if marker_pos < 0:
        return None

    tag_start = html.rfind("<", 0, marker_pos)
    if tag_start < 0:
        return None

    tag_end = html.find(">", tag_start)
    if tag_end < 0:
        return None
    tag = html[tag_start : tag_end + 1]

    attr_needle = f'{attr}="'
    attr_pos = tag.find(attr_needle)
    if attr_pos < 0:
        return None

    value_start = attr_pos + len(attr_needle)
    value_end = tag.find('"', value_start)
    if value_end < 0:
        return None

    return unescape_entities(tag[value_start:value_end])


def text_from_class(html: str, marker: str) -> str | None:
    """读取带有 marker 的元素内、下一个标签之前的文本。"""
    marker_pos = html.find(marker)
    if marker_pos < 0:
        return None

    tag_close = html.find(">", marker_pos)
    if tag_close < 0:
        return None

    content_start = tag_close + 1
    next_tag = html.find("<", content_start)
    if next_tag < 0:
        return None

    text = html[content_start:next_tag].strip()
    return unescape_entities(text) or None


def text_after_marker(html: str, marker: str) -> str | None:
    """跳过 marker 所在元素的闭合标签，读取紧随其后的行内文本。

    用于抓取用户名之后的说明文字，例如::

        <a class="CaptionUsername">alice</a> hello world<br/>
    """
    marker_pos = html.find(marker)
    if marker_pos < 0:
        return None

    close_start = html.find("</", marker_pos)
    if close_start < 0:
        return None

    close_end = html.find(">", close_start)
    if close_end < 0:
        return None

    content_start = close_end + 1
    next_tag = html.find("<", content_start)
    if next_tag < 0:
        next_tag = len(html)

    text = html[content_start:next_tag].strip()
    return unescape_entities(text) or None
