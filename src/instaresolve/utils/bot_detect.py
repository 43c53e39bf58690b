"""根据 User-Agent 判断请求方是否为爬虫/链接预览机器人。"""

from __future__ import annotations

BOT_SIGNATURES: tuple[str, ...] = (
    "bot",
    "facebook",
    "embed",
    "got",
    "firefox/92",
    "firefox/38",
    "curl",
    "wget",
    "go-http",
    "yahoo",
    "generator",
    "whatsapp",
    "preview",
    "link",
    "proxy",
    "vkshare",
    "images",
    "analyzer",
    "index",
    "crawl",
    "spider",
    "python",
    "cfnetwork",
    "node",
    "mastodon",
    "http.rb",
    "discord",
    "telegram",
    "slack",
    "redditbot",
    "dataprovider",
)


def is_bot(user_agent: str) -> bool:
    ua = user_agent.lower()
    return any(sig in ua for sig in BOT_SIGNATURES)
