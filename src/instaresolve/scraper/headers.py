"""各抓取策略使用的固定请求头与客户端标识。

这些是配置数据而非逻辑：每个策略只通过对应的 build_*_headers 函数取用。
"""

from __future__ import annotations

# 桌面 Chrome（embed 页面）
EMBED_USER_AGENT = (
    "Mozilla/5.0 (Windows NT 10.0; Win64; x64) AppleWebKit/537.36 "
    "(KHTML, like Gecko) Chrome/120.0.0.0 Safari/537.36"
)

# 桌面 Chrome on macOS（GraphQL 查询接口）
GRAPHQL_USER_AGENT = (
    "Mozilla/5.0 (Macintosh; Intel Mac OS X 10_15_7) AppleWebKit/537.36 "
    "(KHTML, like Gecko) Chrome/125.0.0.0 Safari/537.36"
)

# Instagram Android 客户端（私有 API）
MOBILE_USER_AGENT = (
    "Instagram 317.0.0.34.109 Android (31/12; 420dpi; 1080x2400; samsung; "
    "SM-G991B; o1s; exynos2100; en_US; 562530885)"
)

WEB_APP_ID = "936619743392459"
ANDROID_APP_ID = "567067343352427"

# 与 GraphQL 表单中的 lsd 字段保持一致
GRAPHQL_LSD = "AVoPBTXMX0Y"
GRAPHQL_FRIENDLY_NAME = "PolarisPostActionLoadPostQueryQuery"

EMBED_HEADERS: dict[str, str] = {
    "User-Agent": EMBED_USER_AGENT,
    "Accept": "text/html,application/xhtml+xml",
    "Accept-Language": "en-US,en;q=0.9",
}

GRAPHQL_HEADERS: dict[str, str] = {
    "Accept": "*/*",
    "Accept-Language": "en-US,en;q=0.9",
    "Content-Type": "application/x-www-form-urlencoded",
    "Origin": "https://www.instagram.com",
    "Referer": "https://www.instagram.com/",
    "Priority": "u=1, i",
    "Sec-Ch-Prefers-Color-Scheme": "dark",
    "Sec-Ch-Ua": '"Google Chrome";v="125", "Chromium";v="125", "Not.A/Brand";v="24"',
    "Sec-Ch-Ua-Full-Version-List": (
        '"Google Chrome";v="125.0.6422.142", "Chromium";v="125.0.6422.142", "Not.A/Brand";v="24.0.0.0"'
    ),
    "Sec-Ch-Ua-Mobile": "?0",
    "Sec-Ch-Ua-Model": '""',
    "Sec-Ch-Ua-Platform": '"macOS"',
    "Sec-Ch-Ua-Platform-Version": '"12.7.4"',
    "Sec-Fetch-Dest": "empty",
    "Sec-Fetch-Mode": "cors",
    "Sec-Fetch-Site": "same-origin",
    "User-Agent": GRAPHQL_USER_AGENT,
    "X-Asbd-Id": "129477",
    "X-Fb-Lsd": GRAPHQL_LSD,
    "X-Fb-Friendly-Name": GRAPHQL_FRIENDLY_NAME,
    "X-Ig-App-Id": WEB_APP_ID,
}

PAPI_HEADERS: dict[str, str] = {
    "User-Agent": MOBILE_USER_AGENT,
    "Accept": "*/*",
    "Accept-Language": "en-US,en;q=0.9",
    "X-Ig-App-Id": ANDROID_APP_ID,
}

# GraphQL 表单中模拟浏览器会话的固定字段（variables 与 doc_id 除外）
GRAPHQL_FORM_FIELDS: tuple[tuple[str, str], ...] = (
    ("av", "0"),
    ("__d", "www"),
    ("__user", "0"),
    ("__a", "1"),
    ("__req", "k"),
    ("__hs", "19888.HYP:instagram_web_pkg.2.1..0.0"),
    ("dpr", "2"),
    ("__ccg", "UNKNOWN"),
    ("__rev", "1014227545"),
    ("__s", "trbjos:n8dn55:yev1rm"),
    ("__hsi", "7380500578385702299"),
    (
        "__dyn",
        "7xeUjG1mxu1syUbFp40NonwgU7SbzEdF8aUco2qwJw5ux609vCwjE1xoswaq0yE6ucw5Mx62G5UswoEcE7O2l0Fwqo31w9a9wtUd8-"
        "U2zxe2GewGw9a362W2K0zK5o4q3y1Sx-0iS2Sq2-azo7u3C2u2J0bS1LwTwKG1pg2fwxyo6O1FwlEcUed6goK2O4UrAwCAxW6Uf9EObzVU8U",
    ),
    (
        "__csr",
        "n2Yfg_5hcQAG5mPtfEzil8Wn-DpKGBXhdczlAhrK8uHBAGuKCJeCieLDyExenh68aQAKta8p8ShogKkF5yaUBqCpF9XHmmhoBXyBKbQp0HCwDjq"
        "oOepV8Tzk8xeXqAGFTVoCciGaCgvGUtVU-u5Vp801nrEkO0rC58xw41g0VW07ISyie2W1v7F0CwYwwwvEkw8K5cM0VC1dwdi0hCbc094w6MU1xE02lzw",
    ),
    ("__comet_req", "7"),
    ("lsd", GRAPHQL_LSD),
    ("jazoest", "2882"),
    ("__spin_r", "1014227545"),
    ("__spin_b", "trunk"),
    ("__spin_t", "1718406700"),
    ("fb_api_caller_class", "RelayModern"),
    ("fb_api_req_friendly_name", GRAPHQL_FRIENDLY_NAME),
)

# 查询帖子时附带的评论/点赞分页参数
GRAPHQL_VARIABLE_KNOBS: dict[str, object] = {
    "fetch_comment_count": 40,
    "parent_comment_count": 24,
    "child_comment_count": 3,
    "fetch_like_count": 10,
    "fetch_tagged_user_count": None,
    "fetch_preview_comment_count": 2,
    "has_threaded_comments": True,
    "hoisted_comment_id": None,
    "hoisted_reply_id": None,
}


def build_embed_headers(cookie: str | None = None) -> dict[str, str]:
    headers = dict(EMBED_HEADERS)
    if cookie:
        headers["Cookie"] = cookie
    return headers


def build_graphql_headers() -> dict[str, str]:
    return dict(GRAPHQL_HEADERS)


def build_papi_headers(cookie: str) -> dict[str, str]:
    headers = dict(PAPI_HEADERS)
    headers["Cookie"] = cookie
    return headers
