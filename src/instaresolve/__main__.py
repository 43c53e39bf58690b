from __future__ import annotations

import argparse
import json
import logging
import sys

from instaresolve.config import AppConfig, load_config
from instaresolve.media import canonical_post_url, image_target, select_media, stats_summary, video_target
from instaresolve.resolver import PostResolver


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="instaresolve", description="Instagram 帖子解析工具")
    parser.add_argument(
        "--config",
        type=str,
        default=None,
        help="配置文件路径（默认仅读取环境变量）",
    )
    parser.add_argument("-v", "--verbose", action="store_true", help="输出调试日志")

    sub = parser.add_subparsers(dest="command", required=True)

    resolve = sub.add_parser("resolve", help="解析帖子并输出 JSON")
    resolve.add_argument("target", help="shortcode、数字 id、帖子 URL 或 share/... 链接")
    resolve.add_argument("--media", type=int, default=None, help="只输出第 N 个媒体（1 起始）")

    return parser


def main(argv: list[str] | None = None) -> int:
    args = _build_parser().parse_args(argv)

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format="%(asctime)s [%(levelname)s] %(name)s - %(message)s",
    )

    config = load_config(args.config) if args.config else AppConfig.from_env()
    resolver = PostResolver.from_config(config)

    post_id, record = resolver.resolve_identifier(args.target)
    if record is None:
        print(f"未找到帖子数据，请访问: {canonical_post_url(post_id)}", file=sys.stderr)
        return 1

    if args.media is None:
        print(json.dumps(record.model_dump(mode="json", exclude_none=True), ensure_ascii=False, indent=2))
        summary = stats_summary(record)
        if summary:
            print(f"@{record.username} | {summary}", file=sys.stderr)
        return 0

    item = select_media(record, args.media)
    output = {
        "post_id": record.post_id,
        "media": item.model_dump(mode="json", exclude_none=True) if item else None,
        "image": image_target(record, args.media),
        "video": video_target(record, args.media),
    }
    print(json.dumps(output, ensure_ascii=False, indent=2))
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
