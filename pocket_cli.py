#!/usr/bin/env python3
"""
Pocket command-line tool
Authorize against Pocket, then add, modify and list saved items.
"""

import json
import sys
import logging
import argparse
from typing import List, Optional

from credentials import DEFAULT_ENV_FILE, save_access_token
from data_parser import summarize_items
from errors import PocketError
from models import ITEM_ACTIONS, TAG_ACTIONS, ItemAction, TagAction
from pocket_client import PocketClient

logger = logging.getLogger(__name__)


def configure_logging(verbose: bool = False) -> None:
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.INFO,
        format="%(asctime)s - %(levelname)s - %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
    )


def cmd_auth(client: PocketClient, args: argparse.Namespace) -> int:
    token = client.request_token()
    print("Open this URL in your browser and approve access:\n")
    print(f"  {client.build_authorize_url(token)}\n")
    input("Press Enter once you have approved the app... ")

    authorization = client.authorize(token)
    save_access_token(authorization.access_token, args.env_file)
    print(f"✅ Authorized as {authorization.username}")
    return 0


def cmd_add(client: PocketClient, args: argparse.Namespace) -> int:
    item = client.add(args.url, title=args.title, tags=args.tags)
    print(json.dumps(item.to_wire(), ensure_ascii=False, indent=2))
    return 0


def cmd_send(client: PocketClient, args: argparse.Namespace) -> int:
    actions = []
    for item_id in args.item_ids:
        if args.action in TAG_ACTIONS:
            actions.append(TagAction(action=args.action, item_id=item_id, tags=args.tags))
        else:
            actions.append(ItemAction(action=args.action, item_id=item_id))

    result = client.modify(actions)
    for outcome in result.outcomes:
        mark = "✅" if outcome.applied else "❌"
        line = f"{mark} {outcome.action.action} {outcome.action.item_id}"
        if outcome.error:
            line += f" ({outcome.error.message})"
        print(line)
    return 0 if result.all_applied else 1


def cmd_get(client: PocketClient, args: argparse.Namespace) -> int:
    filters = {
        "state": args.state,
        "favorite": args.favorite,
        "tag": args.tag,
        "contentType": args.content_type,
        "sort": args.sort,
        "detailType": args.detail_type,
        "search": args.search,
        "domain": args.domain,
        "since": args.since,
        "count": args.count,
        "offset": args.offset,
    }
    page = client.retrieve_page({k: v for k, v in filters.items() if v is not None})

    output = {item_id: item.to_wire() for item_id, item in page.items.items()}
    print(json.dumps(output, ensure_ascii=False, indent=2))

    summary = summarize_items(page.items)
    logger.info(
        f"📊 {len(page.items)} items: {summary['unread']} unread, "
        f"{summary['archived']} archived, {summary['deleted']} deleted"
    )
    return 0


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Pocket API client")
    parser.add_argument("--env-file", default=DEFAULT_ENV_FILE,
                        help=f"Credentials file (default: {DEFAULT_ENV_FILE})")
    parser.add_argument("--verbose", "-v", action="store_true", help="Enable verbose logging")
    subparsers = parser.add_subparsers(dest="command", required=True)

    auth = subparsers.add_parser("auth", help="Authorize this app and store the access token")
    auth.set_defaults(func=cmd_auth)

    add = subparsers.add_parser("add", help="Save a URL")
    add.add_argument("url")
    add.add_argument("--title", help="Title to use if Pocket cannot detect one")
    add.add_argument("--tags", help="Comma-separated tags")
    add.set_defaults(func=cmd_add)

    send = subparsers.add_parser("send", help="Apply one action to one or more items")
    send.add_argument("action", choices=list(ITEM_ACTIONS) + list(TAG_ACTIONS))
    send.add_argument("item_ids", nargs="+", metavar="ITEM_ID")
    send.add_argument("--tags", help="Comma-separated tags for tag actions")
    send.set_defaults(func=cmd_send)

    get = subparsers.add_parser("get", help="List saved items")
    get.add_argument("--state", choices=["unread", "archive", "all"])
    get.add_argument("--favorite", type=int, choices=[0, 1])
    get.add_argument("--tag", help="Tag name, or _untagged_")
    get.add_argument("--content-type", choices=["article", "video", "image"])
    get.add_argument("--sort", choices=["newest", "oldest", "title", "site"])
    get.add_argument("--detail-type", choices=["simple", "complete"])
    get.add_argument("--search")
    get.add_argument("--domain")
    get.add_argument("--since", type=int, help="Unix timestamp")
    get.add_argument("--count", type=int)
    get.add_argument("--offset", type=int)
    get.set_defaults(func=cmd_get)

    return parser


def main(argv: Optional[List[str]] = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)
    if args.command == "send" and args.action in TAG_ACTIONS and not (args.tags or "").strip():
        parser.error(f"{args.action} requires --tags")
    configure_logging(args.verbose)

    try:
        client = PocketClient.from_env(args.env_file)
        return args.func(client, args)
    except PocketError as e:
        logger.error(f"❌ {e.message}")
        logger.debug(json.dumps(e.to_dict(), default=str))
        return 1
    except KeyboardInterrupt:
        logger.info("⏹️  Interrupted by user")
        return 130


if __name__ == "__main__":
    sys.exit(main())
