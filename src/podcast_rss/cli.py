"""
Command-line interface for managing the podcast and its feed.
"""

import argparse
import json
import logging
import sys
from typing import Any, List, Optional

from .errors import (
    ConflictError,
    NotFoundError,
    PersistenceError,
    PodcastRSSError,
    ValidationError,
)
from .factory import create_manager
from .feed import inspect_feed

EXIT_CODES = {
    ValidationError: 2,
    NotFoundError: 3,
    ConflictError: 4,
    PersistenceError: 5,
}


def _print_json(data: Any) -> None:
    print(json.dumps(data, indent=2, ensure_ascii=False))


def _read_payload(raw: str) -> Any:
    """Parse a JSON payload given inline or as '-' for stdin."""
    text = sys.stdin.read() if raw == "-" else raw
    try:
        return json.loads(text)
    except ValueError as e:
        raise ValidationError(f"Invalid JSON payload: {e}") from e


def build_parser() -> argparse.ArgumentParser:
    """Argument parser with one sub-command per operation."""
    parser = argparse.ArgumentParser(
        prog="podcast-rss",
        description="Manage a podcast's episodes and publish its RSS feed",
    )
    parser.add_argument(
        "-v", "--verbose", action="store_true", help="Enable debug logging"
    )
    commands = parser.add_subparsers(dest="command", required=True)

    commands.add_parser(
        "init", help="Create the data file if needed and render the feed"
    )
    commands.add_parser("render", help="Regenerate the feed artifact")
    commands.add_parser("health", help="Show service status")
    commands.add_parser("check", help="Read the published feed back")

    info = commands.add_parser("info", help="Show or update show info")
    info_commands = info.add_subparsers(dest="info_command", required=True)
    info_commands.add_parser("show", help="Print the show info")
    info_update = info_commands.add_parser(
        "update", help="Merge fields into the show info"
    )
    info_update.add_argument("payload", help="JSON object, or - for stdin")

    episodes = commands.add_parser("episodes", help="Manage episodes")
    episode_commands = episodes.add_subparsers(
        dest="episode_command", required=True
    )
    episode_commands.add_parser("list", help="List episodes, newest first")
    add = episode_commands.add_parser("add", help="Create an episode")
    add.add_argument("payload", help="JSON object, or - for stdin")
    get = episode_commands.add_parser("get", help="Show one episode")
    get.add_argument("guid")
    update = episode_commands.add_parser("update", help="Update an episode")
    update.add_argument("guid")
    update.add_argument("payload", help="JSON object, or - for stdin")
    delete = episode_commands.add_parser("delete", help="Delete an episode")
    delete.add_argument("guid")

    return parser


def _run(args: argparse.Namespace) -> int:
    manager = create_manager()
    repository = manager.repository

    if args.command == "init":
        published = manager.start()
        print(f"Data file: {manager.config.data_file}")
        print(f"RSS feed: {manager.config.feed_file}")
        return 0 if published else 1

    if args.command == "render":
        if not manager.render():
            print("Error: could not generate RSS feed", file=sys.stderr)
            return 1
        print(f"RSS feed: {manager.config.feed_file}")
        return 0

    if args.command == "health":
        _print_json(manager.health())
        return 0

    if args.command == "check":
        summary = inspect_feed(
            manager.config.feed_file, manager.store.storage
        )
        print(f"Title: {summary.title}")
        print(f"Items: {summary.item_count}")
        for guid in summary.guids:
            print(f"  {guid}")
        if not summary.well_formed:
            print(f"Error: malformed feed: {summary.error}", file=sys.stderr)
            return 1
        return 0

    if args.command == "info":
        if args.info_command == "show":
            _print_json(repository.get_rss_info().to_json())
        else:
            info = repository.update_rss_info(_read_payload(args.payload))
            _print_json(info.to_json())
        return 0

    if args.episode_command == "list":
        _print_json([ep.to_json() for ep in repository.list_episodes()])
    elif args.episode_command == "add":
        episode = repository.create_episode(_read_payload(args.payload))
        _print_json(episode.to_json())
    elif args.episode_command == "get":
        _print_json(repository.get_episode(args.guid).to_json())
    elif args.episode_command == "update":
        episode = repository.update_episode(
            args.guid, _read_payload(args.payload)
        )
        _print_json(episode.to_json())
    else:
        _print_json(repository.delete_episode(args.guid).to_json())
    return 0


def main(argv: Optional[List[str]] = None) -> None:
    """CLI entry point for podcast-rss."""
    args = build_parser().parse_args(argv)
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
    )

    try:
        exit_code = _run(args)
    except PodcastRSSError as e:
        print(f"Error: {e}", file=sys.stderr)
        exit_code = EXIT_CODES.get(type(e), 1)
    except KeyboardInterrupt:
        print("\nInterrupted by user", file=sys.stderr)
        exit_code = 130

    sys.exit(exit_code)


if __name__ == "__main__":
    main()
