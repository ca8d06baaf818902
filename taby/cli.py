#!/usr/bin/env python3
"""
Taby - saved tabs from your gist, in the terminal.

A thin command-line surface over the browse session: list spaces, search
cards, refresh the cached snapshot, open a whole collection.
"""
import sys
import json
import asyncio
import argparse
import logging
import webbrowser
from pathlib import Path
from typing import List

from rich.console import Console
from rich.markup import escape
from rich.table import Table

from taby.cache import SnapshotCache
from taby.config import TabyConfig, get_config, init_config
from taby.decompress import MalformedSnapshotError
from taby.models import CollectionWithCards
from taby.selection import SpaceSelection
from taby.session import BrowseSession
from taby.storage import LocalStorage
from taby.sync import SyncFetchError, SyncOrchestrator
from taby.transliterate import get_transliterator

logger = logging.getLogger(__name__)


console = Console()


def build_session(config: TabyConfig) -> BrowseSession:
    """Wire a browse session from configuration."""
    storage = LocalStorage(config.data_dir)
    cache = SnapshotCache(storage, max_age=config.cache_duration)
    orchestrator = SyncOrchestrator(cache, timeout=config.timeout, user_agent=config.user_agent)
    return BrowseSession(
        orchestrator,
        SpaceSelection(storage),
        config.credentials(),
        transliterator=get_transliterator(config.transliteration),
        threshold=config.search_threshold,
    )


def output_collections(collections: List[CollectionWithCards], format: str = "table"):
    """Output collections and their cards in the specified format."""
    if format == "json":
        data = [{
            "id": c.id,
            "title": c.title,
            "labels": [label.title for label in c.labels],
            "cards": [{
                "id": card.id,
                "title": card.display_title,
                "url": card.url,
                "description": card.display_description,
                "favicon": card.favicon,
            } for card in c.cards],
        } for c in collections]
        print(json.dumps(data, indent=2, ensure_ascii=False))
    elif format == "urls":
        for c in collections:
            for card in c.cards:
                print(card.url)
    else:
        if not collections:
            console.print("[yellow]No cards found[/yellow]")
            return
        for c in collections:
            labels = ", ".join(label.title for label in c.labels)
            title = f"{escape(c.title)} ({len(c.cards)} cards)"
            if labels:
                title += f" · {escape(labels)}"
            table = Table(title=title, title_justify="left")
            table.add_column("ID", style="cyan")
            table.add_column("Title", style="green")
            table.add_column("Description", style="white")
            table.add_column("URL", style="blue")
            for card in c.cards:
                table.add_row(
                    str(card.id),
                    card.display_title[:50],
                    card.display_description[:40],
                    card.url[:60],
                )
            console.print(table)


def cmd_spaces(args):
    """List spaces."""
    session = build_session(get_config())

    async def run():
        await session.load()
        return session.spaces

    spaces = asyncio.run(run())

    if args.output == "json":
        print(json.dumps([{
            "id": s.id,
            "title": s.title,
            "selected": str(s.id) == session.selected_space_id,
            "collections": len(s.collections),
            "cards": sum(len(c.cards) for c in s.collections),
        } for s in spaces], indent=2, ensure_ascii=False))
        return

    table = Table(title="Spaces")
    table.add_column("", style="red")
    table.add_column("ID", style="cyan")
    table.add_column("Title", style="green")
    table.add_column("Collections", style="magenta")
    table.add_column("Cards", style="magenta")
    for s in spaces:
        table.add_row(
            "*" if str(s.id) == session.selected_space_id else "",
            str(s.id),
            s.title,
            str(len(s.collections)),
            str(sum(len(c.cards) for c in s.collections)),
        )
    console.print(table)


def cmd_search(args):
    """Search cards in the selected space."""
    session = build_session(get_config())

    async def run():
        await session.load()
        if args.space is not None:
            await session.select_space(args.space)
        return session.search(" ".join(args.query))

    collections = asyncio.run(run())
    output_collections(collections, args.output)


def cmd_refresh(args):
    """Drop the cache and fetch the snapshot again."""
    session = build_session(get_config())
    snapshot = asyncio.run(session.refresh())
    console.print(
        f"[green]✓ Refreshed: {len(snapshot.spaces)} spaces, "
        f"{len(snapshot.collections)} collections, {len(snapshot.cards)} cards[/green]"
    )


def cmd_open(args):
    """Open every web card of a collection in the browser."""
    session = build_session(get_config())

    async def run():
        await session.load()
        if args.space is not None:
            await session.select_space(args.space)
        return session.collection_urls(args.collection_id)

    urls = asyncio.run(run())
    if not urls:
        console.print(f"[yellow]No web cards in collection {args.collection_id}[/yellow]")
        return
    for url in urls:
        webbrowser.open(url)
    console.print(f"[green]✓ Opened {len(urls)} cards[/green]")


def cmd_config(args):
    """Manage configuration."""
    config = get_config()

    if args.action == "show":
        table = Table(title="Configuration")
        table.add_column("Key", style="cyan")
        table.add_column("Value", style="green")
        for key, value in vars(config).items():
            if key == "access_token" and value:
                value = "********"
            table.add_row(key, str(value))
        console.print(table)
    elif args.action == "set":
        if not args.key or args.value is None:
            console.print("[red]Usage: taby config set <key> <value>[/red]")
            sys.exit(1)
        if not hasattr(config, args.key):
            console.print(f"[red]Unknown config key: {args.key}[/red]")
            sys.exit(1)
        current = getattr(config, args.key)
        value = args.value
        if isinstance(current, bool):
            value = value.lower() in ("true", "1", "yes")
        elif isinstance(current, int):
            value = int(value)
        elif isinstance(current, float):
            value = float(value)
        setattr(config, args.key, value)
        config.save()
        console.print(f"[green]✓ Set {args.key} = {value}[/green]")
    elif args.action == "init":
        path = TabyConfig.user_config_path()
        if path.exists():
            console.print(f"[yellow]Config already exists: {path}[/yellow]")
            return
        TabyConfig().save(path)
        console.print(f"[green]✓ Created config file: {path}[/green]")


def main():
    """Main entry point."""
    parser = argparse.ArgumentParser(
        description="Taby - browse and search the tabs saved in your gist",
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    parser.add_argument("--config", help="Config file to load")
    parser.add_argument("--output", "-o", choices=["table", "json", "urls"],
                        help="Output format")
    parser.add_argument("--verbose", "-v", action="store_true", help="Debug logging")

    subparsers = parser.add_subparsers(dest="command", required=True)

    spaces_parser = subparsers.add_parser("spaces", help="List spaces")
    spaces_parser.set_defaults(func=cmd_spaces)

    search_parser = subparsers.add_parser("search", help="Search cards in a space")
    search_parser.add_argument("query", nargs="*", help="Search text (empty lists everything)")
    search_parser.add_argument("--space", "-s", help="Space id (remembered for next time)")
    search_parser.set_defaults(func=cmd_search)

    refresh_parser = subparsers.add_parser("refresh", help="Refetch the snapshot")
    refresh_parser.set_defaults(func=cmd_refresh)

    open_parser = subparsers.add_parser("open", help="Open all cards of a collection")
    open_parser.add_argument("collection_id", type=int, help="Collection id")
    open_parser.add_argument("--space", "-s", help="Space id")
    open_parser.set_defaults(func=cmd_open)

    config_parser = subparsers.add_parser("config", help="Manage configuration")
    config_parser.add_argument("action", choices=["show", "set", "init"],
                               help="Config action")
    config_parser.add_argument("key", nargs="?", help="Config key")
    config_parser.add_argument("value", nargs="?", help="Config value (for set)")
    config_parser.set_defaults(func=cmd_config)

    args = parser.parse_args()

    config_args = {}
    if args.output:
        config_args["output_format"] = args.output
    config = init_config(
        config_file=Path(args.config) if args.config else None,
        **config_args,
    )

    if not args.output:
        args.output = config.output_format
    console.no_color = not config.color_output

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else config.log_level.upper(),
        format="%(levelname)s: %(message)s",
    )

    try:
        args.func(args)
    except KeyboardInterrupt:
        console.print("\n[yellow]Interrupted[/yellow]")
        sys.exit(130)
    except (SyncFetchError, MalformedSnapshotError) as e:
        console.print(f"[red]Failed to load data: {e}[/red]")
        console.print("[dim]Run 'taby refresh' to try again[/dim]")
        sys.exit(1)
    except Exception as e:
        console.print(f"[red]Error: {e}[/red]")
        sys.exit(1)


if __name__ == "__main__":
    main()
