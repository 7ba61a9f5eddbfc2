#!/usr/bin/env python3
"""Book Dashboard CLI - browse and edit Open Library search results."""
import argparse
import asyncio
import shlex
import sys
import json
from tabulate import tabulate
from bookdash.client import OpenLibraryClient
from bookdash.async_client import AsyncOpenLibraryClient
from bookdash.assembler import RecordAssembler, assemble_threaded
from bookdash.dashboard import Dashboard
from bookdash.models import COLUMNS, PAGE_SIZE_OPTIONS
from bookdash.parse import parse_field_value
from bookdash.config import Config
import logging

logger = logging.getLogger(__name__)


async def load_async(dashboard: Dashboard, args, config: Config):
    """Load the collection with the async client."""
    async with AsyncOpenLibraryClient(
        base_url=config.OPENLIBRARY_BASE_URL,
        timeout=config.DEFAULT_TIMEOUT,
        max_concurrent=args.parallel,
        max_retries=config.DEFAULT_MAX_RETRIES,
        base_backoff=config.DEFAULT_BACKOFF
    ) as client:
        dashboard.assembler = RecordAssembler(client, args.query, args.limit)
        await dashboard.load()


def load_sync(dashboard: Dashboard, args, config: Config):
    """Load the collection with the threaded client."""
    with OpenLibraryClient(
        base_url=config.OPENLIBRARY_BASE_URL,
        timeout=config.DEFAULT_TIMEOUT,
        max_retries=config.DEFAULT_MAX_RETRIES,
        base_backoff=config.DEFAULT_BACKOFF
    ) as client:
        dashboard.load_blocking(
            lambda: assemble_threaded(client, args.query, args.limit, max_workers=args.parallel)
        )


def build_dashboard(args, config: Config) -> Dashboard:
    """Create a dashboard and load it."""
    dashboard = Dashboard(
        page_size=args.page_size,
        debounce_delay=config.SEARCH_DEBOUNCE_SECONDS
    )
    logger.info(f"Loading books for: {args.query}")

    if args.use_async:
        asyncio.run(load_async(dashboard, args, config))
    else:
        load_sync(dashboard, args, config)

    return dashboard


def _truncate(value, width: int = 40) -> str:
    text = str(value)
    return text[:width] + "..." if len(text) > width else text


def display_page(view: dict, format_type: str):
    """Display the current page in the specified format."""
    if view["error"]:
        print(f"\nCould not load books: {view['error']}\n")
        return

    if format_type == "table":
        headers = ["#"] + [column["label"] for column in view["columns"]]
        rows = [
            [record["record_id"]] + [_truncate(record[column["id"]]) for column in view["columns"]]
            for record in view["page_records"]
        ]
        print("\n" + tabulate(rows, headers=headers, tablefmt="grid"))

    elif format_type == "json":
        print(json.dumps(view["page_records"], indent=2))

    elif format_type == "compact":
        for record in view["page_records"]:
            print(f"{record['record_id']}. {record['title']} - {record['author_name']}")

    print(
        f"\nPage {view['page_index'] + 1} of {view['total_pages']}"
        f" ({view['total_records']} books, {view['page_size']} per page)"
    )


def list_books(args, config: Config):
    """Print one page of the dashboard."""
    dashboard = build_dashboard(args, config)

    if args.search:
        dashboard.apply_search(args.search)
    if args.sort:
        dashboard.on_sort_toggle(args.sort)
        if args.desc:
            dashboard.on_sort_toggle(args.sort)
    dashboard.on_page_change(args.page - 1)

    view = dashboard.render()
    display_page(view, args.format)
    if view["error"]:
        sys.exit(1)


BROWSE_HELP = """Commands:
  search [text]              filter by author (empty clears)
  sort <column>              cycle ascending / descending / unsorted
  next | prev                change page
  size <n>                   page size, one of {sizes}
  edit <id> field=value ...  edit a record and save it
  show                       redraw the page
  help | quit
Columns: {columns}""".format(
    sizes=", ".join(str(size) for size in PAGE_SIZE_OPTIONS),
    columns=", ".join(column.id for column in COLUMNS)
)


def edit_record(dashboard: Dashboard, record_id: str, assignments):
    """Open an edit session, apply ``field=value`` pairs and save."""
    if dashboard.on_edit_open(int(record_id)) is None:
        print(f"No book with id {record_id}")
        return

    try:
        for assignment in assignments:
            name, _, raw = assignment.partition("=")
            dashboard.on_edit_field(name, parse_field_value(name, raw))
    except ValueError as e:
        dashboard.on_edit_cancel()
        print(f"Edit cancelled: {e}")
        return

    dashboard.on_edit_save()
    print(f"Saved book {record_id}")


def run_command(dashboard: Dashboard, line: str, format_type: str) -> bool:
    """Run one browse command. Returns False when the user quits."""
    parts = shlex.split(line)
    if not parts:
        return True
    command, rest = parts[0].lower(), parts[1:]

    if command in ("quit", "exit", "q"):
        return False
    elif command == "help":
        print(BROWSE_HELP)
        return True
    elif command == "search":
        dashboard.apply_search(" ".join(rest))
    elif command == "sort" and rest:
        dashboard.on_sort_toggle(rest[0])
    elif command == "next":
        dashboard.on_page_change(1)
    elif command == "prev":
        dashboard.on_page_change(-1)
    elif command == "size" and rest:
        dashboard.on_page_size_change(int(rest[0]))
    elif command == "edit" and rest:
        edit_record(dashboard, rest[0], rest[1:])
    elif command != "show":
        print(f"Unknown command: {line}\n{BROWSE_HELP}")
        return True

    display_page(dashboard.render(), format_type)
    return True


def browse_books(args, config: Config):
    """Interactive browse loop over the loaded collection."""
    dashboard = build_dashboard(args, config)
    view = dashboard.render()
    display_page(view, args.format)
    if view["error"]:
        sys.exit(1)

    print(BROWSE_HELP)
    while True:
        try:
            line = input("> ")
        except EOFError:
            break
        try:
            if not run_command(dashboard, line, args.format):
                break
        except ValueError as e:
            print(f"Error: {e}")


def main():
    """Main CLI entry point."""
    config = Config()

    # Configure logging
    logging.basicConfig(
        level=config.LOG_LEVEL.upper(),
        format='%(asctime)s - %(levelname)s - %(message)s'
    )

    parser = argparse.ArgumentParser(
        description="Book Dashboard - Open Library search, enrichment and editing",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  # First page with defaults
  %(prog)s list

  # Filter by author and sort by year, newest first
  %(prog)s list --search tolkien --sort first_publish_year --desc

  # Interactive browsing with the async client
  %(prog)s browse --async --parallel 20
        """
    )

    common = argparse.ArgumentParser(add_help=False)
    common.add_argument("--query", default=config.SEARCH_QUERY, help=f"Search query (default: {config.SEARCH_QUERY})")
    common.add_argument("--limit", type=int, default=config.SEARCH_LIMIT, help="Max books to fetch")
    common.add_argument("--page-size", type=int, choices=PAGE_SIZE_OPTIONS, default=config.DEFAULT_PAGE_SIZE, help="Rows per page")
    common.add_argument("--format", choices=["table", "json", "compact"], default="table", help="Output format")
    common.add_argument("--parallel", type=int, default=config.MAX_CONCURRENT, help=f"Concurrent requests (default: {config.MAX_CONCURRENT})")
    common.add_argument("--async", dest="use_async", action="store_true", help="Use async client")

    subparsers = parser.add_subparsers(dest="command", help="Command to execute")

    # List command
    list_parser = subparsers.add_parser("list", parents=[common], help="Print one page of books")
    list_parser.add_argument("--search", help="Filter by author name")
    list_parser.add_argument("--sort", choices=[column.id for column in COLUMNS], help="Sort column")
    list_parser.add_argument("--desc", action="store_true", help="Sort descending")
    list_parser.add_argument("--page", type=int, default=1, help="Page number (default: 1)")

    # Browse command
    subparsers.add_parser("browse", parents=[common], help="Browse and edit interactively")

    args = parser.parse_args()

    if not args.command:
        parser.print_help()
        sys.exit(1)

    try:
        if args.command == "list":
            list_books(args, config)

        elif args.command == "browse":
            browse_books(args, config)

    except KeyboardInterrupt:
        logger.info("\n⚠️  Interrupted by user")
        sys.exit(0)
    except Exception as e:
        logger.error(f"❌ Error: {e}", exc_info=True)
        sys.exit(1)


if __name__ == "__main__":
    main()
