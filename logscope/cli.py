"""
Command line interface for logscope.

Provides one-shot searches, an interactive browser with page navigation
and record details, and ingestion of log records from JSON files.
"""

import argparse
import asyncio
import json
import sys
from typing import Any, TextIO

from dotenv import load_dotenv

from .controller import FilterForm, SearchSessionController
from .exceptions import LogscopeError
from .models.query import FILTER_FIELDS
from .models.session import SearchStatus
from .presentation.search_view import format_log_detail, render_text
from .services.log_search_client import LogSearchClient, LogSearchConfig
from .utils.logging import configure_logging, get_logger

BROWSE_HELP = """Commands:
  n                  next page
  p                  previous page
  d <id>             show record details
  s                  search with the current filters
  set <field> <val>  set a filter (e.g. set level error)
  unset <field>      clear one filter
  c                  clear all filters
  f                  show current filters
  q                  quit"""


def _option_name(field: str) -> str:
    return "--" + field.replace("_", "-")


def _add_filter_arguments(parser: argparse.ArgumentParser) -> None:
    group = parser.add_argument_group("filters")
    for field, wire_name in FILTER_FIELDS.items():
        group.add_argument(
            _option_name(field),
            dest=field,
            default="",
            metavar=wire_name.upper() if field not in ("start_time", "end_time") else "YYYY-MM-DDTHH:MM",
            help=f"Filter on {wire_name}",
        )


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="logscope", description="Search a log server from the terminal")
    parser.add_argument("--base-url", help="Log server URL (default: LOGSCOPE_BASE_URL or http://localhost:3000)")
    parser.add_argument("--timeout", type=float, help="Request timeout in seconds")
    parser.add_argument("--log-level", help="Log level for diagnostics (default: LOG_LEVEL or WARNING)")
    parser.add_argument("--verbose", action="store_true", help="Enable debug logging")

    subparsers = parser.add_subparsers(dest="command", required=True)

    search = subparsers.add_parser("search", help="Run one search and print a page of results")
    _add_filter_arguments(search)
    search.add_argument("--page", type=int, default=1, help="Page to show (default: 1)")
    search.add_argument("--json", action="store_true", help="Print the page as JSON")

    browse = subparsers.add_parser("browse", help="Browse results interactively")
    _add_filter_arguments(browse)

    ingest = subparsers.add_parser("ingest", help="Send log records from a JSON file")
    ingest.add_argument("file", help="JSON file with one record or a list of records ('-' for stdin)")

    return parser


def _config_from_args(args: argparse.Namespace) -> LogSearchConfig:
    overrides: dict[str, Any] = {}
    if args.base_url:
        overrides["base_url"] = args.base_url
    if args.timeout is not None:
        overrides["request_timeout"] = args.timeout
    return LogSearchConfig(**overrides)


def _form_from_args(args: argparse.Namespace) -> FilterForm:
    return FilterForm(**{field: getattr(args, field, "") for field in FILTER_FIELDS})


async def run_search(args: argparse.Namespace, client: LogSearchClient, out: TextIO) -> int:
    controller = SearchSessionController(client, form=_form_from_args(args))
    session = await controller.trigger_search()

    if args.page != 1 and session.status == SearchStatus.READY:
        if not await controller.go_to_page(args.page):
            print(f"Page {args.page} is out of range (1-{session.max_page})", file=sys.stderr)
            return 2

    if args.json:
        payload = {
            "count": session.total_count,
            "page": session.current_page,
            "total_pages": session.total_pages,
            "error": session.error_message,
            "logs": [record.to_detail_dict() for record in session.current_logs],
        }
        print(json.dumps(payload, indent=2, ensure_ascii=False), file=out)
    else:
        print(render_text(controller.view()), file=out)

    return 1 if session.status == SearchStatus.ERROR else 0


async def run_browse(
    args: argparse.Namespace,
    client: LogSearchClient,
    stdin: TextIO,
    out: TextIO,
) -> int:
    controller = SearchSessionController(client, form=_form_from_args(args))
    await controller.trigger_search()
    print(render_text(controller.view()), file=out)
    print("Type 'h' for help.", file=out)

    while True:
        print("> ", end="", file=out, flush=True)
        line = await asyncio.to_thread(stdin.readline)
        if not line:
            break
        command, _, rest = line.strip().partition(" ")
        rest = rest.strip()

        if command in ("q", "quit", "exit"):
            break
        elif command in ("h", "help", "?"):
            print(BROWSE_HELP, file=out)
        elif command == "n":
            if await controller.next_page():
                print(render_text(controller.view()), file=out)
            else:
                print("Already on the last page.", file=out)
        elif command == "p":
            if await controller.previous_page():
                print(render_text(controller.view()), file=out)
            else:
                print("Already on the first page.", file=out)
        elif command == "d":
            record = controller.get_record(rest)
            if record is None:
                print(f"No entry with id '{rest}' on this page.", file=out)
            else:
                print(format_log_detail(record), file=out)
        elif command == "s":
            await controller.trigger_search()
            print(render_text(controller.view()), file=out)
        elif command in ("set", "unset"):
            field, _, value = rest.partition(" ")
            try:
                controller.form.set(field, value.strip() if command == "set" else "")
            except LogscopeError as e:
                print(e.message, file=out)
        elif command == "c":
            controller.clear_filters()
            print("Filters cleared.", file=out)
        elif command == "f":
            print(repr(controller.form), file=out)
        elif command:
            print(f"Unknown command '{command}'. Type 'h' for help.", file=out)

    return 0


def _load_records(path: str) -> list[Any]:
    if path == "-":
        data = json.load(sys.stdin)
    else:
        with open(path, encoding="utf-8") as handle:
            data = json.load(handle)
    return data if isinstance(data, list) else [data]


async def run_ingest(args: argparse.Namespace, client: LogSearchClient, out: TextIO) -> int:
    records = _load_records(args.file)
    failed = 0
    for position, record in enumerate(records):
        try:
            await client.ingest_log(record)
        except LogscopeError as e:
            failed += 1
            print(f"Record {position}: {e.message}", file=out)

    print(f"Ingested {len(records) - failed} of {len(records)} records.", file=out)
    return 1 if failed else 0


async def run(args: argparse.Namespace, stdin: TextIO = sys.stdin, out: TextIO = sys.stdout) -> int:
    async with LogSearchClient(_config_from_args(args)) as client:
        if args.command == "search":
            return await run_search(args, client, out)
        if args.command == "browse":
            return await run_browse(args, client, stdin, out)
        return await run_ingest(args, client, out)


def main(argv: list[str] | None = None) -> int:
    """Main entry point for the logscope command."""
    load_dotenv()

    parser = build_parser()
    args = parser.parse_args(argv)

    configure_logging(log_level=args.log_level, verbose=args.verbose)
    logger = get_logger(__name__)
    logger.debug(f"logscope starting with {args.command} command")

    try:
        return asyncio.run(run(args))
    except (OSError, ValueError) as e:
        # Unreadable ingest file or invalid configuration
        print(f"logscope: {e}", file=sys.stderr)
        return 2
    except KeyboardInterrupt:
        return 130


if __name__ == "__main__":
    sys.exit(main())
