"""CLI entrypoint for the voter roll query engine."""

import argparse
import asyncio
import json
import sys
from pathlib import Path
from typing import Any, Dict, Iterator, List, Optional

from voterroll.api import voters_api
from voterroll.api.models import Envelope, failure_envelope
from voterroll.config.loader import (
    get_log_level,
    get_query_timeout,
    get_storage_path,
    load_config,
)
from voterroll.database.collection import Collections, open_collections
from voterroll.errors import VoterRollError
from voterroll.intake.normalizer import normalize_intake
from voterroll.utils.logging import configure_logging, get_logger

logger = get_logger(__name__)

EXIT_NOT_FOUND = 2


def _load_settings(args: argparse.Namespace) -> Dict[str, Any]:
    """Config file is optional for the CLI; fall back to defaults."""
    path = Path(args.config) if args.config else None
    try:
        return load_config(path)
    except FileNotFoundError:
        if path is not None:
            raise
        return {"storage": {}, "query": {}, "logging": {}}


def _collections(args: argparse.Namespace) -> Collections:
    sqlite_path = args.db or get_storage_path(args.settings)
    return open_collections(sqlite_path=sqlite_path)


def _emit(envelope: Optional[Envelope], not_found_message: str = "Not found") -> int:
    if envelope is None:
        print(json.dumps({"success": False, "message": not_found_message}, indent=2))
        return EXIT_NOT_FOUND
    print(json.dumps(envelope.to_dict(), indent=2, ensure_ascii=False))
    return 0


def _read_documents(path: Path) -> Iterator[Dict[str, Any]]:
    """Read a JSON array or JSON Lines file of documents."""
    text = path.read_text(encoding="utf-8")
    stripped = text.lstrip()
    if stripped.startswith("["):
        documents = json.loads(stripped)
    else:
        documents = [json.loads(line) for line in text.splitlines() if line.strip()]
    for document in documents:
        if not isinstance(document, dict):
            raise ValueError(f"Expected JSON objects in {path}, got {type(document).__name__}")
        yield document


def cmd_init_db(args: argparse.Namespace) -> int:
    """Create the database file and tables."""
    _collections(args)
    print(f"Database ready: {args.db or get_storage_path(args.settings)}")
    return 0


def cmd_load(args: argparse.Namespace) -> int:
    """Bulk-load documents into a collection."""
    collections = _collections(args)
    collection = collections.by_name(args.collection)
    documents: List[Dict[str, Any]] = list(_read_documents(Path(args.file)))
    if collection is collections.soon_voters:
        documents = [normalize_intake(document) for document in documents]
    stored = collection.insert_many(documents)
    logger.info(f"Loaded {len(stored)} document(s) into {collection.name}")
    print(f"Loaded {len(stored)} document(s) into {collection.name}")
    return 0


def cmd_list(args: argparse.Namespace) -> int:
    envelope = asyncio.run(
        voters_api.list_voters(_collections(args), args.page, args.limit, args.q, timeout=args.timeout)
    )
    return _emit(envelope)


def cmd_age60(args: argparse.Namespace) -> int:
    envelope = asyncio.run(
        voters_api.list_age60_above_voters(_collections(args), args.page, args.limit, args.q, timeout=args.timeout)
    )
    return _emit(envelope)


def cmd_soon(args: argparse.Namespace) -> int:
    envelope = asyncio.run(
        voters_api.list_soon_voters(_collections(args), args.page, args.limit, args.q, timeout=args.timeout)
    )
    return _emit(envelope)


def cmd_search(args: argparse.Namespace) -> int:
    envelope = asyncio.run(
        voters_api.search_voters(
            _collections(args),
            name=args.name,
            part_no=args.part_no,
            page=args.page,
            limit=args.limit,
            timeout=args.timeout,
        )
    )
    return _emit(envelope)


def cmd_age_range(args: argparse.Namespace) -> int:
    envelope = asyncio.run(
        voters_api.list_voters_by_age_range(
            _collections(args),
            args.min_age,
            args.max_age,
            page=args.page,
            limit=args.limit,
            timeout=args.timeout,
        )
    )
    return _emit(envelope)


def cmd_get(args: argparse.Namespace) -> int:
    envelope = asyncio.run(voters_api.get_voter_by_id(_collections(args), args.id, timeout=args.timeout))
    return _emit(envelope, "Voter not found")


def cmd_part(args: argparse.Namespace) -> int:
    envelope = asyncio.run(
        voters_api.get_voters_by_part(
            _collections(args), args.part_number, page=args.page, limit=args.limit, timeout=args.timeout
        )
    )
    return _emit(envelope, "Part not found")


def cmd_stats(args: argparse.Namespace) -> int:
    envelope = asyncio.run(voters_api.get_part_gender_stats(_collections(args), args.part_number, timeout=args.timeout))
    return _emit(envelope, "Part not found")


def cmd_parts(args: argparse.Namespace) -> int:
    envelope = asyncio.run(voters_api.list_part_numbers(_collections(args), timeout=args.timeout))
    return _emit(envelope)


def cmd_intake(args: argparse.Namespace) -> int:
    """Create one soon-to-be-eligible voter from a JSON object."""
    payload = json.loads(Path(args.file).read_text(encoding="utf-8")) if args.file else json.loads(args.json)
    if not isinstance(payload, dict):
        raise ValueError("Intake payload must be a JSON object")
    envelope = asyncio.run(voters_api.create_soon_voter(_collections(args), payload, timeout=args.timeout))
    return _emit(envelope)


def _add_paging(parser: argparse.ArgumentParser, search: bool = True) -> None:
    parser.add_argument("--page", type=str, default=None, help="Page number (default: 1)")
    parser.add_argument("--limit", type=str, default=None, help="Page size (default: 20)")
    if search:
        parser.add_argument("-q", "--q", type=str, default="", help="Search term (name or number)")


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Voter roll lookup and demographic summaries")
    parser.add_argument("--config", type=str, help="Path to voterroll.config.yaml")
    parser.add_argument("--db", type=str, help="SQLite path (overrides config)")
    subparsers = parser.add_subparsers(dest="command", help="Command to run")

    init_parser = subparsers.add_parser("init-db", help="Create database tables")
    init_parser.set_defaults(func=cmd_init_db)

    load_parser = subparsers.add_parser("load", help="Bulk-load a JSON or JSONL file into a collection")
    load_parser.add_argument("collection", choices=["voters", "age60", "soon"])
    load_parser.add_argument("file", type=str)
    load_parser.set_defaults(func=cmd_load)

    list_parser = subparsers.add_parser("list", help="Search the primary roll")
    _add_paging(list_parser)
    list_parser.set_defaults(func=cmd_list)

    age60_parser = subparsers.add_parser("age60", help="Search the age 60+ extract with gender summary")
    _add_paging(age60_parser)
    age60_parser.set_defaults(func=cmd_age60)

    soon_parser = subparsers.add_parser("soon", help="List soon-to-be-eligible intake records")
    _add_paging(soon_parser)
    soon_parser.set_defaults(func=cmd_soon)

    search_parser = subparsers.add_parser("search", help="Structured search by name and part number")
    search_parser.add_argument("--name", type=str, default=None)
    search_parser.add_argument("--part-no", type=str, default=None)
    _add_paging(search_parser, search=False)
    search_parser.set_defaults(func=cmd_search)

    age_range_parser = subparsers.add_parser("age-range", help="Primary roll records within an age range")
    age_range_parser.add_argument("--min-age", type=float, required=True)
    age_range_parser.add_argument("--max-age", type=float, required=True)
    _add_paging(age_range_parser, search=False)
    age_range_parser.set_defaults(func=cmd_age_range)

    get_parser = subparsers.add_parser("get", help="Get a voter by id")
    get_parser.add_argument("id", type=str)
    get_parser.set_defaults(func=cmd_get)

    part_parser = subparsers.add_parser("part", help="Voters in a part")
    part_parser.add_argument("part_number", type=str)
    _add_paging(part_parser, search=False)
    part_parser.set_defaults(func=cmd_part)

    stats_parser = subparsers.add_parser("stats", help="Gender stats for a part")
    stats_parser.add_argument("part_number", type=str)
    stats_parser.set_defaults(func=cmd_stats)

    parts_parser = subparsers.add_parser("parts", help="List distinct part numbers")
    parts_parser.set_defaults(func=cmd_parts)

    intake_parser = subparsers.add_parser("intake", help="Create a soon-to-be-eligible voter")
    intake_group = intake_parser.add_mutually_exclusive_group(required=True)
    intake_group.add_argument("--json", type=str, help="Inline JSON object")
    intake_group.add_argument("--file", type=str, help="Path to a JSON object")
    intake_parser.set_defaults(func=cmd_intake)

    return parser


def main(argv: Optional[List[str]] = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)

    if not args.command:
        parser.print_help()
        return 0

    args.settings = _load_settings(args)
    configure_logging(get_log_level(args.settings))
    args.timeout = get_query_timeout(args.settings)

    try:
        return args.func(args)
    except VoterRollError as e:
        logger.error(f"Error running command '{args.command}': {e}", exc_info=True)
        print(json.dumps(failure_envelope(e).to_dict(), indent=2))
        return 1


if __name__ == "__main__":
    sys.exit(main())
