"""Standalone CLI over the document pipeline.

Usage::

    python -m docprocessor.cli process invoice.pdf
    python -m docprocessor.cli process receipt.png --json
    python -m docprocessor.cli search email
    python -m docprocessor.cli search "Invoice Number" --exact
    python -m docprocessor.cli lookup invoice
    python -m docprocessor.cli lookup "@example.com" --value
    python -m docprocessor.cli stats

Builds the same components as the web application (settings from ``.env``
and the environment, tuning from ``config/config.yaml``) and talks to the
same SQLite database, so documents processed here show up in the API.
"""

from __future__ import annotations

import argparse
import asyncio
import json
import mimetypes
import sys
from pathlib import Path
from typing import Any

from docprocessor.models.document import MediaType, UploadedFile
from docprocessor.models.index import ExactSearchResult, IndexEntry, PartialSearchResult
from docprocessor.utils.errors import DocumentProcessorError

_SEPARATOR = "=" * 60


# ---------------------------------------------------------------------------
# Formatting helpers
# ---------------------------------------------------------------------------


def _guess_mime_type(path: Path) -> str:
    mime_type, _ = mimetypes.guess_type(path.name)
    return mime_type or "application/octet-stream"


def _format_value(value: Any) -> str:
    if isinstance(value, (dict, list)):
        return json.dumps(value, ensure_ascii=False, default=str)
    return str(value)


def _format_search(result: ExactSearchResult | PartialSearchResult) -> str:
    lines = [_SEPARATOR, f"  Key search: {result.search_key!r} ({result.search_type})", _SEPARATOR]

    if isinstance(result, ExactSearchResult):
        lines.append(
            f"{result.total_results} entries across {result.total_documents} documents"
        )
        for freq in result.value_frequency:
            lines.append(f"  {freq.count:>4}  {_format_value(freq.value)}")
            lines.append(f"        {', '.join(freq.filenames)}")
    else:
        lines.append(
            f"{result.total_matches} matches across {result.total_documents} documents"
        )
        for group in result.results:
            lines.append(f"  {group.original_filename}  [{group.document_id}]")
            for match in group.matches:
                lines.append(f"    {match.key}: {_format_value(match.value)}")

    return "\n".join(lines)


def _format_entries(term: str, entries: list[IndexEntry], by_value: bool) -> str:
    field = "value" if by_value else "key"
    lines = [_SEPARATOR, f"  Entries with {field} containing {term!r}", _SEPARATOR]
    lines.append(f"{len(entries)} entries")
    for entry in entries:
        lines.append(f"  {entry.original_filename}  [{entry.document_id}]")
        lines.append(f"    {entry.key}: {_format_value(entry.value)}")
    return "\n".join(lines)


# ---------------------------------------------------------------------------
# Commands
# ---------------------------------------------------------------------------


async def _run(args: argparse.Namespace) -> int:
    # Deferred: importing main builds the FastAPI app and configures logging.
    from docprocessor.main import build_components, initialize_components, settings

    try:
        components = build_components(settings)
        await initialize_components(components)
        service = components["document_service"]

        if args.command == "process":
            return await _process(service, Path(args.file).resolve(), args.json_output)
        if args.command == "search":
            result = await service.search_by_key(args.key, exact=args.exact, limit=args.limit)
            if args.json_output:
                print(json.dumps(result.model_dump(mode="json"), indent=2))
            else:
                print(_format_search(result))
            return 0
        if args.command == "lookup":
            entries = await service.lookup_entries(args.term, by_value=args.value, limit=args.limit)
            if args.json_output:
                print(json.dumps([e.model_dump(mode="json") for e in entries], indent=2))
            else:
                print(_format_entries(args.term, entries, args.value))
            return 0
        if args.command == "stats":
            return await _stats(service, args.limit, args.json_output)
    except DocumentProcessorError as exc:
        print(f"Error: {exc.message}", file=sys.stderr)
        return 1

    return 2


async def _process(service, path: Path, json_output: bool) -> int:  # noqa: ANN001
    if not path.exists():
        print(f"Error: File not found: {path}", file=sys.stderr)
        return 1

    mime_type = _guess_mime_type(path)
    if MediaType.parse(mime_type) is None:
        print(f"Error: Unsupported file type: {mime_type}", file=sys.stderr)
        return 1

    upload = UploadedFile(
        original_filename=path.name,
        mime_type=mime_type,
        content=path.read_bytes(),
    )
    print(f"Processing: {path.name} ({upload.size:,} bytes)", file=sys.stderr)
    result = await service.process(upload)

    if json_output:
        print(json.dumps(result.model_dump(mode="json"), indent=2))
        return 0

    print(_SEPARATOR)
    print(f"  {result.original_filename}  [{result.id}]")
    print(_SEPARATOR)
    for pair in result.key_value_pairs:
        print(f"  {pair.key}: {_format_value(pair.value)}")
    print("")
    print(
        f"{len(result.key_value_pairs)} pairs, {result.indexed_entries} indexed, "
        f"confidence {result.confidence:.0%}, {result.processing_time_ms} ms"
    )
    return 0


async def _stats(service, limit: int, json_output: bool) -> int:  # noqa: ANN001
    doc_stats = await service.document_stats()
    key_stats = await service.key_statistics(limit)

    if json_output:
        payload = {
            "documents": doc_stats.model_dump(mode="json"),
            "keys": [s.model_dump(mode="json") for s in key_stats],
        }
        print(json.dumps(payload, indent=2))
        return 0

    print(
        f"Documents: {doc_stats.total_documents} "
        f"({doc_stats.recent_documents} in the last 7 days)"
    )
    print(f"Distinct keys: {len(key_stats)}")
    for stat in key_stats:
        print(f"  {stat.count:>5}  {stat.unique_value_count:>5} unique  {stat.key}")
    return 0


# ---------------------------------------------------------------------------
# CLI entry point
# ---------------------------------------------------------------------------


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="python -m docprocessor.cli",
        description="Process documents and query the key-value index from the command line.",
    )
    subparsers = parser.add_subparsers(dest="command", required=True)

    process = subparsers.add_parser("process", help="Extract and index one PDF or image.")
    process.add_argument("file", type=str, help="Path to a PDF, JPEG or PNG file.")
    process.add_argument("--json", action="store_true", dest="json_output")

    search = subparsers.add_parser("search", help="Search the key-value index by key.")
    search.add_argument("key", type=str)
    search.add_argument(
        "--exact",
        action="store_true",
        help="Match the raw key exactly instead of a normalized substring.",
    )
    search.add_argument("--limit", type=int, default=100)
    search.add_argument("--json", action="store_true", dest="json_output")

    lookup = subparsers.add_parser(
        "lookup", help="List raw index entries whose key or value contains a term."
    )
    lookup.add_argument("term", type=str)
    lookup.add_argument(
        "--value",
        action="store_true",
        help="Match against string values instead of keys.",
    )
    lookup.add_argument("--limit", type=int, default=50)
    lookup.add_argument("--json", action="store_true", dest="json_output")

    stats = subparsers.add_parser("stats", help="Print document and key usage statistics.")
    stats.add_argument("--limit", type=int, default=50)
    stats.add_argument("--json", action="store_true", dest="json_output")

    return parser


def main(argv: list[str] | None = None) -> None:
    """CLI entry point; exits with the command's status code."""
    args = _build_parser().parse_args(argv)
    sys.exit(asyncio.run(_run(args)))


if __name__ == "__main__":
    main()
