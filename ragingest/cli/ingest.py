"""Standalone CLI for the ragingest pipelines.

Usage::

    python -m ragingest.cli.ingest ingest docs/faq.json notes.txt --owner-id u-42

    python -m ragingest.cli.ingest process-binary 3f2a... 9bc1...

    python -m ragingest.cli.ingest ensure-schema

Uses the same provider wiring as the web server (:func:`ragingest.main.build_pipeline`),
so the same ``.env`` / ``config/config.yaml`` apply.
"""

from __future__ import annotations

import argparse
import asyncio
import base64
import mimetypes
import sys
from pathlib import Path
from typing import Any

from ragingest.models.ingest import TEXT_EXTENSIONS, IngestFile, is_text_file_name
from ragingest.utils.errors import IngestError


def read_ingest_file(path: Path, text_extensions: frozenset[str] = TEXT_EXTENSIONS) -> IngestFile:
    """Read *path* into an :class:`IngestFile`.

    Text files are read as UTF-8; everything else is base64-encoded, as an
    upload client would send it.
    """
    mime_type, _ = mimetypes.guess_type(path.name)
    raw = path.read_bytes()
    if is_text_file_name(path.name, text_extensions):
        return IngestFile.from_upload(
            name=path.name,
            content=raw.decode("utf-8", errors="replace"),
            mime_type=mime_type or "text/plain",
            byte_size=len(raw),
            is_text_file=True,
        )
    return IngestFile.from_upload(
        name=path.name,
        content=base64.b64encode(raw).decode("ascii"),
        mime_type=mime_type or "application/octet-stream",
        byte_size=len(raw),
        is_text_file=False,
    )


async def _handle_ingest(args: argparse.Namespace, components: dict[str, Any]) -> int:
    config = components["ingestion_config"]
    files: list[IngestFile] = []
    for raw_path in args.paths:
        path = Path(raw_path)
        if not path.is_file():
            print(f"Error: not a file: {path}", file=sys.stderr)
            return 1
        files.append(read_ingest_file(path, config.text_extensions))

    print(f"Ingesting {len(files)} file(s) into class '{config.class_name}'")
    summary = await components["ingestion_service"].ingest_files(
        files,
        owner_id=args.owner_id,
        owner_name=args.owner_name,
    )

    print("\nIngestion complete:")
    for text_file in summary.text_files:
        print(f"  [text]   {text_file.name:<40} {text_file.chunk_count} chunks")
    for binary in summary.binary_files:
        print(f"  [binary] {binary.name:<40} id={binary.id}")
    for failed in summary.failed_files:
        print(f"  [failed] {failed.name:<40} {failed.error}")
    return 1 if summary.failed_files else 0


async def _handle_process_binary(args: argparse.Namespace, components: dict[str, Any]) -> int:
    print(f"Processing {len(args.file_ids)} stored binary file(s)")
    processed = await components["binary_processor"].process_binary_files(
        args.file_ids,
        owner_id=args.owner_id,
    )
    for item in processed:
        print(f"  {item.name:<40} -> {item.sidecar_name} ({item.extracted_length} chars)")

    done = {item.id for item in processed}
    skipped = [fid for fid in dict.fromkeys(args.file_ids) if fid not in done]
    for file_id in skipped:
        print(f"  skipped: {file_id}")
    print(f"\nProcessed {len(processed)}, skipped {len(skipped)}.")
    return 0


async def _handle_ensure_schema(components: dict[str, Any]) -> int:
    bootstrapper = components["schema_bootstrapper"]
    await bootstrapper.ensure_schema()
    print(f"Class '{bootstrapper.schema.class_name}' is ready.")
    return 0


async def _run(args: argparse.Namespace, components: dict[str, Any]) -> int:
    try:
        await components["file_records"].initialize()
        if args.command == "ingest":
            return await _handle_ingest(args, components)
        if args.command == "process-binary":
            return await _handle_process_binary(args, components)
        return await _handle_ensure_schema(components)
    except IngestError as exc:
        print(f"Error: {exc}", file=sys.stderr)
        return 1
    finally:
        await components["http_client"].aclose()


def _build_parser() -> argparse.ArgumentParser:
    """Build the argparse parser for the ingestion CLI."""
    parser = argparse.ArgumentParser(
        prog="ragingest",
        description="Ingest documents into the ragingest vector index.",
    )
    subparsers = parser.add_subparsers(dest="command")

    ingest_parser = subparsers.add_parser("ingest", help="Index text files and store binaries")
    ingest_parser.add_argument("paths", nargs="+", help="Files to ingest")
    ingest_parser.add_argument("--owner-id", default=None, help="Owner of the upload")
    ingest_parser.add_argument("--owner-name", default=None, help="Sender name for free-text files")

    binary_parser = subparsers.add_parser(
        "process-binary",
        help="Extract and index previously stored binary files",
    )
    binary_parser.add_argument("file_ids", nargs="+", help="File record ids")
    binary_parser.add_argument("--owner-id", default=None, help="Owner folder for the .txt sidecars")

    subparsers.add_parser("ensure-schema", help="Create the index class if it does not exist")
    return parser


def main(argv: list[str] | None = None) -> None:
    """CLI entry point."""
    parser = _build_parser()
    args = parser.parse_args(argv)

    if args.command is None:
        parser.print_help()
        sys.exit(1)

    # Deferred: importing main configures logging and reads the environment.
    from ragingest.main import build_pipeline

    try:
        components = build_pipeline()
    except IngestError as exc:
        print(f"Error: {exc}", file=sys.stderr)
        sys.exit(1)

    sys.exit(asyncio.run(_run(args, components)))


if __name__ == "__main__":
    main()
