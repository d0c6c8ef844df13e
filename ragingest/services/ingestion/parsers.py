"""Format-specific text-file parsers.

Each parser turns one text file into a list of :class:`TextBlock` objects
that the chunker splits independently:

* ``.json`` / ``.jsonl`` -- one block per item, in the structured block format
* ``.csv`` -- one ``"header: value; ..."`` block per data row
* anything else -- the whole file as one structured block, titled by the
  metadata enricher

Structured block format::

    sender_name: "<s>", receiver_name: "<r>", title: "<t>"; content: "<c>";
    category: "<cat>"; department: "<dep>"; effective_date: "<YYYY-MM-DD>";

(on one line).  Recoverable problems -- an unparsable JSONL line, a JSON
item without content, a malformed CSV row -- are logged and skipped.  A
file that yields no items at all raises :class:`ParseError`.
"""

from __future__ import annotations

import csv
import io
import json
from datetime import date
from typing import Any

import structlog

from ragingest.models.ingest import DocumentMetadata, TextBlock, file_extension
from ragingest.utils.errors import ParseError

logger = structlog.get_logger(logger_name=__name__)

DEFAULT_SENDER = "User"
DEFAULT_RECEIVER = "ChatBot"
DEFAULT_CATEGORY = "General"
DEFAULT_DEPARTMENT = "Support"

_JSON_EXTENSIONS = frozenset({".json", ".jsonl"})


def text_format_for(name: str) -> str:
    """Return the parser family for *name*: ``"json"``, ``"csv"`` or ``"text"``."""
    ext = file_extension(name)
    if ext in _JSON_EXTENSIONS:
        return "json"
    if ext == ".csv":
        return "csv"
    return "text"


def blob_type_for(name: str) -> str:
    """Return the ``blobType`` property written for chunks of *name*."""
    return text_format_for(name)


def format_block(
    *,
    sender_name: str,
    receiver_name: str,
    title: str,
    content: str,
    category: str,
    department: str,
    effective_date: str,
) -> str:
    """Render the structured block embedded in every JSON item and text file."""
    return (
        f'sender_name: "{sender_name}", receiver_name: "{receiver_name}", title: "{title}"; '
        f'content: "{content}"; category: "{category}"; department: "{department}"; '
        f'effective_date: "{effective_date}";'
    )


# ---------------------------------------------------------------------------
# JSON / JSONL
# ---------------------------------------------------------------------------


def _load_json_items(name: str, content: str) -> list[Any]:
    """Parse *content* as one JSON document, falling back to JSONL."""
    try:
        parsed = json.loads(content)
    except json.JSONDecodeError:
        logger.info("json_parse_failed_trying_jsonl", file_name=name)
    else:
        return parsed if isinstance(parsed, list) else [parsed]

    items: list[Any] = []
    for line_number, line in enumerate(content.strip().splitlines(), start=1):
        line = line.strip()
        if not line:
            continue
        try:
            items.append(json.loads(line))
        except json.JSONDecodeError:
            logger.warning(
                "jsonl_line_skipped",
                file_name=name,
                line=line_number,
                preview=line[:50],
            )

    if not items:
        raise ParseError(
            message=(
                f"Could not parse {name} as JSON or JSONL format. "
                "Please ensure the file contains valid JSON."
            ),
        )
    return items


def _field(item: dict[str, Any], *keys: str) -> str:
    """Return the first truthy value among *keys*, as a string."""
    for key in keys:
        value = item.get(key)
        if value:
            return value if isinstance(value, str) else str(value)
    return ""


def parse_json_blocks(name: str, content: str, today: date | None = None) -> list[TextBlock]:
    """Build one structured block per JSON (or JSONL) item.

    A top-level object is treated as a one-item array.  Items that are not
    objects or carry neither ``content`` nor ``text`` are skipped.

    Raises
    ------
    ParseError
        If neither JSON nor JSONL parsing yields any item, or no item
        carries content.
    """
    effective_default = (today or date.today()).isoformat()
    items = _load_json_items(name, content)

    blocks: list[TextBlock] = []
    for index, item in enumerate(items):
        if not isinstance(item, dict):
            logger.warning("json_item_skipped", file_name=name, item=index, reason="not an object")
            continue
        text = _field(item, "content", "text")
        if not text:
            logger.warning("json_item_skipped", file_name=name, item=index, reason="no content")
            continue
        title = _field(item, "title", "name") or f"Item {index + 1}"
        blocks.append(
            TextBlock(
                title=title,
                text=format_block(
                    sender_name=_field(item, "sender_name") or DEFAULT_SENDER,
                    receiver_name=_field(item, "receiver_name") or DEFAULT_RECEIVER,
                    title=title,
                    content=text,
                    category=_field(item, "category") or DEFAULT_CATEGORY,
                    department=_field(item, "department") or DEFAULT_DEPARTMENT,
                    effective_date=_field(item, "effective_date") or effective_default,
                ),
            )
        )

    if not blocks:
        raise ParseError(message=f"{name} contains no items with content")
    logger.info("json_file_parsed", file_name=name, items=len(items), blocks=len(blocks))
    return blocks


# ---------------------------------------------------------------------------
# CSV
# ---------------------------------------------------------------------------


def parse_csv_blocks(name: str, content: str) -> list[TextBlock]:
    """Build one ``"header: value; ..."`` block per CSV data row.

    The first row is the header.  Blank rows and rows the csv module rejects
    are skipped; short rows fill missing values with ``""``.

    Raises
    ------
    ParseError
        If the file has no header row or no non-blank data row.
    """
    reader = csv.reader(io.StringIO(content.strip()))
    try:
        headers = next(reader)
    except StopIteration:
        headers = []
    except csv.Error as exc:
        raise ParseError(message=f"Could not read CSV header of {name}: {exc}") from exc
    if not headers:
        raise ParseError(message=f"CSV file {name} has no header row")

    blocks: list[TextBlock] = []
    row_number = 0
    while True:
        row_number += 1
        try:
            row = next(reader)
        except StopIteration:
            break
        except csv.Error as exc:
            logger.warning("csv_row_skipped", file_name=name, row=row_number, error=str(exc))
            continue
        if not any(cell.strip() for cell in row):
            continue
        row_text = "; ".join(
            f"{header}: {row[idx] if idx < len(row) else ''}" for idx, header in enumerate(headers)
        )
        blocks.append(TextBlock(title=f"{name} - Row {row_number}", text=row_text))

    if not blocks:
        raise ParseError(message=f"CSV file {name} has no data rows")
    logger.info("csv_file_parsed", file_name=name, rows=len(blocks))
    return blocks


# ---------------------------------------------------------------------------
# Free text
# ---------------------------------------------------------------------------


def build_text_block(
    content: str,
    metadata: DocumentMetadata,
    sender_name: str = DEFAULT_SENDER,
) -> TextBlock:
    """Wrap a whole free-text file in one structured block.

    Double quotes in *content* are escaped.  Every chunk of the block
    carries the enriched title unchanged.
    """
    return TextBlock(
        title=metadata.title,
        number_parts=False,
        text=format_block(
            sender_name=sender_name or DEFAULT_SENDER,
            receiver_name=DEFAULT_RECEIVER,
            title=metadata.title,
            content=content.replace('"', '\\"'),
            category=metadata.category,
            department=metadata.department,
            effective_date=metadata.effective_date.isoformat(),
        ),
    )
