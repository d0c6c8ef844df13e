"""Unit tests for the JSON / JSONL / CSV / free-text parsers."""

from __future__ import annotations

import json
from datetime import date

import pytest

from ragingest.models.ingest import DocumentMetadata
from ragingest.services.ingestion.parsers import (
    blob_type_for,
    build_text_block,
    format_block,
    parse_csv_blocks,
    parse_json_blocks,
    text_format_for,
)
from ragingest.utils.errors import ParseError

_TODAY = date(2024, 5, 1)


class TestFormatDispatch:
    @pytest.mark.parametrize(
        ("name", "expected"),
        [
            ("faq.json", "json"),
            ("FAQ.JSONL", "json"),
            ("rows.csv", "csv"),
            ("notes.txt", "text"),
            ("README.md", "text"),
            ("noextension", "text"),
        ],
    )
    def test_text_format_for(self, name: str, expected: str) -> None:
        assert text_format_for(name) == expected
        assert blob_type_for(name) == expected


class TestParseJson:
    def test_array_items_and_default_title(self) -> None:
        content = '[{"content":"A","title":"T1"},{"content":"B"}]'

        blocks = parse_json_blocks("faq.json", content, today=_TODAY)

        assert len(blocks) == 2
        assert blocks[0].title == "T1"
        assert blocks[1].title == "Item 2"
        assert blocks[1].text == format_block(
            sender_name="User",
            receiver_name="ChatBot",
            title="Item 2",
            content="B",
            category="General",
            department="Support",
            effective_date="2024-05-01",
        )

    def test_item_fields_override_defaults(self) -> None:
        item = {
            "text": "Reset your password from the login page.",
            "name": "Password reset",
            "sender_name": "Alice",
            "receiver_name": "Helpdesk",
            "category": "Accounts",
            "department": "IT",
            "effective_date": "2023-01-15",
        }

        [block] = parse_json_blocks("kb.json", json.dumps(item), today=_TODAY)

        assert block.title == "Password reset"
        assert 'sender_name: "Alice", receiver_name: "Helpdesk"' in block.text
        assert 'category: "Accounts"; department: "IT"' in block.text
        assert 'effective_date: "2023-01-15";' in block.text

    def test_single_object_is_one_item(self) -> None:
        blocks = parse_json_blocks("one.json", '{"content": "solo"}', today=_TODAY)
        assert len(blocks) == 1
        assert blocks[0].title == "Item 1"

    def test_items_without_content_are_skipped(self) -> None:
        content = '[{"title": "empty"}, "just a string", {"content": "kept"}]'

        blocks = parse_json_blocks("mixed.json", content, today=_TODAY)

        assert len(blocks) == 1
        assert blocks[0].title == "Item 3"

    def test_jsonl_fallback_skips_bad_lines(self) -> None:
        content = '{"content": "first"}\nnot json at all\n\n{"content": "third", "title": "C"}\n'

        blocks = parse_json_blocks("log.jsonl", content, today=_TODAY)

        assert [b.title for b in blocks] == ["Item 1", "C"]

    def test_malformed_json_raises_parse_error(self) -> None:
        with pytest.raises(ParseError, match="Could not parse broken.json"):
            parse_json_blocks("broken.json", "{not json")

    @pytest.mark.parametrize("content", ["[]", '[{"foo": 1}, {"bar": 2}]', '["a", 3]'])
    def test_no_item_with_content_raises_parse_error(self, content: str) -> None:
        with pytest.raises(ParseError, match="faq.json contains no items"):
            parse_json_blocks("faq.json", content)


class TestParseCsv:
    def test_rows_become_header_value_blocks(self) -> None:
        blocks = parse_csv_blocks("data.csv", "a,b\n1,2\n3,4")

        assert [b.text for b in blocks] == ["a: 1; b: 2", "a: 3; b: 4"]
        assert [b.title for b in blocks] == ["data.csv - Row 1", "data.csv - Row 2"]

    def test_quoted_commas_are_respected(self) -> None:
        [block] = parse_csv_blocks("q.csv", 'name,note\n"Smith, J","says ""hi"""')
        assert block.text == 'name: Smith, J; note: says "hi"'

    def test_short_rows_fill_missing_values(self) -> None:
        [block] = parse_csv_blocks("short.csv", "a,b,c\n1")
        assert block.text == "a: 1; b: ; c: "

    def test_blank_rows_are_skipped(self) -> None:
        blocks = parse_csv_blocks("gaps.csv", "a,b\n1,2\n\n,\n3,4")
        assert [b.text for b in blocks] == ["a: 1; b: 2", "a: 3; b: 4"]

    @pytest.mark.parametrize("content", ["a,b\n", "a,b\n\n,\n"])
    def test_no_data_rows_raises_parse_error(self, content: str) -> None:
        with pytest.raises(ParseError, match="rows.csv has no data rows"):
            parse_csv_blocks("rows.csv", content)

    def test_empty_file_raises_parse_error(self) -> None:
        with pytest.raises(ParseError):
            parse_csv_blocks("empty.csv", "   ")


class TestBuildTextBlock:
    def test_wraps_content_with_metadata(self) -> None:
        metadata = DocumentMetadata(
            title="Onboarding Guide",
            category="Documentation",
            department="HR",
            effective_date=_TODAY,
        )

        block = build_text_block('Say "hello" to the team.', metadata, sender_name="Dana")

        assert block.title == "Onboarding Guide"
        assert block.number_parts is False
        assert block.text.startswith('sender_name: "Dana", receiver_name: "ChatBot"')
        assert 'content: "Say \\"hello\\" to the team.";' in block.text
        assert 'effective_date: "2024-05-01";' in block.text

    def test_empty_sender_falls_back_to_default(self) -> None:
        metadata = DocumentMetadata(title="x", effective_date=_TODAY)
        block = build_text_block("body", metadata, sender_name="")
        assert block.text.startswith('sender_name: "User"')
