"""
Tests for Featured records — parsing, table rendering, selection parsing

These tests validate:
- Strict decoding of required fields, permissive category
- Table shape (header + one row per record, input order)
- Repo extraction from a chosen row
- Non-interactive best match
"""

import json
import sys

import pytest

from repobrowse.core.featured import (
    RepoRecord, FEATURED_FILENAME, TABLE_DELIMITER, TABLE_COLUMNS,
    parse_featured, load_featured, render_table, extract_repo, best_match,
)
from repobrowse.errors import DecodeError, ReadError


HEADER = "Repo\tDescription\tTags\tStars\tLast Updated\n"


def record(**overrides):
    base = {
        "repo": "grenkoca/cheats",
        "description": "demo",
        "tags": ["cli", "rust"],
        "stars": 5,
        "last_updated": "2024-01-01",
        "category": None,
    }
    base.update(overrides)
    return base


# =============================================================================
# Parsing
# =============================================================================

class TestParseFeatured:
    """Decode the featured document."""

    def test_decodes_all_fields(self):
        records = parse_featured(json.dumps([record(category="tools")]))

        assert records == [RepoRecord(
            repo="grenkoca/cheats",
            description="demo",
            tags=("cli", "rust"),
            stars=5,
            last_updated="2024-01-01",
            category="tools",
        )]

    def test_preserves_document_order(self, sample_json, sample_records):
        records = parse_featured(sample_json)
        assert [r.repo for r in records] == [r["repo"] for r in sample_records]

    def test_empty_array(self):
        assert parse_featured("[]") == []

    def test_category_omitted_is_valid(self):
        data = record()
        del data["category"]

        records = parse_featured(json.dumps([data]))

        assert records[0].category is None

    def test_category_null_is_valid(self):
        records = parse_featured(json.dumps([record(category=None)]))
        assert records[0].category is None

    @pytest.mark.parametrize("field", ["repo", "description", "tags", "stars", "last_updated"])
    def test_missing_required_field_fails(self, field):
        data = record()
        del data[field]

        with pytest.raises(DecodeError) as exc:
            parse_featured(json.dumps([data]))

        assert field in str(exc.value)

    def test_missing_field_in_later_record_fails_whole_document(self):
        bad = record(repo="b/b")
        del bad["stars"]

        with pytest.raises(DecodeError) as exc:
            parse_featured(json.dumps([record(), bad]))

        assert "record 1" in str(exc.value)

    @pytest.mark.parametrize("field,value", [
        ("repo", 42),
        ("description", None),
        ("tags", "cli, rust"),
        ("tags", ["cli", 3]),
        ("stars", "5"),
        ("stars", 4.5),
        ("stars", True),
        ("stars", -1),
        ("last_updated", 20240101),
        ("category", 7),
    ])
    def test_wrong_value_type_fails(self, field, value):
        with pytest.raises(DecodeError):
            parse_featured(json.dumps([record(**{field: value})]))

    def test_invalid_json_fails(self):
        with pytest.raises(DecodeError) as exc:
            parse_featured("[{not json")
        assert "Failed to parse featured repositories JSON" in str(exc.value)

    def test_deeply_nested_json_fails(self):
        with pytest.raises(DecodeError) as exc:
            parse_featured("[" * 200000 + "]" * 200000)
        assert "Failed to parse featured repositories JSON" in str(exc.value)

    @pytest.mark.skipif(not hasattr(sys, "set_int_max_str_digits"),
                        reason="Integer digit limit needs Python 3.11+")
    def test_oversized_integer_fails(self):
        text = json.dumps([record()]).replace('"stars": 5', '"stars": ' + "9" * 5000)

        with pytest.raises(DecodeError):
            parse_featured(text)

    def test_non_array_document_fails(self):
        with pytest.raises(DecodeError):
            parse_featured(json.dumps(record()))

    def test_non_object_entry_fails(self):
        with pytest.raises(DecodeError):
            parse_featured(json.dumps(["grenkoca/cheats"]))

    def test_records_are_immutable(self):
        rec = parse_featured(json.dumps([record()]))[0]
        with pytest.raises(AttributeError):
            rec.repo = "other/repo"


class TestLoadFeatured:
    """Read the featured file from a directory."""

    def test_reads_default_filename(self, tmp_path, sample_json):
        (tmp_path / FEATURED_FILENAME).write_text(sample_json, encoding="utf-8")

        records = load_featured(tmp_path)

        assert len(records) == 3

    def test_custom_filename(self, tmp_path, sample_json):
        (tmp_path / "other.json").write_text(sample_json, encoding="utf-8")
        assert len(load_featured(tmp_path, "other.json")) == 3

    def test_missing_file_is_read_error(self, tmp_path):
        with pytest.raises(ReadError) as exc:
            load_featured(tmp_path)

        assert FEATURED_FILENAME in str(exc.value)
        assert exc.value.path == tmp_path / FEATURED_FILENAME

    def test_non_utf8_file_is_read_error(self, tmp_path):
        (tmp_path / FEATURED_FILENAME).write_bytes(b"\xff\xfe[]")
        with pytest.raises(ReadError):
            load_featured(tmp_path)

    def test_malformed_file_is_decode_error(self, tmp_path):
        (tmp_path / FEATURED_FILENAME).write_text("{}", encoding="utf-8")
        with pytest.raises(DecodeError):
            load_featured(tmp_path)


# =============================================================================
# Rendering
# =============================================================================

class TestRenderTable:
    """Tab-delimited table for the finder."""

    def test_example_row(self):
        records = parse_featured(json.dumps([record()]))

        table = render_table(records)

        assert table == HEADER + "grenkoca/cheats\tdemo\tcli, rust\t5\t2024-01-01\n"

    def test_header_only_for_no_records(self):
        assert render_table([]) == HEADER

    def test_one_line_per_record_plus_header(self, sample_json):
        records = parse_featured(sample_json)

        lines = render_table(records).splitlines()

        assert len(lines) == len(records) + 1
        assert lines[0] == TABLE_DELIMITER.join(TABLE_COLUMNS)

    def test_rows_follow_input_order(self, sample_json):
        records = parse_featured(sample_json)

        rows = render_table(records).splitlines()[1:]

        assert [row.split(TABLE_DELIMITER)[0] for row in rows] == [r.repo for r in records]

    def test_every_line_newline_terminated(self, sample_json):
        table = render_table(parse_featured(sample_json))
        assert table.endswith("\n")
        assert "\n\n" not in table

    def test_fields_split_back_to_values(self, sample_json):
        records = parse_featured(sample_json)

        rows = render_table(records).splitlines()[1:]

        for rec, row in zip(records, rows):
            repo, description, tags, stars, last_updated = row.split(TABLE_DELIMITER)
            assert repo == rec.repo
            assert description == rec.description
            assert tags == ", ".join(rec.tags)
            assert int(stars) == rec.stars
            assert last_updated == rec.last_updated

    def test_empty_tags_render_empty_column(self):
        rec = parse_featured(json.dumps([record(tags=[])]))[0]
        assert rec.to_row().split(TABLE_DELIMITER)[2] == ""

    def test_embedded_delimiter_only_affects_its_row(self):
        records = parse_featured(json.dumps([
            record(repo="a/a", description="has\ttab"),
            record(repo="b/b"),
        ]))

        rows = render_table(records).splitlines()[1:]

        assert len(rows[0].split(TABLE_DELIMITER)) == 6
        assert len(rows[1].split(TABLE_DELIMITER)) == 5


# =============================================================================
# Extraction
# =============================================================================

class TestExtractRepo:
    """First column of the chosen row."""

    def test_rendered_row_yields_repo(self, sample_json):
        records = parse_featured(sample_json)
        for rec, row in zip(records, render_table(records).splitlines(keepends=True)[1:]):
            assert extract_repo(row) == rec.repo

    def test_example_selection(self):
        assert extract_repo("grenkoca/cheats\tdemo\tcli, rust\t5\t2024-01-01") == "grenkoca/cheats"

    def test_empty_line_yields_empty_string(self):
        assert extract_repo("") == ""

    def test_line_without_delimiter_yields_empty_string(self):
        assert extract_repo("grenkoca/cheats") == ""

    def test_trailing_newline_ignored(self):
        assert extract_repo("a/b\tx\t\t1\td\n") == "a/b"


# =============================================================================
# Best match
# =============================================================================

class TestBestMatch:
    """Non-interactive selection with rapidfuzz."""

    def test_matches_repo_name(self, sample_json):
        records = parse_featured(sample_json)
        assert best_match(records, "kubectl") == "someone/kubectl-cheats"

    def test_matches_tags_and_description(self, sample_json):
        records = parse_featured(sample_json)
        assert best_match(records, "docker shell") == "denisidoro/cheats"

    def test_word_order_insensitive(self, sample_json):
        records = parse_featured(sample_json)
        assert best_match(records, "rust cli") == best_match(records, "cli rust") == "grenkoca/cheats"

    def test_no_match_yields_empty_string(self, sample_json):
        records = parse_featured(sample_json)
        assert best_match(records, "zzzzqqqq") == ""

    def test_blank_query_yields_empty_string(self, sample_json):
        assert best_match(parse_featured(sample_json), "   ") == ""

    def test_no_records(self):
        assert best_match([], "anything") == ""
