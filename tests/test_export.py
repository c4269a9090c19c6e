"""
Tests for the response export formatter.

The CSV layout is a compatibility surface, so these tests pin exact text.
"""

import json

import pytest

from surveyengine.answers import MultiAnswer, SingleAnswer
from surveyengine.backends import ExportFormat, export_filename, export_responses, save_export_file
from surveyengine.backends.export import CSV_HEADER, format_csv, format_json
from surveyengine.model import ResponseRecord


def record(rid="1", survey_id="s1", submitted_at="2024-01-01T00:00:00Z", client_meta="UA", **kwargs):
    return ResponseRecord(id=rid, survey_id=survey_id, submitted_at=submitted_at,
                          client_meta=client_meta, **kwargs)


class TestCsv:
    """Test CSV output."""

    def test_single_record_exact_text(self):
        text = export_responses([record()], "csv")
        assert text == "Response ID,Survey ID,Submitted At,User Agent\n1,s1,2024-01-01T00:00:00Z,UA"

    def test_rows_in_input_order(self):
        text = format_csv([record(rid="b"), record(rid="a")])
        assert [line.split(",")[0] for line in text.splitlines()[1:]] == ["b", "a"]

    def test_header_is_fixed(self):
        assert ",".join(CSV_HEADER) == "Response ID,Survey ID,Submitted At,User Agent"

    def test_empty_input_exports_empty_string(self):
        assert format_csv([]) == ""

    def test_embedded_commas_not_escaped(self):
        text = format_csv([record(client_meta="Mozilla/5.0 (X11, Linux)")])
        assert text.splitlines()[1] == "1,s1,2024-01-01T00:00:00Z,Mozilla/5.0 (X11, Linux)"
        assert len(text.splitlines()[1].split(",")) == 5

    def test_answers_not_in_csv(self):
        text = format_csv([record(answers={"q1": SingleAnswer("secret")})])
        assert "secret" not in text


class TestJson:
    """Test JSON output."""

    def test_pretty_printed_records(self):
        r = record(answers={"q1": SingleAnswer(4), "q2": MultiAnswer(("a", "b"))},
                   time_spent_seconds=42)
        text = format_json([r])
        assert "\n  " in text
        data = json.loads(text)
        assert data == [{
            "id": "1",
            "surveyId": "s1",
            "answers": {"q1": 4, "q2": ["a", "b"]},
            "submittedAt": "2024-01-01T00:00:00Z",
            "timeSpentSeconds": 42,
            "completed": True,
            "clientMeta": "UA",
        }]

    def test_empty_list(self):
        assert json.loads(export_responses([], ExportFormat.JSON)) == []


class TestFormatMetadata:
    """Test filenames, MIME types and format parsing."""

    def test_filenames(self):
        assert export_filename("123", "csv") == "survey-data-123.csv"
        assert export_filename("123", ExportFormat.JSON) == "survey-data-123.json"

    def test_mime_types(self):
        assert ExportFormat.CSV.mime_type == "text/csv"
        assert ExportFormat.JSON.mime_type == "application/json"

    def test_format_case_insensitive(self):
        assert export_responses([record()], "CSV").startswith("Response ID")

    def test_unknown_format(self):
        with pytest.raises(ValueError):
            export_responses([record()], "xml")

    def test_save_export_file(self, tmp_path):
        path = tmp_path / export_filename("s1", "csv")
        save_export_file([record()], str(path), "csv")
        assert path.read_text(encoding="utf-8") == format_csv([record()])
