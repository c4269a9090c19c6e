"""
Response export formatter.

Turns a list of response records into downloadable text.

Supports two formats:
    - CSV: fixed four-column summary, one row per response
    - JSON: pretty-printed list of full response records

The CSV layout is a compatibility surface for spreadsheets built on older
exports, so it stays exactly as it is:
    - header is always ``Response ID,Survey ID,Submitted At,User Agent``
    - fields are comma-joined with NO quoting or escaping
    - an empty response list exports as an empty string
"""

import json
from enum import Enum
from typing import Iterable, List, Union

from surveyengine.model import ResponseRecord
from surveyengine.serialization import response_to_dict

CSV_HEADER = ["Response ID", "Survey ID", "Submitted At", "User Agent"]


class ExportFormat(Enum):
    """Export formats with their file extension and MIME type."""
    CSV = "csv"
    JSON = "json"

    @property
    def extension(self) -> str:
        return self.value

    @property
    def mime_type(self) -> str:
        return {"csv": "text/csv", "json": "application/json"}[self.value]


def _coerce_format(fmt: Union[ExportFormat, str]) -> ExportFormat:
    if isinstance(fmt, ExportFormat):
        return fmt
    return ExportFormat(str(fmt).lower())


def _csv_field(value) -> str:
    return "" if value is None else str(value)


def format_csv(responses: Iterable[ResponseRecord]) -> str:
    """
    Render the four-column CSV summary.

    Embedded commas are NOT escaped. A client_meta containing a comma
    shifts the remaining columns of that row.
    """
    rows: List[List[str]] = [
        [_csv_field(r.id), _csv_field(r.survey_id), _csv_field(r.submitted_at), _csv_field(r.client_meta)]
        for r in responses
    ]
    if not rows:
        return ""
    return "\n".join(",".join(row) for row in [CSV_HEADER] + rows)


def format_json(responses: Iterable[ResponseRecord]) -> str:
    return json.dumps([response_to_dict(r) for r in responses], indent=2, ensure_ascii=False)


def export_responses(responses: Iterable[ResponseRecord], fmt: Union[ExportFormat, str] = ExportFormat.CSV) -> str:
    """
    Export responses in the given format.

    Args:
        responses: Records in the order they should appear
        fmt: ExportFormat or its string value ("csv" / "json")

    Returns:
        Export text

    Raises:
        ValueError: unknown format
    """
    fmt = _coerce_format(fmt)
    if fmt is ExportFormat.CSV:
        return format_csv(responses)
    return format_json(responses)


def export_filename(survey_id: str, fmt: Union[ExportFormat, str] = ExportFormat.CSV) -> str:
    return f"survey-data-{survey_id}.{_coerce_format(fmt).extension}"


def save_export_file(responses: Iterable[ResponseRecord], filename: str, fmt: Union[ExportFormat, str] = ExportFormat.CSV) -> None:
    """
    Export and save to file.

    Args:
        responses: Records to export
        filename: Output file path (see export_filename)
        fmt: Export format
    """
    text = export_responses(responses, fmt)
    with open(filename, 'w', encoding="utf-8") as f:
        f.write(text)


__all__ = [
    "CSV_HEADER",
    "ExportFormat",
    "export_filename",
    "export_responses",
    "format_csv",
    "format_json",
    "save_export_file",
]
