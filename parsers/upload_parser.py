"""
Parser for import uploads.

Turns an uploaded CSV, JSON or XLSX file into a header list and a list of
row dicts (source column -> raw value). Values from CSV and XLSX arrive as
strings; JSON values keep their JSON types.
"""

from dataclasses import dataclass, field
from datetime import date, datetime
from io import BytesIO
from pathlib import Path
from typing import Any
import json
import math
import structlog

import pandas as pd

from exceptions import FileParseError, UnsupportedFileTypeError
from models.imports import FileType

logger = structlog.get_logger(__name__)

SUPPORTED_EXTENSIONS = {
    ".csv": FileType.CSV,
    ".json": FileType.JSON,
    ".xlsx": FileType.XLSX,
}


@dataclass
class ParsedUpload:
    """Result of parsing an upload."""
    filename: str
    file_type: FileType
    headers: list[str] = field(default_factory=list)
    rows: list[dict[str, Any]] = field(default_factory=list)

    @property
    def row_count(self) -> int:
        return len(self.rows)


def detect_file_type(filename: str) -> FileType:
    """
    Map a filename to an upload format by extension.

    Raises:
        UnsupportedFileTypeError: Extension not csv/json/xlsx
    """
    extension = Path(filename or "").suffix.lower()
    file_type = SUPPORTED_EXTENSIONS.get(extension)
    if file_type is None:
        raise UnsupportedFileTypeError(
            filename=filename,
            supported=sorted(ext.lstrip(".") for ext in SUPPORTED_EXTENSIONS)
        )
    return file_type


def parse_upload(filename: str, content: bytes) -> ParsedUpload:
    """
    Parse an uploaded file.

    Args:
        filename: Original filename (used for format detection)
        content: Raw file bytes

    Returns:
        ParsedUpload with headers and rows

    Raises:
        UnsupportedFileTypeError: Unknown extension
        FileParseError: File could not be read
    """
    file_type = detect_file_type(filename)

    logger.info("parsing_upload", filename=filename, file_type=file_type.value, size=len(content))

    if file_type == FileType.CSV:
        headers, rows = parse_csv(content)
    elif file_type == FileType.JSON:
        headers, rows = parse_json(content)
    else:
        headers, rows = parse_xlsx(content)

    logger.info(
        "upload_parsed",
        filename=filename,
        file_type=file_type.value,
        columns=len(headers),
        rows=len(rows)
    )

    return ParsedUpload(filename=filename, file_type=file_type, headers=headers, rows=rows)


def parse_csv(content: bytes) -> tuple[list[str], list[dict[str, Any]]]:
    """
    Parse CSV with a header row.

    Every value is read as a string, empty cells stay "" and blank lines
    are skipped. Fields past the last header (trailing commas) are dropped
    so the remaining values stay under their own headers.
    """
    try:
        df = pd.read_csv(
            BytesIO(content),
            dtype=str,
            index_col=False,
            keep_default_na=False,
            skip_blank_lines=True,
            encoding="utf-8-sig",
        )
    except pd.errors.EmptyDataError:
        raise FileParseError(message="Failed to parse CSV: file is empty")
    except (pd.errors.ParserError, UnicodeDecodeError, ValueError) as e:
        logger.error("csv_parse_failed", error=str(e))
        raise FileParseError(
            message=f"Failed to parse CSV: {e}",
            details={"original_error": str(e)}
        )

    headers = [str(col) for col in df.columns]
    rows = [
        dict(zip(headers, record))
        for record in df.itertuples(index=False, name=None)
    ]
    return headers, rows


def parse_json(content: bytes) -> tuple[list[str], list[dict[str, Any]]]:
    """
    Parse JSON records.

    Accepts an array of objects or a single object (treated as one row).
    Headers come from the keys of the first record.
    """
    try:
        data = json.loads(content.decode("utf-8-sig"))
    except (UnicodeDecodeError, json.JSONDecodeError) as e:
        logger.error("json_parse_failed", error=str(e))
        raise FileParseError(
            message=f"Failed to parse JSON: {e}",
            details={"original_error": str(e)}
        )

    records = data if isinstance(data, list) else [data]

    bad = [i for i, record in enumerate(records) if not isinstance(record, dict)]
    if bad:
        raise FileParseError(
            message="Failed to parse JSON: every record must be an object",
            details={"invalid_indexes": bad[:20]}
        )

    headers = list(records[0].keys()) if records else []
    return headers, records


def parse_xlsx(content: bytes) -> tuple[list[str], list[dict[str, Any]]]:
    """
    Parse the first sheet of an Excel workbook.

    Header row becomes the columns. Fully empty rows are dropped and cells
    are converted to strings the way they would read in a CSV export.
    """
    try:
        df = pd.read_excel(BytesIO(content), sheet_name=0, engine="openpyxl")
    except Exception as e:
        logger.error("xlsx_parse_failed", error=str(e), error_type=type(e).__name__)
        raise FileParseError(
            message="Failed to read Excel file",
            details={"original_error": str(e)}
        )

    df = df.dropna(how="all")
    headers = [str(col) for col in df.columns]
    rows = [
        {header: _cell_to_str(value) for header, value in zip(headers, record)}
        for record in df.itertuples(index=False, name=None)
    ]
    return headers, rows


def _cell_to_str(value: Any) -> str:
    """Render an Excel cell as text."""
    if value is None or value is pd.NaT:
        return ""
    if isinstance(value, float):
        if math.isnan(value):
            return ""
        if value.is_integer():
            return str(int(value))
        return str(value)
    if isinstance(value, pd.Timestamp):
        value = value.to_pydatetime()
    if isinstance(value, datetime):
        if value.hour == value.minute == value.second == value.microsecond == 0:
            return value.date().isoformat()
        return value.isoformat()
    if isinstance(value, date):
        return value.isoformat()
    return str(value)
