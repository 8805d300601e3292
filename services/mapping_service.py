"""
Field mapping between upload columns and collection fields.

Handles auto-mapping by name, applying a mapping to parsed rows, and the
blank CSV template operators fill in before an import.
"""

from io import StringIO
from typing import Any, Optional
import structlog

import pandas as pd

from exceptions import InvalidMappingError
from models.webflow import SYSTEM_FIELD_SLUGS

logger = structlog.get_logger(__name__)

ID_COLUMN = "id"


def suggest_mapping(headers: list[str], fields: list[dict]) -> dict[str, str]:
    """
    Map headers onto fields whose slug or display name matches.

    Comparison is case-insensitive. Headers without a match are left out.

    Args:
        headers: Upload column names
        fields: Collection fields as returned by Webflow

    Returns:
        header -> field slug
    """
    mapping: dict[str, str] = {}
    for header in headers:
        wanted = header.strip().lower()
        for field in fields:
            slug = (field.get("slug") or "").lower()
            display_name = (field.get("displayName") or "").lower()
            if wanted and wanted in (slug, display_name):
                mapping[header] = field["slug"]
                break

    logger.debug(
        "mapping_suggested",
        headers=len(headers),
        mapped=len(mapping)
    )
    return mapping


def validate_mapping(mapping: dict[str, Optional[str]], headers: list[str]) -> None:
    """
    Reject mappings that name columns the upload does not have.

    Raises:
        InvalidMappingError: One or more unknown source columns
    """
    known = set(headers)
    unknown = [source for source in mapping if source not in known]
    if unknown:
        raise InvalidMappingError(unknown)


def transform_rows(
    rows: list[dict[str, Any]],
    mapping: dict[str, Optional[str]],
    keep_id: bool = False,
) -> list[dict[str, Any]]:
    """
    Apply a field mapping to parsed rows.

    Columns mapped to nothing are skipped; a source value absent from a row
    (ragged JSON records) is skipped too. With keep_id, a non-empty "id"
    column of the source row is carried over as "id" so upserts can match
    on it.

    Args:
        rows: Parsed upload rows
        mapping: source column -> destination field slug (None skips)
        keep_id: Carry the source row's id through

    Returns:
        One dict per row keyed by field slug
    """
    transformed = []
    for row in rows:
        item: dict[str, Any] = {}
        if keep_id and row.get(ID_COLUMN) not in (None, ""):
            item[ID_COLUMN] = row[ID_COLUMN]
        for source, target in mapping.items():
            if target and source in row:
                item[target] = row[source]
        transformed.append(item)
    return transformed


def template_columns(fields: list[dict]) -> list[str]:
    """Field slugs an import template should offer."""
    return [
        field["slug"]
        for field in fields
        if field.get("slug") and field["slug"] not in SYSTEM_FIELD_SLUGS
    ]


def build_template_csv(fields: list[dict]) -> str:
    """
    Blank CSV template for a collection.

    Header row of field slugs plus one empty example row.
    """
    columns = template_columns(fields)
    df = pd.DataFrame([[""] * len(columns)], columns=columns)
    buffer = StringIO()
    df.to_csv(buffer, index=False)
    return buffer.getvalue()
