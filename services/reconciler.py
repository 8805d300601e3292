"""
Bulk import reconciliation against a CMS item store.

Three operations over already-mapped rows:
    upsert_items: update rows matching an existing item by id or slug, create the rest
    create_items: create every row
    preview_rows: classify rows without touching the store (dry run)

Runs are strictly sequential. Calls are spaced by a FixedIntervalRateLimiter.
A failing row is recorded with its input index and the run moves on; only a
failure while listing existing items stops an upsert before any row is written.
"""

from dataclasses import dataclass, field
from typing import Any, Callable, Optional, Protocol
import structlog

from config import settings
from exceptions import AppError
from services.rate_limiter import FixedIntervalRateLimiter

logger = structlog.get_logger(__name__)

ID_KEY = "id"
SLUG_KEY = "slug"
DIAGNOSTIC_SAMPLE = 5


class ItemStore(Protocol):
    """Item operations of a CMS backend."""

    def list_items(self, collection_id: str, limit: int = 100, offset: int = 0) -> list[dict]:
        ...

    def get_item(self, collection_id: str, item_id: str) -> dict:
        ...

    def create_item(self, collection_id: str, field_data: dict, live: bool = True) -> dict:
        ...

    def update_item(
        self,
        collection_id: str,
        item_id: str,
        field_data: dict,
        live: bool = True
    ) -> dict:
        ...


@dataclass
class ProgressEvent:
    """Progress notification for the presentation layer."""
    phase: str
    message: str
    current: Optional[int] = None
    total: Optional[int] = None

    def to_dict(self) -> dict:
        return {
            "phase": self.phase,
            "message": self.message,
            "current": self.current,
            "total": self.total,
        }


ProgressCallback = Callable[[ProgressEvent], None]


@dataclass
class RowResult:
    """Row written successfully."""
    index: int
    action: str
    item: dict


@dataclass
class RowError:
    """Row whose remote call failed."""
    index: int
    error: str
    row: dict


@dataclass
class ImportResult:
    """Outcome of one import run."""
    mode: str
    total: int
    results: list[RowResult] = field(default_factory=list)
    errors: list[RowError] = field(default_factory=list)
    diagnostics: Optional[dict] = None

    @property
    def created(self) -> int:
        return sum(1 for r in self.results if r.action == "created")

    @property
    def updated(self) -> int:
        return sum(1 for r in self.results if r.action == "updated")

    @property
    def failed(self) -> int:
        return len(self.errors)

    def to_dict(self) -> dict:
        """Convert to dictionary for API response."""
        return {
            "mode": self.mode,
            "total": self.total,
            "created": self.created,
            "updated": self.updated,
            "failed": self.failed,
            "results": [
                {"index": r.index, "action": r.action, "item": r.item}
                for r in self.results
            ],
            "errors": [
                {"index": e.index, "error": e.error, "row": e.row}
                for e in self.errors
            ],
            "diagnostics": self.diagnostics,
        }


@dataclass
class DryRunPreview:
    """Classification of rows for a dry run."""
    total: int
    with_id: int
    with_slug: int
    new: int
    preview: list[dict]

    def to_dict(self) -> dict:
        return {
            "total": self.total,
            "with_id": self.with_id,
            "with_slug": self.with_slug,
            "new": self.new,
            "preview": self.preview,
        }


# ===================
# HELPERS
# ===================

def _emit(on_progress: Optional[ProgressCallback], event: ProgressEvent) -> None:
    if on_progress is not None:
        on_progress(event)


def _error_message(error: Exception) -> str:
    if isinstance(error, AppError):
        return error.message
    return str(error) or type(error).__name__


def _write_limiter() -> FixedIntervalRateLimiter:
    return FixedIntervalRateLimiter(settings.write_interval_seconds)


def _item_slug(item: dict) -> Optional[str]:
    return (item.get("fieldData") or {}).get(SLUG_KEY)


def split_row(row: dict) -> tuple[Optional[str], dict]:
    """
    Separate the item identifier from the field payload.

    The id is not a CMS field; it only selects the item to update.
    """
    field_data = {key: value for key, value in row.items() if key != ID_KEY}
    item_id = row.get(ID_KEY)
    if item_id is not None:
        item_id = str(item_id).strip() or None
    return item_id, field_data


def build_lookups(items: list[dict]) -> tuple[set[str], dict[str, str]]:
    """
    Build id membership set and slug -> id map from existing items.

    Items without a slug only land in the id set. When two items share a
    slug the later one wins.
    """
    ids: set[str] = set()
    slug_to_id: dict[str, str] = {}
    for item in items:
        ids.add(item["id"])
        slug = _item_slug(item)
        if slug:
            slug_to_id[slug] = item["id"]
    return ids, slug_to_id


def resolve_target(
    item_id: Optional[str],
    field_data: dict,
    ids: set[str],
    slug_to_id: dict[str, str],
) -> Optional[str]:
    """
    Pick the existing item a row should update.

    Id match wins over slug match. None means the row is new.
    """
    if item_id and item_id in ids:
        return item_id
    slug = field_data.get(SLUG_KEY)
    if slug and slug in slug_to_id:
        return slug_to_id[slug]
    return None


def fetch_all_items(
    store: ItemStore,
    collection_id: str,
    page_size: Optional[int] = None,
    rate_limiter: Optional[FixedIntervalRateLimiter] = None,
) -> list[dict]:
    """
    List every item of a collection.

    Pages until a page shorter than page_size comes back.
    """
    page_size = page_size or settings.items_page_size
    limiter = rate_limiter or FixedIntervalRateLimiter(settings.page_interval_seconds)

    items: list[dict] = []
    offset = 0
    while True:
        limiter.wait()
        page = store.list_items(collection_id, limit=page_size, offset=offset)
        items.extend(page)
        if len(page) < page_size:
            break
        offset += page_size

    logger.debug("items_fetched", collection_id=collection_id, count=len(items))
    return items


def _diagnostics(existing: list[dict], rows: list[dict]) -> dict:
    """Small sample of both sides to debug matching problems."""
    head = existing[:DIAGNOSTIC_SAMPLE]
    incoming = rows[:DIAGNOSTIC_SAMPLE]
    return {
        "existing_count": len(existing),
        "existing_ids": [item.get("id") for item in head],
        "existing_slugs": [_item_slug(item) for item in head],
        "incoming_ids": [row.get(ID_KEY) for row in incoming if row.get(ID_KEY)],
        "incoming_slugs": [row.get(SLUG_KEY) for row in incoming if row.get(SLUG_KEY)],
    }


# ===================
# OPERATIONS
# ===================

def upsert_items(
    store: ItemStore,
    collection_id: str,
    rows: list[dict],
    live: bool = True,
    on_progress: Optional[ProgressCallback] = None,
    rate_limiter: Optional[FixedIntervalRateLimiter] = None,
    page_size: Optional[int] = None,
) -> ImportResult:
    """
    Update rows that match an existing item, create the rest.

    Matching: the row's id if it names an existing item, else the row's slug
    if an existing item has it. Each row yields exactly one RowResult or
    RowError, so created + updated + failed == total.

    Args:
        store: Item store to read and write
        collection_id: Target collection
        rows: Mapped rows, optionally carrying "id"
        live: Publish writes immediately
        on_progress: Receives ProgressEvent notifications
        rate_limiter: Spacing for write calls (defaults to settings)
        page_size: Listing page size (defaults to settings)

    Returns:
        ImportResult with per-row outcomes and diagnostics

    Raises:
        Whatever the store raises while listing existing items
    """
    total = len(rows)
    limiter = rate_limiter or _write_limiter()

    logger.info("upsert_started", collection_id=collection_id, rows=total, live=live)

    _emit(on_progress, ProgressEvent("fetching", "Fetching existing items..."))
    existing = fetch_all_items(store, collection_id, page_size=page_size)
    ids, slug_to_id = build_lookups(existing)

    _emit(on_progress, ProgressEvent(
        "importing",
        f"Found {len(existing)} existing items. Starting upsert...",
        current=0,
        total=total,
    ))

    result = ImportResult(mode="upsert", total=total, diagnostics=_diagnostics(existing, rows))

    for index, row in enumerate(rows):
        try:
            item_id, field_data = split_row(row)
            target_id = resolve_target(item_id, field_data, ids, slug_to_id)

            limiter.wait()
            if target_id:
                item = store.update_item(collection_id, target_id, field_data, live=live)
                action = "updated"
            else:
                item = store.create_item(collection_id, field_data, live=live)
                action = "created"

            result.results.append(RowResult(index=index, action=action, item=item))

        except Exception as e:
            logger.warning(
                "upsert_row_failed",
                collection_id=collection_id,
                index=index,
                error=str(e),
                error_type=type(e).__name__
            )
            result.errors.append(RowError(index=index, error=_error_message(e), row=row))

        _emit(on_progress, ProgressEvent(
            "importing",
            f"Processed {index + 1} of {total}",
            current=index + 1,
            total=total,
        ))

    logger.info(
        "upsert_completed",
        collection_id=collection_id,
        total=total,
        created=result.created,
        updated=result.updated,
        failed=result.failed
    )
    _emit(on_progress, ProgressEvent(
        "complete",
        f"Created {result.created}, updated {result.updated}, failed {result.failed}",
        current=total,
        total=total,
    ))

    return result


def create_items(
    store: ItemStore,
    collection_id: str,
    rows: list[dict],
    live: bool = True,
    on_progress: Optional[ProgressCallback] = None,
    rate_limiter: Optional[FixedIntervalRateLimiter] = None,
) -> ImportResult:
    """
    Create one item per row, no matching.

    Per-row failures are recorded and the loop continues.
    """
    total = len(rows)
    limiter = rate_limiter or _write_limiter()

    logger.info("create_started", collection_id=collection_id, rows=total, live=live)

    result = ImportResult(mode="create", total=total)

    for index, row in enumerate(rows):
        try:
            _, field_data = split_row(row)
            limiter.wait()
            item = store.create_item(collection_id, field_data, live=live)
            result.results.append(RowResult(index=index, action="created", item=item))

        except Exception as e:
            logger.warning(
                "create_row_failed",
                collection_id=collection_id,
                index=index,
                error=str(e),
                error_type=type(e).__name__
            )
            result.errors.append(RowError(index=index, error=_error_message(e), row=row))

        _emit(on_progress, ProgressEvent(
            "importing",
            f"Processed {index + 1} of {total}",
            current=index + 1,
            total=total,
        ))

    logger.info(
        "create_completed",
        collection_id=collection_id,
        total=total,
        created=result.created,
        failed=result.failed
    )
    _emit(on_progress, ProgressEvent(
        "complete",
        f"Created {result.created}, failed {result.failed}",
        current=total,
        total=total,
    ))

    return result


def preview_rows(rows: list[dict], preview_size: Optional[int] = None) -> DryRunPreview:
    """
    Classify rows for a dry run. No remote calls.

    with_id: row carries an id
    with_slug: no id, but a slug
    new: neither
    """
    if preview_size is None:
        preview_size = settings.preview_size

    has_id = [row.get(ID_KEY) not in (None, "") for row in rows]
    with_id = sum(has_id)
    with_slug = sum(
        1 for row, carries_id in zip(rows, has_id)
        if row.get(SLUG_KEY) and not carries_id
    )

    return DryRunPreview(
        total=len(rows),
        with_id=with_id,
        with_slug=with_slug,
        new=len(rows) - with_id - with_slug,
        preview=rows[:preview_size],
    )


def summarize(result: ImportResult) -> dict[str, Any]:
    """Counts only, for log lines and job listings."""
    return {
        "mode": result.mode,
        "total": result.total,
        "created": result.created,
        "updated": result.updated,
        "failed": result.failed,
    }
