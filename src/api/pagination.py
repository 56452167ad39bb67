# This file handles pagination and sort parsing for list endpoints.
# It exists so every entity list uses the same deterministic rules for windows and ordering.
# Sort fields are resolved against an allow-list because they are interpolated into ORDER BY.
# When either sort input is missing, lists fall back to identifier ascending.

from __future__ import annotations

from dataclasses import dataclass

DEFAULT_SORT_FIELD = "id"
DEFAULT_SORT_ORDER = "asc"


@dataclass(frozen=True)
class SortSpec:
    field: str
    order: str

    @property
    def as_text(self) -> str:
        return f"{self.field}:{self.order}"

    @property
    def is_default(self) -> bool:
        return self.field == DEFAULT_SORT_FIELD


@dataclass(frozen=True)
class PageWindow:
    offset: int
    limit: int


def normalize_window(*, page_offset: int | None, page_limit: int | None, max_page_limit: int) -> PageWindow:
    """Validate offset/limit values.

    A non-positive limit and a negative (or missing) offset are rejected. The only other
    rule is the upper bound: `page_limit` may not exceed `max_page_limit`, which comes from
    `API_MAX_PAGE_LIMIT` and keeps a single list request from reading the whole table.
    """

    if page_limit is None or page_limit <= 0:
        raise ValueError("page_limit must be > 0")
    if page_offset is None or page_offset < 0:
        raise ValueError("page_offset must be >= 0")
    if page_limit > max_page_limit:
        raise ValueError(f"page_limit must be <= {max_page_limit}")
    return PageWindow(offset=page_offset, limit=page_limit)


def resolve_sort(
    *,
    sort_field: str | None,
    sort_order: str | None,
    allowed_fields: set[str],
) -> SortSpec:
    """Resolve a sort column and direction, defaulting to `id asc` when either is unset."""

    field = (sort_field or "").strip().lower()
    order = (sort_order or "").strip().lower()
    if not field or not order:
        return SortSpec(field=DEFAULT_SORT_FIELD, order=DEFAULT_SORT_ORDER)

    if field not in allowed_fields:
        supported = ", ".join(sorted(allowed_fields))
        raise ValueError(f"Unsupported sort field '{field}'. Supported fields: {supported}")
    if order not in {"asc", "desc"}:
        raise ValueError("sort order must be 'asc' or 'desc'")
    return SortSpec(field=field, order=order)
