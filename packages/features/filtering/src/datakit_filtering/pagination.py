"""Page arithmetic and the list envelope."""

from __future__ import annotations

from typing import Any, NamedTuple


def total_pages(total: int, page_size: int) -> int:
    """Number of pages needed for *total* rows (0 when *page_size* is 0)."""
    if page_size <= 0:
        return 0
    return (total + page_size - 1) // page_size


def page_window(page: int, page_size: int) -> tuple[int, int]:
    """Return ``(limit, offset)`` for the 1-based *page*."""
    return page_size, (page - 1) * page_size


class ListEnvelope(NamedTuple):
    rows: list[Any]
    total: int
    page: int
    page_size: int
    total_pages: int

    @classmethod
    def build(
        cls, rows: list[Any], total: int, page: int, page_size: int
    ) -> ListEnvelope:
        return cls(
            rows=rows,
            total=total,
            page=page,
            page_size=page_size,
            total_pages=total_pages(total, page_size),
        )

    def to_dict(self) -> dict[str, Any]:
        """Wire form with camelCase keys."""
        return {
            "rows": self.rows,
            "total": self.total,
            "page": self.page,
            "pageSize": self.page_size,
            "totalPages": self.total_pages,
        }
