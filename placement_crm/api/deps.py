"""
Shared route dependencies.
"""

from typing import Optional

from fastapi import Query, Request

from placement_crm.services.aggregate_writer import ListQuery


class ListParams:
    """Keyword, sorting and pagination query parameters common to every list route."""

    def __init__(
        self,
        request: Request,
        keyword: Optional[str] = Query(None, description="Case-insensitive search"),
        sort_by: Optional[str] = Query(None),
        sort_order: str = Query("DESC", pattern="(?i)^(asc|desc)$"),
        page: int = Query(1, ge=1),
        limit: Optional[int] = Query(None, ge=1, description="Page size, capped by max_page_size"),
    ):
        settings = request.app.state.settings
        self.keyword = keyword
        self.sort_by = sort_by
        self.sort_order = sort_order
        self.page = page
        self.limit = min(limit or settings.default_page_size, settings.max_page_size)

    def to_query(self, **filters) -> ListQuery:
        return ListQuery(
            keyword=self.keyword,
            filters=filters,
            sort_by=self.sort_by,
            sort_order=self.sort_order,
            page=self.page,
            limit=self.limit,
        )
