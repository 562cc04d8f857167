"""Paging metadata shapes.

IG paginates history endpoints in two unrelated ways: activities carry a
`next` cursor, transactions and prices carry page counters.
"""

from __future__ import annotations

from ig_session.models.base import IGModel


class ActivityPaging(IGModel):
    next: str | None = None
    size: int


class ActivityMetadata(IGModel):
    paging: ActivityPaging


class PageData(IGModel):
    page_number: int
    page_size: int
    total_pages: int


class PagedMetadata(IGModel):
    page_data: PageData
    size: int
