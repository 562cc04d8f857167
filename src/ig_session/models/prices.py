"""Historical price models."""

from __future__ import annotations

from enum import Enum

from pydantic import Field

from ig_session.models.base import IGModel
from ig_session.models.paging import PagedMetadata


class Resolution(str, Enum):
    SECOND = "SECOND"
    MINUTE = "MINUTE"
    MINUTE_2 = "MINUTE_2"
    MINUTE_3 = "MINUTE_3"
    MINUTE_5 = "MINUTE_5"
    MINUTE_10 = "MINUTE_10"
    MINUTE_15 = "MINUTE_15"
    MINUTE_30 = "MINUTE_30"
    HOUR = "HOUR"
    HOUR_2 = "HOUR_2"
    HOUR_3 = "HOUR_3"
    HOUR_4 = "HOUR_4"
    DAY = "DAY"
    WEEK = "WEEK"
    MONTH = "MONTH"


class PriceLevel(IGModel):
    bid: float | None = None
    ask: float | None = None
    last_traded: float | None = None


class PricePoint(IGModel):
    snapshot_time: str
    snapshot_time_utc: str | None = Field(default=None, alias="snapshotTimeUTC")
    open_price: PriceLevel | None = None
    close_price: PriceLevel | None = None
    high_price: PriceLevel | None = None
    low_price: PriceLevel | None = None
    last_traded_volume: float | None = None


class PriceHistory(IGModel):
    prices: tuple[PricePoint, ...]
    instrument_type: str
    metadata: PagedMetadata | None = None
