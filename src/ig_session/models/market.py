"""Market, position and navigation models."""

from __future__ import annotations

from typing import Any

from pydantic import Field

from ig_session.models.base import IGModel


class Market(IGModel):
    epic: str
    instrument_name: str | None = None
    instrument_type: str | None = None
    expiry: str | None = None
    lot_size: float | None = None
    high: float | None = None
    low: float | None = None
    percentage_change: float | None = None
    net_change: float | None = None
    bid: float | None = None
    offer: float | None = None
    update_time: str | None = None
    update_time_utc: str | None = Field(default=None, alias="updateTimeUTC")
    delay_time: int | None = None
    streaming_prices_available: bool | None = None
    market_status: str | None = None
    scaling_factor: int | None = None


class Position(IGModel):
    deal_id: str
    direction: str
    size: float
    deal_reference: str | None = None
    contract_size: float | None = None
    created_date: str | None = None
    created_date_utc: str | None = Field(default=None, alias="createdDateUTC")
    level: float | None = None
    limit_level: float | None = None
    stop_level: float | None = None
    trailing_step: float | None = None
    trailing_stop_distance: float | None = None
    currency: str | None = None
    controlled_risk: bool | None = None
    limited_risk_premium: float | None = None


class PositionWithMarket(IGModel):
    market: Market
    position: Position


class PositionList(IGModel):
    positions: tuple[PositionWithMarket, ...]


class Node(IGModel):
    id: str
    name: str


class RootNavigation(IGModel):
    """Top-level navigation: typed nodes, markets exactly as upstream sent them."""

    nodes: tuple[Node, ...]
    markets: Any = None


class NodeNavigation(IGModel):
    """Navigation below a node: nodes exactly as upstream sent them, typed markets."""

    nodes: Any = None
    markets: tuple[Market, ...]


class MarketDetails(IGModel):
    instrument: dict[str, Any]
    dealing_rules: dict[str, Any] | None = None
    snapshot: dict[str, Any] | None = None
