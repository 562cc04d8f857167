"""Activity and transaction history models."""

from __future__ import annotations

from ig_session.models.base import IGModel
from ig_session.models.paging import ActivityMetadata, PagedMetadata


class ActivityAction(IGModel):
    action_type: str | None = None
    affected_deal_id: str | None = None


class HistoricalActivityDetail(IGModel):
    deal_reference: str | None = None
    actions: tuple[ActivityAction, ...] = ()
    market_name: str | None = None
    good_till_date: str | None = None
    currency: str | None = None
    size: float | None = None
    direction: str | None = None
    level: float | None = None
    stop_level: float | None = None
    stop_distance: float | None = None
    guaranteed_stop: bool | None = None
    trailing_stop_distance: float | None = None
    trailing_step: float | None = None
    limit_level: float | None = None
    limit_distance: float | None = None


class HistoricalActivity(IGModel):
    """One activity entry.

    Covers both the v3 shape (type/status/description/details) and the v1
    shape (activity/actionStatus/result and flat deal fields); fields absent
    from the version in use stay None.
    """

    date: str
    epic: str | None = None
    period: str | None = None
    deal_id: str | None = None
    channel: str | None = None
    type: str | None = None
    status: str | None = None
    description: str | None = None
    details: HistoricalActivityDetail | None = None
    # v1 only
    time: str | None = None
    activity: str | None = None
    action_status: str | None = None
    market_name: str | None = None
    result: str | None = None
    currency: str | None = None
    size: str | float | None = None
    level: str | float | None = None
    stop: str | float | None = None
    stop_type: str | None = None
    limit: str | float | None = None


class Transaction(IGModel):
    reference: str
    transaction_type: str
    date: str | None = None
    date_utc: str | None = None
    open_date_utc: str | None = None
    instrument_name: str | None = None
    period: str | None = None
    profit_and_loss: str | None = None
    open_level: str | float | None = None
    close_level: str | float | None = None
    size: str | float | None = None
    currency: str | None = None
    cash_transaction: bool = False


class ActivityHistory(IGModel):
    activities: tuple[HistoricalActivity, ...]
    metadata: ActivityMetadata | None = None


class TransactionHistory(IGModel):
    transactions: tuple[Transaction, ...]
    metadata: PagedMetadata
