"""Typed records decoded from IG responses."""

from ig_session.models.account import Account, AccountBalance, AccountPreference, AccountSummary
from ig_session.models.history import (
    ActivityAction,
    ActivityHistory,
    HistoricalActivity,
    HistoricalActivityDetail,
    Transaction,
    TransactionHistory,
)
from ig_session.models.market import (
    Market,
    MarketDetails,
    Node,
    NodeNavigation,
    Position,
    PositionList,
    PositionWithMarket,
    RootNavigation,
)
from ig_session.models.paging import ActivityMetadata, ActivityPaging, PageData, PagedMetadata
from ig_session.models.prices import PriceHistory, PriceLevel, PricePoint, Resolution
from ig_session.models.session import SessionState

__all__ = [
    "Account",
    "AccountBalance",
    "AccountPreference",
    "AccountSummary",
    "ActivityAction",
    "ActivityHistory",
    "ActivityMetadata",
    "ActivityPaging",
    "HistoricalActivity",
    "HistoricalActivityDetail",
    "Market",
    "MarketDetails",
    "Node",
    "NodeNavigation",
    "PageData",
    "PagedMetadata",
    "Position",
    "PositionList",
    "PositionWithMarket",
    "PriceHistory",
    "PriceLevel",
    "PricePoint",
    "Resolution",
    "RootNavigation",
    "SessionState",
    "Transaction",
    "TransactionHistory",
]
