"""Decoders turning parsed IG JSON payloads into typed records.

Every decoder takes the already-parsed JSON value of one endpoint and either
returns a fully built record or raises `DecodeError` naming the first
missing or mismatched field as a dotted path (``positions[1].market.epic``).
Lists are decoded element by element and a single bad element fails the
whole payload; no partial results are returned.
"""

from __future__ import annotations

import json
from typing import Any, Callable, TypeVar

from pydantic import BaseModel, ValidationError

from ig_session.exceptions import DecodeError
from ig_session.models.account import Account, AccountPreference, AccountSummary
from ig_session.models.history import (
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
from ig_session.models.paging import ActivityMetadata, PagedMetadata
from ig_session.models.prices import PriceHistory, PricePoint
from ig_session.models.session import SessionState

ROOT = "<root>"

ModelT = TypeVar("ModelT", bound=BaseModel)
ItemT = TypeVar("ItemT")


def parse_json(content: bytes) -> Any:
    try:
        return json.loads(content)
    except ValueError as exc:
        raise DecodeError("<body>", f"response is not valid JSON: {exc}") from exc


def decode_login(body: Any, *, cst: str, security_token: str, credentials: SessionState) -> SessionState:
    """Build a fresh authenticated state from a login response.

    Credentials and the demo flag are taken from `credentials`, never from the
    payload. Null values fall back to the state defaults.
    """
    payload = _object(body, "")
    values = {key: value for key, value in payload.items() if value is not None}
    values["accounts"] = _decode_list(
        payload, "accounts", lambda row, path: _validate(AccountSummary, row, path), "", optional=True
    )
    values.update(
        {
            "cst": cst,
            "securityToken": security_token,
            "identifier": credentials.identifier,
            "password": credentials.password,
            "apiKey": credentials.api_key,
            "demo": credentials.demo,
        }
    )
    return _validate(SessionState, values, "")


def decode_accounts(body: Any) -> tuple[Account, ...]:
    return _decode_list(body, "accounts", lambda row, path: _validate(Account, row, path), "")


def decode_account_preferences(body: Any) -> AccountPreference:
    return _validate(AccountPreference, body, "")


def decode_activity(raw: Any, path: str = "") -> HistoricalActivity:
    payload = _object(raw, path)
    flat = {key: value for key, value in payload.items() if key != "details"}
    activity = _validate(HistoricalActivity, flat, path)

    # many activity types carry no details at all
    details = payload.get("details")
    if details is None:
        return activity
    detail = _validate(HistoricalActivityDetail, details, _join(path, "details"))
    return activity.model_copy(update={"details": detail})


def decode_activities(body: Any) -> ActivityHistory:
    """Decode the filtered (v3) activity listing with its cursor metadata."""
    activities = _decode_list(body, "activities", decode_activity, "")
    metadata = _validate(ActivityMetadata, _field(body, "metadata", ""), "metadata")
    return ActivityHistory(activities=activities, metadata=metadata)


def decode_activity_list(body: Any) -> ActivityHistory:
    """Decode the period and date-range (v1) activity listings, which carry no metadata."""
    return ActivityHistory(activities=_decode_list(body, "activities", decode_activity, ""))


def decode_transactions(body: Any) -> TransactionHistory:
    transactions = _decode_list(body, "transactions", lambda row, path: _validate(Transaction, row, path), "")
    metadata = _validate(PagedMetadata, _field(body, "metadata", ""), "metadata")
    return TransactionHistory(transactions=transactions, metadata=metadata)


def decode_position(raw: Any, path: str = "") -> PositionWithMarket:
    market = _validate(Market, _field(raw, "market", path), _join(path, "market"))
    position = _validate(Position, _field(raw, "position", path), _join(path, "position"))
    return PositionWithMarket(market=market, position=position)


def decode_positions(body: Any) -> PositionList:
    return PositionList(positions=_decode_list(body, "positions", decode_position, ""))


def decode_root_navigation(body: Any) -> RootNavigation:
    nodes = _decode_list(body, "nodes", lambda row, path: _validate(Node, row, path), "", optional=True)
    return RootNavigation(nodes=nodes, markets=_field(body, "markets", ""))


def decode_node_navigation(body: Any) -> NodeNavigation:
    nodes = _field(body, "nodes", "")
    markets = _decode_list(body, "markets", lambda row, path: _validate(Market, row, path), "", optional=True)
    return NodeNavigation(nodes=nodes, markets=markets)


def decode_market_details(body: Any) -> MarketDetails:
    payload = _object(body, "")
    for key in ("instrument", "dealingRules", "snapshot"):
        _field(payload, key, "")
    return _validate(MarketDetails, payload, "")


def decode_prices(body: Any) -> PriceHistory:
    """Decode the v3 price listing; `metadata.allowance` is not part of the record."""
    prices = _decode_list(body, "prices", lambda row, path: _validate(PricePoint, row, path), "")
    instrument_type = _string(body, "instrumentType", "")
    metadata = _validate(PagedMetadata, _field(body, "metadata", ""), "metadata")
    return PriceHistory(prices=prices, instrument_type=instrument_type, metadata=metadata)


def decode_prices_with_points(body: Any) -> PriceHistory:
    """Decode the v2 count and date-range listings; top-level `allowance` is dropped."""
    prices = _decode_list(body, "prices", lambda row, path: _validate(PricePoint, row, path), "")
    instrument_type = _string(body, "instrumentType", "")
    return PriceHistory(prices=prices, instrument_type=instrument_type)


def _join(path: str, key: str | int) -> str:
    if isinstance(key, int):
        return f"{path or ROOT}[{key}]"
    return f"{path}.{key}" if path else key


def _object(value: Any, path: str) -> dict[str, Any]:
    if not isinstance(value, dict):
        raise DecodeError(path or ROOT, f"expected an object, got {type(value).__name__}")
    return value


def _field(value: Any, key: str, path: str) -> Any:
    payload = _object(value, path)
    if key not in payload:
        raise DecodeError(_join(path, key), "required field is missing")
    return payload[key]


def _string(value: Any, key: str, path: str) -> str:
    raw = _field(value, key, path)
    if not isinstance(raw, str):
        raise DecodeError(_join(path, key), f"expected a string, got {type(raw).__name__}")
    return raw


def _decode_list(
    value: Any,
    key: str,
    decode_item: Callable[[Any, str], ItemT],
    path: str,
    *,
    optional: bool = False,
) -> tuple[ItemT, ...]:
    list_path = _join(path, key)
    payload = _object(value, path)
    if key not in payload:
        if optional:
            return ()
        raise DecodeError(list_path, "required field is missing")
    rows = payload[key]
    if rows is None and optional:
        return ()
    if not isinstance(rows, list):
        raise DecodeError(list_path, f"expected a list, got {type(rows).__name__}")
    return tuple(decode_item(row, _join(list_path, index)) for index, row in enumerate(rows))


def _validate(model: type[ModelT], value: Any, path: str) -> ModelT:
    payload = _object(value, path)
    try:
        return model.model_validate(payload)
    except ValidationError as exc:
        error = exc.errors()[0]
        location = path
        for part in error["loc"]:
            location = _join(location, part)
        raise DecodeError(location or path or ROOT, error["msg"]) from exc
