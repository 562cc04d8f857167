from __future__ import annotations

from datetime import date, datetime, timedelta
from enum import Enum

import pytest
from pydantic import SecretStr

from ig_session.exceptions import ErrorCode, InvalidArgumentError
from ig_session.models.prices import Resolution
from ig_session.models.session import SessionState
from ig_session.request_spec import Endpoint, build_request, decode_query, encode_query

ANONYMOUS = SessionState(identifier="alice", password=SecretStr("s3cret"), api_key="key-1")
LOGGED_IN = ANONYMOUS.model_copy(update={"cst": "cst-1", "security_token": "xst-1"})


class Direction(Enum):
    BUY = "BUY"


@pytest.mark.parametrize(
    ("endpoint", "path_params", "expected_path", "version"),
    [
        (Endpoint.ACCOUNTS, None, "/accounts", 1),
        (Endpoint.ACCOUNT_PREFERENCES, None, "/accounts/preferences", 1),
        (Endpoint.ACTIVITY_HISTORY, None, "/history/activity", 3),
        (Endpoint.ACTIVITY_HISTORY_PERIOD, {"last_period": 600000}, "/history/activity/600000", 1),
        (
            Endpoint.ACTIVITY_HISTORY_RANGE,
            {"from_date": date(2024, 3, 1), "to_date": "05-03-2024"},
            "/history/activity/01-03-2024/05-03-2024",
            1,
        ),
        (Endpoint.TRANSACTIONS, None, "/history/transactions", 2),
        (Endpoint.POSITIONS, None, "/positions", 2),
        (Endpoint.POSITION, {"deal_id": "DIAAAABBBCCC"}, "/positions/DIAAAABBBCCC", 2),
        (Endpoint.MARKET_NAVIGATION, None, "/marketnavigation", 1),
        (Endpoint.MARKET_NAVIGATION_NODE, {"node_id": "264134"}, "/marketnavigation/264134", 1),
        (Endpoint.MARKET, {"epic": "CS.D.EURUSD.CFD.IP"}, "/markets/CS.D.EURUSD.CFD.IP", 3),
        (Endpoint.MARKETS, {"epics": ["A", "B"]}, "/markets/A,B", 3),
        (Endpoint.PRICES, {"epic": "CS.D.EURUSD.CFD.IP"}, "/prices/CS.D.EURUSD.CFD.IP", 3),
        (
            Endpoint.PRICES_COUNT,
            {"epic": "CS.D.EURUSD.CFD.IP", "resolution": Resolution.MINUTE, "num_points": 10},
            "/prices/CS.D.EURUSD.CFD.IP/MINUTE/10",
            2,
        ),
        (
            Endpoint.PRICES_RANGE,
            {
                "epic": "CS.D.EURUSD.CFD.IP",
                "resolution": "DAY",
                "start": datetime(2024, 1, 1),
                "end": datetime(2024, 2, 1, 12, 30),
            },
            "/prices/CS.D.EURUSD.CFD.IP/DAY/2024-01-01%2000:00:00/2024-02-01%2012:30:00",
            2,
        ),
    ],
)
def test_endpoint_paths_and_versions(endpoint, path_params, expected_path, version) -> None:
    spec = build_request(endpoint, LOGGED_IN, path_params=path_params)

    assert spec.method == "GET"
    assert spec.path == expected_path
    assert spec.version == version
    assert spec.header("VERSION") == str(version)
    assert spec.url_path == expected_path


def test_login_request_carries_no_tokens() -> None:
    spec = build_request(Endpoint.LOGIN, LOGGED_IN)

    assert spec.method == "POST"
    assert spec.path == "/session"
    assert spec.headers == (("X-IG-API-KEY", "key-1"), ("VERSION", "1"))


def test_authenticated_header_order() -> None:
    spec = build_request(Endpoint.POSITIONS, LOGGED_IN)

    assert spec.headers == (
        ("X-IG-API-KEY", "key-1"),
        ("X-SECURITY-TOKEN", "xst-1"),
        ("CST", "cst-1"),
        ("VERSION", "2"),
    )


def test_unauthenticated_state_sends_empty_tokens() -> None:
    spec = build_request(Endpoint.ACCOUNTS, ANONYMOUS)

    assert spec.header("cst") == ""
    assert spec.header("x-security-token") == ""


def test_request_spec_is_pure() -> None:
    first = build_request(Endpoint.POSITION, LOGGED_IN, path_params={"deal_id": "D1"})
    second = build_request(Endpoint.POSITION, LOGGED_IN, path_params={"deal_id": "D1"})

    assert first == second


def test_query_encoding_round_trips() -> None:
    params = {
        "from": datetime(2024, 3, 1, 9, 30, 15),
        "to": date(2024, 3, 2),
        "detailed": False,
        "filter": "channel==PUBLIC_WEB_API",
        "pageSize": 50,
        "direction": Direction.BUY,
        "resolution": Resolution.HOUR_4,
    }

    spec = build_request(Endpoint.ACTIVITY_HISTORY, LOGGED_IN, params=params)

    assert spec.url_path.startswith("/history/activity?")
    assert decode_query(spec.query) == {
        "from": "2024-03-01T09:30:15",
        "to": "2024-03-02",
        "detailed": "false",
        "filter": "channel==PUBLIC_WEB_API",
        "pageSize": "50",
        "direction": "BUY",
        "resolution": "HOUR_4",
    }


def test_query_preserves_insertion_order() -> None:
    assert encode_query({"b": 1, "a": 2}) == "b=1&a=2"


def test_empty_params_produce_no_query() -> None:
    spec = build_request(Endpoint.TRANSACTIONS, LOGGED_IN, params={})
    assert spec.query == ""
    assert spec.url_path == "/history/transactions"


def test_params_rejected_for_fixed_endpoint() -> None:
    with pytest.raises(InvalidArgumentError) as exc:
        build_request(Endpoint.POSITIONS, LOGGED_IN, params={"pageSize": 10})

    assert exc.value.code == ErrorCode.INVALID_ARGS
    assert exc.value.details["params"] == ["pageSize"]


def test_unsupported_query_value_type() -> None:
    with pytest.raises(InvalidArgumentError):
        encode_query({"pageSize": [1, 2]})


@pytest.mark.parametrize(
    ("endpoint", "path_params"),
    [
        (Endpoint.POSITION, {}),
        (Endpoint.POSITION, {"deal_id": "  "}),
        (Endpoint.POSITION, {"deal_id": "D1", "epic": "extra"}),
        (Endpoint.MARKETS, {"epics": []}),
        (Endpoint.MARKETS, {"epics": ["A", ""]}),
        (Endpoint.MARKETS, {"epics": ["A", " B"]}),
        (Endpoint.MARKETS, {"epics": "A, B"}),
        (Endpoint.POSITION, {"deal_id": " D1"}),
        (Endpoint.MARKET, {"epic": "CS.D.EURUSD.CFD.IP\n"}),
        (Endpoint.MARKET_NAVIGATION_NODE, {"node_id": "264134 "}),
        (Endpoint.ACTIVITY_HISTORY_RANGE, {"from_date": " 01-03-2024", "to_date": "05-03-2024"}),
        (Endpoint.ACTIVITY_HISTORY_PERIOD, {"last_period": 0}),
        (Endpoint.ACTIVITY_HISTORY_PERIOD, {"last_period": True}),
        (Endpoint.ACTIVITY_HISTORY_PERIOD, {"last_period": timedelta(0)}),
        (Endpoint.PRICES_COUNT, {"epic": "A", "resolution": "FORTNIGHT", "num_points": 10}),
        (Endpoint.PRICES_COUNT, {"epic": "A", "resolution": "DAY", "num_points": -1}),
        (Endpoint.PRICES_RANGE, {"epic": "A", "resolution": "DAY", "start": 1, "end": "2024-01-01 00:00:00"}),
    ],
)
def test_invalid_path_parameters(endpoint, path_params) -> None:
    with pytest.raises(InvalidArgumentError):
        build_request(endpoint, LOGGED_IN, path_params=path_params)


def test_path_segments_are_percent_encoded() -> None:
    spec = build_request(Endpoint.MARKET_NAVIGATION_NODE, LOGGED_IN, path_params={"node_id": "a/b c"})
    assert spec.path == "/marketnavigation/a%2Fb%20c"
