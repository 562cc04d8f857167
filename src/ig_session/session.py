"""Session actor serializing every IG call made on behalf of one user."""

from __future__ import annotations

import asyncio
from collections.abc import Mapping, Sequence
from contextlib import suppress
from dataclasses import dataclass
from datetime import date, datetime, timedelta
import logging
from typing import Any, Awaitable, Callable

from pydantic import SecretStr

from ig_session.audit.logger import SessionAuditLogger
from ig_session.config import AppConfig
from ig_session.decoders import (
    decode_account_preferences,
    decode_accounts,
    decode_activities,
    decode_activity_list,
    decode_login,
    decode_market_details,
    decode_node_navigation,
    decode_position,
    decode_positions,
    decode_prices,
    decode_prices_with_points,
    decode_root_navigation,
    decode_transactions,
    parse_json,
)
from ig_session.exceptions import AuthenticationError, DecodeError, IGError, RequestError, TransportError
from ig_session.models.account import Account, AccountPreference
from ig_session.models.history import ActivityHistory, TransactionHistory
from ig_session.models.market import MarketDetails, NodeNavigation, PositionList, PositionWithMarket, RootNavigation
from ig_session.models.prices import PriceHistory, Resolution
from ig_session.models.session import SessionState
from ig_session.request_spec import Endpoint, RequestSpec, build_request
from ig_session.transport import HttpxTransport, Transport, TransportResponse

logger = logging.getLogger(__name__)

LOGIN_REQUIRED_SUGGESTION = "Call login() to obtain fresh session tokens."


@dataclass
class _Job:
    operation: str
    run: Callable[[], Awaitable[Any]]
    future: asyncio.Future[Any]


class IGSession:
    """One logical IG session.

    Every operation is queued and executed by a single worker task, strictly
    one at a time in submission order, so no call ever sees the state halfway
    through a login. Only `login()` replaces the state.
    """

    def __init__(
        self,
        identifier: str,
        password: str | SecretStr,
        api_key: str,
        *,
        demo: bool = False,
        transport: Transport | None = None,
        audit: SessionAuditLogger | None = None,
    ) -> None:
        self._state = SessionState(
            identifier=identifier,
            password=password if isinstance(password, SecretStr) else SecretStr(password),
            api_key=api_key,
            demo=demo,
        )
        self._owns_transport = transport is None
        self._transport = transport or HttpxTransport()
        self._audit = audit
        self._queue: asyncio.Queue[_Job] | None = None
        self._worker: asyncio.Task[None] | None = None

    @classmethod
    def from_config(cls, cfg: AppConfig, *, audit: SessionAuditLogger | None = None) -> "IGSession":
        creds = cfg.credentials
        session = cls(
            creds.identifier,
            creds.password,
            creds.api_key,
            demo=creds.demo,
            transport=HttpxTransport(cfg.transport),
            audit=audit,
        )
        session._owns_transport = True
        return session

    @property
    def state(self) -> SessionState:
        """Snapshot of the current state; states are immutable and swapped whole."""
        return self._state

    @property
    def is_running(self) -> bool:
        return self._worker is not None and not self._worker.done()

    async def start(self) -> None:
        if self._ensure_worker():
            await self._log_session_event("session_started", {"demo": self._state.demo})

    def _ensure_worker(self) -> bool:
        """Create the queue and worker if needed; returns True when a new worker was created."""
        if self.is_running:
            return False
        self._queue = asyncio.Queue()
        self._worker = asyncio.create_task(self._run(), name=f"ig-session-{self._state.identifier}")
        return True

    async def stop(self) -> None:
        if self._worker is not None:
            self._worker.cancel()
            with suppress(asyncio.CancelledError):
                await self._worker
            self._worker = None
            while self._queue is not None and not self._queue.empty():
                self._queue.get_nowait().future.cancel()
            self._queue = None
            await self._log_session_event("session_stopped", {})

        if self._owns_transport:
            await self._transport.aclose()

    async def __aenter__(self) -> "IGSession":
        await self.start()
        return self

    async def __aexit__(self, *_: object) -> None:
        await self.stop()

    async def get_state(self) -> SessionState:
        """Return the state as seen by an operation queued at this point."""

        async def run() -> SessionState:
            return self._state

        return await self._submit("get_state", run)

    async def login(self) -> SessionState:
        return await self._submit("login", self._login)

    async def accounts(self) -> tuple[Account, ...]:
        return await self._call("accounts", Endpoint.ACCOUNTS, decode_accounts)

    async def account_preferences(self) -> AccountPreference:
        return await self._call("account_preferences", Endpoint.ACCOUNT_PREFERENCES, decode_account_preferences)

    async def activity_history(self, params: Mapping[str, Any] | None = None) -> ActivityHistory:
        """Filtered activity history.

        Recognised keys: from, to, detailed, dealId, filter, pageSize.
        """
        return await self._call("activity_history", Endpoint.ACTIVITY_HISTORY, decode_activities, params=params)

    async def activity_history_for_period(self, last_period: int | timedelta) -> ActivityHistory:
        """Activity over the trailing period, given in milliseconds or as a timedelta."""
        return await self._call(
            "activity_history_for_period",
            Endpoint.ACTIVITY_HISTORY_PERIOD,
            decode_activity_list,
            path_params={"last_period": last_period},
        )

    async def activity_history_between(self, from_date: str | date, to_date: str | date) -> ActivityHistory:
        """Activity between two dates, as dd-mm-yyyy strings or dates."""
        return await self._call(
            "activity_history_between",
            Endpoint.ACTIVITY_HISTORY_RANGE,
            decode_activity_list,
            path_params={"from_date": from_date, "to_date": to_date},
        )

    async def transactions(self, params: Mapping[str, Any] | None = None) -> TransactionHistory:
        """Transaction history.

        Recognised keys: type, from, to, maxSpanSeconds, pageSize, pageNumber.
        """
        return await self._call("transactions", Endpoint.TRANSACTIONS, decode_transactions, params=params)

    async def positions(self) -> PositionList:
        return await self._call("positions", Endpoint.POSITIONS, decode_positions)

    async def position(self, deal_id: str) -> PositionWithMarket:
        return await self._call("position", Endpoint.POSITION, decode_position, path_params={"deal_id": deal_id})

    async def market_navigation(self, node_id: str | None = None) -> RootNavigation | NodeNavigation:
        if node_id is None:
            return await self._call("market_navigation", Endpoint.MARKET_NAVIGATION, decode_root_navigation)
        return await self._call(
            "market_navigation",
            Endpoint.MARKET_NAVIGATION_NODE,
            decode_node_navigation,
            path_params={"node_id": node_id},
        )

    async def market(self, epic: str) -> MarketDetails:
        return await self._call("market", Endpoint.MARKET, decode_market_details, path_params={"epic": epic})

    async def markets(self, epics: str | Sequence[str], filter_type: str = "ALL") -> MarketDetails:
        """Market details for several epics; `filter_type` is ALL or SNAPSHOT_ONLY."""
        return await self._call(
            "markets",
            Endpoint.MARKETS,
            decode_market_details,
            path_params={"epics": epics},
            params={"filter": filter_type},
        )

    async def prices(self, epic: str, params: Mapping[str, Any] | None = None) -> PriceHistory:
        """Historical prices; by default the minute prices of the last ten minutes.

        Recognised keys: resolution, from, to, max, pageSize, pageNumber.
        """
        return await self._call("prices", Endpoint.PRICES, decode_prices, path_params={"epic": epic}, params=params)

    async def prices_by_count(self, epic: str, resolution: Resolution | str, num_points: int) -> PriceHistory:
        return await self._call(
            "prices_by_count",
            Endpoint.PRICES_COUNT,
            decode_prices_with_points,
            path_params={"epic": epic, "resolution": resolution, "num_points": num_points},
        )

    async def prices_between(
        self,
        epic: str,
        resolution: Resolution | str,
        start: str | datetime,
        end: str | datetime,
    ) -> PriceHistory:
        return await self._call(
            "prices_between",
            Endpoint.PRICES_RANGE,
            decode_prices_with_points,
            path_params={"epic": epic, "resolution": resolution, "start": start, "end": end},
        )

    async def _submit(self, operation: str, run: Callable[[], Awaitable[Any]]) -> Any:
        started = self._ensure_worker()
        assert self._queue is not None
        future: asyncio.Future[Any] = asyncio.get_running_loop().create_future()
        # enqueue before any await so submission order is queue order
        self._queue.put_nowait(_Job(operation=operation, run=run, future=future))
        if started:
            await self._log_session_event("session_started", {"demo": self._state.demo})
        return await future

    async def _run(self) -> None:
        assert self._queue is not None
        queue = self._queue
        while True:
            job = await queue.get()
            try:
                if job.future.done():
                    continue
                try:
                    result = await job.run()
                except asyncio.CancelledError:
                    job.future.cancel()
                    raise
                except Exception as exc:
                    if not job.future.done():
                        job.future.set_exception(exc)
                else:
                    if not job.future.done():
                        job.future.set_result(result)
            finally:
                queue.task_done()

    async def _call(
        self,
        operation: str,
        endpoint: Endpoint,
        decode: Callable[[Any], Any],
        *,
        path_params: Mapping[str, Any] | None = None,
        params: Mapping[str, Any] | None = None,
    ) -> Any:
        async def run() -> Any:
            # built inside the job so headers carry the tokens current at dispatch time
            spec = build_request(endpoint, self._state, path_params=path_params, params=params)
            return await self._perform(operation, spec, decode)

        return await self._submit(operation, run)

    async def _perform(self, operation: str, spec: RequestSpec, decode: Callable[[Any], Any]) -> Any:
        status_code: int | None = None
        logger.debug("%s %s %s version=%s", operation, spec.method, spec.url_path, spec.version)
        try:
            response = await self._request(operation, spec)
            status_code = response.status_code
            result = decode(parse_json(response.content))
        except IGError as exc:
            status_code = status_code or exc.details.get("status_code")
            logger.warning("%s failed code=%s message=%s", operation, exc.code.value, exc.message)
            await self._log_request(operation, spec, status_code, exc.code.value)
            raise
        await self._log_request(operation, spec, status_code, None)
        return result

    async def _request(self, operation: str, spec: RequestSpec) -> TransportResponse:
        try:
            response = await self._transport.get(self._state.demo, spec.url_path, spec.headers)
        except TransportError as exc:
            raise RequestError(
                f"{operation} failed: {exc.message}",
                details={"operation": operation, "path": spec.path, "timeout": exc.timeout},
            ) from exc

        if not response.ok:
            error_code = _extract_error_code(response)
            suggestion: str | None = None
            if response.status_code in {401, 403}:
                suggestion = LOGIN_REQUIRED_SUGGESTION
            elif response.status_code == 429:
                suggestion = "Retry with lower request frequency."
            raise RequestError(
                f"{operation} failed with HTTP {response.status_code}: {error_code or response.text}",
                status_code=response.status_code,
                body=response.text,
                details={"operation": operation, "path": spec.path, "error_code": error_code},
                suggestion=suggestion,
            )
        return response

    async def _login(self) -> SessionState:
        credentials = self._state
        spec = build_request(Endpoint.LOGIN, credentials)
        body = {"identifier": credentials.identifier, "password": credentials.password.get_secret_value()}

        try:
            new_state, status_code = await self._authenticate(credentials, spec, body)
        except AuthenticationError as exc:
            logger.warning("login failed identifier=%s message=%s", credentials.identifier, exc.message)
            await self._log_request("login", spec, exc.details.get("status_code"), exc.code.value)
            await self._log_session_event("login_failed", {"message": exc.message})
            raise

        self._state = new_state
        logger.info(
            "login succeeded identifier=%s account=%s demo=%s",
            new_state.identifier,
            new_state.current_account_id,
            new_state.demo,
        )
        await self._log_request("login", spec, status_code, None)
        await self._log_session_event(
            "login_succeeded",
            {"current_account_id": new_state.current_account_id, "accounts": len(new_state.accounts)},
        )
        return new_state

    async def _authenticate(
        self,
        credentials: SessionState,
        spec: RequestSpec,
        body: dict[str, Any],
    ) -> tuple[SessionState, int]:
        try:
            response = await self._transport.post(credentials.demo, spec.url_path, spec.headers, body)
        except TransportError as exc:
            raise AuthenticationError(
                f"login failed: {exc.message}",
                details={"timeout": exc.timeout},
            ) from exc

        if not response.ok:
            error_code = _extract_error_code(response)
            raise AuthenticationError(
                f"login rejected with HTTP {response.status_code}: {error_code or response.text}",
                details={"status_code": response.status_code, "error_code": error_code, "body": response.text},
                suggestion="Verify the identifier, password and API key, and the demo/live setting.",
            )

        cst = response.header("CST")
        security_token = response.header("X-SECURITY-TOKEN")
        if not cst or not security_token:
            raise AuthenticationError(
                "login response did not include CST and X-SECURITY-TOKEN headers",
                details={"status_code": response.status_code},
            )

        try:
            new_state = decode_login(
                parse_json(response.content),
                cst=cst,
                security_token=security_token,
                credentials=credentials,
            )
        except DecodeError as exc:
            raise AuthenticationError(
                f"login response could not be decoded: {exc.message}",
                details={"status_code": response.status_code, "field": exc.field},
            ) from exc
        return new_state, response.status_code

    async def _log_request(
        self,
        operation: str,
        spec: RequestSpec,
        status_code: int | None,
        error_code: str | None,
    ) -> None:
        if self._audit:
            await self._audit.log_request(
                self._state.identifier,
                operation=operation,
                method=spec.method,
                path=spec.url_path,
                status_code=status_code,
                error_code=error_code,
            )

    async def _log_session_event(self, event: str, details: dict[str, Any]) -> None:
        logger.info("session_event=%s identifier=%s details=%s", event, self._state.identifier, details)
        if self._audit:
            await self._audit.log_session_event(self._state.identifier, event, details)


def _extract_error_code(response: TransportResponse) -> str | None:
    if not response.content:
        return None
    try:
        payload = parse_json(response.content)
    except DecodeError:
        return None
    if isinstance(payload, dict):
        code = payload.get("errorCode")
        if isinstance(code, str) and code.strip():
            return code.strip()
    return None
