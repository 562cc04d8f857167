"""Authenticated session state."""

from __future__ import annotations

from pydantic import Field, SecretStr, model_validator

from ig_session.models.account import AccountBalance, AccountSummary
from ig_session.models.base import IGModel


class SessionState(IGModel):
    """Everything one session knows about its user.

    Credentials and `demo` are fixed at construction. Every other field is
    replaced in one step by a successful login.
    """

    demo: bool = False
    identifier: str
    password: SecretStr
    api_key: str
    cst: str | None = None
    security_token: str | None = None
    account_type: str | None = None
    account_info: AccountBalance = Field(default_factory=AccountBalance)
    currency_iso_code: str | None = None
    currency_symbol: str | None = None
    current_account_id: str | None = None
    lightstreamer_endpoint: str | None = None
    accounts: tuple[AccountSummary, ...] = ()
    client_id: str | None = None
    timezone_offset: int = 0
    has_active_demo_accounts: bool = True
    has_active_live_accounts: bool = True
    trailing_stops_enabled: bool = False
    rerouting_environment: str | None = None
    dealing_enabled: bool = True

    @model_validator(mode="after")
    def _tokens_travel_together(self) -> "SessionState":
        if (self.cst is None) != (self.security_token is None):
            raise ValueError("cst and security_token must both be set or both be absent")
        return self

    @property
    def is_authenticated(self) -> bool:
        return self.cst is not None
