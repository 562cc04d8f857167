"""Account and account preference models."""

from __future__ import annotations

from pydantic import Field

from ig_session.models.base import IGModel


class AccountBalance(IGModel):
    balance: float | None = None
    deposit: float | None = None
    profit_loss: float | None = None
    available: float | None = None


class Account(IGModel):
    account_id: str
    account_name: str | None = None
    account_alias: str | None = None
    status: str | None = None
    account_type: str | None = None
    preferred: bool = False
    balance: AccountBalance | None = None
    currency: str | None = None
    can_transfer_from: bool | None = None
    can_transfer_to: bool | None = None


class AccountSummary(IGModel):
    """Account entry as listed in the login response."""

    account_id: str
    account_name: str | None = None
    preferred: bool = False
    account_type: str | None = None


class AccountPreference(IGModel):
    trailing_stops_enabled: bool = Field(default=False)
