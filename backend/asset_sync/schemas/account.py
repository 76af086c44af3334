"""Pydantic schemas for Account payloads."""

from typing import Any

from pydantic import ConfigDict, Field, field_validator

from asset_sync.constants import AccountType
from asset_sync.schemas.common import WireModel


class AccountBase(WireModel):
    """Base Account schema with the user-editable fields."""

    name: str = Field(..., min_length=1, max_length=100)
    description: str | None = Field(None, max_length=500)
    owner: str | None = Field(None, max_length=100, description="Free-text person label")
    account_type: AccountType = AccountType.REGULAR
    financial_institution: str | None = Field(None, max_length=100)
    account_number: str | None = Field(None, max_length=100)


class AccountCreate(AccountBase):
    """Schema for registering a new Account against a spreadsheet tab."""

    sheet_name: str = Field(..., min_length=1, description="Spreadsheet tab backing the account")


class AccountUpdate(AccountBase):
    """Schema for editing an Account.

    The sheet tab is fixed at registration, so it is not accepted here.
    """

    model_config = ConfigDict(extra="forbid")


class Account(WireModel):
    """Schema for Account responses."""

    id: int
    name: str = ""
    description: str | None = None
    sheet_name: str | None = None
    owner: str | None = None
    account_type: AccountType | None = None
    financial_institution: str | None = None
    account_number: str | None = None

    @field_validator("account_type", mode="before")
    @classmethod
    def _blank_account_type(cls, value: Any) -> Any:
        return value or None
