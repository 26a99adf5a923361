from __future__ import annotations

from datetime import datetime
from typing import Literal, Optional, get_args

from pydantic import ConfigDict, Field, field_validator
from pydantic.alias_generators import to_camel

from .common import CamelModel, parse_datetime, to_number, to_optional_text

LedgerType = Literal["credit", "debit"]

# Known values of LedgerEntry.source
LEDGER_SOURCES = (
    "manual",
    "partyPayment",
    "invoicePayment",
    "orderExpense",
    "orderProfit",
    "orderPaymentUpdate",
)


class LedgerEntry(CamelModel):
    """
    One money movement. `credit` is money in, `debit` is money out.

    `partyName` is set only when an incoming payment is attributable to a
    customer; `supplier` marks outgoing raw-material payments.
    """
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, extra="allow")

    id: Optional[str] = Field(default=None)
    type: Optional[LedgerType] = Field(default=None, description="None when the stored type is missing or unknown")
    amount: float = Field(default=0.0)
    date: Optional[datetime] = Field(default=None)
    note: Optional[str] = Field(default=None)
    created_at: Optional[datetime] = Field(default=None)
    source: Optional[str] = Field(default=None, description=f"One of {', '.join(LEDGER_SOURCES)}")
    supplier: Optional[str] = Field(default=None)
    party_name: Optional[str] = Field(default=None)

    @field_validator("amount", mode="before")
    @classmethod
    def _coerce_amount(cls, v):
        return to_number(v)

    @field_validator("date", "created_at", mode="before")
    @classmethod
    def _parse_dates(cls, v):
        return parse_datetime(v)

    @field_validator("type", mode="before")
    @classmethod
    def _known_type(cls, v):
        return v if v in get_args(LedgerType) else None

    @field_validator("id", "note", "source", "supplier", "party_name", mode="before")
    @classmethod
    def _coerce_text(cls, v):
        return to_optional_text(v)
