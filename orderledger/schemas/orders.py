from __future__ import annotations

from collections.abc import Mapping
from datetime import datetime
from enum import Enum
from typing import Any, List, Optional, Union

from pydantic import ConfigDict, Field, field_validator
from pydantic.alias_generators import to_camel

from .common import (
    CamelModel,
    parse_datetime,
    to_number,
    to_optional_flag,
    to_optional_int,
    to_optional_number,
    to_optional_text,
    to_text,
)


class PaymentStatus(str, Enum):
    """Raw-material payment status of an order."""
    PAID = "paid"
    PARTIAL = "partial"
    UNPAID = "unpaid"


class PaymentRecord(CamelModel):
    """One payment attached to an order."""
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, extra="allow")

    id: Optional[str] = Field(default=None)
    amount: float = Field(default=0.0)
    date: Optional[datetime] = Field(default=None)
    note: Optional[str] = Field(default=None)
    ledger_entry_id: Optional[str] = Field(default=None, description="Ledger entry that created this payment")
    created_at: Optional[datetime] = Field(default=None)
    updated_at: Optional[datetime] = Field(default=None)

    @field_validator("amount", mode="before")
    @classmethod
    def _coerce_amount(cls, v):
        return to_number(v)

    @field_validator("id", "note", "ledger_entry_id", mode="before")
    @classmethod
    def _coerce_text(cls, v):
        return to_optional_text(v)

    @field_validator("date", "created_at", "updated_at", mode="before")
    @classmethod
    def _parse_dates(cls, v):
        return parse_datetime(v)


def _payment_list(value: Any) -> list:
    if not isinstance(value, (list, tuple)):
        return []
    return [item for item in value if isinstance(item, (Mapping, PaymentRecord))]


class Order(CamelModel):
    """
    One material-delivery order as stored in the `orders` collection.

    `profit` is the stored baseline (total - originalTotal - additionalCost) and
    is never recomputed here. `partialPayments` are payments made OUT to the
    supplier for raw material; `customerPayments` are invoice-side receipts.
    """
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, extra="allow")

    id: Optional[str] = Field(default=None)
    workspace_id: Optional[str] = Field(default=None)
    order_code: Optional[str] = Field(default=None, description="Human-friendly incremental code (e.g. RS1)")
    date: Optional[datetime] = Field(default=None)
    challan_no: Optional[int] = Field(default=None)
    party_name: str = Field(default="")
    site_name: str = Field(default="")
    material: Union[str, List[str]] = Field(default="")
    weight: float = Field(default=0.0)
    rate: float = Field(default=0.0)
    total: float = Field(default=0.0)
    truck_owner: str = Field(default="")
    truck_no: str = Field(default="")
    supplier: str = Field(default="")
    original_weight: float = Field(default=0.0)
    original_rate: float = Field(default=0.0)
    original_total: float = Field(default=0.0)
    additional_cost: float = Field(default=0.0)
    profit: float = Field(default=0.0)
    partial_payments: List[PaymentRecord] = Field(default_factory=list)
    customer_payments: List[PaymentRecord] = Field(default_factory=list)
    invoiced: bool = Field(default=False)
    invoice_id: Optional[str] = Field(default=None)
    archived: bool = Field(default=False)
    adjustment_amount: float = Field(default=0.0, description="Manual profit adjustment")
    adjustment_note: Optional[str] = Field(default=None)
    expense_adjustment: float = Field(default=0.0, description="Deduction from paying more/less for raw material")
    revenue_adjustment: float = Field(default=0.0, description="Addition from the party paying more/less than total")
    paid: Optional[bool] = Field(default=None)
    payment_due: Optional[bool] = Field(default=None)
    paid_amount: Optional[float] = Field(default=None)
    party_paid: Optional[bool] = Field(default=None)
    created_at: Optional[datetime] = Field(default=None)
    updated_at: Optional[datetime] = Field(default=None)

    @field_validator(
        "weight",
        "rate",
        "total",
        "original_weight",
        "original_rate",
        "original_total",
        "additional_cost",
        "profit",
        "adjustment_amount",
        "expense_adjustment",
        "revenue_adjustment",
        mode="before",
    )
    @classmethod
    def _coerce_numbers(cls, v):
        return to_number(v)

    @field_validator("challan_no", mode="before")
    @classmethod
    def _coerce_challan(cls, v):
        return to_optional_int(v)

    @field_validator("paid_amount", mode="before")
    @classmethod
    def _coerce_paid_amount(cls, v):
        return to_optional_number(v)

    @field_validator("partial_payments", "customer_payments", mode="before")
    @classmethod
    def _keep_payment_maps(cls, v):
        # entries that are not payment maps carry no amount
        return _payment_list(v)

    @field_validator("material", mode="before")
    @classmethod
    def _coerce_material(cls, v):
        if isinstance(v, (list, tuple)):
            return [to_text(item) for item in v if item is not None]
        return to_text(v)

    @field_validator("party_name", "site_name", "truck_owner", "truck_no", "supplier", mode="before")
    @classmethod
    def _default_text(cls, v):
        return to_text(v)

    @field_validator("id", "workspace_id", "order_code", "invoice_id", "adjustment_note", mode="before")
    @classmethod
    def _optional_text(cls, v):
        return to_optional_text(v)

    @field_validator("paid", "payment_due", "party_paid", mode="before")
    @classmethod
    def _optional_flags(cls, v):
        return to_optional_flag(v)

    @field_validator("invoiced", "archived", mode="before")
    @classmethod
    def _default_flags(cls, v):
        return bool(to_optional_flag(v))

    @field_validator("date", "created_at", "updated_at", mode="before")
    @classmethod
    def _parse_dates(cls, v):
        return parse_datetime(v)

    @property
    def materials(self) -> List[str]:
        """Selected materials as a list (legacy orders store a single string)."""
        if isinstance(self.material, list):
            return list(self.material)
        return [self.material] if self.material else []


class OrderFilters(CamelModel):
    """Dashboard filters applied to orders before aggregation."""
    party_name: Optional[str] = Field(default=None, description="Comma-separated party names (exact, case-insensitive)")
    material: Optional[str] = Field(default=None, description="Comma-separated material fragments (case-insensitive)")
    start_date: Optional[datetime] = Field(default=None, description="Inclusive lower bound on order date")
    end_date: Optional[datetime] = Field(default=None, description="Inclusive upper bound on order date")


class OrderProfitRead(CamelModel):
    """Reconciliation view of one order."""
    id: Optional[str] = Field(default=None)
    order_code: Optional[str] = Field(default=None)
    date: Optional[datetime] = Field(default=None)
    party_name: str = Field(default="")
    truck_no: str = Field(default="")
    profit: float = Field(..., description="Stored baseline profit")
    adjusted_profit: float = Field(..., description="Profit after expense, revenue and manual adjustments")
    has_adjustments: bool = Field(...)
    raw_material_paid: float = Field(..., description="Sum of payments made for raw material")
    raw_material_outstanding: float = Field(..., description="max(0, originalTotal - rawMaterialPaid)")
    payment_status: PaymentStatus = Field(...)
