"""
Pydantic schemas for ledger transaction endpoints.

Each of the four transaction kinds has its own request body. Amounts are
in currency units and validated by the ledger service (positive, finite,
rounded to the cent); responses carry amount_cents.
"""

from datetime import date, datetime
from decimal import Decimal

from pydantic import BaseModel, Field

from marketing_ledger.models.transaction import TransactionKind, TransactionType


class _ApplyRequest(BaseModel):
    amount: Decimal = Field(description="Amount in currency units, e.g. 30.00")
    note: str | None = Field(None, max_length=500)
    transaction_date: date | None = Field(None, description="Business date, defaults to today")


class ColdToRealRequest(_ApplyRequest):
    """Request body for POST /marketing/transactions/cold-to-real."""
    card_id: int


class FromCardColdRequest(_ApplyRequest):
    """Request body for POST /marketing/transactions/from-card-cold."""
    source_card_id: int
    target_card_id: int


class SpendRequest(_ApplyRequest):
    """Request body for POST /marketing/transactions/spend."""
    card_id: int
    ad_account_id: int


class RealToColdRequest(_ApplyRequest):
    """Request body for POST /marketing/transactions/real-to-cold."""
    card_id: int


class TransactionUpdateRequest(BaseModel):
    """Only the note and business date of a logged transaction can change."""
    note: str | None = Field(None, max_length=500)
    transaction_date: date | None = None


class TransactionResponse(BaseModel):
    """Public representation of a log entry."""
    id: int
    type: TransactionType
    kind: TransactionKind
    card_id: int
    source_card_id: int | None
    ad_account_id: int | None
    amount_cents: int
    note: str | None
    transaction_date: date
    created_by: int | None
    created_at: datetime

    model_config = {"from_attributes": True}


class TransactionDetailResponse(TransactionResponse):
    """Log entry with card and ad account names resolved."""
    card_name: str | None
    source_card_name: str | None
    ad_account_name: str | None
    updated_at: datetime
