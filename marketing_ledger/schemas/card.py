"""
Pydantic schemas for card endpoints.

Requests carry amounts in currency units (e.g. "250.00" or 250); the
service converts them to integer cents. Responses expose integer cents
(e.g. 250.00 = 25000) plus the derived available dotation and total.
"""

from datetime import datetime
from decimal import Decimal

from pydantic import BaseModel, Field


class CardCreateRequest(BaseModel):
    """Request body for POST /marketing/cards."""
    name: str = Field(min_length=1, max_length=100)
    last_four_digits: str = Field(pattern=r"^[0-9]{4}$")
    dotation_limit: Decimal = Field(ge=0, description="Dotation ceiling in currency units")
    cold_balance: Decimal = Field(
        Decimal("0"), ge=0, description="Opening cold balance in currency units"
    )


class CardUpdateRequest(BaseModel):
    """Request body for PATCH /marketing/cards/{id}. Balances are not editable."""
    name: str | None = Field(None, min_length=1, max_length=100)
    last_four_digits: str | None = Field(None, pattern=r"^[0-9]{4}$")
    dotation_limit: Decimal | None = Field(None, ge=0)


class CardResponse(BaseModel):
    """A card with its balances and derived summary figures, all in cents."""
    id: int
    name: str
    last_four_digits: str
    dotation_limit_cents: int
    dotation_used_cents: int
    available_dotation_cents: int
    cold_balance_cents: int
    real_balance_cents: int
    total_balance_cents: int
    created_at: datetime
    updated_at: datetime

    model_config = {"from_attributes": True}
