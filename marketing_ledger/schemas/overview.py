"""Pydantic schemas for the overview and summary endpoints."""

from pydantic import BaseModel

from marketing_ledger.schemas.ad_account import AdAccountResponse
from marketing_ledger.schemas.card import CardResponse


class SummaryResponse(BaseModel):
    """Totals across all cards, in cents."""
    total_cold_balance_cents: int
    total_real_balance_cents: int
    total_balance_cents: int
    total_dotation_limit_cents: int
    total_dotation_used_cents: int
    total_available_dotation_cents: int
    total_cards: int
    total_ad_accounts: int


class OverviewResponse(BaseModel):
    summary: SummaryResponse
    cards: list[CardResponse]
    ad_accounts: list[AdAccountResponse]

    model_config = {"from_attributes": True}
