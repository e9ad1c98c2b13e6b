"""
Overview service — read-only reporting across all cards.

get_summary() aggregates in the database; get_overview() adds the
per-card balances and the ad account / card links needed to render the
marketing dashboard in one request.
"""

from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from marketing_ledger.models.ad_account import AdAccount
from marketing_ledger.models.card import Card
from marketing_ledger.services import ad_account_service, card_service


async def get_summary(db: AsyncSession) -> dict:
    """Totals over every card, all in cents."""
    result = await db.execute(
        select(
            func.coalesce(func.sum(Card.cold_balance_cents), 0),
            func.coalesce(func.sum(Card.real_balance_cents), 0),
            func.coalesce(func.sum(Card.dotation_limit_cents), 0),
            func.coalesce(func.sum(Card.dotation_used_cents), 0),
            func.count(Card.id),
        )
    )
    cold, real, limit, used, card_count = result.one()

    ad_account_count = (
        await db.execute(select(func.count(AdAccount.id)))
    ).scalar_one()

    return {
        "total_cold_balance_cents": cold,
        "total_real_balance_cents": real,
        "total_balance_cents": cold + real,
        "total_dotation_limit_cents": limit,
        "total_dotation_used_cents": used,
        "total_available_dotation_cents": limit - used,
        "total_cards": card_count,
        "total_ad_accounts": ad_account_count,
    }


async def get_overview(db: AsyncSession) -> dict:
    """
    Summary totals, every card's balances, and ad account links.

    Returns:
        {"summary": {...}, "cards": [Card, ...], "ad_accounts": [AdAccount, ...]}
        with cards ordered by name and each ad account's cards loaded.
    """
    return {
        "summary": await get_summary(db),
        "cards": await card_service.list_cards(db),
        "ad_accounts": await ad_account_service.list_ad_accounts(db),
    }
