"""
Ad account service — ad account administration and card links.

Ad accounts carry no balance; they are the destination named by a
spend_ad_account transaction and are linked to the cards that pay for
them. Deleting an ad account removes its links but never touches the
transaction log, so spends against it stay reversible.
"""

from sqlalchemy import delete, func, insert, select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import selectinload

from marketing_ledger.exceptions import (
    AdAccountNotFoundError,
    CardLinkNotFoundError,
    DuplicateAdAccountNameError,
    DuplicateCardLinkError,
    InvalidInputError,
)
from marketing_ledger.models.ad_account import AdAccount, ad_account_cards
from marketing_ledger.services.card_service import get_card


def _clean_name(name: str) -> str:
    cleaned = name.strip()
    if not cleaned:
        raise InvalidInputError("Ad account name must not be empty")
    return cleaned


async def _ensure_name_available(
    db: AsyncSession, name: str, exclude_id: int | None = None
) -> None:
    query = select(AdAccount.id).where(func.lower(AdAccount.name) == name.lower())
    if exclude_id is not None:
        query = query.where(AdAccount.id != exclude_id)
    result = await db.execute(query)
    if result.first() is not None:
        raise DuplicateAdAccountNameError(name)


async def _flush_named(db: AsyncSession, name: str) -> None:
    try:
        await db.flush()
    except IntegrityError:
        raise DuplicateAdAccountNameError(name)


async def get_ad_account(db: AsyncSession, ad_account_id: int) -> AdAccount:
    """Ad account with its linked cards loaded, or AdAccountNotFoundError."""
    # populate_existing so link changes made through Core statements show up
    result = await db.execute(
        select(AdAccount)
        .where(AdAccount.id == ad_account_id)
        .options(selectinload(AdAccount.cards))
        .execution_options(populate_existing=True)
    )
    ad_account = result.scalar_one_or_none()
    if ad_account is None:
        raise AdAccountNotFoundError(ad_account_id)
    return ad_account


async def list_ad_accounts(db: AsyncSession) -> list[AdAccount]:
    result = await db.execute(
        select(AdAccount)
        .options(selectinload(AdAccount.cards))
        .order_by(AdAccount.name, AdAccount.id)
        .execution_options(populate_existing=True)
    )
    return list(result.scalars().all())


async def create_ad_account(db: AsyncSession, name: str) -> AdAccount:
    name = _clean_name(name)
    await _ensure_name_available(db, name)

    ad_account = AdAccount(name=name)
    db.add(ad_account)
    await _flush_named(db, name)
    return await get_ad_account(db, ad_account.id)


async def update_ad_account(db: AsyncSession, ad_account_id: int, name: str) -> AdAccount:
    ad_account = await get_ad_account(db, ad_account_id)
    name = _clean_name(name)
    await _ensure_name_available(db, name, exclude_id=ad_account_id)

    ad_account.name = name
    await _flush_named(db, name)
    return ad_account


async def delete_ad_account(db: AsyncSession, ad_account_id: int) -> None:
    ad_account = await get_ad_account(db, ad_account_id)
    # Unloaded collection: the ORM leaves the link rows to the delete below
    db.expire(ad_account, ["cards"])

    await db.execute(
        delete(ad_account_cards).where(ad_account_cards.c.ad_account_id == ad_account_id)
    )
    await db.delete(ad_account)
    await db.flush()


async def link_card(db: AsyncSession, ad_account_id: int, card_id: int) -> AdAccount:
    """
    Link a card to an ad account.

    Raises:
        AdAccountNotFoundError / CardNotFoundError: Either side is missing.
        DuplicateCardLinkError: The link already exists.
    """
    await get_ad_account(db, ad_account_id)
    await get_card(db, card_id)

    existing = await db.execute(
        select(ad_account_cards.c.card_id).where(
            ad_account_cards.c.ad_account_id == ad_account_id,
            ad_account_cards.c.card_id == card_id,
        )
    )
    if existing.first() is not None:
        raise DuplicateCardLinkError(ad_account_id, card_id)

    await db.execute(
        insert(ad_account_cards).values(ad_account_id=ad_account_id, card_id=card_id)
    )
    return await get_ad_account(db, ad_account_id)


async def unlink_card(db: AsyncSession, ad_account_id: int, card_id: int) -> AdAccount:
    await get_ad_account(db, ad_account_id)

    result = await db.execute(
        delete(ad_account_cards).where(
            ad_account_cards.c.ad_account_id == ad_account_id,
            ad_account_cards.c.card_id == card_id,
        )
    )
    if result.rowcount == 0:
        raise CardLinkNotFoundError(ad_account_id, card_id)
    return await get_ad_account(db, ad_account_id)
