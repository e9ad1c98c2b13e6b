"""
Card service — card administration and the shared row-locking helper.

Admin operations:
  - create_card: name, last four digits, dotation limit and an optional
    opening cold balance (the only way funds enter the ledger)
  - update_card: rename, change last four digits, raise or lower the
    dotation limit (never below what is already used)
  - delete_card: refused while any transaction references the card,
    as target or as source

Lock ordering:
  Every operation that touches more than one card locks the rows in
  ascending id order through lock_cards(). Two concurrent operations on
  the same pair of cards therefore always request the locks in the same
  sequence and cannot deadlock.

SQLite note:
  with_for_update() is a no-op on SQLite. There every transaction starts
  with BEGIN IMMEDIATE (database.enable_sqlite_write_locks), so the locking
  read already holds the database write lock. On PostgreSQL it takes row
  locks.
"""

import re

from sqlalchemy import delete, func, or_, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from marketing_ledger.exceptions import (
    CardInUseError,
    CardNotFoundError,
    DotationLimitBelowUsageError,
    DuplicateCardNameError,
    InvalidInputError,
)
from marketing_ledger.models.ad_account import ad_account_cards
from marketing_ledger.models.card import Card
from marketing_ledger.models.transaction import CardTransaction
from marketing_ledger.money import validate_money


LAST_FOUR_PATTERN = re.compile(r"^[0-9]{4}$")


# ---------------------------------------------------------------------------
# Locking
# ---------------------------------------------------------------------------

async def _select_card_for_update(db: AsyncSession, card_id: int) -> Card | None:
    # populate_existing refreshes an already-loaded instance with the
    # values read under the lock
    result = await db.execute(
        select(Card)
        .where(Card.id == card_id)
        .with_for_update()
        .execution_options(populate_existing=True)
    )
    return result.scalar_one_or_none()


async def lock_cards(db: AsyncSession, *card_ids: int) -> dict[int, Card | None]:
    """
    Lock the given card rows in ascending id order.

    Duplicate ids are locked once. Missing cards map to None so the
    caller can decide which error to raise and in what order.

    Returns:
        Dict of card id -> locked Card (or None if it doesn't exist).
    """
    locked: dict[int, Card | None] = {}
    for card_id in sorted(set(card_ids)):
        locked[card_id] = await _select_card_for_update(db, card_id)
    return locked


async def lock_card(db: AsyncSession, card_id: int) -> Card:
    """Lock a single card row, raising CardNotFoundError if it is missing."""
    card = (await lock_cards(db, card_id))[card_id]
    if card is None:
        raise CardNotFoundError(card_id)
    return card


# ---------------------------------------------------------------------------
# Validation helpers
# ---------------------------------------------------------------------------

def _clean_name(name: str) -> str:
    cleaned = name.strip()
    if not cleaned:
        raise InvalidInputError("Card name must not be empty")
    return cleaned


def _check_last_four(last_four_digits: str) -> str:
    if not LAST_FOUR_PATTERN.match(last_four_digits):
        raise InvalidInputError("last_four_digits must be exactly 4 digits")
    return last_four_digits


async def _ensure_name_available(
    db: AsyncSession, name: str, exclude_card_id: int | None = None
) -> None:
    query = select(Card.id).where(func.lower(Card.name) == name.lower())
    if exclude_card_id is not None:
        query = query.where(Card.id != exclude_card_id)
    result = await db.execute(query)
    if result.first() is not None:
        raise DuplicateCardNameError(name)


async def _flush_named(db: AsyncSession, name: str) -> None:
    # The unique index still catches a name taken by a concurrent request
    # after _ensure_name_available ran
    try:
        await db.flush()
    except IntegrityError:
        raise DuplicateCardNameError(name)


# ---------------------------------------------------------------------------
# CRUD
# ---------------------------------------------------------------------------

async def create_card(
    db: AsyncSession,
    name: str,
    last_four_digits: str,
    dotation_limit,
    cold_balance=0,
) -> Card:
    """
    Create a card with an empty real balance and no dotation used.

    Args:
        db: Database session.
        name: Unique display name (compared case-insensitively).
        last_four_digits: Exactly four ASCII digits.
        dotation_limit: Ceiling for dotation_used, in currency units (>= 0).
        cold_balance: Opening cold funds, in currency units (>= 0).

    Raises:
        InvalidInputError: Empty name or malformed last four digits.
        InvalidAmountError: Negative or non-numeric limit/balance.
        DuplicateCardNameError: Another card already uses the name.
    """
    name = _clean_name(name)
    _check_last_four(last_four_digits)
    limit = validate_money(dotation_limit, positive=False)
    opening = validate_money(cold_balance, positive=False)

    await _ensure_name_available(db, name)

    card = Card(
        name=name,
        last_four_digits=last_four_digits,
        dotation_limit_cents=limit.cents,
        dotation_used_cents=0,
        cold_balance_cents=opening.cents,
        real_balance_cents=0,
    )
    db.add(card)
    await _flush_named(db, name)
    return card


async def get_card(db: AsyncSession, card_id: int) -> Card:
    result = await db.execute(select(Card).where(Card.id == card_id))
    card = result.scalar_one_or_none()
    if card is None:
        raise CardNotFoundError(card_id)
    return card


async def list_cards(db: AsyncSession) -> list[Card]:
    result = await db.execute(select(Card).order_by(Card.name, Card.id))
    return list(result.scalars().all())


async def update_card(
    db: AsyncSession,
    card_id: int,
    name: str | None = None,
    last_four_digits: str | None = None,
    dotation_limit=None,
) -> Card:
    """
    Update a card's descriptive fields and dotation limit.

    Balances are never edited here; they only move through the ledger
    service. The card row is locked so a concurrent spend cannot raise
    dotation_used past a limit being lowered at the same moment.

    Raises:
        CardNotFoundError: The card doesn't exist.
        DuplicateCardNameError: The new name is taken by another card.
        DotationLimitBelowUsageError: The new limit is below dotation_used.
    """
    card = await lock_card(db, card_id)

    if name is not None:
        name = _clean_name(name)
        await _ensure_name_available(db, name, exclude_card_id=card_id)
        card.name = name

    if last_four_digits is not None:
        card.last_four_digits = _check_last_four(last_four_digits)

    if dotation_limit is not None:
        limit = validate_money(dotation_limit, positive=False)
        if limit.cents < card.dotation_used_cents:
            raise DotationLimitBelowUsageError(
                card_id=card_id,
                requested_cents=limit.cents,
                available_cents=card.dotation_used_cents,
            )
        card.dotation_limit_cents = limit.cents

    await _flush_named(db, card.name)
    return card


async def count_card_transactions(db: AsyncSession, card_id: int) -> int:
    """Number of log rows that reference the card as target or source."""
    result = await db.execute(
        select(func.count(CardTransaction.id)).where(
            or_(
                CardTransaction.card_id == card_id,
                CardTransaction.source_card_id == card_id,
            )
        )
    )
    return result.scalar_one()


async def delete_card(db: AsyncSession, card_id: int) -> None:
    """
    Delete a card and its ad account links.

    Raises:
        CardNotFoundError: The card doesn't exist.
        CardInUseError: Transactions still reference the card. They must be
                        reversed first so every logged effect stays undoable.
    """
    card = await lock_card(db, card_id)

    in_use = await count_card_transactions(db, card_id)
    if in_use:
        raise CardInUseError(card_id, in_use)

    # Unloaded collection: the ORM leaves the link rows to the delete below
    db.expire(card, ["ad_accounts"])
    await db.execute(delete(ad_account_cards).where(ad_account_cards.c.card_id == card_id))
    await db.delete(card)
    await db.flush()
