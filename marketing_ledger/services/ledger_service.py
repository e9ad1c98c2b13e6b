"""
Ledger service — the balance mutation engine.

THIS IS THE MOST CRITICAL FILE IN THE PROJECT. It implements the four
ways money can move between a card's balances:

  apply_revenue_cold_to_real           cold -a, real +a, used +a
  apply_revenue_from_other_card_cold   source.cold -a, target.real +a, target.used +a
  apply_expense_spend                  real -a, used +a
  apply_expense_real_to_cold           real -a, cold +a, used -a

Every operation follows the same shape:
  1. validate the amount (Money, integer cents)
  2. lock every card it touches, ascending by id (card_service.lock_cards)
  3. check ALL preconditions, in a fixed order, before writing anything
  4. apply the balance changes
  5. insert exactly one CardTransaction row and flush

Atomicity:
  Steps 2-5 happen in the caller's database transaction (the request
  session). Because nothing is written until every check has passed, a
  rejected operation leaves no trace even before the rollback runs.

Conservation:
  cold + real summed over all cards only changes through card creation.
  Every operation here moves value between balances without creating or
  destroying it.

Note on spend:
  apply_expense_spend consumes dotation as well as real balance, so
  dotation_used tracks cumulative use of the card, not what sits in real.
"""

from datetime import date

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from marketing_ledger.exceptions import (
    AdAccountNotFoundError,
    CardNotFoundError,
    DotationUnderflowError,
    InsufficientColdBalanceError,
    InsufficientDotationError,
    InsufficientRealBalanceError,
    InsufficientSourceColdBalanceError,
    InvalidOperationError,
)
from marketing_ledger.models.ad_account import AdAccount
from marketing_ledger.models.card import Card
from marketing_ledger.models.transaction import CardTransaction, KIND_TO_TYPE, TransactionKind
from marketing_ledger.money import Money, validate_money
from marketing_ledger.services.card_service import lock_card, lock_cards


# ---------------------------------------------------------------------------
# Precondition checks (raise, never mutate)
# ---------------------------------------------------------------------------

def _require_dotation_headroom(card: Card, amount: Money) -> None:
    available = card.dotation_limit_cents - card.dotation_used_cents
    if amount.cents > available:
        raise InsufficientDotationError(card.id, amount.cents, available)


def _require_real(card: Card, amount: Money) -> None:
    if card.real_balance_cents < amount.cents:
        raise InsufficientRealBalanceError(card.id, amount.cents, card.real_balance_cents)


async def _record(
    db: AsyncSession,
    kind: TransactionKind,
    card_id: int,
    amount: Money,
    note: str | None,
    actor_id: int | None,
    transaction_date: date | None,
    source_card_id: int | None = None,
    ad_account_id: int | None = None,
) -> CardTransaction:
    txn = CardTransaction(
        type=KIND_TO_TYPE[kind],
        kind=kind,
        card_id=card_id,
        source_card_id=source_card_id,
        ad_account_id=ad_account_id,
        amount_cents=amount.cents,
        note=note,
        created_by=actor_id,
    )
    if transaction_date is not None:
        txn.transaction_date = transaction_date
    db.add(txn)
    await db.flush()
    return txn


# ---------------------------------------------------------------------------
# Operations
# ---------------------------------------------------------------------------

async def apply_revenue_cold_to_real(
    db: AsyncSession,
    card_id: int,
    amount,
    note: str | None = None,
    actor_id: int | None = None,
    transaction_date: date | None = None,
) -> CardTransaction:
    """
    Make cold funds on a card spendable.

    Raises (checked in this order):
        InvalidAmountError: amount is not a positive number.
        CardNotFoundError: the card doesn't exist.
        InsufficientColdBalanceError: cold_balance < amount.
        InsufficientDotationError: dotation_used + amount > dotation_limit.
    """
    value = validate_money(amount)
    card = await lock_card(db, card_id)

    if card.cold_balance_cents < value.cents:
        raise InsufficientColdBalanceError(card.id, value.cents, card.cold_balance_cents)
    _require_dotation_headroom(card, value)

    card.cold_balance_cents -= value.cents
    card.real_balance_cents += value.cents
    card.dotation_used_cents += value.cents

    return await _record(
        db, TransactionKind.COLD_TO_REAL, card.id, value, note, actor_id, transaction_date,
    )


async def apply_revenue_from_other_card_cold(
    db: AsyncSession,
    source_card_id: int,
    target_card_id: int,
    amount,
    note: str | None = None,
    actor_id: int | None = None,
    transaction_date: date | None = None,
) -> CardTransaction:
    """
    Fund a card's real balance from another card's cold balance.

    Both cards are locked in ascending id order, whichever one is the
    source. The target is checked before the source.

    Raises (checked in this order):
        InvalidAmountError: amount is not a positive number.
        InvalidOperationError: source and target are the same card.
        CardNotFoundError: the target card doesn't exist.
        InsufficientDotationError: target would exceed its dotation limit.
        CardNotFoundError: the source card doesn't exist.
        InsufficientSourceColdBalanceError: source cold_balance < amount.
    """
    value = validate_money(amount)
    if source_card_id == target_card_id:
        raise InvalidOperationError("Source and target card must be different")

    cards = await lock_cards(db, source_card_id, target_card_id)
    target = cards[target_card_id]
    source = cards[source_card_id]

    if target is None:
        raise CardNotFoundError(target_card_id)
    _require_dotation_headroom(target, value)

    if source is None:
        raise CardNotFoundError(source_card_id)
    if source.cold_balance_cents < value.cents:
        raise InsufficientSourceColdBalanceError(
            source.id, value.cents, source.cold_balance_cents
        )

    source.cold_balance_cents -= value.cents
    target.real_balance_cents += value.cents
    target.dotation_used_cents += value.cents

    return await _record(
        db,
        TransactionKind.FROM_CARD_COLD,
        target.id,
        value,
        note,
        actor_id,
        transaction_date,
        source_card_id=source.id,
    )


async def apply_expense_spend(
    db: AsyncSession,
    card_id: int,
    ad_account_id: int,
    amount,
    note: str | None = None,
    actor_id: int | None = None,
    transaction_date: date | None = None,
) -> CardTransaction:
    """
    Spend real funds from a card on an ad account.

    The ad account is read without a lock; it does not carry a balance.

    Raises (checked in this order):
        InvalidAmountError: amount is not a positive number.
        CardNotFoundError: the card doesn't exist.
        InsufficientRealBalanceError: real_balance < amount.
        InsufficientDotationError: dotation_used + amount > dotation_limit.
        AdAccountNotFoundError: the ad account doesn't exist.
    """
    value = validate_money(amount)
    card = await lock_card(db, card_id)

    _require_real(card, value)
    _require_dotation_headroom(card, value)

    result = await db.execute(select(AdAccount.id).where(AdAccount.id == ad_account_id))
    if result.first() is None:
        raise AdAccountNotFoundError(ad_account_id)

    card.real_balance_cents -= value.cents
    card.dotation_used_cents += value.cents

    return await _record(
        db,
        TransactionKind.SPEND_AD_ACCOUNT,
        card.id,
        value,
        note,
        actor_id,
        transaction_date,
        ad_account_id=ad_account_id,
    )


async def apply_expense_real_to_cold(
    db: AsyncSession,
    card_id: int,
    amount,
    note: str | None = None,
    actor_id: int | None = None,
    transaction_date: date | None = None,
) -> CardTransaction:
    """
    Park real funds back on the card's cold balance, releasing dotation.

    Raises (checked in this order):
        InvalidAmountError: amount is not a positive number.
        CardNotFoundError: the card doesn't exist.
        InsufficientRealBalanceError: real_balance < amount.
        DotationUnderflowError: dotation_used < amount.
    """
    value = validate_money(amount)
    card = await lock_card(db, card_id)

    _require_real(card, value)
    if card.dotation_used_cents < value.cents:
        raise DotationUnderflowError(card.id, value.cents, card.dotation_used_cents)

    card.real_balance_cents -= value.cents
    card.cold_balance_cents += value.cents
    card.dotation_used_cents -= value.cents

    return await _record(
        db, TransactionKind.REAL_TO_COLD, card.id, value, note, actor_id, transaction_date,
    )
