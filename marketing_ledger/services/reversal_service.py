"""
Reversal service — undo a logged transaction exactly.

Deleting a transaction means applying the inverse of its effect and then
removing the row, in one database transaction:

  kind               guards checked before undoing        inverse applied
  cold_to_real       real >= a, used >= a                 cold +a, real -a, used -a
  from_card_cold     target real >= a, target used >= a  source.cold +a, target.real -a, target.used -a
  spend_ad_account   used >= a                            real +a, used -a
  real_to_cold       cold >= a, used + a <= limit         real +a, cold -a, used +a

Why reversal can fail:
  Later transactions may have consumed what this one produced (e.g. the
  real funds of a cold_to_real were spent afterwards). Undoing it would
  then push a balance negative or past the dotation limit. In that case
  ReversalConflictError is raised, the row is kept, and no balance moves.
  The caller can reverse the later transactions first and retry.

Locking:
  The transaction row is locked first, then its cards in ascending id
  order through card_service.lock_cards, the same order every ledger
  operation uses.

Dispatch:
  Kinds map to inverse functions through _INVERSES. A kind with no entry
  raises UnsupportedKindError instead of being silently ignored.
"""

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from marketing_ledger.exceptions import (
    CardNotFoundError,
    ReversalConflictError,
    TransactionNotFoundError,
    UnsupportedKindError,
)
from marketing_ledger.models.card import Card
from marketing_ledger.models.transaction import CardTransaction, TransactionKind
from marketing_ledger.services.card_service import lock_cards


def _conflict(txn: CardTransaction, reason: str) -> ReversalConflictError:
    return ReversalConflictError(txn.id, reason)


def _undo_cold_to_real(txn: CardTransaction, card: Card, source: Card | None) -> None:
    amount = txn.amount_cents
    if card.real_balance_cents < amount:
        raise _conflict(txn, f"card {card.id} real balance is below {amount} cents")
    if card.dotation_used_cents < amount:
        raise _conflict(txn, f"card {card.id} dotation used is below {amount} cents")

    card.cold_balance_cents += amount
    card.real_balance_cents -= amount
    card.dotation_used_cents -= amount


def _undo_from_card_cold(txn: CardTransaction, card: Card, source: Card | None) -> None:
    amount = txn.amount_cents
    if card.real_balance_cents < amount:
        raise _conflict(txn, f"target card {card.id} real balance is below {amount} cents")
    if card.dotation_used_cents < amount:
        raise _conflict(txn, f"target card {card.id} dotation used is below {amount} cents")
    if source is None:
        raise _conflict(txn, f"source card {txn.source_card_id} no longer exists")

    source.cold_balance_cents += amount
    card.real_balance_cents -= amount
    card.dotation_used_cents -= amount


def _undo_spend(txn: CardTransaction, card: Card, source: Card | None) -> None:
    # The ad account may have been deleted since; it holds no balance
    amount = txn.amount_cents
    if card.dotation_used_cents < amount:
        raise _conflict(txn, f"card {card.id} dotation used is below {amount} cents")

    card.real_balance_cents += amount
    card.dotation_used_cents -= amount


def _undo_real_to_cold(txn: CardTransaction, card: Card, source: Card | None) -> None:
    amount = txn.amount_cents
    if card.cold_balance_cents < amount:
        raise _conflict(txn, f"card {card.id} cold balance is below {amount} cents")
    if card.dotation_used_cents + amount > card.dotation_limit_cents:
        raise _conflict(txn, f"card {card.id} dotation limit would be exceeded")

    card.real_balance_cents += amount
    card.cold_balance_cents -= amount
    card.dotation_used_cents += amount


_INVERSES = {
    TransactionKind.COLD_TO_REAL: _undo_cold_to_real,
    TransactionKind.FROM_CARD_COLD: _undo_from_card_cold,
    TransactionKind.SPEND_AD_ACCOUNT: _undo_spend,
    TransactionKind.REAL_TO_COLD: _undo_real_to_cold,
}


async def reverse_transaction(db: AsyncSession, transaction_id: int) -> CardTransaction:
    """
    Undo a transaction's balance effect and delete its log row.

    Returns:
        The deleted CardTransaction (attributes remain readable).

    Raises:
        TransactionNotFoundError: No transaction with this id.
        CardNotFoundError: The target card no longer exists.
        UnsupportedKindError: The kind has no inverse.
        ReversalConflictError: An inverse guard failed; nothing changed.
    """
    result = await db.execute(
        select(CardTransaction)
        .where(CardTransaction.id == transaction_id)
        .with_for_update()
    )
    txn = result.scalar_one_or_none()
    if txn is None:
        raise TransactionNotFoundError(transaction_id)

    card_ids = [txn.card_id]
    if txn.source_card_id is not None:
        card_ids.append(txn.source_card_id)
    cards = await lock_cards(db, *card_ids)

    card = cards[txn.card_id]
    if card is None:
        raise CardNotFoundError(txn.card_id)
    source = cards.get(txn.source_card_id) if txn.source_card_id is not None else None

    undo = _INVERSES.get(txn.kind)
    if undo is None:
        raise UnsupportedKindError(txn.kind)
    undo(txn, card, source)

    await db.delete(txn)
    await db.flush()
    return txn
