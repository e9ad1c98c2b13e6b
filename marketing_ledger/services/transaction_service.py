"""
Transaction log queries and metadata edits.

Read side of the log. Rows are returned as plain dicts that combine the
transaction columns with names resolved through outer joins:

  - card_name: the target card
  - source_card_name: the donor card (from_card_cold only)
  - ad_account_name: the ad account (spend_ad_account only; None once the
    ad account has been deleted)

Ordering is newest business date first, then newest created_at, then
highest id, so entries on the same day keep a stable order.

The only write here is update_transaction_metadata, which may change the
note and transaction_date. Amounts, kinds and card references are
immutable; to change those, reverse the transaction and apply a new one.
"""

from sqlalchemy import or_, select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import aliased

from marketing_ledger.exceptions import InvalidInputError, TransactionNotFoundError
from marketing_ledger.models.ad_account import AdAccount
from marketing_ledger.models.card import Card
from marketing_ledger.models.transaction import CardTransaction, TransactionKind
from marketing_ledger.services.card_service import get_card


_UNSET = object()

_TargetCard = aliased(Card, name="target_card")
_SourceCard = aliased(Card, name="source_card")


def _detail_query():
    return (
        select(
            CardTransaction,
            _TargetCard.name,
            _SourceCard.name,
            AdAccount.name,
        )
        .outerjoin(_TargetCard, _TargetCard.id == CardTransaction.card_id)
        .outerjoin(_SourceCard, _SourceCard.id == CardTransaction.source_card_id)
        .outerjoin(AdAccount, AdAccount.id == CardTransaction.ad_account_id)
    )


def _to_detail(txn: CardTransaction, card_name, source_card_name, ad_account_name) -> dict:
    return {
        "id": txn.id,
        "type": txn.type,
        "kind": txn.kind,
        "card_id": txn.card_id,
        "card_name": card_name,
        "source_card_id": txn.source_card_id,
        "source_card_name": source_card_name,
        "ad_account_id": txn.ad_account_id,
        "ad_account_name": ad_account_name,
        "amount_cents": txn.amount_cents,
        "note": txn.note,
        "transaction_date": txn.transaction_date,
        "created_by": txn.created_by,
        "created_at": txn.created_at,
        "updated_at": txn.updated_at,
    }


async def get_transaction(db: AsyncSession, transaction_id: int) -> dict:
    """Single log entry with resolved names, or TransactionNotFoundError."""
    result = await db.execute(
        _detail_query().where(CardTransaction.id == transaction_id)
    )
    row = result.first()
    if row is None:
        raise TransactionNotFoundError(transaction_id)
    return _to_detail(*row)


async def list_transactions(
    db: AsyncSession,
    card_id: int | None = None,
    kind: TransactionKind | None = None,
    limit: int = 50,
    offset: int = 0,
) -> list[dict]:
    """
    List log entries, newest first.

    Args:
        db: Database session.
        card_id: Only entries where this card is the target OR the source.
        kind: Only entries of this kind.
        limit: Max number of results.
        offset: Number of results to skip (for pagination).
    """
    query = _detail_query().order_by(
        CardTransaction.transaction_date.desc(),
        CardTransaction.created_at.desc(),
        CardTransaction.id.desc(),
    )

    if card_id is not None:
        query = query.where(
            or_(
                CardTransaction.card_id == card_id,
                CardTransaction.source_card_id == card_id,
            )
        )
    if kind is not None:
        query = query.where(CardTransaction.kind == kind)

    result = await db.execute(query.limit(limit).offset(offset))
    return [_to_detail(*row) for row in result.all()]


async def list_card_transactions(
    db: AsyncSession,
    card_id: int,
    limit: int = 50,
    offset: int = 0,
) -> list[dict]:
    """Entries touching one card, as target or source. 404s on unknown cards."""
    await get_card(db, card_id)
    return await list_transactions(db, card_id=card_id, limit=limit, offset=offset)


async def update_transaction_metadata(
    db: AsyncSession,
    transaction_id: int,
    note=_UNSET,
    transaction_date=_UNSET,
) -> dict:
    """
    Edit the note and/or business date of a log entry.

    Arguments left at their default are not touched; passing note=None
    clears the note. The balance effect of the transaction never changes.

    Raises:
        TransactionNotFoundError: No transaction with this id.
        InvalidInputError: transaction_date explicitly set to None.
    """
    result = await db.execute(
        select(CardTransaction)
        .where(CardTransaction.id == transaction_id)
        .with_for_update()
    )
    txn = result.scalar_one_or_none()
    if txn is None:
        raise TransactionNotFoundError(transaction_id)

    if note is not _UNSET:
        txn.note = note
    if transaction_date is not _UNSET:
        if transaction_date is None:
            raise InvalidInputError("transaction_date cannot be cleared")
        txn.transaction_date = transaction_date

    await db.flush()
    return await get_transaction(db, transaction_id)
