"""
Transactions router — apply, inspect, annotate and reverse ledger entries.

Endpoints (mounted under API_PREFIX):
  POST   /transactions/cold-to-real     — cold -> real on one card
  POST   /transactions/from-card-cold   — another card's cold -> this card's real
  POST   /transactions/spend            — real spent on an ad account
  POST   /transactions/real-to-cold     — real -> cold, releasing dotation
  GET    /transactions                  — List log entries (filters + pagination)
  GET    /transactions/{id}             — One log entry with resolved names
  PATCH  /transactions/{id}             — Edit note / transaction_date only
  DELETE /transactions/{id}             — Reverse the entry (undo its effect)

Any authenticated user may call these; the user becomes created_by.
Amounts in requests are currency units; responses carry amount_cents.
"""

import logging

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.ext.asyncio import AsyncSession

from marketing_ledger.database import get_db
from marketing_ledger.dependencies import get_current_user
from marketing_ledger.models.transaction import CardTransaction, TransactionKind
from marketing_ledger.models.user import User
from marketing_ledger.schemas.transaction import (
    ColdToRealRequest,
    FromCardColdRequest,
    RealToColdRequest,
    SpendRequest,
    TransactionDetailResponse,
    TransactionResponse,
    TransactionUpdateRequest,
)
from marketing_ledger.services import ledger_service, reversal_service, transaction_service

logger = logging.getLogger(__name__)

router = APIRouter()


def _log_applied(txn: CardTransaction, user: User) -> None:
    logger.info(
        "applied %s transaction %s: card=%s source_card=%s ad_account=%s amount_cents=%s by user %s",
        txn.kind.value,
        txn.id,
        txn.card_id,
        txn.source_card_id,
        txn.ad_account_id,
        txn.amount_cents,
        user.id,
    )


@router.post(
    "/cold-to-real",
    response_model=TransactionResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Move a card's cold balance to its real balance",
)
async def apply_cold_to_real(
    request: ColdToRealRequest,
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    """Rejected (422) if cold balance or dotation headroom is insufficient."""
    txn = await ledger_service.apply_revenue_cold_to_real(
        db,
        card_id=request.card_id,
        amount=request.amount,
        note=request.note,
        actor_id=user.id,
        transaction_date=request.transaction_date,
    )
    _log_applied(txn, user)
    return txn


@router.post(
    "/from-card-cold",
    response_model=TransactionResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Fund a card's real balance from another card's cold balance",
)
async def apply_from_card_cold(
    request: FromCardColdRequest,
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    txn = await ledger_service.apply_revenue_from_other_card_cold(
        db,
        source_card_id=request.source_card_id,
        target_card_id=request.target_card_id,
        amount=request.amount,
        note=request.note,
        actor_id=user.id,
        transaction_date=request.transaction_date,
    )
    _log_applied(txn, user)
    return txn


@router.post(
    "/spend",
    response_model=TransactionResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Spend a card's real balance on an ad account",
)
async def apply_spend(
    request: SpendRequest,
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    """Spending also consumes dotation: dotation_used grows by the amount."""
    txn = await ledger_service.apply_expense_spend(
        db,
        card_id=request.card_id,
        ad_account_id=request.ad_account_id,
        amount=request.amount,
        note=request.note,
        actor_id=user.id,
        transaction_date=request.transaction_date,
    )
    _log_applied(txn, user)
    return txn


@router.post(
    "/real-to-cold",
    response_model=TransactionResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Move a card's real balance back to cold",
)
async def apply_real_to_cold(
    request: RealToColdRequest,
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    txn = await ledger_service.apply_expense_real_to_cold(
        db,
        card_id=request.card_id,
        amount=request.amount,
        note=request.note,
        actor_id=user.id,
        transaction_date=request.transaction_date,
    )
    _log_applied(txn, user)
    return txn


@router.get(
    "",
    response_model=list[TransactionDetailResponse],
    summary="List transactions",
)
async def list_transactions(
    card_id: int | None = Query(None, description="Card as target or source"),
    kind: TransactionKind | None = Query(None),
    limit: int = Query(50, ge=1, le=200),
    offset: int = Query(0, ge=0),
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    return await transaction_service.list_transactions(
        db, card_id=card_id, kind=kind, limit=limit, offset=offset
    )


@router.get(
    "/{transaction_id}",
    response_model=TransactionDetailResponse,
    summary="Get a transaction",
)
async def get_transaction(
    transaction_id: int,
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    return await transaction_service.get_transaction(db, transaction_id)


@router.patch(
    "/{transaction_id}",
    response_model=TransactionDetailResponse,
    summary="Edit a transaction's note or date",
)
async def update_transaction(
    transaction_id: int,
    request: TransactionUpdateRequest,
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    """Only fields present in the body change. Amount and cards are immutable."""
    return await transaction_service.update_transaction_metadata(
        db, transaction_id, **request.model_dump(exclude_unset=True)
    )


@router.delete(
    "/{transaction_id}",
    response_model=TransactionResponse,
    summary="Reverse a transaction",
)
async def reverse_transaction(
    transaction_id: int,
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    """
    Undo the transaction's effect on the card balances and remove it.

    Returns the removed entry. Responds 409 (and changes nothing) when a
    later transaction has consumed what this one produced.
    """
    txn = await reversal_service.reverse_transaction(db, transaction_id)
    logger.info(
        "reversed %s transaction %s: card=%s amount_cents=%s by user %s",
        txn.kind.value, txn.id, txn.card_id, txn.amount_cents, user.id,
    )
    return txn
