"""
Cards router — card administration and per-card views.

Endpoints (mounted under API_PREFIX, e.g. /marketing):
  GET    /cards                      — List cards with summary figures
  GET    /cards/{id}                 — One card with summary figures
  GET    /cards/{id}/transactions    — Log entries where the card is target or source
  POST   /cards                      — Create a card              [ADMIN]
  PATCH  /cards/{id}                 — Rename / change limit      [ADMIN]
  DELETE /cards/{id}                 — Delete an unused card      [ADMIN]
"""

import logging

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.ext.asyncio import AsyncSession

from marketing_ledger.database import get_db
from marketing_ledger.dependencies import get_current_user, require_admin
from marketing_ledger.models.user import User
from marketing_ledger.schemas.card import CardCreateRequest, CardResponse, CardUpdateRequest
from marketing_ledger.schemas.transaction import TransactionDetailResponse
from marketing_ledger.services import card_service, transaction_service

logger = logging.getLogger(__name__)

router = APIRouter()


@router.get("", response_model=list[CardResponse], summary="List cards")
async def list_cards(
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    return await card_service.list_cards(db)


@router.get("/{card_id}", response_model=CardResponse, summary="Get a card")
async def get_card(
    card_id: int,
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    return await card_service.get_card(db, card_id)


@router.get(
    "/{card_id}/transactions",
    response_model=list[TransactionDetailResponse],
    summary="List transactions touching a card",
)
async def list_card_transactions(
    card_id: int,
    limit: int = Query(50, ge=1, le=200),
    offset: int = Query(0, ge=0),
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    """Newest business date first. Includes entries where the card was the donor."""
    return await transaction_service.list_card_transactions(
        db, card_id, limit=limit, offset=offset
    )


@router.post(
    "",
    response_model=CardResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Create a card",
)
async def create_card(
    request: CardCreateRequest,
    admin: User = Depends(require_admin),
    db: AsyncSession = Depends(get_db),
):
    """
    Create a card. Amounts are in currency units.

    - **dotation_limit**: ceiling for dotation used (>= 0)
    - **cold_balance**: opening cold funds (>= 0, default 0)
    """
    card = await card_service.create_card(
        db,
        name=request.name,
        last_four_digits=request.last_four_digits,
        dotation_limit=request.dotation_limit,
        cold_balance=request.cold_balance,
    )
    logger.info(
        "card %s created by user %s with cold_balance_cents=%s",
        card.id, admin.id, card.cold_balance_cents,
    )
    return card


@router.patch("/{card_id}", response_model=CardResponse, summary="Update a card")
async def update_card(
    card_id: int,
    request: CardUpdateRequest,
    admin: User = Depends(require_admin),
    db: AsyncSession = Depends(get_db),
):
    """Balances are not editable here. The limit can't drop below dotation used."""
    card = await card_service.update_card(
        db,
        card_id,
        name=request.name,
        last_four_digits=request.last_four_digits,
        dotation_limit=request.dotation_limit,
    )
    logger.info("card %s updated by user %s", card.id, admin.id)
    return card


@router.delete(
    "/{card_id}",
    status_code=status.HTTP_204_NO_CONTENT,
    summary="Delete a card",
)
async def delete_card(
    card_id: int,
    admin: User = Depends(require_admin),
    db: AsyncSession = Depends(get_db),
):
    """Refused with 409 while any transaction references the card."""
    await card_service.delete_card(db, card_id)
    logger.info("card %s deleted by user %s", card_id, admin.id)
