"""
Ad accounts router — ad account administration and card links.

Endpoints (mounted under API_PREFIX):
  GET    /ad-accounts                          — List with linked cards
  GET    /ad-accounts/{id}                     — One ad account
  POST   /ad-accounts                          — Create        [ADMIN]
  PATCH  /ad-accounts/{id}                     — Rename        [ADMIN]
  DELETE /ad-accounts/{id}                     — Delete        [ADMIN]
  POST   /ad-accounts/{id}/cards               — Link a card   [ADMIN]
  DELETE /ad-accounts/{id}/cards/{card_id}     — Unlink a card [ADMIN]
"""

import logging

from fastapi import APIRouter, Depends, status
from sqlalchemy.ext.asyncio import AsyncSession

from marketing_ledger.database import get_db
from marketing_ledger.dependencies import get_current_user, require_admin
from marketing_ledger.models.user import User
from marketing_ledger.schemas.ad_account import (
    AdAccountCreateRequest,
    AdAccountResponse,
    AdAccountUpdateRequest,
    CardLinkRequest,
)
from marketing_ledger.services import ad_account_service

logger = logging.getLogger(__name__)

router = APIRouter()


@router.get("", response_model=list[AdAccountResponse], summary="List ad accounts")
async def list_ad_accounts(
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    return await ad_account_service.list_ad_accounts(db)


@router.get("/{ad_account_id}", response_model=AdAccountResponse, summary="Get an ad account")
async def get_ad_account(
    ad_account_id: int,
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    return await ad_account_service.get_ad_account(db, ad_account_id)


@router.post(
    "",
    response_model=AdAccountResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Create an ad account",
)
async def create_ad_account(
    request: AdAccountCreateRequest,
    admin: User = Depends(require_admin),
    db: AsyncSession = Depends(get_db),
):
    ad_account = await ad_account_service.create_ad_account(db, request.name)
    logger.info("ad account %s created by user %s", ad_account.id, admin.id)
    return ad_account


@router.patch("/{ad_account_id}", response_model=AdAccountResponse, summary="Rename an ad account")
async def update_ad_account(
    ad_account_id: int,
    request: AdAccountUpdateRequest,
    admin: User = Depends(require_admin),
    db: AsyncSession = Depends(get_db),
):
    return await ad_account_service.update_ad_account(db, ad_account_id, request.name)


@router.delete(
    "/{ad_account_id}",
    status_code=status.HTTP_204_NO_CONTENT,
    summary="Delete an ad account",
)
async def delete_ad_account(
    ad_account_id: int,
    admin: User = Depends(require_admin),
    db: AsyncSession = Depends(get_db),
):
    """Logged spends against the ad account are kept and stay reversible."""
    await ad_account_service.delete_ad_account(db, ad_account_id)
    logger.info("ad account %s deleted by user %s", ad_account_id, admin.id)


@router.post(
    "/{ad_account_id}/cards",
    response_model=AdAccountResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Link a card to an ad account",
)
async def link_card(
    ad_account_id: int,
    request: CardLinkRequest,
    admin: User = Depends(require_admin),
    db: AsyncSession = Depends(get_db),
):
    return await ad_account_service.link_card(db, ad_account_id, request.card_id)


@router.delete(
    "/{ad_account_id}/cards/{card_id}",
    response_model=AdAccountResponse,
    summary="Unlink a card from an ad account",
)
async def unlink_card(
    ad_account_id: int,
    card_id: int,
    admin: User = Depends(require_admin),
    db: AsyncSession = Depends(get_db),
):
    return await ad_account_service.unlink_card(db, ad_account_id, card_id)
