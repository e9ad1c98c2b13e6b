"""
Overview router — dashboard reads.

  GET /overview  — totals, per-card balances, ad account links
  GET /summary   — totals only
"""

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from marketing_ledger.database import get_db
from marketing_ledger.dependencies import get_current_user
from marketing_ledger.models.user import User
from marketing_ledger.schemas.overview import OverviewResponse, SummaryResponse
from marketing_ledger.services import overview_service

router = APIRouter()


@router.get("/overview", response_model=OverviewResponse, summary="Marketing overview")
async def get_overview(
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    return await overview_service.get_overview(db)


@router.get("/summary", response_model=SummaryResponse, summary="Totals across all cards")
async def get_summary(
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    return await overview_service.get_summary(db)
