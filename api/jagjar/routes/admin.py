"""Admin revenue endpoints. Every route here requires the admin capability."""
from fastapi import APIRouter, Depends, Path, Query
from sqlalchemy.ext.asyncio import AsyncSession

from jagjar.auth import require_admin
from jagjar.db.database import get_db
from jagjar.schemas.revenue import (
    MONTH_PATTERN,
    RevenueCalculateRequest,
    DistributionSummary,
    DistributionLogResponse,
    RevenueSettingsResponse,
    RevenueSettingsUpdate,
    TopDeveloper,
)
from jagjar.services.revenue_service import RevenueDistributionService
from jagjar.services.settings_service import RevenueSettingsService

router = APIRouter(dependencies=[Depends(require_admin)])


@router.post('/revenue/calculate', response_model=DistributionSummary)
async def calculate_revenue(
    data: RevenueCalculateRequest | None = None,
    db: AsyncSession = Depends(get_db),
):
    """Run the monthly distribution. Re-running a month replaces its results."""
    svc = RevenueDistributionService(db)
    log = await svc.calculate_monthly_revenue(data.month if data else None)
    return log


@router.get('/revenue/settings', response_model=RevenueSettingsResponse)
async def get_revenue_settings(db: AsyncSession = Depends(get_db)):
    return await RevenueSettingsService(db).get_settings()


@router.put('/revenue/settings', response_model=RevenueSettingsResponse)
async def update_revenue_settings(
    data: RevenueSettingsUpdate,
    db: AsyncSession = Depends(get_db),
):
    svc = RevenueSettingsService(db)
    updated = await svc.update_settings(
        platform_fee_percentage=data.platform_fee_percentage,
        minimum_payout_amount=data.minimum_payout_amount,
        payout_schedule=data.payout_schedule,
    )
    return updated


@router.get('/revenue/stats', response_model=list[DistributionLogResponse])
async def get_platform_revenue_stats(
    months: int = Query(default=12, ge=1, le=120),
    db: AsyncSession = Depends(get_db),
):
    """Distribution log history, newest month first."""
    svc = RevenueDistributionService(db)
    return await svc.get_platform_revenue_stats(months)


@router.get('/revenue/top-developers/{month}', response_model=list[TopDeveloper])
async def get_top_earning_developers(
    month: str = Path(..., pattern=MONTH_PATTERN),
    limit: int = Query(default=10, ge=1, le=100),
    db: AsyncSession = Depends(get_db),
):
    svc = RevenueDistributionService(db)
    return await svc.get_top_earning_developers(month, limit)
