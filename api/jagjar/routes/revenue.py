"""Developer-facing earnings endpoints."""
from fastapi import APIRouter, Depends, Path
from sqlalchemy.ext.asyncio import AsyncSession

from jagjar.auth import get_current_user
from jagjar.db.database import get_db
from jagjar.errors import NotFoundError
from jagjar.models.developer import Developer
from jagjar.models.user import User
from jagjar.schemas.revenue import MONTH_PATTERN, MonthlyEarnings, WebsiteEarnings, PayoutResponse
from jagjar.services.revenue_service import RevenueDistributionService

router = APIRouter()


async def get_current_developer(
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
) -> Developer:
    developer = await RevenueDistributionService(db).get_developer_for_user(user.id)
    if not developer:
        raise NotFoundError('Developer profile not found')
    return developer


@router.get('/earnings', response_model=list[MonthlyEarnings])
async def get_developer_earnings(
    developer: Developer = Depends(get_current_developer),
    db: AsyncSession = Depends(get_db),
):
    """Monthly earnings for the current developer, newest first."""
    svc = RevenueDistributionService(db)
    return await svc.get_developer_earnings(developer.id)


@router.get('/earnings/{month}', response_model=list[WebsiteEarnings])
async def get_developer_earnings_details(
    month: str = Path(..., pattern=MONTH_PATTERN),
    developer: Developer = Depends(get_current_developer),
    db: AsyncSession = Depends(get_db),
):
    """Per-website breakdown for one month."""
    svc = RevenueDistributionService(db)
    return await svc.get_developer_earnings_details(developer.id, month)


@router.get('/payouts', response_model=list[PayoutResponse])
async def get_developer_payouts(
    developer: Developer = Depends(get_current_developer),
    db: AsyncSession = Depends(get_db),
):
    svc = RevenueDistributionService(db)
    return await svc.get_developer_payouts(developer.id)
