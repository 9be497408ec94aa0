"""
Monthly Revenue Distribution

Splits a month's subscription revenue between developers in proportion to
the time premium users spent on their websites:

    platform_fee = floor(total_revenue * fee% / 100)
    distributable = total_revenue - platform_fee
    earnings(dev, site) = floor(distributable * site_premium_time / total_premium_time)

Re-running a month replaces its rows. The caller owns the transaction.
"""
import logging
import re
from collections import defaultdict
from dataclasses import dataclass
from datetime import date, datetime, timedelta
from decimal import Decimal, ROUND_FLOOR
from sqlalchemy import select, delete, desc, func, text
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from jagjar.config import settings
from jagjar.errors import ValidationError, ConflictError, ComputationFailure
from jagjar.models.user import User
from jagjar.models.developer import Developer, ApiKey, Website
from jagjar.models.tracking import TimeTracking
from jagjar.models.revenue import (
    DeveloperEarning, Revenue, Payout, PayoutStatus,
    RevenueDistributionLog, DistributionStatus,
)
from jagjar.services.revenue_source import RevenueSource, SubscriberRevenueSource
from jagjar.services.settings_service import RevenueSettingsService

logger = logging.getLogger(__name__)

MONTH_RE = re.compile(r'\d{4}-\d{2}', re.ASCII)

NO_USAGE_NOTE = 'No premium usage recorded for this period.'

# First key of pg_advisory_xact_lock(int, int); second key is YYYYMM
ADVISORY_LOCK_NAMESPACE = 0x4A4A


def previous_month(today: date | None = None) -> str:
    """YYYY-MM of the calendar month before `today`."""
    today = today or date.today()
    last_day = today.replace(day=1) - timedelta(days=1)
    return last_day.strftime('%Y-%m')


def month_bounds(month: str) -> tuple[datetime, datetime]:
    """Half-open [first day of month, first day of next month)."""
    if not isinstance(month, str) or not MONTH_RE.fullmatch(month):
        raise ValidationError('Invalid month format, must be YYYY-MM')
    year, mon = int(month[:4]), int(month[5:])
    if not 1 <= mon <= 12:
        raise ValidationError('Invalid month format, must be YYYY-MM')

    try:
        start = datetime(year, mon, 1)
        if mon == 12:
            end = datetime(year + 1, 1, 1)
        else:
            end = datetime(year, mon + 1, 1)
    except ValueError as e:
        # year 0000, or no representable upper bound for 9999-12
        raise ValidationError(f'Month {month} is out of range') from e
    return start, end


def platform_fee_for(total_revenue: int, fee_percentage: Decimal) -> int:
    fee = Decimal(total_revenue) * Decimal(fee_percentage) / 100
    return int(fee.to_integral_value(rounding=ROUND_FLOOR))


@dataclass
class WebsiteUsage:
    developer_id: int
    website_id: int
    total_time: int
    premium_time: int
    earnings: int = 0


class RevenueDistributionService:
    """Monthly allocator plus the read-side queries the dashboards use."""

    def __init__(self, db: AsyncSession, revenue_source: RevenueSource | None = None):
        self.db = db
        self.revenue_source = revenue_source or SubscriberRevenueSource()

    async def calculate_monthly_revenue(self, month: str | None = None) -> RevenueDistributionLog:
        """Compute and persist the distribution for `month` (default: last month).

        Returns the distribution log written for the run.
        """
        if month is None:
            month = previous_month()
        start, end = month_bounds(month)

        logger.info('Calculating revenue distribution for %s', month)
        try:
            await self._lock_month(month)
            await self._clear_month(month)

            snapshot = await RevenueSettingsService(self.db).get_settings()

            # 1. Platform-wide premium time
            total_premium_time = await self.db.scalar(
                select(func.coalesce(func.sum(TimeTracking.duration), 0))
                .select_from(TimeTracking)
                .join(User, TimeTracking.user_id == User.id)
                .where(TimeTracking.date >= start)
                .where(TimeTracking.date < end)
                .where(User.is_subscribed == True)  # noqa: E712
            )
            total_premium_time = int(total_premium_time or 0)

            if total_premium_time == 0:
                log = RevenueDistributionLog(
                    month=month,
                    total_revenue=0,
                    total_distributed=0,
                    platform_fee=0,
                    developer_count=0,
                    status=DistributionStatus.COMPLETED.value,
                    notes=NO_USAGE_NOTE,
                )
                self.db.add(log)
                await self.db.flush()
                await self.db.refresh(log)
                logger.info('No premium usage for %s, nothing to distribute', month)
                return log

            # 2. Pool
            total_revenue = await self.revenue_source.get_total_revenue_for_month(self.db, month)
            platform_fee = platform_fee_for(total_revenue, snapshot.platform_fee_percentage)
            distributable = total_revenue - platform_fee

            # 3. Premium time per (developer, website)
            usages = await self._website_usage(start, end)

            # 4. Pro-rata earnings, floored
            developer_totals: dict[int, int] = defaultdict(int)
            for usage in usages:
                usage.earnings = distributable * usage.premium_time // total_premium_time
                developer_totals[usage.developer_id] += usage.earnings

                self.db.add(DeveloperEarning(
                    developer_id=usage.developer_id,
                    website_id=usage.website_id,
                    month=month,
                    total_time=usage.total_time,
                    premium_time=usage.premium_time,
                    earnings=usage.earnings,
                ))

            # 5. Developer totals and payouts over the threshold
            for developer_id, amount in developer_totals.items():
                self.db.add(Revenue(developer_id=developer_id, month=month, amount=amount))

                if amount >= snapshot.minimum_payout_amount:
                    self.db.add(Payout(
                        developer_id=developer_id,
                        amount=amount,
                        status=PayoutStatus.PENDING.value,
                        payment_method=settings.default_payment_method,
                        month=month,
                        notes=f'Automatic payout for {month}',
                    ))

            log = RevenueDistributionLog(
                month=month,
                total_revenue=total_revenue,
                total_distributed=distributable,
                platform_fee=platform_fee,
                developer_count=len(developer_totals),
                status=DistributionStatus.COMPLETED.value,
                notes=f'Processed on {datetime.utcnow().isoformat()}',
            )
            self.db.add(log)
            await self.db.flush()
            await self.db.refresh(log)
        except SQLAlchemyError as e:
            logger.error('Revenue distribution for %s failed: %s', month, e, exc_info=True)
            raise ComputationFailure(f'Revenue calculation for {month} failed') from e

        logger.info(
            'Distributed %s for %s: revenue=%s fee=%s developers=%s',
            distributable, month, total_revenue, platform_fee, len(developer_totals),
        )
        return log

    async def _lock_month(self, month: str) -> None:
        """Serialise concurrent runs for one month (PostgreSQL only)."""
        if self.db.get_bind().dialect.name != 'postgresql':
            return
        await self.db.execute(
            text('SELECT pg_advisory_xact_lock(:ns, :key)'),
            {'ns': ADVISORY_LOCK_NAMESPACE, 'key': int(month.replace('-', ''))},
        )

    async def _clear_month(self, month: str) -> None:
        """Drop a previous run's rows so the month can be recomputed."""
        settled = await self.db.scalar(
            select(func.count(Payout.id))
            .where(Payout.month == month)
            .where(Payout.status != PayoutStatus.PENDING.value)
        )
        if settled:
            raise ConflictError(
                f'{month} has payouts already being processed; it cannot be recalculated'
            )

        await self.db.execute(delete(DeveloperEarning).where(DeveloperEarning.month == month))
        await self.db.execute(delete(Revenue).where(Revenue.month == month))
        await self.db.execute(delete(Payout).where(Payout.month == month))
        await self.db.execute(
            delete(RevenueDistributionLog).where(RevenueDistributionLog.month == month)
        )

    async def _website_usage(self, start: datetime, end: datetime) -> list[WebsiteUsage]:
        result = await self.db.execute(
            select(
                ApiKey.developer_id,
                Website.id,
                func.sum(TimeTracking.duration).label('premium_time'),
            )
            .select_from(TimeTracking)
            .join(Website, TimeTracking.website_id == Website.id)
            .join(ApiKey, Website.api_key_id == ApiKey.id)
            .join(User, TimeTracking.user_id == User.id)
            .where(TimeTracking.date >= start)
            .where(TimeTracking.date < end)
            .where(User.is_subscribed == True)  # noqa: E712
            .group_by(ApiKey.developer_id, Website.id)
            .order_by(ApiKey.developer_id, Website.id)
        )
        # Only premium sessions are aggregated, so total_time == premium_time here
        return [
            WebsiteUsage(
                developer_id=developer_id,
                website_id=website_id,
                total_time=int(premium_time),
                premium_time=int(premium_time),
            )
            for developer_id, website_id, premium_time in result.all()
        ]

    async def get_developer_earnings(self, developer_id: int, limit: int = 12) -> list[dict]:
        """Monthly totals for a developer, newest month first."""
        result = await self.db.execute(
            select(Revenue.month, Revenue.amount, Revenue.calculated_at)
            .where(Revenue.developer_id == developer_id)
            .order_by(desc(Revenue.month))
            .limit(limit)
        )
        return [
            {'month': month, 'amount': amount, 'calculated_at': calculated_at}
            for month, amount, calculated_at in result.all()
        ]

    async def get_developer_earnings_details(self, developer_id: int, month: str) -> list[dict]:
        """Per-website breakdown of one developer's month, biggest earner first."""
        month_bounds(month)
        result = await self.db.execute(
            select(DeveloperEarning, Website)
            .join(Website, DeveloperEarning.website_id == Website.id)
            .where(
                DeveloperEarning.developer_id == developer_id,
                DeveloperEarning.month == month,
            )
            .order_by(desc(DeveloperEarning.earnings), DeveloperEarning.website_id)
        )
        return [
            {
                'website_id': website.id,
                'website_name': website.name,
                'website_url': website.url,
                'total_time': earning.total_time,
                'premium_time': earning.premium_time,
                'earnings': earning.earnings,
            }
            for earning, website in result.all()
        ]

    async def get_developer_payouts(self, developer_id: int, limit: int = 10) -> list[Payout]:
        result = await self.db.execute(
            select(Payout)
            .where(Payout.developer_id == developer_id)
            .order_by(desc(Payout.created_at), desc(Payout.id))
            .limit(limit)
        )
        return list(result.scalars().all())

    async def get_platform_revenue_stats(self, months: int = 12) -> list[RevenueDistributionLog]:
        result = await self.db.execute(
            select(RevenueDistributionLog)
            .order_by(desc(RevenueDistributionLog.month))
            .limit(months)
        )
        return list(result.scalars().all())

    async def get_top_earning_developers(self, month: str, limit: int = 10) -> list[dict]:
        month_bounds(month)
        result = await self.db.execute(
            select(Revenue.developer_id, Developer.company_name, Revenue.amount)
            .join(Developer, Revenue.developer_id == Developer.id)
            .where(Revenue.month == month)
            .order_by(desc(Revenue.amount), Revenue.developer_id)
            .limit(limit)
        )
        return [
            {'developer_id': developer_id, 'developer_name': name, 'amount': amount}
            for developer_id, name, amount in result.all()
        ]

    async def get_developer_for_user(self, user_id: int) -> Developer | None:
        result = await self.db.execute(
            select(Developer).where(Developer.user_id == user_id)
        )
        return result.scalar_one_or_none()
