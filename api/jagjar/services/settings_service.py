"""Revenue settings accessor.

The settings table holds at most one row. When it is empty every reader gets
DEFAULT_REVENUE_SETTINGS, so changing a default means bumping its version.
"""
from dataclasses import dataclass
from datetime import datetime
from decimal import Decimal
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from jagjar.errors import ValidationError
from jagjar.models.revenue import RevenueSettings, PayoutSchedule


@dataclass(frozen=True)
class RevenueSettingsSnapshot:
    """Immutable view of the settings used for the whole of one computation."""
    platform_fee_percentage: Decimal
    minimum_payout_amount: int
    payout_schedule: str
    updated_at: datetime | None = None
    version: int | None = None

    @classmethod
    def from_row(cls, row: RevenueSettings) -> 'RevenueSettingsSnapshot':
        return cls(
            platform_fee_percentage=Decimal(row.platform_fee_percentage),
            minimum_payout_amount=row.minimum_payout_amount,
            payout_schedule=row.payout_schedule,
            updated_at=row.updated_at,
        )


DEFAULT_REVENUE_SETTINGS = RevenueSettingsSnapshot(
    platform_fee_percentage=Decimal('30.00'),
    minimum_payout_amount=1000,  # $10 in cents
    payout_schedule=PayoutSchedule.MONTHLY.value,
    version=1,
)


class RevenueSettingsService:
    """Read and update the platform revenue settings singleton."""

    def __init__(self, db: AsyncSession):
        self.db = db

    async def _get_row(self) -> RevenueSettings | None:
        result = await self.db.execute(
            select(RevenueSettings).order_by(RevenueSettings.id).limit(1)
        )
        return result.scalar_one_or_none()

    async def get_settings(self) -> RevenueSettingsSnapshot:
        """Current settings, or the defaults when none were ever saved."""
        row = await self._get_row()
        if row is None:
            return DEFAULT_REVENUE_SETTINGS
        return RevenueSettingsSnapshot.from_row(row)

    async def update_settings(
        self,
        platform_fee_percentage: Decimal | float | None = None,
        minimum_payout_amount: int | None = None,
        payout_schedule: str | None = None,
    ) -> RevenueSettingsSnapshot:
        """Validate and persist a partial update. Creates the row if absent."""
        values = {}

        if platform_fee_percentage is not None:
            fee = Decimal(str(platform_fee_percentage))
            if fee < 0 or fee > 100:
                raise ValidationError('platform_fee_percentage must be between 0 and 100')
            values['platform_fee_percentage'] = fee

        if minimum_payout_amount is not None:
            if minimum_payout_amount < 0:
                raise ValidationError('minimum_payout_amount must be >= 0')
            values['minimum_payout_amount'] = int(minimum_payout_amount)

        if payout_schedule is not None:
            schedule = getattr(payout_schedule, 'value', payout_schedule)
            if schedule not in {s.value for s in PayoutSchedule}:
                raise ValidationError(
                    'payout_schedule must be one of: weekly, biweekly, monthly'
                )
            values['payout_schedule'] = schedule

        row = await self._get_row()
        if row is None:
            # Unset fields start from the defaults, not the column defaults
            row = RevenueSettings(
                platform_fee_percentage=DEFAULT_REVENUE_SETTINGS.platform_fee_percentage,
                minimum_payout_amount=DEFAULT_REVENUE_SETTINGS.minimum_payout_amount,
                payout_schedule=DEFAULT_REVENUE_SETTINGS.payout_schedule,
            )
            self.db.add(row)

        for key, value in values.items():
            setattr(row, key, value)
        row.updated_at = datetime.utcnow()

        await self.db.flush()
        await self.db.refresh(row)
        return RevenueSettingsSnapshot.from_row(row)
