"""Where a month's gross subscription revenue comes from."""
from typing import Protocol
from sqlalchemy import select, func
from sqlalchemy.ext.asyncio import AsyncSession

from jagjar.config import settings
from jagjar.models.user import User


class RevenueSource(Protocol):
    async def get_total_revenue_for_month(self, db: AsyncSession, month: str) -> int:
        """Gross revenue for the month, in cents."""
        ...


class SubscriberRevenueSource:
    """Estimate: currently subscribed users x flat monthly price.

    Stands in for real billing records until payment data is imported.
    """

    def __init__(self, price_per_subscriber: int | None = None):
        if price_per_subscriber is None:
            price_per_subscriber = settings.subscription_price_cents
        self.price_per_subscriber = price_per_subscriber

    async def get_total_revenue_for_month(self, db: AsyncSession, month: str) -> int:
        subscribers = await db.scalar(
            select(func.count(User.id)).where(User.is_subscribed == True)  # noqa: E712
        )
        return (subscribers or 0) * self.price_per_subscriber


class FixedRevenueSource:
    """Known revenue figure, e.g. imported from the payment processor."""

    def __init__(self, amount: int):
        self.amount = amount

    async def get_total_revenue_for_month(self, db: AsyncSession, month: str) -> int:
        return self.amount
