from datetime import datetime
from decimal import Decimal
from enum import Enum
from sqlalchemy import (
    String, Integer, BigInteger, Numeric, ForeignKey, DateTime, UniqueConstraint, Index,
)
from sqlalchemy.orm import Mapped, mapped_column

from jagjar.db.database import Base


class PayoutSchedule(str, Enum):
    WEEKLY = 'weekly'
    BIWEEKLY = 'biweekly'
    MONTHLY = 'monthly'


class PayoutStatus(str, Enum):
    PENDING = 'pending'
    PROCESSING = 'processing'
    COMPLETED = 'completed'
    FAILED = 'failed'


class DistributionStatus(str, Enum):
    COMPLETED = 'completed'
    FAILED = 'failed'


class RevenueSettings(Base):
    """Platform-wide revenue configuration. Singleton row."""

    __tablename__ = 'revenue_settings'

    id: Mapped[int] = mapped_column(primary_key=True)
    platform_fee_percentage: Mapped[Decimal] = mapped_column(Numeric(5, 2), default=Decimal('30.00'))
    # Cents
    minimum_payout_amount: Mapped[int] = mapped_column(BigInteger, default=1000)
    payout_schedule: Mapped[str] = mapped_column(String(10), default=PayoutSchedule.MONTHLY.value)
    updated_at: Mapped[datetime] = mapped_column(DateTime, default=datetime.utcnow)


class DeveloperEarning(Base):
    """Per-developer, per-website earnings for one month."""

    __tablename__ = 'developer_earnings'

    id: Mapped[int] = mapped_column(primary_key=True)
    developer_id: Mapped[int] = mapped_column(
        ForeignKey('developers.id', ondelete='CASCADE'), index=True
    )
    website_id: Mapped[int] = mapped_column(ForeignKey('websites.id', ondelete='CASCADE'))
    month: Mapped[str] = mapped_column(String(7), index=True)

    # Seconds
    total_time: Mapped[int] = mapped_column(BigInteger, default=0)
    premium_time: Mapped[int] = mapped_column(BigInteger, default=0)

    # Cents
    earnings: Mapped[int] = mapped_column(BigInteger, default=0)
    calculated_at: Mapped[datetime] = mapped_column(DateTime, default=datetime.utcnow)

    __table_args__ = (
        UniqueConstraint('developer_id', 'website_id', 'month', name='unique_developer_website_month'),
    )


class Revenue(Base):
    """A developer's aggregate payable amount for one month."""

    __tablename__ = 'revenue'

    id: Mapped[int] = mapped_column(primary_key=True)
    developer_id: Mapped[int] = mapped_column(
        ForeignKey('developers.id', ondelete='CASCADE'), index=True
    )
    month: Mapped[str] = mapped_column(String(7), index=True)
    amount: Mapped[int] = mapped_column(BigInteger, default=0)
    calculated_at: Mapped[datetime] = mapped_column(DateTime, default=datetime.utcnow)

    __table_args__ = (
        UniqueConstraint('developer_id', 'month', name='unique_developer_month'),
    )


class Payout(Base):
    """Payout obligation. Only created once a month clears the minimum threshold."""

    __tablename__ = 'payouts'

    id: Mapped[int] = mapped_column(primary_key=True)
    developer_id: Mapped[int] = mapped_column(
        ForeignKey('developers.id', ondelete='CASCADE'), index=True
    )
    amount: Mapped[int] = mapped_column(BigInteger)
    status: Mapped[str] = mapped_column(String(20), default=PayoutStatus.PENDING.value)
    payment_method: Mapped[str] = mapped_column(String(50))
    # Month the payout was generated for; null for manual payouts
    month: Mapped[str | None] = mapped_column(String(7), default=None)
    notes: Mapped[str | None] = mapped_column(String(500), default=None)
    created_at: Mapped[datetime] = mapped_column(DateTime, default=datetime.utcnow)
    processed_at: Mapped[datetime | None] = mapped_column(DateTime, default=None)

    __table_args__ = (
        Index('ix_payouts_month_status', 'month', 'status'),
    )


class RevenueDistributionLog(Base):
    """Audit record of one allocator run. One per month."""

    __tablename__ = 'revenue_distribution_logs'

    id: Mapped[int] = mapped_column(primary_key=True)
    month: Mapped[str] = mapped_column(String(7), unique=True, index=True)
    total_revenue: Mapped[int] = mapped_column(BigInteger, default=0)
    total_distributed: Mapped[int] = mapped_column(BigInteger, default=0)
    platform_fee: Mapped[int] = mapped_column(BigInteger, default=0)
    developer_count: Mapped[int] = mapped_column(Integer, default=0)
    status: Mapped[str] = mapped_column(String(20), default=DistributionStatus.COMPLETED.value)
    notes: Mapped[str | None] = mapped_column(String(500), default=None)
    created_at: Mapped[datetime] = mapped_column(DateTime, default=datetime.utcnow)
