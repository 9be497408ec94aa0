from datetime import datetime
from decimal import Decimal
from pydantic import BaseModel, Field

from jagjar.models.revenue import PayoutSchedule

MONTH_PATTERN = r'^\d{4}-\d{2}$'


class RevenueCalculateRequest(BaseModel):
    """Body of the admin calculate call. Omitted month = previous calendar month."""
    month: str | None = Field(None, pattern=MONTH_PATTERN)


class DistributionSummary(BaseModel):
    """Result of one allocator run."""
    month: str
    total_revenue: int
    total_distributed: int
    platform_fee: int
    developer_count: int
    status: str
    notes: str | None

    class Config:
        from_attributes = True


class DistributionLogResponse(DistributionSummary):
    id: int
    created_at: datetime


class RevenueSettingsResponse(BaseModel):
    platform_fee_percentage: Decimal
    minimum_payout_amount: int
    payout_schedule: PayoutSchedule
    updated_at: datetime | None = None

    class Config:
        from_attributes = True


class RevenueSettingsUpdate(BaseModel):
    """Partial settings update. Unset fields keep their current value."""
    platform_fee_percentage: Decimal | None = Field(None, ge=0, le=100)
    minimum_payout_amount: int | None = Field(None, ge=0)
    payout_schedule: PayoutSchedule | None = None


class MonthlyEarnings(BaseModel):
    month: str
    amount: int
    calculated_at: datetime


class WebsiteEarnings(BaseModel):
    """Per-website breakdown of one developer's month."""
    website_id: int
    website_name: str
    website_url: str
    total_time: int
    premium_time: int
    earnings: int


class PayoutResponse(BaseModel):
    id: int
    developer_id: int
    amount: int
    status: str
    payment_method: str
    month: str | None
    notes: str | None
    created_at: datetime
    processed_at: datetime | None

    class Config:
        from_attributes = True


class TopDeveloper(BaseModel):
    developer_id: int
    developer_name: str | None
    amount: int
