from jagjar.schemas.revenue import (
    RevenueCalculateRequest,
    DistributionSummary,
    DistributionLogResponse,
    RevenueSettingsResponse,
    RevenueSettingsUpdate,
    MonthlyEarnings,
    WebsiteEarnings,
    PayoutResponse,
    TopDeveloper,
)

__all__ = [
    'RevenueCalculateRequest',
    'DistributionSummary',
    'DistributionLogResponse',
    'RevenueSettingsResponse',
    'RevenueSettingsUpdate',
    'MonthlyEarnings',
    'WebsiteEarnings',
    'PayoutResponse',
    'TopDeveloper',
]
