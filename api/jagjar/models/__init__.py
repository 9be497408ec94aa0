from jagjar.models.user import User
from jagjar.models.developer import Developer, ApiKey, Website
from jagjar.models.tracking import TimeTracking
from jagjar.models.revenue import (
    RevenueSettings, DeveloperEarning, Revenue, Payout, RevenueDistributionLog,
)

__all__ = [
    'User',
    'Developer',
    'ApiKey',
    'Website',
    'TimeTracking',
    'RevenueSettings',
    'DeveloperEarning',
    'Revenue',
    'Payout',
    'RevenueDistributionLog',
]
