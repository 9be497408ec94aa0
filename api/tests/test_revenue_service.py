from datetime import date, datetime

import pytest
from sqlalchemy import select, func
from sqlalchemy.exc import OperationalError

from jagjar.errors import ValidationError, ConflictError, ComputationFailure
from jagjar.models.revenue import (
    DeveloperEarning, Revenue, Payout, PayoutStatus, RevenueDistributionLog,
)
from jagjar.services.revenue_service import (
    RevenueDistributionService, previous_month, month_bounds, platform_fee_for, NO_USAGE_NOTE,
)
from jagjar.services.revenue_source import FixedRevenueSource
from jagjar.services.settings_service import RevenueSettingsService


async def count(db, model, **filters):
    query = select(func.count(model.id))
    for key, value in filters.items():
        query = query.where(getattr(model, key) == value)
    return await db.scalar(query)


def test_previous_month():
    assert previous_month(date(2024, 6, 15)) == '2024-05'
    assert previous_month(date(2024, 1, 1)) == '2023-12'
    assert previous_month(date(2024, 3, 31)) == '2024-02'


def test_month_bounds_half_open():
    assert month_bounds('2024-05') == (datetime(2024, 5, 1), datetime(2024, 6, 1))
    assert month_bounds('2023-12') == (datetime(2023, 12, 1), datetime(2024, 1, 1))


@pytest.mark.parametrize('month', [
    '2024-5', '2024-13', '2024-00', 'May 2024', '', '2024-05-01',
    '2024-05\n', ' 2024-05', '0000-05', '9999-12', '\u0662\u0660\u0662\u0664-05',
])
def test_month_bounds_rejects_malformed(month):
    with pytest.raises(ValidationError):
        month_bounds(month)


def test_platform_fee_floors():
    assert platform_fee_for(2000, 30) == 600
    assert platform_fee_for(999, 33.33) == 332
    assert platform_fee_for(1, 99) == 0


async def test_two_developer_distribution(db_session, two_developer_month):
    svc = RevenueDistributionService(db_session)
    log = await svc.calculate_monthly_revenue('2024-05')
    await db_session.commit()

    assert log.month == '2024-05'
    assert log.total_revenue == 2000
    assert log.platform_fee == 600
    assert log.total_distributed == 1400
    assert log.developer_count == 2
    assert log.status == 'completed'

    dev_a, dev_b = two_developer_month['dev_a'], two_developer_month['dev_b']
    result = await db_session.execute(
        select(DeveloperEarning).order_by(DeveloperEarning.developer_id)
    )
    rows = result.scalars().all()
    assert [(r.developer_id, r.earnings) for r in rows] == [(dev_a.id, 466), (dev_b.id, 933)]
    assert [r.premium_time for r in rows] == [1800, 3600]
    assert all(r.total_time == r.premium_time for r in rows)

    amounts = dict((await db_session.execute(select(Revenue.developer_id, Revenue.amount))).all())
    assert amounts == {dev_a.id: 466, dev_b.id: 933}

    # Both under the default 1000 threshold
    assert await count(db_session, Payout) == 0


async def test_no_premium_usage_writes_only_log(db_session, factory):
    reader = await factory.user(subscribed=False)
    await factory.user(subscribed=True)
    developer = await factory.developer()
    site = await factory.website(developer)
    await factory.track(reader, site, 3600, datetime(2024, 5, 10))
    await db_session.commit()

    log = await RevenueDistributionService(db_session).calculate_monthly_revenue('2024-05')

    assert (log.total_revenue, log.total_distributed, log.platform_fee) == (0, 0, 0)
    assert log.developer_count == 0
    assert log.status == 'completed'
    assert log.notes == NO_USAGE_NOTE
    assert await count(db_session, DeveloperEarning) == 0
    assert await count(db_session, Revenue) == 0
    assert await count(db_session, Payout) == 0
    assert await count(db_session, RevenueDistributionLog, month='2024-05') == 1


async def test_fee_and_distributable_sum_to_revenue(db_session, factory):
    await RevenueSettingsService(db_session).update_settings(platform_fee_percentage='33.33')
    reader = await factory.user(subscribed=True)
    developer = await factory.developer()
    site = await factory.website(developer)
    await factory.track(reader, site, 10, datetime(2024, 5, 1))
    await db_session.commit()

    svc = RevenueDistributionService(db_session, revenue_source=FixedRevenueSource(999))
    log = await svc.calculate_monthly_revenue('2024-05')

    assert log.platform_fee == 332
    assert log.total_distributed == 667
    assert log.platform_fee + log.total_distributed == log.total_revenue


async def test_floor_loss_bounded_by_group_count(db_session, factory):
    await RevenueSettingsService(db_session).update_settings(platform_fee_percentage=0)
    reader = await factory.user(subscribed=True)
    sites = []
    for _ in range(3):
        developer = await factory.developer()
        sites.append(await factory.website(developer))
    for site in sites:
        await factory.track(reader, site, 7, datetime(2024, 5, 15))
    await db_session.commit()

    svc = RevenueDistributionService(db_session, revenue_source=FixedRevenueSource(1000))
    log = await svc.calculate_monthly_revenue('2024-05')

    total_earned = await db_session.scalar(select(func.sum(DeveloperEarning.earnings)))
    assert total_earned == 999
    assert log.total_distributed - 3 <= total_earned <= log.total_distributed


async def test_developer_total_is_sum_of_websites(db_session, factory):
    reader = await factory.user(subscribed=True)
    developer = await factory.developer()
    first = await factory.website(developer)
    second = await factory.website(developer)
    other = await factory.website(await factory.developer())
    await factory.track(reader, first, 100, datetime(2024, 5, 2))
    await factory.track(reader, second, 250, datetime(2024, 5, 3))
    await factory.track(reader, other, 650, datetime(2024, 5, 4))
    await db_session.commit()

    svc = RevenueDistributionService(db_session, revenue_source=FixedRevenueSource(10_000))
    log = await svc.calculate_monthly_revenue('2024-05')
    assert log.developer_count == 2

    site_total = await db_session.scalar(
        select(func.sum(DeveloperEarning.earnings))
        .where(DeveloperEarning.developer_id == developer.id)
    )
    revenue = await db_session.scalar(
        select(Revenue.amount).where(Revenue.developer_id == developer.id)
    )
    # 7000 distributable: 100/1000 -> 700, 250/1000 -> 1750
    assert site_total == revenue == 2450


@pytest.mark.parametrize('minimum, expected', [(466, {466, 933}), (500, {933}), (1000, set())])
async def test_payout_only_over_threshold(db_session, two_developer_month, minimum, expected):
    await RevenueSettingsService(db_session).update_settings(minimum_payout_amount=minimum)
    await db_session.commit()

    await RevenueDistributionService(db_session).calculate_monthly_revenue('2024-05')

    result = await db_session.execute(select(Payout))
    payouts = result.scalars().all()
    assert {p.amount for p in payouts} == expected
    for p in payouts:
        assert p.status == PayoutStatus.PENDING.value
        assert p.payment_method == 'bank_transfer'
        assert p.month == '2024-05'
        assert p.notes == 'Automatic payout for 2024-05'


async def test_rerun_replaces_previous_results(db_session, two_developer_month, factory):
    await RevenueSettingsService(db_session).update_settings(minimum_payout_amount=0)
    svc = RevenueDistributionService(db_session)
    await svc.calculate_monthly_revenue('2024-05')
    await db_session.commit()

    # Late-arriving usage changes the split on the second run
    late = await factory.user(subscribed=True)
    await factory.track(late, two_developer_month['site_a'], 1800, datetime(2024, 5, 30))
    await db_session.commit()

    log = await svc.calculate_monthly_revenue('2024-05')
    await db_session.commit()

    assert await count(db_session, RevenueDistributionLog, month='2024-05') == 1
    assert await count(db_session, DeveloperEarning, month='2024-05') == 2
    assert await count(db_session, Revenue, month='2024-05') == 2
    assert await count(db_session, Payout, month='2024-05') == 2

    # 3 subscribers -> 3000 revenue, 2100 distributable, A and B now split 1:1
    assert log.total_revenue == 3000
    amounts = (await db_session.execute(select(Revenue.amount))).scalars().all()
    assert sorted(amounts) == [1050, 1050]


async def test_rerun_refused_once_payout_is_processing(db_session, two_developer_month):
    await RevenueSettingsService(db_session).update_settings(minimum_payout_amount=0)
    svc = RevenueDistributionService(db_session)
    await svc.calculate_monthly_revenue('2024-05')
    payout = (await db_session.execute(select(Payout).limit(1))).scalar_one()
    payout.status = PayoutStatus.PROCESSING.value
    await db_session.commit()

    with pytest.raises(ConflictError):
        await svc.calculate_monthly_revenue('2024-05')


async def test_other_months_untouched_by_rerun(db_session, two_developer_month, factory):
    reader = await factory.user(subscribed=True)
    await factory.track(reader, two_developer_month['site_b'], 60, datetime(2024, 6, 5))
    await db_session.commit()

    svc = RevenueDistributionService(db_session)
    await svc.calculate_monthly_revenue('2024-05')
    await svc.calculate_monthly_revenue('2024-06')
    await svc.calculate_monthly_revenue('2024-05')
    await db_session.commit()

    assert await count(db_session, RevenueDistributionLog) == 2
    assert await count(db_session, Revenue, month='2024-06') == 2


async def test_invalid_month_rejected(db_session):
    with pytest.raises(ValidationError):
        await RevenueDistributionService(db_session).calculate_monthly_revenue('2024-13')


async def test_trailing_newline_month_does_not_touch_existing_run(db_session, two_developer_month):
    svc = RevenueDistributionService(db_session)
    await svc.calculate_monthly_revenue('2024-05')
    await db_session.commit()

    with pytest.raises(ValidationError):
        await svc.calculate_monthly_revenue('2024-05\n')

    assert await count(db_session, RevenueDistributionLog) == 1
    assert await count(db_session, Revenue, month='2024-05') == 2


async def test_default_month_is_previous(db_session):
    log = await RevenueDistributionService(db_session).calculate_monthly_revenue()
    assert log.month == previous_month()


class BrokenRevenueSource:
    async def get_total_revenue_for_month(self, db, month):
        raise OperationalError('SELECT 1', {}, Exception('connection lost'))


async def test_data_access_failure_is_computation_failure(db_session, two_developer_month):
    svc = RevenueDistributionService(db_session, revenue_source=BrokenRevenueSource())
    with pytest.raises(ComputationFailure):
        await svc.calculate_monthly_revenue('2024-05')
    await db_session.rollback()

    assert await count(db_session, RevenueDistributionLog) == 0
    assert await count(db_session, DeveloperEarning) == 0


async def test_read_queries(db_session, two_developer_month):
    svc = RevenueDistributionService(db_session)
    await svc.calculate_monthly_revenue('2024-05')
    await db_session.commit()
    dev_a, dev_b = two_developer_month['dev_a'], two_developer_month['dev_b']

    history = await svc.get_developer_earnings(dev_b.id)
    assert [(h['month'], h['amount']) for h in history] == [('2024-05', 933)]

    details = await svc.get_developer_earnings_details(dev_a.id, '2024-05')
    assert details == [{
        'website_id': two_developer_month['site_a'].id,
        'website_name': 'acme',
        'website_url': 'https://acme.test',
        'total_time': 1800,
        'premium_time': 1800,
        'earnings': 466,
    }]

    top = await svc.get_top_earning_developers('2024-05')
    assert [(t['developer_name'], t['amount']) for t in top] == [('Globex', 933), ('Acme', 466)]

    stats = await svc.get_platform_revenue_stats()
    assert [s.month for s in stats] == ['2024-05']

    assert await svc.get_developer_payouts(dev_a.id) == []
