"""Seed script: wipe all data and create demo developers, websites and tracked time.

Usage (from inside the api container):
    python seed.py

Usage (from host, via docker):
    docker compose exec api python seed.py
"""
import asyncio
import secrets
from datetime import datetime, timedelta

from sqlalchemy import text
from sqlalchemy.ext.asyncio import AsyncSession

from jagjar.db.database import engine, async_session
from jagjar.models.user import User
from jagjar.models.developer import Developer, ApiKey, Website
from jagjar.models.tracking import TimeTracking
from jagjar.services.revenue_service import previous_month, month_bounds


# Developer accounts with one website each
TEST_DEVELOPERS = [
    {
        'username': 'acme',
        'company': 'Acme Tools',
        'site_name': 'Acme Docs',
        'site_url': 'https://docs.acme.test',
        'premium_seconds': 1800,
    },
    {
        'username': 'globex',
        'company': 'Globex',
        'site_name': 'Globex News',
        'site_url': 'https://news.globex.test',
        'premium_seconds': 3600,
    },
]

# Readers; subscribed ones count toward the pool
TEST_READERS = [
    {'username': 'alice', 'subscribed': True},
    {'username': 'bob', 'subscribed': True},
    {'username': 'eve', 'subscribed': False},
]


async def wipe_all(db: AsyncSession):
    """Truncate all tables in dependency-safe order."""
    tables = [
        'revenue_distribution_logs',
        'payouts',
        'revenue',
        'developer_earnings',
        'revenue_settings',
        'time_tracking',
        'websites',
        'api_keys',
        'developers',
        'users',
    ]
    for table in tables:
        await db.execute(text(f'TRUNCATE TABLE {table} RESTART IDENTITY CASCADE'))
    await db.commit()
    print('✓ All tables wiped')


async def create_accounts(db: AsyncSession) -> tuple[list[User], list[Website]]:
    """Create the admin, readers and developers with their websites."""
    admin = User(username='admin', email='admin@jagjar.test', is_admin=True)
    db.add(admin)

    readers = []
    for r in TEST_READERS:
        user = User(
            username=r['username'],
            email=f'{r["username"]}@jagjar.test',
            is_subscribed=r['subscribed'],
            subscription_type='premium' if r['subscribed'] else 'free',
        )
        db.add(user)
        readers.append(user)

    websites = []
    for d in TEST_DEVELOPERS:
        user = User(username=d['username'], email=f'{d["username"]}@jagjar.test')
        db.add(user)
        await db.flush()

        developer = Developer(user_id=user.id, company_name=d['company'], website=d['site_url'])
        db.add(developer)
        await db.flush()

        api_key = ApiKey(
            developer_id=developer.id,
            key=f'jj_{secrets.token_hex(16)}',
            name='Default',
        )
        db.add(api_key)
        await db.flush()

        website = Website(api_key_id=api_key.id, url=d['site_url'], name=d['site_name'])
        db.add(website)
        websites.append(website)

        print(f'  ✓ {d["company"]} (@{d["username"]}) - {d["site_url"]}')

    await db.flush()
    await db.commit()
    return readers, websites


async def create_tracking(db: AsyncSession, readers: list[User], websites: list[Website]):
    """Spread each site's premium seconds over subscribed readers in the previous month."""
    start, _ = month_bounds(previous_month())
    subscribed = [r for r in readers if r.is_subscribed]

    for d, website in zip(TEST_DEVELOPERS, websites):
        per_reader = d['premium_seconds'] // len(subscribed)
        for i, reader in enumerate(subscribed):
            db.add(TimeTracking(
                user_id=reader.id,
                website_id=website.id,
                duration=per_reader,
                date=start + timedelta(days=i + 1, hours=12),
            ))
        # Free readers are tracked too but don't count
        free = [r for r in readers if not r.is_subscribed]
        for reader in free:
            db.add(TimeTracking(
                user_id=reader.id,
                website_id=website.id,
                duration=600,
                date=start + timedelta(days=2),
            ))

    await db.commit()
    print(f'  ✓ Time tracked for {previous_month()}')


async def main():
    print()
    print('=' * 50)
    print('  JagJar Seed Script')
    print('=' * 50)
    print()

    async with async_session() as db:
        print('[1/3] Wiping all data...')
        await wipe_all(db)

        print('[2/3] Creating accounts...')
        readers, websites = await create_accounts(db)

        print('[3/3] Creating time tracking...')
        await create_tracking(db, readers, websites)

    await engine.dispose()

    print()
    print(f'Done! Seeded at {datetime.utcnow():%Y-%m-%d %H:%M} UTC.')
    print('Run the distribution: POST /api/admin/revenue/calculate as @admin')
    print()


if __name__ == '__main__':
    asyncio.run(main())
