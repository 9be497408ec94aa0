"""
Distribution Worker

Runs the monthly revenue distribution for the previous calendar month on a
cron schedule (default: 1st of the month, 03:00 UTC).

Uses APScheduler for job scheduling.
"""
import asyncio
import logging
from apscheduler.schedulers.asyncio import AsyncIOScheduler
from apscheduler.triggers.cron import CronTrigger
from sqlalchemy.ext.asyncio import create_async_engine, async_sessionmaker

from jagjar.config import settings
from jagjar.services.revenue_service import RevenueDistributionService

logger = logging.getLogger('distribution_worker')


class DistributionWorker:
    """Background worker for the monthly distribution."""

    def __init__(self, database_url: str | None = None):
        self.engine = create_async_engine(database_url or settings.database_url, echo=False)
        self.async_session = async_sessionmaker(
            self.engine, expire_on_commit=False
        )
        self.scheduler = AsyncIOScheduler()

    def schedule(self):
        self.scheduler.add_job(
            self._run_monthly_distribution,
            CronTrigger(
                day=settings.distribution_cron_day,
                hour=settings.distribution_cron_hour,
                minute=0,
                timezone='UTC',
            ),
            id='monthly_distribution',
            name='Monthly Revenue Distribution',
            replace_existing=True,
        )

    async def start(self):
        """Start the worker and scheduler."""
        logger.info('Starting Distribution Worker...')
        self.schedule()
        self.scheduler.start()
        for job in self.scheduler.get_jobs():
            logger.info(f'  - {job.name}: next run at {job.next_run_time}')

        # Keep running
        try:
            while True:
                await asyncio.sleep(60)
        except (KeyboardInterrupt, SystemExit, asyncio.CancelledError):
            logger.info('Shutting down...')
            self.scheduler.shutdown()
            await self.engine.dispose()

    async def _run_monthly_distribution(self, month: str | None = None) -> dict:
        """Compute one month inside a single transaction."""
        logger.info('Running monthly distribution (month=%s)...', month or 'previous')
        try:
            async with self.async_session() as session:
                async with session.begin():
                    svc = RevenueDistributionService(session)
                    log = await svc.calculate_monthly_revenue(month)

                result = {
                    'month': log.month,
                    'total_revenue': log.total_revenue,
                    'total_distributed': log.total_distributed,
                    'platform_fee': log.platform_fee,
                    'developer_count': log.developer_count,
                    'status': log.status,
                }
                logger.info(f'Distribution result: {result}')
                return result
        except Exception as e:
            logger.error(f'Monthly distribution failed: {e}', exc_info=True)
            raise

    async def run_once(self, month: str | None = None) -> dict:
        """Run the distribution immediately (manual trigger / testing)."""
        return await self._run_monthly_distribution(month)


async def main():
    """Entry point for the worker."""
    logging.basicConfig(
        level=logging.INFO,
        format='%(asctime)s - %(name)s - %(levelname)s - %(message)s',
    )
    worker = DistributionWorker()
    await worker.start()


if __name__ == '__main__':
    asyncio.run(main())
