import logging

from apscheduler.schedulers.asyncio import AsyncIOScheduler
from apscheduler.triggers.interval import IntervalTrigger

from player_sync.services.sync import SyncService

log = logging.getLogger(__name__)

SYNC_JOB_ID = "players_background_sync"


def make_scheduler(sync_service: SyncService, interval_minutes: int = 10) -> AsyncIOScheduler:
    scheduler = AsyncIOScheduler()
    scheduler.add_job(
        sync_service.scheduled_sync,
        trigger=IntervalTrigger(minutes=interval_minutes),
        id=SYNC_JOB_ID,
        replace_existing=True,
        max_instances=1,
        coalesce=True,
    )
    log.info(f"Фоновая синхронизация запланирована каждые {interval_minutes} мин.")
    return scheduler
