"""
ChronoLegi Monitor - Scheduled Runner
Runs the daily report and the hourly version probe using APScheduler
"""
from apscheduler.schedulers.blocking import BlockingScheduler
from apscheduler.triggers.cron import CronTrigger
from datetime import datetime
import logging

from legi_monitor.config import settings
from legi_monitor.main import build_history, process_legi_updates, process_log_updates

logger = logging.getLogger(__name__)


def run_job(name, job, *args):
    """Execute one tick, logging instead of raising so the scheduler keeps running"""
    logger.info("="*80)
    logger.info(f"Starting {name} at {datetime.now()}")
    logger.info("="*80)

    result = None
    try:
        result = job(*args)
        logger.info(f"{name} finished: {result}")
    except Exception as e:
        logger.error(f"Error during {name}: {str(e)}", exc_info=True)

    logger.info("="*80)
    return result


def daily_job():
    return run_job("daily report", process_legi_updates, settings)


def build_scheduler(history, settings=settings):
    """Register both cron jobs on a BlockingScheduler sharing one history"""
    scheduler = BlockingScheduler(timezone=settings.TIMEZONE)

    scheduler.add_job(
        daily_job,
        CronTrigger.from_crontab(settings.DAILY_CRON, timezone=settings.TIMEZONE),
        id='daily_report',
        max_instances=1,
        coalesce=True,
    )
    scheduler.add_job(
        run_job,
        CronTrigger.from_crontab(settings.HOURLY_CRON, timezone=settings.TIMEZONE),
        args=["hourly probe", process_log_updates, history, settings],
        id='hourly_probe',
        max_instances=1,
        coalesce=True,
    )
    return scheduler


def main():
    """Set up and start the scheduler"""
    logging.basicConfig(
        level=logging.INFO,
        format='%(asctime)s - %(name)s - %(levelname)s - %(message)s',
        handlers=[
            logging.FileHandler(settings.LOG_FILE),
            logging.StreamHandler()
        ]
    )

    logger.info("Bot is starting...")
    history = build_history(settings)
    scheduler = build_scheduler(history, settings)

    logger.info("ChronoLegi Monitor Scheduler Started")
    logger.info(f"Daily report: '{settings.DAILY_CRON}' ({settings.TIMEZONE})")
    logger.info(f"Hourly probe: '{settings.HOURLY_CRON}' ({settings.TIMEZONE})")
    logger.info("Press Ctrl+C to exit")

    try:
        scheduler.start()
    except (KeyboardInterrupt, SystemExit):
        logger.info("Scheduler stopped by user")
        scheduler.shutdown()


if __name__ == "__main__":
    main()
