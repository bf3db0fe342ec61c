import logging

from apscheduler.schedulers.background import BackgroundScheduler

from linkhub.services.rate_limiter import RateLimitStore

logger = logging.getLogger(__name__)

SWEEP_JOB_ID = "rate-limit-sweep"


def sweep_rate_limits(store: RateLimitStore) -> int:
    removed = store.sweep()
    if removed:
        logger.debug("Swept %d expired rate limit windows", removed, extra={"removed": removed})
    return removed


def build_scheduler(store: RateLimitStore, interval_seconds: int) -> BackgroundScheduler:
    """
    Background scheduler running the rate limit sweep on a fixed interval.
    Jobs run on the scheduler's own threads, never on a request.
    """
    scheduler = BackgroundScheduler()
    scheduler.add_job(
        sweep_rate_limits,
        "interval",
        seconds=interval_seconds,
        args=[store],
        id=SWEEP_JOB_ID,
        replace_existing=True,
        coalesce=True,
        max_instances=1,
    )
    return scheduler
