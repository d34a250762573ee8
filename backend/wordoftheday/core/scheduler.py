from __future__ import annotations

import logging
from typing import Optional

from apscheduler.schedulers.background import BackgroundScheduler
from apscheduler.triggers.cron import CronTrigger

from .errors import ConfigError, NotifierError, ServiceError
from .notifications import Notifier
from .service import WordService

logger = logging.getLogger(__name__)

WORD_OF_THE_DAY_SUBJECT = "My Word Of The Day"
JOB_ID = "word_of_the_day"


def parse_schedule(expression: str) -> CronTrigger:
    """
    Parse a 5-field crontab expression (minute hour day month day-of-week).
    Called once at startup so a bad schedule stops the process early.
    """
    if not expression or not expression.strip():
        raise ConfigError("smtp schedule not defined")
    try:
        return CronTrigger.from_crontab(expression)
    except ValueError as exc:
        raise ConfigError("unable to parse smtp schedule", exc) from exc


def send_word_of_the_day(service: WordService, notifier: Notifier) -> bool:
    """
    One scheduled cycle. Returns True when a mail went out. Failures are
    logged and the cycle is skipped; the next run tries again.
    """
    try:
        word = service.random_word()
    except ServiceError as exc:
        logger.error("Error getting random word: %s", exc)
        return False

    if word is None:
        logger.info("No words have been added - skipping")
        return False

    try:
        notifier.send_rendered(
            WORD_OF_THE_DAY_SUBJECT,
            {"word": word.word, "definition": word.custom_definition},
        )
    except NotifierError as exc:
        logger.error("Error sending mail: %s", exc)
        return False

    logger.info("Word of the day sent id=%s", word.id)
    return True


def start_word_scheduler(
    trigger: CronTrigger,
    service: WordService,
    notifier: Notifier,
    scheduler: Optional[BackgroundScheduler] = None,
) -> BackgroundScheduler:
    scheduler = scheduler or BackgroundScheduler(daemon=True)
    scheduler.add_job(
        send_word_of_the_day,
        trigger,
        args=[service, notifier],
        id=JOB_ID,
        replace_existing=True,
        max_instances=1,
        coalesce=True,
    )
    scheduler.start()

    job = scheduler.get_job(JOB_ID)
    logger.info("Word of the day scheduled next_run_time=%s", getattr(job, "next_run_time", None))
    return scheduler
