# Copyright 2025 Canonical Ltd.
# See LICENSE file for licensing details.

"""Cron handling of the MySQL BackupSchedule resource."""

import copy
import logging
from datetime import datetime, timedelta, timezone
from typing import Optional

from apscheduler.triggers.base import BaseTrigger
from apscheduler.triggers.combining import OrTrigger
from apscheduler.triggers.cron import CronTrigger
from lightkube.models.meta_v1 import ObjectMeta

from .constants import BACKUP_NAME_TIME_FORMAT, BACKUP_SCHEDULE_LABEL
from .crds import Backup, BackupSchedule, BackupSchedulePhase
from .lifecycle import get_phase

logger = logging.getLogger(__name__)

CRON_MACROS = {
    "@yearly": "0 0 1 1 *",
    "@annually": "0 0 1 1 *",
    "@monthly": "0 0 1 * *",
    "@weekly": "0 0 * * 0",
    "@daily": "0 0 * * *",
    "@midnight": "0 0 * * *",
    "@hourly": "0 * * * *",
}


# Cron numbers the days of the week from Sunday, 7 is Sunday again
WEEKDAYS = ("sun", "mon", "tue", "wed", "thu", "fri", "sat")


def _weekday_number(token: str) -> int:
    token = token.lower()
    if token in WEEKDAYS:
        return WEEKDAYS.index(token)
    if not token.isdigit() or int(token) > 7:
        raise ValueError(f"Invalid day of week '{token}'")
    return int(token)


def _day_of_week(field: str) -> str:
    """Translate a cron day of week field into APScheduler weekday names."""
    if field in ("*", "?"):
        return "*"
    days = set()
    for part in field.split(","):
        base, _, step = part.partition("/")
        if step and (not step.isdigit() or int(step) == 0):
            raise ValueError(f"Invalid day of week step '{part}'")
        if base == "*":
            first, last = 0, 6
        elif "-" in base:
            start, _, end = base.partition("-")
            first, last = _weekday_number(start), _weekday_number(end)
            if first > last:
                raise ValueError(f"Invalid day of week range '{base}'")
        else:
            first = _weekday_number(base)
            last = max(first, 6) if step else first
        days.update(day % 7 for day in range(first, last + 1, int(step or 1)))
    return ",".join(WEEKDAYS[day] for day in sorted(days))


def _as_utc(value: datetime) -> datetime:
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


def parse_schedule(expression: str) -> BaseTrigger:
    """Parse a cron expression into a trigger evaluated in UTC.

    Accepts five field crontab expressions and the ``@yearly``, ``@annually``,
    ``@monthly``, ``@weekly``, ``@daily``, ``@midnight`` and ``@hourly`` macros.
    Days of the week follow cron: 0 and 7 are Sunday. When both the day of
    month and the day of week are restricted, a time matching either fires.

    Raises:
        ValueError: If the expression cannot be parsed.
    """
    crontab = expression.strip()
    if crontab.startswith("@"):
        if crontab not in CRON_MACROS:
            raise ValueError(f"Unknown cron macro '{crontab}'")
        crontab = CRON_MACROS[crontab]

    fields = crontab.split()
    if len(fields) != 5:
        raise ValueError(f"Wrong number of fields; got {len(fields)}, expected 5")
    minute, hour, day, month, day_of_week = fields
    common = {"minute": minute, "hour": hour, "month": month, "timezone": timezone.utc}

    if day.startswith("*") or day_of_week.startswith("*"):
        return CronTrigger(day=day, day_of_week=_day_of_week(day_of_week), **common)
    return OrTrigger(
        [
            CronTrigger(day=day, **common),
            CronTrigger(day_of_week=_day_of_week(day_of_week), **common),
        ]
    )


def next_backup_time(schedule: BackupSchedule, after: datetime) -> Optional[datetime]:
    """Return the first time strictly after ``after`` at which a backup is due.

    A naive ``after`` is taken to be in UTC.
    """
    trigger = parse_schedule(schedule.spec.schedule)
    return trigger.get_next_fire_time(None, _as_utc(after) + timedelta(microseconds=1))


def is_backup_due(schedule: BackupSchedule, now: datetime) -> bool:
    """Return True if an enabled schedule should create a Backup at ``now``.

    The reference point is the last backup of the schedule, or its creation
    time when it never ran. A naive ``now`` is taken to be in UTC.
    """
    if get_phase(schedule) != BackupSchedulePhase.ENABLED:
        return False
    last = schedule.status.lastBackup if schedule.status else None
    if last is None and schedule.metadata is not None:
        last = schedule.metadata.creationTimestamp
    if last is None:
        return True
    due = next_backup_time(schedule, last)
    return due is not None and due <= _as_utc(now)


def backup_from_schedule(schedule: BackupSchedule, now: datetime) -> Backup:
    """Stamp a new Backup out of the template of a schedule."""
    labels = dict(schedule.labels or {})
    labels[BACKUP_SCHEDULE_LABEL] = schedule.name
    backup = Backup(
        metadata=ObjectMeta(
            name=f"{schedule.name}-{now.strftime(BACKUP_NAME_TIME_FORMAT)}",
            namespace=schedule.namespace,
            labels=labels,
        ),
        spec=copy.deepcopy(schedule.spec.backupTemplate),
    )
    logger.info("Created Backup '%s' from schedule '%s'", backup.name, schedule.name)
    return backup
