import logging
from collections.abc import Callable, Iterable
from datetime import date, timedelta

from app.models import Job
from app.services.recurrence import InstanceSpec, expand, is_series_parent, series_index

logger = logging.getLogger(__name__)

VIEWS = {"week", "month"}


def _days_since_sunday(day: date) -> int:
    return (day.weekday() + 1) % 7


def visible_range(view: str, offset: int, today: date) -> tuple[date, date]:
    if view == "month":
        year, month_index = divmod(today.month - 1 + offset, 12)
        first = date(today.year + year, month_index + 1, 1)
        next_first = date(first.year + 1, 1, 1) if first.month == 12 else date(first.year, first.month + 1, 1)
        last = next_first - timedelta(days=1)
        start = first - timedelta(days=_days_since_sunday(first))
        end = last + timedelta(days=6 - _days_since_sunday(last))
        return start, end
    start = today - timedelta(days=_days_since_sunday(today)) + timedelta(weeks=offset)
    return start, start + timedelta(days=6)


def range_key(range_start: date, range_end: date) -> str:
    return f"{range_start.isoformat()}_{range_end.isoformat()}"


class ScheduleViewTrigger:
    """Expands recurring series once per visible range for one viewing session.

    ``seen`` only suppresses repeat scans of a range already processed; a range
    dropped from it is simply scanned again and yields nothing new.
    """

    def __init__(self, materialize: Callable[[list[InstanceSpec]], list[Job]], seen: Iterable[str] | None = None):
        self.materialize = materialize
        self.seen: set[str] = set(seen or ())

    def sync(self, jobs: list[Job], range_start: date, range_end: date) -> list[Job]:
        key = range_key(range_start, range_end)
        if key in self.seen:
            return []
        self.seen.add(key)

        parents = [job for job in jobs if is_series_parent(job)]
        if not parents:
            return []
        specs = expand(parents, series_index(jobs), range_start, range_end)
        if not specs:
            return []
        created = self.materialize(specs)
        jobs.extend(created)
        logger.debug(f"Range {key}: materialized {len(created)} of {len(specs)} recurring instances")
        return created
