"""Recurring job expansion.

A series is a parent job (``is_recurring`` with a rule) plus the instances
generated from it. ``expand`` walks each parent's cadence across a date range
and stages the instances that do not exist yet. It never writes; the caller
decides how existence is checked (an in-memory snapshot or store point
queries) and how staged instances are persisted.
"""

import calendar
import logging
from collections.abc import Container, Iterable
from dataclasses import dataclass, field
from datetime import date, timedelta

from sqlalchemy.orm import Session, selectinload

from app.models import RECURRENCE_RULES, Job

logger = logging.getLogger(__name__)

SeriesKey = tuple[str, date]


def advance(current: date, rule: str) -> date:
    if rule == "weekly":
        return current + timedelta(days=7)
    if rule == "biweekly":
        return current + timedelta(days=14)
    if rule == "monthly":
        year, month = (current.year + 1, 1) if current.month == 12 else (current.year, current.month + 1)
        days_in_month = calendar.monthrange(year, month)[1]
        if current.day <= days_in_month:
            return current.replace(year=year, month=month)
        # Overflow rolls into the following month: Jan 31 -> Mar 2 (leap) / Mar 3.
        return date(year, month, days_in_month) + timedelta(days=current.day - days_in_month)
    raise ValueError(f"Unknown recurrence rule: {rule!r}")


def _step(current: date, rule: str) -> date | None:
    try:
        return advance(current, rule)
    except (OverflowError, ValueError):
        # Past date.max; the series has nowhere left to go.
        return None


@dataclass
class InstanceSpec:
    parent_job_id: int
    series_id: str
    business_id: int
    client_id: int | None
    date: date
    time: str
    duration: float
    amount_cents: int
    rate_type: str
    employee_ids: list[int] = field(default_factory=list)
    status: str = "scheduled"
    payment_status: str = "pending"
    is_recurring: bool = False

    @property
    def key(self) -> SeriesKey:
        return (self.series_id, self.date)


def is_series_parent(job: Job) -> bool:
    return bool(job.is_recurring) and job.parent_job_id is None


def resolve_series_id(parent: Job) -> str:
    return parent.series_id or str(parent.id)


def series_index(jobs: Iterable[Job]) -> set[SeriesKey]:
    return {(job.series_id, job.date) for job in jobs if job.series_id}


def expand(
    parents: Iterable[Job],
    existing: Container[SeriesKey],
    range_start: date,
    range_end: date,
) -> list[InstanceSpec]:
    staged: list[InstanceSpec] = []
    staged_keys: set[SeriesKey] = set()

    for parent in parents:
        rule = parent.recurrence_rule
        if not rule:
            continue
        if rule not in RECURRENCE_RULES:
            logger.warning(f"Skipping job {parent.id}: unknown recurrence rule {rule!r}")
            continue

        series_id = resolve_series_id(parent)
        recurrence_end = parent.recurrence_end_date
        cursor = parent.date

        while cursor is not None and cursor < range_start:
            cursor = _step(cursor, rule)

        while cursor is not None and cursor <= range_end:
            if recurrence_end and cursor > recurrence_end:
                break
            key = (series_id, cursor)
            if cursor != parent.date and key not in staged_keys and key not in existing:
                staged_keys.add(key)
                staged.append(
                    InstanceSpec(
                        parent_job_id=parent.id,
                        series_id=series_id,
                        business_id=parent.business_id,
                        client_id=parent.client_id,
                        date=cursor,
                        time=parent.time,
                        duration=parent.duration,
                        amount_cents=parent.amount_cents,
                        rate_type=parent.rate_type,
                        employee_ids=list(parent.employee_ids),
                    )
                )
            cursor = _step(cursor, rule)

    return staged


class StoreSeriesIndex:
    """Existence checks answered by point queries against the jobs table."""

    def __init__(self, db: Session, business_id: int):
        self.db = db
        self.business_id = business_id

    def __contains__(self, key: SeriesKey) -> bool:
        series_id, on = key
        found = (
            self.db.query(Job.id)
            .filter(Job.business_id == self.business_id, Job.series_id == series_id, Job.date == on)
            .first()
        )
        return found is not None


def load_parents(db: Session, business_id: int) -> list[Job]:
    return (
        db.query(Job)
        .options(selectinload(Job.assignments))
        .filter(Job.business_id == business_id, Job.is_recurring.is_(True), Job.parent_job_id.is_(None))
        .order_by(Job.id.asc())
        .all()
    )

