import logging

from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import Session

from app.models import Job, JobEmployee
from app.services.recurrence import InstanceSpec

logger = logging.getLogger(__name__)


class JobMaterializer:
    """Persists staged instances one at a time.

    Each instance is committed on its own so a rejected write (for example a
    duplicate ``(series_id, date)`` lost to a concurrent caller) only drops that
    instance. Employee assignments are written after the job row; if they fail
    the job is kept without them.
    """

    def __init__(self, db: Session, business_id: int):
        self.db = db
        self.business_id = business_id

    def materialize(self, specs: list[InstanceSpec]) -> list[Job]:
        if not specs:
            return []
        self._stamp_series_ids(specs)

        created: list[Job] = []
        for spec in specs:
            job = self._write_job(spec)
            if job is None:
                continue
            self._write_assignments(job, spec.employee_ids)
            created.append(job)
        return created

    def _stamp_series_ids(self, specs: list[InstanceSpec]) -> None:
        parent_ids = {spec.parent_job_id for spec in specs}
        parents = (
            self.db.query(Job)
            .filter(Job.id.in_(parent_ids), Job.business_id == self.business_id, Job.series_id.is_(None))
            .all()
        )
        if not parents:
            return
        for parent in parents:
            parent.series_id = str(parent.id)
        try:
            self.db.commit()
        except SQLAlchemyError:
            self.db.rollback()
            logger.exception(f"Failed to stamp series ids on parents {sorted(p.id for p in parents)}")

    def _write_job(self, spec: InstanceSpec) -> Job | None:
        job = Job(
            business_id=self.business_id,
            client_id=spec.client_id,
            date=spec.date,
            time=spec.time,
            duration=spec.duration,
            status=spec.status,
            amount_cents=spec.amount_cents,
            rate_type=spec.rate_type,
            payment_status=spec.payment_status,
            is_recurring=spec.is_recurring,
            parent_job_id=spec.parent_job_id,
            series_id=spec.series_id,
        )
        self.db.add(job)
        try:
            self.db.commit()
        except IntegrityError:
            self.db.rollback()
            logger.warning(f"Instance {spec.series_id}@{spec.date.isoformat()} already exists; skipped")
            return None
        except SQLAlchemyError:
            self.db.rollback()
            logger.exception(f"Failed to write instance {spec.series_id}@{spec.date.isoformat()}")
            return None
        return job

    def _write_assignments(self, job: Job, employee_ids: list[int]) -> None:
        if not employee_ids:
            return
        job_id = job.id
        self.db.add_all([JobEmployee(job_id=job_id, employee_id=employee_id) for employee_id in employee_ids])
        try:
            self.db.commit()
        except SQLAlchemyError:
            self.db.rollback()
            logger.warning(f"Job {job_id} saved without employee assignments {employee_ids}")
