from datetime import date

from sqlalchemy.exc import OperationalError

from app.models import Job, JobEmployee
from app.services.generation import generate_for_range
from app.services.materializer import JobMaterializer
from app.services.recurrence import InstanceSpec, StoreSeriesIndex, expand, load_parents


def _add_parent(db, job_date=date(2024, 1, 1), rule="weekly", series_id=None, employee_ids=(1,), **extra):
    parent = Job(
        business_id=1,
        client_id=1,
        date=job_date,
        time="9:00 AM",
        duration=2,
        amount_cents=12000,
        rate_type="flat",
        is_recurring=True,
        recurrence_rule=rule,
        series_id=series_id,
        assignments=[JobEmployee(employee_id=e) for e in employee_ids],
        **extra,
    )
    db.add(parent)
    db.commit()
    return parent


def test_materialize_persists_instances_and_assignments(db):
    parent = _add_parent(db, series_id="series-1", employee_ids=(1, 2))
    specs = expand(load_parents(db, 1), StoreSeriesIndex(db, 1), date(2024, 1, 8), date(2024, 1, 15))

    created = JobMaterializer(db, 1).materialize(specs)

    assert [j.date for j in created] == [date(2024, 1, 8), date(2024, 1, 15)]
    for job in created:
        assert job.id is not None
        assert job.parent_job_id == parent.id
        assert job.series_id == "series-1"
        assert sorted(job.employee_ids) == [1, 2]
        assert (job.status, job.payment_status, job.is_recurring) == ("scheduled", "pending", False)


def test_stale_snapshot_duplicate_is_rejected_and_siblings_survive(db):
    _add_parent(db, series_id="series-2")
    first = JobMaterializer(db, 1).materialize(expand(load_parents(db, 1), set(), date(2024, 1, 8), date(2024, 1, 8)))
    assert len(first) == 1

    # A snapshot that predates the first write still proposes 01-08.
    stale = expand(load_parents(db, 1), set(), date(2024, 1, 8), date(2024, 1, 15))
    created = JobMaterializer(db, 1).materialize(stale)

    assert [j.date for j in created] == [date(2024, 1, 15)]
    dates = [j.date for j in db.query(Job).filter(Job.series_id == "series-2").order_by(Job.date).all()]
    assert dates == [date(2024, 1, 1), date(2024, 1, 8), date(2024, 1, 15)]


def test_legacy_parent_gets_series_id_stamped(db):
    parent = _add_parent(db, series_id=None)

    created = JobMaterializer(db, 1).materialize(expand(load_parents(db, 1), set(), date(2024, 1, 8), date(2024, 1, 8)))

    db.refresh(parent)
    assert parent.series_id == str(parent.id)
    assert created[0].series_id == str(parent.id)


def test_store_index_is_scoped_to_business(db):
    _add_parent(db, series_id="shared")
    index = StoreSeriesIndex(db, 1)
    assert ("shared", date(2024, 1, 1)) in index
    assert ("shared", date(2024, 1, 8)) not in index
    assert ("shared", date(2024, 1, 1)) not in StoreSeriesIndex(db, 2)


def test_generate_for_range_is_idempotent(db):
    _add_parent(db, series_id="series-3", rule="biweekly")

    assert generate_for_range(db, 1, date(2024, 1, 1), date(2024, 2, 29)) == 4
    assert generate_for_range(db, 1, date(2024, 1, 1), date(2024, 2, 29)) == 0
    assert generate_for_range(db, 1, date(2024, 2, 1), date(2024, 3, 31)) == 2


def test_generate_for_range_ignores_inverted_range_and_other_businesses(db):
    _add_parent(db, series_id="series-4")
    assert generate_for_range(db, 1, date(2024, 2, 1), date(2024, 1, 1)) == 0
    assert generate_for_range(db, 2, date(2024, 1, 1), date(2024, 1, 31)) == 0


def test_empty_batch_writes_nothing(db):
    assert JobMaterializer(db, 1).materialize([]) == []
    assert db.query(Job).count() == 0


def test_failed_assignment_write_keeps_job_and_batch_continues(db):
    parent = _add_parent(db, series_id="series-5", employee_ids=())
    # The repeated employee breaks uq_job_employee for the first instance only.
    specs = [
        InstanceSpec(
            parent_job_id=parent.id,
            series_id="series-5",
            business_id=1,
            client_id=1,
            date=on,
            time="9:00 AM",
            duration=2,
            amount_cents=12000,
            rate_type="flat",
            employee_ids=employee_ids,
        )
        for on, employee_ids in ((date(2024, 1, 8), [1, 1]), (date(2024, 1, 15), [2]))
    ]

    created = JobMaterializer(db, 1).materialize(specs)

    assert [j.date for j in created] == [date(2024, 1, 8), date(2024, 1, 15)]
    assert created[0].employee_ids == []
    assert created[1].employee_ids == [2]
    assert db.query(Job).filter(Job.series_id == "series-5").count() == 3


def test_failed_job_write_skips_only_that_instance(db, monkeypatch):
    _add_parent(db, series_id="series-6")
    commit = db.commit

    def flaky_commit():
        if any(isinstance(obj, Job) and obj.date == date(2024, 1, 15) for obj in db.new):
            raise OperationalError("INSERT INTO jobs", {}, Exception("disk I/O error"))
        commit()

    monkeypatch.setattr(db, "commit", flaky_commit)
    assert generate_for_range(db, 1, date(2024, 1, 8), date(2024, 1, 22)) == 2
    dates = [j.date for j in db.query(Job).filter(Job.parent_job_id.isnot(None)).order_by(Job.date).all()]
    assert dates == [date(2024, 1, 8), date(2024, 1, 22)]

    monkeypatch.setattr(db, "commit", commit)
    assert generate_for_range(db, 1, date(2024, 1, 8), date(2024, 1, 22)) == 1
