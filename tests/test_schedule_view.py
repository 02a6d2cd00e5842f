from datetime import date, timedelta

from app.core.config import get_settings
from app.core.session import ranges_serializer
from app.models import Job
from app.services.schedule_view import ScheduleViewTrigger, range_key, visible_range


def _login(client, email, password="pass1234"):
    response = client.post("/login", data={"email": email, "password": password}, follow_redirects=False)
    assert response.status_code == 303


def test_week_range_starts_on_sunday():
    assert visible_range("week", 0, date(2024, 1, 10)) == (date(2024, 1, 7), date(2024, 1, 13))
    assert visible_range("week", 0, date(2024, 1, 7)) == (date(2024, 1, 7), date(2024, 1, 13))
    assert visible_range("week", 2, date(2024, 1, 10)) == (date(2024, 1, 21), date(2024, 1, 27))


def test_month_range_covers_full_grid():
    assert visible_range("month", 0, date(2024, 1, 10)) == (date(2023, 12, 31), date(2024, 2, 3))
    assert visible_range("month", -1, date(2024, 1, 10)) == (date(2023, 11, 26), date(2024, 1, 6))
    assert visible_range("month", 11, date(2024, 1, 10)) == (date(2024, 12, 1), date(2025, 1, 4))


def _recorder():
    calls = []

    def materialize(specs):
        calls.append(specs)
        return [Job(id=100 + i, date=s.date, series_id=s.series_id, parent_job_id=s.parent_job_id, is_recurring=False) for i, s in enumerate(specs)]

    return calls, materialize


def _parent():
    return Job(id=1, business_id=1, client_id=1, date=date(2024, 1, 1), time="9:00", duration=1, amount_cents=0, rate_type="flat", is_recurring=True, recurrence_rule="weekly", parent_job_id=None, series_id="s")


def test_trigger_expands_each_range_once():
    calls, materialize = _recorder()
    trigger = ScheduleViewTrigger(materialize)
    jobs = [_parent()]

    created = trigger.sync(jobs, date(2024, 1, 7), date(2024, 1, 13))
    assert [j.date for j in created] == [date(2024, 1, 8)]
    assert len(jobs) == 2

    assert trigger.sync(jobs, date(2024, 1, 7), date(2024, 1, 13)) == []
    assert len(calls) == 1
    assert range_key(date(2024, 1, 7), date(2024, 1, 13)) in trigger.seen


def test_trigger_uses_its_own_snapshot_for_dedup():
    calls, materialize = _recorder()
    jobs = [_parent()]
    ScheduleViewTrigger(materialize).sync(jobs, date(2024, 1, 7), date(2024, 1, 13))

    # A fresh trigger has no seen ranges but the snapshot already holds 01-08.
    assert ScheduleViewTrigger(materialize).sync(jobs, date(2024, 1, 7), date(2024, 1, 13)) == []
    assert len(calls) == 1


def test_trigger_honours_preloaded_seen_ranges():
    calls, materialize = _recorder()
    trigger = ScheduleViewTrigger(materialize, seen=["2024-01-07_2024-01-13"])
    assert trigger.sync([_parent()], date(2024, 1, 7), date(2024, 1, 13)) == []
    assert calls == []


def _create_weekly_job(client, job_date, **extra):
    data = {
        "client_id": "1",
        "date": job_date.isoformat(),
        "time": "9:00 AM",
        "duration": "2",
        "recurrence_rule": "weekly",
    }
    data.update(extra)
    response = client.post("/jobs?business_id=1", data=data, follow_redirects=False)
    assert response.status_code == 303
    return response


def test_schedule_page_generates_instances_once_per_range(client, db):
    _login(client, "owner@test.local")
    _create_weekly_job(client, date.today() - timedelta(days=7))

    first = client.get("/schedule?business_id=1")
    assert first.status_code == 200
    assert "1 recurring jobs added" in first.text
    assert "Recurring" in first.text
    assert get_settings().schedule_cookie in first.cookies

    again = client.get("/schedule?business_id=1")
    assert "recurring jobs added" not in again.text
    assert db.query(Job).filter(Job.series_id.isnot(None)).count() == 2


def test_schedule_rescan_without_cookie_adds_no_duplicates(client, db):
    _login(client, "owner@test.local")
    _create_weekly_job(client, date.today() - timedelta(days=14))

    client.get("/schedule?business_id=1&view=month")
    client.cookies.delete(get_settings().schedule_cookie)
    rescan = client.get("/schedule?business_id=1&view=month")

    assert "recurring jobs added" not in rescan.text
    jobs = db.query(Job).filter(Job.series_id.isnot(None)).all()
    keys = [(j.series_id, j.date) for j in jobs]
    assert len(keys) == len(set(keys))


def test_schedule_rejects_unknown_view(client):
    _login(client, "owner@test.local")
    assert client.get("/schedule?business_id=1&view=year").status_code == 400


def test_employee_sees_only_assigned_jobs(client):
    _login(client, "owner@test.local")
    today = date.today().isoformat()
    for time, employee_id in (("7:15 AM", "1"), ("3:45 PM", "2")):
        response = client.post(
            "/jobs?business_id=1",
            data={"client_id": "1", "date": today, "time": time, "duration": "1", "employee_ids": [employee_id]},
            follow_redirects=False,
        )
        assert response.status_code == 303

    client.post("/logout", follow_redirects=False)
    _login(client, "crew@test.local")
    page = client.get("/schedule?business_id=1")
    assert page.status_code == 200
    assert "7:15 AM" in page.text
    assert "3:45 PM" not in page.text
    assert "New Job" not in page.text


def test_new_series_appears_in_already_viewed_range(client, db):
    _login(client, "owner@test.local")
    grid_start, grid_end = visible_range("month", 0, date.today())

    client.get("/schedule?business_id=1&view=month")
    _create_weekly_job(client, grid_start)
    page = client.get("/schedule?business_id=1&view=month")

    assert "recurring jobs added" in page.text
    instances = db.query(Job).filter(Job.parent_job_id.isnot(None)).all()
    assert len(instances) == (grid_end - grid_start).days // 7
    assert all(grid_start < j.date <= grid_end for j in instances)


def test_job_changes_only_reset_their_own_business_ranges(client):
    _login(client, "owner@test.local")
    client.get("/schedule?business_id=1")
    client.get("/schedule?business_id=2")
    cookie_name = get_settings().schedule_cookie
    before = client.cookies.get(cookie_name)

    _create_weekly_job(client, date.today())

    after = ranges_serializer.loads(client.cookies.get(cookie_name))
    assert set(ranges_serializer.loads(before)) == {"1", "2"}
    assert set(after) == {"2"}


def test_schedule_rejects_offset_beyond_calendar(client):
    _login(client, "owner@test.local")
    assert client.get("/schedule?business_id=1&offset=999999999").status_code == 400
    assert client.get("/schedule?business_id=1&view=month&offset=999999999").status_code == 400
