import logging
import uuid
from datetime import date, datetime, timedelta

from fastapi import APIRouter, Depends, Form, HTTPException, Query, Request
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session, selectinload

from app.core.db import get_db
from app.core.session import forget_seen_ranges, read_seen_ranges, write_seen_ranges
from app.core.templating import templates
from app.models import (
    JOB_STATUSES,
    PAYMENT_METHODS,
    PAYMENT_STATUSES,
    RATE_TYPES,
    RECURRENCE_RULES,
    Client,
    Employee,
    Job,
    JobEmployee,
)
from app.routes.common import parse_date, redirect_to
from app.services.authz import CurrentContext, require_context, require_role
from app.services.materializer import JobMaterializer
from app.services.schedule_view import VIEWS, ScheduleViewTrigger, range_key, visible_range

logger = logging.getLogger(__name__)

router = APIRouter(tags=["schedule"])


def _load_jobs(db: Session, business_id: int) -> list[Job]:
    return (
        db.query(Job)
        .options(selectinload(Job.assignments))
        .filter(Job.business_id == business_id)
        .order_by(Job.date.asc(), Job.id.asc())
        .all()
    )


def _get_job(db: Session, business_id: int, job_id: int) -> Job:
    job = db.query(Job).filter(Job.id == job_id, Job.business_id == business_id).first()
    if not job:
        raise HTTPException(status_code=404, detail="Job not found")
    return job


def _check_client(db: Session, business_id: int, client_id: int | None) -> Client | None:
    if not client_id:
        return None
    client = db.query(Client).filter(Client.id == client_id, Client.business_id == business_id).first()
    if not client:
        raise HTTPException(status_code=403, detail="Client access denied")
    return client


def _check_employees(db: Session, business_id: int, employee_ids: list[int]) -> list[int]:
    wanted = sorted(set(employee_ids))
    if not wanted:
        return []
    found = {e.id for e in db.query(Employee).filter(Employee.id.in_(wanted), Employee.business_id == business_id).all()}
    if found != set(wanted):
        raise HTTPException(status_code=403, detail="Employee access denied")
    return wanted


def _required_date(value: str | None, field: str) -> date:
    parsed = parse_date(value, field)
    if not parsed:
        raise HTTPException(status_code=400, detail=f"{field} required")
    return parsed


@router.get("/schedule")
def schedule_page(
    request: Request,
    view: str = Query(default="week"),
    offset: int = Query(default=0),
    ctx: CurrentContext = Depends(require_context),
    db: Session = Depends(get_db),
):
    if view not in VIEWS:
        raise HTTPException(status_code=400, detail="Invalid view")
    try:
        range_start, range_end = visible_range(view, offset, date.today())
    except (OverflowError, ValueError) as exc:
        raise HTTPException(status_code=400, detail="Invalid offset") from exc

    jobs = _load_jobs(db, ctx.business.id)
    seen = read_seen_ranges(request, ctx.business.id)
    trigger = ScheduleViewTrigger(JobMaterializer(db, ctx.business.id).materialize, seen)
    created = trigger.sync(jobs, range_start, range_end)

    visible = [j for j in jobs if range_start <= j.date <= range_end]
    if ctx.is_employee_view:
        visible = [j for j in visible if ctx.membership.employee_id in j.employee_ids]

    clients = db.query(Client).filter(Client.business_id == ctx.business.id).order_by(Client.name.asc()).all()
    employees = db.query(Employee).filter(Employee.business_id == ctx.business.id).order_by(Employee.name.asc()).all()
    days = [range_start + timedelta(days=i) for i in range((range_end - range_start).days + 1)]
    jobs_by_day: dict[date, list[Job]] = {day: [] for day in days}
    for job in visible:
        jobs_by_day[job.date].append(job)

    response = templates.TemplateResponse(
        request,
        "schedule.html",
        {
            "ctx": ctx,
            "view": view,
            "offset": offset,
            "range_start": range_start,
            "range_end": range_end,
            "days": days,
            "jobs_by_day": jobs_by_day,
            "generated_count": len(created),
            "clients": clients,
            "clients_by_id": {c.id: c for c in clients},
            "employees": employees,
            "employees_by_id": {e.id: e for e in employees},
            "recurrence_rules": sorted(RECURRENCE_RULES),
            "job_statuses": sorted(JOB_STATUSES),
            "payment_statuses": sorted(PAYMENT_STATUSES),
            "today": date.today(),
        },
    )
    key = range_key(range_start, range_end)
    if key not in seen:
        write_seen_ranges(request, response, ctx.business.id, [*seen, key])
    return response


@router.post("/jobs")
def create_job(
    request: Request,
    client_id: int = Form(...),
    job_date: str = Form(..., alias="date"),
    time: str = Form(...),
    duration: float = Form(...),
    amount_cents: int | None = Form(None),
    rate_type: str | None = Form(None),
    employee_ids: list[int] = Form([]),
    recurrence_rule: str = Form(""),
    recurrence_end_date: str | None = Form(None),
    ctx: CurrentContext = Depends(require_role("admin")),
    db: Session = Depends(get_db),
):
    client = _check_client(db, ctx.business.id, client_id)
    if not client:
        raise HTTPException(status_code=400, detail="client_id required")
    parsed_date = _required_date(job_date, "date")
    if duration <= 0:
        raise HTTPException(status_code=400, detail="Invalid duration")
    rule = recurrence_rule.strip() or None
    if rule and rule not in RECURRENCE_RULES:
        raise HTTPException(status_code=400, detail="Invalid recurrence rule")
    end_date = parse_date(recurrence_end_date, "recurrence_end_date") if rule else None
    if end_date and end_date < parsed_date:
        raise HTTPException(status_code=400, detail="Recurrence end date precedes job date")
    resolved_rate = rate_type or client.service_rate_type
    if resolved_rate not in RATE_TYPES:
        raise HTTPException(status_code=400, detail="Invalid rate type")
    assigned = _check_employees(db, ctx.business.id, employee_ids)

    job = Job(
        business_id=ctx.business.id,
        client_id=client.id,
        date=parsed_date,
        time=time.strip(),
        duration=duration,
        status="scheduled",
        amount_cents=max(0, amount_cents if amount_cents is not None else client.service_rate_cents),
        rate_type=resolved_rate,
        payment_status="pending",
        is_recurring=rule is not None,
        recurrence_rule=rule,
        recurrence_end_date=end_date,
        series_id=uuid.uuid4().hex if rule else None,
        assignments=[JobEmployee(employee_id=employee_id) for employee_id in assigned],
    )
    db.add(job)
    db.commit()
    if rule:
        logger.info(f"Recurring series {job.series_id} created from job {job.id} ({rule})")
    response = redirect_to("/schedule", ctx.business.id, "job-created")
    forget_seen_ranges(request, response, ctx.business.id)
    return response


@router.post("/jobs/{job_id}/update")
def update_job(
    job_id: int,
    request: Request,
    client_id: int = Form(...),
    job_date: str = Form(..., alias="date"),
    time: str = Form(...),
    duration: float = Form(...),
    amount_cents: int = Form(0),
    rate_type: str = Form("flat"),
    employee_ids: list[int] = Form([]),
    ctx: CurrentContext = Depends(require_role("admin")),
    db: Session = Depends(get_db),
):
    job = _get_job(db, ctx.business.id, job_id)
    _check_client(db, ctx.business.id, client_id)
    if rate_type not in RATE_TYPES:
        raise HTTPException(status_code=400, detail="Invalid rate type")
    if duration <= 0:
        raise HTTPException(status_code=400, detail="Invalid duration")
    assigned = set(_check_employees(db, ctx.business.id, employee_ids))

    job.client_id = client_id
    job.date = _required_date(job_date, "date")
    job.time = time.strip()
    job.duration = duration
    job.amount_cents = max(0, amount_cents)
    job.rate_type = rate_type
    for assignment in list(job.assignments):
        if assignment.employee_id not in assigned:
            job.assignments.remove(assignment)
    current = set(job.employee_ids)
    job.assignments.extend(JobEmployee(employee_id=e) for e in sorted(assigned - current))
    try:
        db.commit()
    except IntegrityError as exc:
        db.rollback()
        raise HTTPException(status_code=409, detail="Series already has a job on that date") from exc
    response = redirect_to("/schedule", ctx.business.id, "job-updated")
    forget_seen_ranges(request, response, ctx.business.id)
    return response


@router.post("/jobs/{job_id}/status")
def update_job_status(job_id: int, status: str = Form(...), ctx: CurrentContext = Depends(require_role("admin")), db: Session = Depends(get_db)):
    if status not in JOB_STATUSES:
        raise HTTPException(status_code=400, detail="Invalid status")
    job = _get_job(db, ctx.business.id, job_id)
    job.status = status
    db.commit()
    return redirect_to("/schedule", ctx.business.id)


@router.post("/jobs/{job_id}/payment")
def update_job_payment(
    job_id: int,
    payment_status: str = Form(...),
    payment_via: str = Form(""),
    ctx: CurrentContext = Depends(require_role("admin")),
    db: Session = Depends(get_db),
):
    if payment_status not in PAYMENT_STATUSES:
        raise HTTPException(status_code=400, detail="Invalid payment status")
    if payment_via and payment_via not in PAYMENT_METHODS:
        raise HTTPException(status_code=400, detail="Invalid payment method")
    job = _get_job(db, ctx.business.id, job_id)
    job.payment_status = payment_status
    job.payment_via = payment_via or None
    db.commit()
    return redirect_to("/schedule", ctx.business.id)


@router.post("/jobs/{job_id}/invoice-sent")
def mark_invoice_sent(job_id: int, ctx: CurrentContext = Depends(require_role("admin")), db: Session = Depends(get_db)):
    job = _get_job(db, ctx.business.id, job_id)
    job.invoice_sent_at = datetime.utcnow()
    db.commit()
    return redirect_to("/schedule", ctx.business.id, "invoice-sent")


@router.post("/jobs/{job_id}/delete")
def delete_job(request: Request, job_id: int, ctx: CurrentContext = Depends(require_role("admin")), db: Session = Depends(get_db)):
    job = _get_job(db, ctx.business.id, job_id)
    # Instances outlive their parent; series_id keeps them deduplicated.
    db.query(Job).filter(Job.parent_job_id == job.id).update({Job.parent_job_id: None}, synchronize_session=False)
    db.delete(job)
    db.commit()
    response = redirect_to("/schedule", ctx.business.id, "job-deleted")
    forget_seen_ranges(request, response, ctx.business.id)
    return response
