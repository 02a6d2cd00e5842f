from datetime import date, timedelta

from sqlalchemy.orm import Session

from app.models import Expense, Job


def month_bounds(day: date) -> tuple[date, date]:
    first = day.replace(day=1)
    next_first = date(first.year + 1, 1, 1) if first.month == 12 else date(first.year, first.month + 1, 1)
    return first, next_first - timedelta(days=1)


def business_snapshot(db: Session, business_id: int, today: date) -> dict:
    month_start, month_end = month_bounds(today)
    month_jobs = (
        db.query(Job)
        .filter(Job.business_id == business_id, Job.date >= month_start, Job.date <= month_end, Job.status != "cancelled")
        .all()
    )
    revenue = sum(j.amount_cents for j in month_jobs if j.payment_status == "paid")
    outstanding = (
        db.query(Job)
        .filter(Job.business_id == business_id, Job.status == "completed", Job.payment_status.in_(["pending", "overdue"]))
        .all()
    )
    expenses = sum(
        e.amount_cents
        for e in db.query(Expense)
        .filter(Expense.business_id == business_id, Expense.date >= month_start, Expense.date <= month_end)
        .all()
    )
    today_jobs = (
        db.query(Job)
        .filter(Job.business_id == business_id, Job.date == today, Job.status != "cancelled")
        .order_by(Job.time.asc(), Job.id.asc())
        .all()
    )

    return {
        "month_start": month_start,
        "month_end": month_end,
        "revenue_cents": revenue,
        "scheduled_cents": sum(j.amount_cents for j in month_jobs if j.status == "scheduled"),
        "pending_cents": sum(j.amount_cents for j in outstanding if j.payment_status == "pending"),
        "overdue_cents": sum(j.amount_cents for j in outstanding if j.payment_status == "overdue"),
        "expenses_cents": expenses,
        "net_cents": revenue - expenses,
        "completed_jobs": sum(1 for j in month_jobs if j.status == "completed"),
        "today_jobs": today_jobs,
    }
