from fastapi import APIRouter, Depends, Form, HTTPException, Request
from sqlalchemy.orm import Session

from app.core.db import get_db
from app.core.templating import templates
from app.models import Expense, Job
from app.routes.common import parse_date, redirect_to
from app.services.authz import CurrentContext, require_context, require_role

router = APIRouter(prefix="/expenses", tags=["expenses"])


@router.get("")
def expenses_page(request: Request, ctx: CurrentContext = Depends(require_context), db: Session = Depends(get_db)):
    expenses = db.query(Expense).filter(Expense.business_id == ctx.business.id).order_by(Expense.date.desc(), Expense.id.desc()).all()
    by_category: dict[str, int] = {}
    for expense in expenses:
        by_category[expense.category] = by_category.get(expense.category, 0) + expense.amount_cents
    return templates.TemplateResponse(
        request,
        "expenses.html",
        {"ctx": ctx, "expenses": expenses, "by_category": sorted(by_category.items()), "total_cents": sum(by_category.values())},
    )


@router.post("")
def create_expense(
    expense_date: str = Form(..., alias="date"),
    description: str = Form(...),
    amount_cents: int = Form(...),
    category: str = Form("general"),
    vendor: str = Form(""),
    job_id: int | None = Form(None),
    notes: str = Form(""),
    ctx: CurrentContext = Depends(require_role("admin")),
    db: Session = Depends(get_db),
):
    parsed_date = parse_date(expense_date)
    if not parsed_date:
        raise HTTPException(status_code=400, detail="date required")
    if amount_cents < 0:
        raise HTTPException(status_code=400, detail="Invalid amount")
    if job_id:
        job = db.query(Job).filter(Job.id == job_id, Job.business_id == ctx.business.id).first()
        if not job:
            raise HTTPException(status_code=403, detail="Job access denied")
    db.add(
        Expense(
            business_id=ctx.business.id,
            date=parsed_date,
            description=description.strip(),
            amount_cents=amount_cents,
            category=category.strip().lower() or "general",
            vendor=vendor.strip(),
            job_id=job_id,
            notes=notes.strip(),
        )
    )
    db.commit()
    return redirect_to("/expenses", ctx.business.id, "expense-created")


@router.post("/{expense_id}/delete")
def delete_expense(expense_id: int, ctx: CurrentContext = Depends(require_role("admin")), db: Session = Depends(get_db)):
    expense = db.query(Expense).filter(Expense.id == expense_id, Expense.business_id == ctx.business.id).first()
    if not expense:
        raise HTTPException(status_code=404, detail="Expense not found")
    db.delete(expense)
    db.commit()
    return redirect_to("/expenses", ctx.business.id, "expense-deleted")
