from datetime import date

from fastapi import APIRouter, Depends, Request
from sqlalchemy.orm import Session

from app.core.db import get_db
from app.core.templating import templates
from app.models import Client, Employee, Membership
from app.services.authz import CurrentContext, require_context
from app.services.summary import business_snapshot

router = APIRouter(tags=["dashboard"])


@router.get("/")
def home(request: Request, ctx: CurrentContext = Depends(require_context), db: Session = Depends(get_db)):
    memberships = db.query(Membership).filter(Membership.user_id == ctx.user.id).all()
    snapshot = business_snapshot(db, ctx.business.id, date.today())
    clients = {c.id: c for c in db.query(Client).filter(Client.business_id == ctx.business.id).all()}
    employees = {e.id: e for e in db.query(Employee).filter(Employee.business_id == ctx.business.id).all()}
    return templates.TemplateResponse(
        request,
        "dashboard.html",
        {
            "ctx": ctx,
            "memberships": memberships,
            "snapshot": snapshot,
            "clients_by_id": clients,
            "employees_by_id": employees,
        },
    )
