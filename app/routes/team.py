from fastapi import APIRouter, Depends, Form, HTTPException, Request
from sqlalchemy.orm import Session

from app.core.db import get_db
from app.core.templating import templates
from app.models import PAY_TYPES, Employee, JobEmployee, Membership
from app.routes.common import redirect_to
from app.services.authz import CurrentContext, require_context, require_role

router = APIRouter(tags=["team"])


@router.get("/team")
def team_page(request: Request, ctx: CurrentContext = Depends(require_context), db: Session = Depends(get_db)):
    employees = db.query(Employee).filter(Employee.business_id == ctx.business.id).order_by(Employee.name.asc()).all()
    return templates.TemplateResponse(request, "team.html", {"ctx": ctx, "employees": employees, "pay_types": sorted(PAY_TYPES)})


@router.post("/employees")
def create_employee(
    name: str = Form(...),
    phone: str = Form(""),
    role_title: str = Form(""),
    rate_cents: int = Form(0),
    pay_type: str = Form("hourly"),
    color: str = Form("#3B82F6"),
    ctx: CurrentContext = Depends(require_role("admin")),
    db: Session = Depends(get_db),
):
    if not name.strip():
        raise HTTPException(status_code=400, detail="name required")
    if pay_type not in PAY_TYPES:
        raise HTTPException(status_code=400, detail="Invalid pay type")
    db.add(
        Employee(
            business_id=ctx.business.id,
            name=name.strip(),
            phone=phone.strip(),
            role_title=role_title.strip(),
            rate_cents=max(0, rate_cents),
            pay_type=pay_type,
            color=color.strip() or "#3B82F6",
        )
    )
    db.commit()
    return redirect_to("/team", ctx.business.id, "employee-created")


@router.post("/employees/{employee_id}/delete")
def delete_employee(employee_id: int, ctx: CurrentContext = Depends(require_role("admin")), db: Session = Depends(get_db)):
    employee = db.query(Employee).filter(Employee.id == employee_id, Employee.business_id == ctx.business.id).first()
    if not employee:
        raise HTTPException(status_code=404, detail="Employee not found")
    db.query(JobEmployee).filter(JobEmployee.employee_id == employee.id).delete(synchronize_session=False)
    db.query(Membership).filter(Membership.employee_id == employee.id).update({Membership.employee_id: None}, synchronize_session=False)
    db.delete(employee)
    db.commit()
    return redirect_to("/team", ctx.business.id, "employee-deleted")
