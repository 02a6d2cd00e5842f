from fastapi import APIRouter, Depends, Form, HTTPException, Request
from sqlalchemy.orm import Session

from app.core.db import get_db
from app.core.templating import templates
from app.models import CLIENT_FREQUENCIES, PAYMENT_METHODS, RATE_TYPES, SERVICE_TYPES, Client
from app.routes.common import redirect_to
from app.services.authz import CurrentContext, require_context, require_role

router = APIRouter(prefix="/clients", tags=["clients"])


@router.get("")
def clients_page(request: Request, ctx: CurrentContext = Depends(require_context), db: Session = Depends(get_db)):
    clients = db.query(Client).filter(Client.business_id == ctx.business.id).order_by(Client.name.asc()).all()
    return templates.TemplateResponse(
        request,
        "clients.html",
        {
            "ctx": ctx,
            "clients": clients,
            "frequencies": sorted(CLIENT_FREQUENCIES),
            "payment_methods": sorted(PAYMENT_METHODS),
            "service_types": sorted(SERVICE_TYPES),
        },
    )


@router.post("")
def create_client(
    name: str = Form(...),
    contact_name: str = Form(""),
    phone: str = Form(""),
    email: str = Form(""),
    address: str = Form(""),
    frequency: str = Form("one_time"),
    payment_method: str = Form("cash"),
    service_type: str = Form("other"),
    service_rate_cents: int = Form(0),
    service_rate_type: str = Form("flat"),
    notes: str = Form(""),
    ctx: CurrentContext = Depends(require_role("admin")),
    db: Session = Depends(get_db),
):
    if not name.strip():
        raise HTTPException(status_code=400, detail="name required")
    if frequency not in CLIENT_FREQUENCIES or payment_method not in PAYMENT_METHODS:
        raise HTTPException(status_code=400, detail="Invalid client options")
    if service_type not in SERVICE_TYPES or service_rate_type not in RATE_TYPES:
        raise HTTPException(status_code=400, detail="Invalid service options")
    db.add(
        Client(
            business_id=ctx.business.id,
            name=name.strip(),
            contact_name=contact_name.strip(),
            phone=phone.strip(),
            email=email.strip(),
            address=address.strip(),
            frequency=frequency,
            payment_method=payment_method,
            service_type=service_type,
            service_rate_cents=max(0, service_rate_cents),
            service_rate_type=service_rate_type,
            notes=notes.strip(),
        )
    )
    db.commit()
    return redirect_to("/clients", ctx.business.id, "client-created")


@router.post("/{client_id}/delete")
def delete_client(client_id: int, ctx: CurrentContext = Depends(require_role("admin")), db: Session = Depends(get_db)):
    client = db.query(Client).filter(Client.id == client_id, Client.business_id == ctx.business.id).first()
    if not client:
        raise HTTPException(status_code=404, detail="Client not found")
    db.delete(client)
    db.commit()
    return redirect_to("/clients", ctx.business.id, "client-deleted")
