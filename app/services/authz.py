from dataclasses import dataclass

from fastapi import Depends, HTTPException, Request, status
from sqlalchemy.orm import Session

from app.core.db import get_db
from app.core.session import read_session
from app.models import Business, Membership, User

ROLE_ORDER = {"employee": 1, "admin": 2, "owner": 3}


@dataclass
class CurrentContext:
    user: User
    business: Business
    membership: Membership

    @property
    def is_employee_view(self) -> bool:
        return self.membership.role == "employee" and self.membership.employee_id is not None


def _find_current_user(request: Request, db: Session) -> User:
    user_id = read_session(request)
    if not user_id:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Authentication required")
    user = db.query(User).filter(User.id == user_id, User.is_active.is_(True)).first()
    if not user:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Invalid session")
    return user


def parse_business_id(raw: str | None) -> int | None:
    if not raw:
        return None
    if not raw.isdigit():
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Invalid business_id")
    return int(raw)


def _select_membership(db: Session, user_id: int, business_id: int | None) -> Membership:
    memberships = db.query(Membership).filter(Membership.user_id == user_id)
    if business_id is None:
        membership = memberships.order_by(Membership.id.asc()).first()
    else:
        membership = memberships.filter(Membership.business_id == business_id).first()
    if membership:
        return membership
    if business_id is not None and memberships.first():
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="Business access denied")
    raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="No business membership")


def require_context(request: Request, db: Session = Depends(get_db)) -> CurrentContext:
    user = _find_current_user(request, db)
    business_id = parse_business_id(request.query_params.get("business_id"))
    membership = _select_membership(db, user.id, business_id)
    if membership.business is None:
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="Business unavailable")
    return CurrentContext(user=user, business=membership.business, membership=membership)


def require_role(min_role: str):
    def _dep(ctx: CurrentContext = Depends(require_context)) -> CurrentContext:
        if ROLE_ORDER.get(ctx.membership.role, 0) < ROLE_ORDER.get(min_role, 0):
            raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="Insufficient role")
        return ctx

    return _dep
