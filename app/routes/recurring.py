import logging

from fastapi import APIRouter, Body, Depends, HTTPException
from pydantic import BaseModel, ConfigDict, Field
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from app.core.db import get_db
from app.routes.common import parse_date
from app.services.authz import CurrentContext, require_role
from app.services.generation import generate_for_range

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/recurring-jobs", tags=["recurring-jobs"])


class GenerateRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    start_date: str | None = Field(default=None, alias="startDate")
    end_date: str | None = Field(default=None, alias="endDate")


@router.post("/generate")
def generate_recurring_jobs(
    payload: GenerateRequest | None = Body(default=None),
    ctx: CurrentContext = Depends(require_role("admin")),
    db: Session = Depends(get_db),
):
    if payload is None or not payload.start_date or not payload.end_date:
        raise HTTPException(status_code=400, detail="startDate and endDate are required")
    range_start = parse_date(payload.start_date, "startDate")
    range_end = parse_date(payload.end_date, "endDate")

    try:
        generated = generate_for_range(db, ctx.business.id, range_start, range_end)
    except SQLAlchemyError as exc:
        db.rollback()
        logger.exception(f"Recurring job generation failed for business {ctx.business.id}")
        raise HTTPException(status_code=500, detail="Failed to read recurring jobs") from exc
    return {"generated": generated}
