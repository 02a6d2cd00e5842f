import logging
from datetime import date

from sqlalchemy.orm import Session

from app.services.materializer import JobMaterializer
from app.services.recurrence import StoreSeriesIndex, expand, load_parents

logger = logging.getLogger(__name__)


def generate_for_range(db: Session, business_id: int, range_start: date, range_end: date) -> int:
    if range_start > range_end:
        return 0
    parents = load_parents(db, business_id)
    if not parents:
        return 0
    specs = expand(parents, StoreSeriesIndex(db, business_id), range_start, range_end)
    created = JobMaterializer(db, business_id).materialize(specs)
    logger.info(
        f"Generated {len(created)} of {len(specs)} recurring instances for business {business_id} "
        f"({range_start.isoformat()}..{range_end.isoformat()})"
    )
    return len(created)
