"""Materialize recurring jobs for one business over a date range.

Meant for cron: the same range can be run repeatedly; existing instances are
left alone.
"""

import argparse
import logging
import os
import sys
from datetime import date, timedelta

sys.path.append(os.path.abspath(os.path.join(os.path.dirname(__file__), "..")))

from app.core.config import get_settings
from app.core.db import SessionLocal
from app.models import Business
from app.services.generation import generate_for_range


def run(business_id: int, range_start: date, range_end: date) -> int:
    db = SessionLocal()
    try:
        if not db.query(Business).filter(Business.id == business_id).first():
            raise SystemExit(f"Business {business_id} not found")
        generated = generate_for_range(db, business_id, range_start, range_end)
        print(f"Generated {generated} recurring jobs for business {business_id} ({range_start}..{range_end})")
        return generated
    finally:
        db.close()


if __name__ == "__main__":
    logging.basicConfig(level=get_settings().log_level.upper(), format="%(asctime)s - %(name)s - %(levelname)s - %(message)s")
    parser = argparse.ArgumentParser()
    parser.add_argument("--business-id", type=int, required=True)
    parser.add_argument("--start", type=date.fromisoformat, default=date.today())
    parser.add_argument("--end", type=date.fromisoformat, default=None)
    args = parser.parse_args()
    run(args.business_id, args.start, args.end or args.start + timedelta(days=30))
