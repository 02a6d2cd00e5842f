from datetime import date

from fastapi import HTTPException
from fastapi.responses import RedirectResponse


def parse_date(value: str | None, field: str = "date") -> date | None:
    if not value:
        return None
    try:
        return date.fromisoformat(value)
    except ValueError as exc:
        raise HTTPException(status_code=400, detail=f"Invalid {field}") from exc


def redirect_to(path: str, business_id: int, toast: str | None = None) -> RedirectResponse:
    url = f"{path}?business_id={business_id}"
    if toast:
        url += f"&toast={toast}"
    return RedirectResponse(url=url, status_code=303)
