from fastapi import Request, Response
from itsdangerous import BadSignature, URLSafeSerializer

from app.core.config import get_settings

settings = get_settings()
serializer = URLSafeSerializer(settings.secret_key, salt="session")
ranges_serializer = URLSafeSerializer(settings.secret_key, salt="schedule-ranges")


def set_session(response: Response, user_id: int) -> None:
    signed = serializer.dumps({"user_id": user_id})
    response.set_cookie(
        settings.session_cookie,
        signed,
        httponly=True,
        secure=False,
        samesite="lax",
    )


def clear_session(response: Response) -> None:
    response.delete_cookie(settings.session_cookie)
    response.delete_cookie(settings.schedule_cookie)


def read_session(request: Request) -> int | None:
    raw = request.cookies.get(settings.session_cookie)
    if not raw:
        return None
    try:
        payload = serializer.loads(raw)
        return int(payload.get("user_id"))
    except (BadSignature, TypeError, ValueError):
        return None


def _load_ranges(request: Request) -> dict[str, list[str]]:
    raw = request.cookies.get(settings.schedule_cookie)
    if not raw:
        return {}
    try:
        payload = ranges_serializer.loads(raw)
    except BadSignature:
        return {}
    return payload if isinstance(payload, dict) else {}


def _store_ranges(response: Response, payload: dict[str, list[str]]) -> None:
    response.set_cookie(
        settings.schedule_cookie,
        ranges_serializer.dumps(payload),
        httponly=True,
        secure=False,
        samesite="lax",
    )


def read_seen_ranges(request: Request, business_id: int) -> list[str]:
    ranges = _load_ranges(request).get(str(business_id), [])
    return [r for r in ranges if isinstance(r, str)] if isinstance(ranges, list) else []


def write_seen_ranges(request: Request, response: Response, business_id: int, ranges: list[str]) -> None:
    payload = _load_ranges(request)
    payload[str(business_id)] = ranges[-settings.schedule_cookie_max_ranges :]
    _store_ranges(response, payload)


def forget_seen_ranges(request: Request, response: Response, business_id: int) -> None:
    """Drop a business's viewed ranges so the next schedule view rescans them."""
    payload = _load_ranges(request)
    if payload.pop(str(business_id), None) is None:
        return
    _store_ranges(response, payload)
