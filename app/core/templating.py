from fastapi.templating import Jinja2Templates

from app.core.config import get_settings


def _cents(value: int | None) -> str:
    return f"${(value or 0) / 100:,.2f}"


templates = Jinja2Templates(directory=str(get_settings().base_dir / "templates"))
templates.env.filters["cents"] = _cents
