import logging

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from fastapi.staticfiles import StaticFiles

from app.core.config import get_settings
from app.routes import auth, clients, dashboard, expenses, recurring, schedule, team

settings = get_settings()

logging.basicConfig(
    level=settings.log_level.upper(),
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
)

app = FastAPI(title=settings.app_name)

app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.include_router(auth.router)
app.include_router(dashboard.router)
app.include_router(schedule.router)
app.include_router(recurring.router)
app.include_router(clients.router)
app.include_router(team.router)
app.include_router(expenses.router)

app.mount("/static", StaticFiles(directory=str(settings.base_dir / "static")), name="static")
