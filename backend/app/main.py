"""
Point d'entrée principal de l'API Attendance Report Service.
Démarrage : uvicorn app.main:app --reload
"""

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

import app.models  # noqa: F401 : enregistre tous les modèles dans Base.metadata avant les routers
from app.config import settings
from app.database import Base, SessionLocal, engine
from app.routers import health, reports, users
from app.scheduler import start_scheduler, stop_scheduler
from app.services.admin_seed import seed_admin_user

logging.basicConfig(
    level=settings.LOG_LEVEL,
    format="%(asctime)s %(levelname)s [%(name)s] %(message)s",
)
logger = logging.getLogger(__name__)


def bootstrap() -> None:
    """Initialisation unique du processus : tables manquantes puis administrateur initial."""
    Base.metadata.create_all(bind=engine)
    db = SessionLocal()
    try:
        seed_admin_user(db)
    finally:
        db.close()


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Cycle de vie : initialisation, puis démarrage et arrêt du balayage des terminaux."""
    bootstrap()
    start_scheduler()
    yield
    stop_scheduler()


app = FastAPI(
    title="Attendance Report Service",
    description="Réception des pointages, synthèses de présence et feuilles de temps par établissement",
    version="0.1.0",
    docs_url="/api/docs",
    redoc_url="/api/redoc",
    openapi_url="/api/openapi.json",
    lifespan=lifespan,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=False,
    allow_methods=["GET", "POST", "OPTIONS"],
    allow_headers=["Content-Type", "Authorization", "Accept"],
)


app.include_router(reports.router)
app.include_router(users.router)
app.include_router(health.router)


@app.exception_handler(Exception)
async def unhandled_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    """
    Intercepte les exceptions non gérées (dont les échecs de la base) :
    journalisées avec leur trace, renvoyées en 500 avec le message d'origine.
    """
    logger.error("Exception non gérée : %s", exc, exc_info=True)
    return JSONResponse(
        status_code=500,
        content={"status": "error", "detail": str(exc)},
    )


@app.get("/api/healthz", tags=["Santé"])
def health_check():
    """Vérifie que l'API est opérationnelle."""
    return {"status": "ok", "service": "Attendance Report Service", "version": "0.1.0"}
