"""
Planificateur APScheduler pour le balayage de santé des terminaux.

Le job s'exécute toutes les HEALTH_SWEEP_INTERVAL_MINUTES minutes (10 par défaut)
et passe hors ligne les terminaux sans ping depuis DEVICE_OFFLINE_THRESHOLD_MINUTES.
Chaque exécution ouvre sa propre session ; une erreur est journalisée sans
interrompre la planification. L'arrêt (stop_scheduler) attend la fin d'un
balayage en cours et n'en planifie plus aucun.
"""

import logging
from datetime import datetime, timezone

from apscheduler.schedulers.background import BackgroundScheduler

from app.config import settings
from app.database import SessionLocal
from app.services.device_health_service import mark_offline_devices

logger = logging.getLogger(__name__)

scheduler = BackgroundScheduler(timezone="UTC")

SWEEP_JOB_ID = "device_health_sweep"


def _sweep_offline_devices() -> int:
    """
    Tâche planifiée : marque hors ligne les terminaux silencieux.
    Retourne le nombre de terminaux modifiés (0 en cas d'erreur).
    """
    db = SessionLocal()
    try:
        updated = mark_offline_devices(db, settings.DEVICE_OFFLINE_THRESHOLD_MINUTES)
        if updated > 0:
            logger.info(
                "%d terminaux marqués hors ligne à %s",
                updated, datetime.now(timezone.utc).isoformat(),
            )
        return updated
    except Exception as exc:
        logger.error("Erreur lors du balayage de santé des terminaux : %s", exc, exc_info=True)
        return 0
    finally:
        db.close()


def start_scheduler() -> None:
    """Démarre le planificateur en arrière-plan (appelé au démarrage de l'API)."""
    scheduler.add_job(
        _sweep_offline_devices,
        trigger="interval",
        minutes=settings.HEALTH_SWEEP_INTERVAL_MINUTES,
        id=SWEEP_JOB_ID,
        replace_existing=True,
        max_instances=1,
        coalesce=True,
    )
    scheduler.start()
    logger.info(
        "Scheduler démarré — balayage des terminaux toutes les %d minutes.",
        settings.HEALTH_SWEEP_INTERVAL_MINUTES,
    )


def stop_scheduler() -> None:
    """Arrête le planificateur proprement (appelé à l'arrêt de l'API)."""
    if scheduler.running:
        scheduler.shutdown(wait=True)
        logger.info("Scheduler arrêté.")
