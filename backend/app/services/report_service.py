"""
Service de réception des pointages envoyés par les terminaux.

Stratégie : append-only, sans déduplication
- Le lot est normalisé en mémoire (attendance_normalizer) puis inséré en une seule transaction
- Tout ou rien : en cas d'échec du commit, rollback et propagation de l'erreur d'origine
- Un lot vide est rejeté avant tout accès à la base
"""

import logging
from datetime import datetime
from typing import List, Optional

from sqlalchemy.orm import Session

from app.schemas.report import AttendanceReportItem, IngestionResponse
from app.services.attendance_normalizer import normalize_batch

logger = logging.getLogger(__name__)


def save_reports(
    db: Session,
    reports: Optional[List[AttendanceReportItem]],
    now: Optional[datetime] = None,
) -> IngestionResponse:
    """
    Normalise puis enregistre un lot de pointages.
    Lève InvalidInputError si le lot est vide (la base n'est pas touchée).
    """
    records = normalize_batch(reports, now=now)

    db.add_all(records)
    try:
        db.commit()
    except Exception:
        db.rollback()
        logger.error("Échec de l'enregistrement d'un lot de %d pointages", len(records))
        raise

    logger.info("Lot de pointages enregistré : %d pointages", len(records))

    return IngestionResponse(
        status="success",
        message=f"{len(records)} records saved successfully.",
        count=len(records),
    )
