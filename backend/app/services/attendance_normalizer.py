"""
Normalisation des pointages bruts en enregistrements AttendanceLog canoniques.

Aucune entrée/sortie : le module ne fait que produire des objets que le service
de réception persiste ensuite en une seule transaction.

Règles appliquées à chaque élément du lot :
1. Identifiant : UUID fourni si lisible, sinon un nouvel UUID (jamais de rejet)
2. Horodatages : conversion en UTC champ par champ
   - horodatage avec fuseau → converti en UTC
   - horodatage sans fuseau → considéré comme déjà en UTC (politique déterministe)
3. Nettoyage des espaces autour du nom, de l'État et de la LGA
4. check_in_date déduit de check_in, sinon de check_out (minuit UTC),
   en seconde passe sur tout le lot
5. received_at = instant serveur, toute valeur client est ignorée
"""

import logging
import uuid
from datetime import datetime, timezone
from typing import List, Optional

from app.exceptions import InvalidInputError
from app.models.attendance import AttendanceLog
from app.schemas.report import AttendanceReportItem

logger = logging.getLogger(__name__)

EMPTY_BATCH_MESSAGE = "Empty report list"


def resolve_uuid(value: Optional[str]) -> Optional[uuid.UUID]:
    """Retourne l'UUID lu dans `value`, ou None s'il est absent ou illisible."""
    if value is None:
        return None
    try:
        return uuid.UUID(str(value).strip())
    except ValueError:
        return None


def to_utc(value: Optional[datetime]) -> Optional[datetime]:
    """Ramène un horodatage en UTC. Un horodatage naïf est étiqueté UTC sans décalage."""
    if value is None:
        return None
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


def utc_midnight(value: datetime) -> datetime:
    """Minuit UTC du jour (UTC) de `value`."""
    value = to_utc(value)
    return datetime(value.year, value.month, value.day, tzinfo=timezone.utc)


def _strip(value: Optional[str]) -> Optional[str]:
    return value.strip() if value is not None else None


def normalize_item(item: AttendanceReportItem, received_at: datetime) -> AttendanceLog:
    """Première passe : identifiants, fuseaux horaires, nettoyage des textes."""
    record_id = resolve_uuid(item.id)
    if record_id is None:
        record_id = uuid.uuid4()
        if item.id is not None:
            logger.debug("Identifiant de pointage invalide %r remplacé par %s", item.id, record_id)

    user_id = resolve_uuid(item.user_id)
    if user_id is None and item.user_id is not None:
        logger.warning("user_id illisible %r : pointage conservé sans agent", item.user_id)

    return AttendanceLog(
        id=record_id,
        user_id=user_id,
        full_name=_strip(item.full_name),
        designation=item.designation,
        facility=item.facility,
        phone_number=item.phone_number,
        state=_strip(item.state),
        lga=_strip(item.lga),
        check_in_date=to_utc(item.check_in_date),
        check_out_date=to_utc(item.check_out_date),
        check_in=to_utc(item.check_in),
        check_out=to_utc(item.check_out),
        message=item.message,
        success=bool(item.success),
        received_at=received_at,
    )


def backfill_check_in_dates(records: List[AttendanceLog]) -> int:
    """
    Seconde passe : complète check_in_date à partir de check_in puis check_out.
    Les pointages sans aucun horodatage restent sans date.
    Retourne le nombre d'enregistrements complétés.
    """
    filled = 0
    for record in records:
        if record.check_in_date is not None:
            continue
        source = record.check_in or record.check_out
        if source is None:
            continue
        record.check_in_date = utc_midnight(source)
        filled += 1
    return filled


def normalize_batch(
    items: Optional[List[AttendanceReportItem]],
    now: Optional[datetime] = None,
) -> List[AttendanceLog]:
    """
    Normalise un lot complet. Le lot en sortie a exactement la même taille qu'en entrée.
    Lève InvalidInputError si le lot est vide ou absent.
    """
    if not items:
        raise InvalidInputError(EMPTY_BATCH_MESSAGE)

    received_at = to_utc(now) if now else datetime.now(timezone.utc)

    records = [normalize_item(item, received_at) for item in items]
    filled = backfill_check_in_dates(records)

    logger.debug("Lot normalisé : %d pointages, %d dates complétées", len(records), filled)
    return records
