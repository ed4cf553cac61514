"""
Service du répertoire du personnel : synchronisation (upsert) et lectures.

Le répertoire est la référence de l'effectif attendu pour toutes les synthèses.
Il n'est jamais modifié par la réception des pointages.
"""

import uuid
import logging
from typing import Dict, List, Optional

from sqlalchemy import select
from sqlalchemy.orm import Session

from app.exceptions import InvalidInputError
from app.models.staff import Staff
from app.schemas.staff import FacilityMember, FacilityRoster, StaffItem, StaffSyncResponse

logger = logging.getLogger(__name__)

SYNCED_FIELDS = ("full_name", "designation", "facility", "phone_number", "state", "lga")


def sync_staff(db: Session, items: Optional[List[StaffItem]]) -> StaffSyncResponse:
    """
    Crée ou met à jour chaque membre du personnel par son id.

    - id inconnu → création
    - id connu → écrasement champ par champ
    - id répété dans le même lot → la dernière occurrence l'emporte (pas de doublon)

    Toute la synchronisation est commitée en une seule fois.
    Lève InvalidInputError si le lot est vide.
    """
    if not items:
        raise InvalidInputError("Empty user list")

    # Membres déjà traités dans CE lot (autoflush=False → les ajouts ne sont pas encore en base)
    seen_in_batch: Dict[uuid.UUID, Staff] = {}
    created = 0
    updated = 0

    for item in items:
        staff = seen_in_batch.get(item.id) or db.get(Staff, item.id)

        if staff is None:
            staff = Staff(id=item.id)
            db.add(staff)
            created += 1
        elif item.id not in seen_in_batch:
            updated += 1

        for field in SYNCED_FIELDS:
            setattr(staff, field, getattr(item, field))
        seen_in_batch[item.id] = staff

    try:
        db.commit()
    except Exception:
        db.rollback()
        raise

    logger.info(
        "Synchronisation du personnel : %d reçus, %d créés, %d mis à jour",
        len(items), created, updated,
    )

    return StaffSyncResponse(
        message=f"{len(items)} users saved/updated successfully.",
        total_received=len(items),
        created=created,
        updated=updated,
    )


def get_all_staff(db: Session) -> List[Staff]:
    """Retourne tout le personnel."""
    return db.execute(select(Staff)).scalars().all()


def get_staff_by_id(db: Session, staff_id: uuid.UUID) -> Optional[Staff]:
    """Retourne un membre du personnel par son id, ou None s'il n'existe pas."""
    return db.get(Staff, staff_id)


def get_staff_by_facility(db: Session, facility: str) -> List[Staff]:
    """Retourne le personnel d'un établissement, trié par nom."""
    return db.execute(
        select(Staff)
        .where(Staff.facility == facility)
        .order_by(Staff.full_name)
    ).scalars().all()


def get_all_facilities(db: Session) -> List[str]:
    """Liste triée des établissements distincts (noms vides exclus)."""
    return db.execute(
        select(Staff.facility)
        .where(Staff.facility.is_not(None), Staff.facility != "")
        .distinct()
        .order_by(Staff.facility)
    ).scalars().all()


def get_facility_roster_summary(db: Session) -> List[FacilityRoster]:
    """Effectif par établissement avec la liste de ses membres, trié par établissement."""
    staff = db.execute(
        select(Staff)
        .where(Staff.facility.is_not(None), Staff.facility != "")
        .order_by(Staff.facility, Staff.full_name)
    ).scalars().all()

    rosters: Dict[str, List[FacilityMember]] = {}
    for member in staff:
        rosters.setdefault(member.facility, []).append(
            FacilityMember(id=member.id, full_name=member.full_name, designation=member.designation)
        )

    return [
        FacilityRoster(facility=facility, user_count=len(members), users=members)
        for facility, members in sorted(rosters.items())
    ]
