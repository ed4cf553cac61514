"""
Service de santé des terminaux de pointage.

- Les pings créent ou mettent à jour l'état d'un terminal (clé : device_name + facility)
- Le balayage périodique passe hors ligne les terminaux silencieux depuis trop longtemps
"""

import logging
from datetime import datetime, timedelta, timezone
from typing import List, Optional

from sqlalchemy import select
from sqlalchemy.orm import Session

from app.models.device_health import DeviceHealth
from app.schemas.device import DevicePing, DevicePingResponse

logger = logging.getLogger(__name__)

DEFAULT_OFFLINE_THRESHOLD_MINUTES = 15


def save_device_health(db: Session, ping: DevicePing, now: Optional[datetime] = None) -> DevicePingResponse:
    """
    Enregistre un ping : mise à jour si le terminal est connu, création sinon.
    last_checked est toujours l'horodatage serveur.
    """
    now = now or datetime.now(timezone.utc)

    device = db.execute(
        select(DeviceHealth).where(
            DeviceHealth.device_name == ping.device_name,
            DeviceHealth.facility == ping.facility,
        )
    ).scalar()

    if device is None:
        device = DeviceHealth(device_name=ping.device_name, facility=ping.facility)
        db.add(device)

    device.is_online = ping.is_online
    device.ip_address = ping.ip_address
    device.facility_code = ping.facility_code
    device.facility_state = ping.facility_state
    device.facility_lga = ping.facility_lga
    device.last_checked = now

    db.commit()
    logger.debug("Ping terminal %s (%s) : online=%s", ping.device_name, ping.facility, ping.is_online)

    return DevicePingResponse(status="success", message="Device health status saved successfully.")


def mark_offline_devices(
    db: Session,
    minutes_threshold: int = DEFAULT_OFFLINE_THRESHOLD_MINUTES,
    now: Optional[datetime] = None,
) -> int:
    """
    Passe hors ligne les terminaux encore en ligne dont le dernier ping
    est antérieur au seuil. Les autres ne sont pas modifiés.
    Retourne le nombre de terminaux modifiés (commit uniquement si > 0).
    """
    now = now or datetime.now(timezone.utc)
    threshold = now - timedelta(minutes=minutes_threshold)

    outdated = db.execute(
        select(DeviceHealth).where(
            DeviceHealth.last_checked < threshold,
            DeviceHealth.is_online.is_(True),
        )
    ).scalars().all()

    for device in outdated:
        device.is_online = False

    if outdated:
        db.commit()

    return len(outdated)


def get_all_statuses(db: Session) -> List[DeviceHealth]:
    """Retourne l'état de tous les terminaux, du plus récent au plus ancien ping."""
    return db.execute(
        select(DeviceHealth).order_by(DeviceHealth.last_checked.desc())
    ).scalars().all()
