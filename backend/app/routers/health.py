"""
Router pour la santé des terminaux de pointage.
Les terminaux envoient un ping périodique ; le tableau de bord consulte leur état.
"""

from typing import List

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from app.database import get_db
from app.schemas.device import DevicePing, DevicePingResponse, DeviceStatus
from app.services import device_health_service

router = APIRouter(prefix="/api/health", tags=["Santé des terminaux"])


@router.post("/ping", response_model=DevicePingResponse, summary="Ping d'un terminal")
def ping_device(data: DevicePing, db: Session = Depends(get_db)):
    """Crée ou met à jour l'état du terminal (device_name + facility) avec l'horodatage serveur."""
    return device_health_service.save_device_health(db, data)


@router.get("/status", response_model=List[DeviceStatus], summary="État des terminaux")
def device_statuses(db: Session = Depends(get_db)):
    """Tous les terminaux, du ping le plus récent au plus ancien."""
    devices = device_health_service.get_all_statuses(db)
    return [
        DeviceStatus(
            facility=d.facility,
            device_name=d.device_name,
            ip_address=d.ip_address,
            is_online=d.is_online,
            facility_code=d.facility_code,
            facility_state=d.facility_state,
            facility_lga=d.facility_lga,
            last_seen=d.last_checked,
        )
        for d in devices
    ]
