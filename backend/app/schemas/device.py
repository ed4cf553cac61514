"""
Schémas Pydantic pour la santé des terminaux de pointage.
Endpoints : POST /api/health/ping, GET /api/health/status
"""

from datetime import datetime
from typing import Optional

from pydantic import BaseModel, field_validator


class DevicePing(BaseModel):
    """Ping envoyé périodiquement par un terminal."""
    device_name: str
    facility: str
    ip_address: Optional[str] = None
    is_online: bool = True
    facility_code: Optional[str] = None
    facility_state: Optional[str] = None
    facility_lga: Optional[str] = None

    @field_validator("device_name", "facility")
    @classmethod
    def not_empty(cls, v: str) -> str:
        if not v.strip():
            raise ValueError("Le champ ne peut pas être vide.")
        return v.strip()


class DevicePingResponse(BaseModel):
    status: str
    message: str


class DeviceStatus(BaseModel):
    facility: str
    device_name: str
    ip_address: Optional[str]
    is_online: bool
    facility_code: Optional[str]
    facility_state: Optional[str]
    facility_lga: Optional[str]
    last_seen: datetime
