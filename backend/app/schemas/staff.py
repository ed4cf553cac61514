"""
Schémas Pydantic pour le répertoire du personnel.
"""

import uuid
from typing import List, Optional

from pydantic import BaseModel, field_validator


class StaffItem(BaseModel):
    """Entrée du personnel reçue lors d'une synchronisation (POST /api/users/sync)."""
    id: uuid.UUID
    full_name: Optional[str] = None
    designation: Optional[str] = None
    facility: Optional[str] = None
    phone_number: Optional[str] = None
    state: Optional[str] = None
    lga: Optional[str] = None

    @field_validator("full_name")
    @classmethod
    def strip_name(cls, v: Optional[str]) -> Optional[str]:
        return v.strip() if v else v


class StaffResponse(BaseModel):
    """Membre du personnel (GET /api/users)."""
    id: uuid.UUID
    full_name: Optional[str]
    designation: Optional[str]
    facility: Optional[str]
    phone_number: Optional[str]
    state: Optional[str]
    lga: Optional[str]

    model_config = {"from_attributes": True}


class StaffSyncResponse(BaseModel):
    """Rapport de synchronisation du personnel."""
    message: str
    total_received: int
    created: int
    updated: int


class FacilityMember(BaseModel):
    id: uuid.UUID
    full_name: Optional[str]
    designation: Optional[str]


class FacilityRoster(BaseModel):
    """Effectif d'un établissement (GET /api/users/facility-summary)."""
    facility: str
    user_count: int
    users: List[FacilityMember]
