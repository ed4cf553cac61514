"""
Schémas Pydantic pour la réception des pointages envoyés par les terminaux.
Endpoint : POST /api/reports/receive

Les champs d'identifiant et d'horodatage sont volontairement tolérants :
une valeur illisible devient None et le normaliseur applique ses règles
(id régénéré, date de pointage déduite) au lieu de rejeter le lot.
"""

import logging
from datetime import datetime
from typing import Any, List, Optional

from pydantic import BaseModel, TypeAdapter, ValidationError, field_validator

logger = logging.getLogger(__name__)

_DATETIME_ADAPTER = TypeAdapter(datetime)


def parse_lenient_datetime(value: Any) -> Optional[datetime]:
    """Convertit une valeur en datetime, ou None si elle est absente ou illisible."""
    if value is None or (isinstance(value, str) and not value.strip()):
        return None
    try:
        return _DATETIME_ADAPTER.validate_python(value)
    except ValidationError:
        pass
    if isinstance(value, str):
        try:
            return datetime.fromisoformat(value.strip())
        except ValueError:
            pass
    logger.warning("Horodatage illisible ignoré : %r", value)
    return None


class AttendanceReportItem(BaseModel):
    """Un pointage brut tel que soumis par un terminal."""

    id: Optional[str] = None              # UUID attendu ; régénéré côté serveur si absent/invalide
    user_id: Optional[str] = None
    full_name: Optional[str] = None
    designation: Optional[str] = None
    facility: Optional[str] = None
    phone_number: Optional[str] = None
    state: Optional[str] = None
    lga: Optional[str] = None
    check_in_date: Optional[datetime] = None
    check_out_date: Optional[datetime] = None
    check_in: Optional[datetime] = None
    check_out: Optional[datetime] = None
    message: Optional[str] = None
    success: bool = False

    @field_validator("id", "user_id", mode="before")
    @classmethod
    def identifier_as_text(cls, v: Any) -> Optional[str]:
        return None if v is None else str(v)

    @field_validator("check_in_date", "check_out_date", "check_in", "check_out", mode="before")
    @classmethod
    def lenient_timestamp(cls, v: Any) -> Optional[datetime]:
        return parse_lenient_datetime(v)

    @field_validator("success", mode="before")
    @classmethod
    def missing_success_is_failure(cls, v: Any) -> Any:
        # null envoyé par le terminal → pointage échoué
        return False if v is None else v


class ReportRequest(BaseModel):
    """Corps de la requête : lot de pointages. Un lot vide ou nul est rejeté par le service."""

    reports: Optional[List[AttendanceReportItem]] = None


class IngestionResponse(BaseModel):
    """Confirmation retournée après l'enregistrement d'un lot."""

    status: str
    message: str
    count: int
