"""
Schémas Pydantic des feuilles de temps mensuelles (par agent et par établissement)
et du document transmis au moteur de rendu PDF.
"""

import uuid
from datetime import datetime
from typing import List, Optional

from pydantic import BaseModel


class StaffIdentity(BaseModel):
    """Identité de l'agent telle qu'enregistrée dans le répertoire du personnel."""
    id: uuid.UUID
    full_name: Optional[str]
    designation: Optional[str]
    facility: Optional[str]
    state: Optional[str]
    lga: Optional[str]
    phone_number: Optional[str]

    model_config = {"from_attributes": True}


class TimesheetRow(BaseModel):
    """
    Ligne de feuille de temps. Les champs d'identité proviennent du pointage
    lui-même (copie au moment de la soumission), pas du répertoire actuel.
    """
    id: uuid.UUID
    date: Optional[datetime]          # Date coalescée : check_in_date, sinon check_in, sinon check_out
    check_in: Optional[datetime]
    check_out: Optional[datetime]
    message: Optional[str]
    success: bool
    full_name: Optional[str]
    facility: Optional[str]
    designation: Optional[str]


class TimesheetSummary(BaseModel):
    total_records: int
    successful_records: int
    failed_records: int
    success_rate: float               # Pourcentage arrondi à 1 décimale
    first_date: Optional[datetime]
    last_date: Optional[datetime]


class UserTimesheet(BaseModel):
    user: StaffIdentity
    year: int
    month: int
    period_start: datetime
    period_end: datetime              # Borne exclusive (1er du mois suivant)
    records: List[TimesheetRow]
    summary: TimesheetSummary


class FacilityTimesheetMember(BaseModel):
    user: StaffIdentity
    has_records: bool
    records: List[TimesheetRow]
    summary: TimesheetSummary


class FacilityTimesheet(BaseModel):
    facility: str
    year: int
    month: int
    period_start: datetime
    period_end: datetime
    total_users: int
    users_with_records: int
    users_without_records: int
    members: List[FacilityTimesheetMember]


# --- Document pour le moteur de rendu ---

class HeaderField(BaseModel):
    label: str
    value: str


class TimesheetDocument(BaseModel):
    """
    Charge utile indépendante du moteur de rendu : en-tête (libellé, valeur)
    et lignes de texte déjà ordonnées.
    """
    title: str
    header: List[HeaderField]
    columns: List[str]
    rows: List[List[str]]
    generated_at: datetime
