"""
Schémas Pydantic des synthèses de présence et des analyses du personnel.

Dans toutes les synthèses, `total` est l'effectif du répertoire du personnel
(pas le nombre de pointages) et `failed` / `not_checked_in` vaut `total - success`.
"""

import uuid
from datetime import datetime
from typing import List, Optional

from pydantic import BaseModel


class FacilitySummary(BaseModel):
    """Synthèse tous temps confondus d'un établissement."""
    facility: str
    total: int
    success: int
    failed: int
    last_check_in: Optional[datetime]


class FacilityTodaySummary(BaseModel):
    """Synthèse du jour (UTC) : success = nombre d'agents distincts pointés avec succès."""
    facility: str
    total: int
    checked_in: int
    success: int
    not_checked_in: int
    failed: int
    attendance_rate: float
    last_check_in: Optional[datetime]


class ChartAnalyticsItem(BaseModel):
    facility: str
    total: int
    success: int
    failed: int
    last_check_in: Optional[datetime]


class ChartAnalytics(BaseModel):
    """Données mensuelles par établissement, prêtes pour un graphique."""
    year: int
    month: int
    total_staff: int
    total_success: int
    facilities: List[ChartAnalyticsItem]


# --- Répartitions démographiques ---

class StaffBrief(BaseModel):
    id: uuid.UUID
    full_name: Optional[str]
    facility: Optional[str]
    phone_number: Optional[str]
    lga: Optional[str]


class StateDesignationGroup(BaseModel):
    """Effectif d'une fonction dans un État ; percentage = part dans l'État."""
    state: str
    designation: str
    count: int
    percentage: float
    staff: List[StaffBrief]


class CategoryShare(BaseModel):
    name: Optional[str]
    count: int
    percentage: float


class TopCategory(BaseModel):
    name: Optional[str]
    count: int


class StateBreakdown(BaseModel):
    state: str
    total_staff: int
    designations: List[CategoryShare]
    top_designation: Optional[TopCategory]


class DesignationBreakdown(BaseModel):
    designation: str
    total_staff: int
    states: List[CategoryShare]
    top_state: Optional[TopCategory]


# --- Couverture des contacts ---

class OverallCoverage(BaseModel):
    total_staff: int
    staff_with_contacts: int
    contact_coverage_percentage: float
    unique_states: int
    unique_designations: int
    unique_facilities: int


class StateCoverage(BaseModel):
    state: Optional[str]
    total_staff: int
    staff_with_contacts: int
    contact_percentage: float
    unique_designations: int
    unique_facilities: int


class DesignationCoverage(BaseModel):
    designation: Optional[str]
    total_staff: int
    staff_with_contacts: int
    contact_percentage: float
    unique_states: int
    unique_facilities: int


class ComprehensiveStaffAnalysis(BaseModel):
    overall_summary: OverallCoverage
    state_breakdown: List[StateCoverage]
    designation_breakdown: List[DesignationCoverage]
    generated_at: datetime


class StaffContact(BaseModel):
    id: uuid.UUID
    full_name: Optional[str]
    phone_number: Optional[str]
    state: Optional[str]
    designation: Optional[str]
    facility: Optional[str]
    lga: Optional[str]


class DesignationContacts(BaseModel):
    designation: Optional[str]
    count: int
    contacts: List[StaffContact]


class StateContacts(BaseModel):
    """Contacts d'un État regroupés par fonction."""
    state: str
    total_staff_with_contacts: int
    designation_breakdown: List[DesignationContacts]
