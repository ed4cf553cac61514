"""
Router pour le répertoire du personnel.
Synchronisation (upsert par id), lectures, analyses démographiques et contacts.
"""

import uuid
from typing import List, Optional

from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.orm import Session

from app.database import get_db
from app.exceptions import InvalidInputError
from app.schemas.staff import FacilityRoster, StaffItem, StaffResponse, StaffSyncResponse
from app.schemas.summary import (
    ComprehensiveStaffAnalysis,
    DesignationBreakdown,
    StaffContact,
    StateBreakdown,
    StateContacts,
    StateDesignationGroup,
)
from app.services import aggregation_service, staff_service

router = APIRouter(prefix="/api/users", tags=["Personnel"])


@router.post("/sync", response_model=StaffSyncResponse, summary="Synchroniser le personnel")
def sync_users(data: List[StaffItem], db: Session = Depends(get_db)):
    """
    Crée ou met à jour le personnel reçu (clé : id).
    Un lot vide est rejeté (400).
    """
    try:
        return staff_service.sync_staff(db, data)
    except InvalidInputError as e:
        raise HTTPException(status_code=400, detail=str(e))


@router.get("", response_model=List[StaffResponse], summary="Lister le personnel")
def list_users(db: Session = Depends(get_db)):
    return staff_service.get_all_staff(db)


@router.get("/facilities", response_model=List[str], summary="Lister les établissements")
def list_facilities(db: Session = Depends(get_db)):
    """Établissements distincts du répertoire, triés par nom."""
    return staff_service.get_all_facilities(db)


@router.get("/facility-summary", response_model=List[FacilityRoster], summary="Effectif par établissement")
def facility_roster_summary(db: Session = Depends(get_db)):
    return staff_service.get_facility_roster_summary(db)


@router.get("/facility/{facility}", response_model=List[StaffResponse], summary="Personnel d'un établissement")
def list_users_by_facility(facility: str, db: Session = Depends(get_db)):
    return staff_service.get_staff_by_facility(db, facility)


@router.get("/analysis/state-designation", response_model=List[StateDesignationGroup],
            summary="Répartition par État et fonction")
def state_designation_analysis(db: Session = Depends(get_db)):
    return aggregation_service.get_state_designation_analysis(db)


@router.get("/analysis/state", response_model=List[StateBreakdown], summary="Répartition des fonctions par État")
def state_analysis(db: Session = Depends(get_db)):
    return aggregation_service.get_state_analysis(db)


@router.get("/analysis/designation", response_model=List[DesignationBreakdown],
            summary="Répartition des États par fonction")
def designation_analysis(db: Session = Depends(get_db)):
    return aggregation_service.get_designation_analysis(db)


@router.get("/analysis/comprehensive", response_model=ComprehensiveStaffAnalysis,
            summary="Analyse complète de la couverture des contacts")
def comprehensive_analysis(db: Session = Depends(get_db)):
    """Part du personnel joignable par téléphone, globale, par État et par fonction."""
    return aggregation_service.get_comprehensive_staff_analysis(db)


@router.get("/contacts", response_model=List[StaffContact], summary="Contacts du personnel")
def staff_contacts(
    state: Optional[str] = None,
    designation: Optional[str] = None,
    facility: Optional[str] = None,
    db: Session = Depends(get_db),
):
    """Personnel disposant d'un numéro de téléphone, filtrable par État, fonction et établissement."""
    return aggregation_service.get_staff_contacts(db, state=state, designation=designation, facility=facility)


@router.get("/contacts/state/{state}", response_model=StateContacts, summary="Contacts d'un État par fonction")
def staff_contacts_for_state(state: str, db: Session = Depends(get_db)):
    return aggregation_service.get_staff_contacts_for_state(db, state)


@router.get("/{user_id}", response_model=StaffResponse, summary="Détail d'un membre du personnel")
def get_user(user_id: uuid.UUID, db: Session = Depends(get_db)):
    staff = staff_service.get_staff_by_id(db, user_id)
    if staff is None:
        raise HTTPException(status_code=404, detail="Membre du personnel introuvable.")
    return staff
