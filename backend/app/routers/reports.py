"""
Router pour les pointages et les rapports de présence.
Réception des lots envoyés par les terminaux, synthèses par établissement,
feuilles de temps mensuelles (JSON et PDF).
"""

import uuid
from typing import Annotated, List

from fastapi import APIRouter, Depends, HTTPException, Path
from fastapi.responses import StreamingResponse
from sqlalchemy.orm import Session

from app.database import get_db
from app.exceptions import InvalidInputError, NotFoundError
from app.schemas.report import IngestionResponse, ReportRequest
from app.schemas.summary import ChartAnalytics, FacilitySummary, FacilityTodaySummary
from app.schemas.timesheet import FacilityTimesheet, UserTimesheet
from app.services import aggregation_service, pdf_renderer, report_service, timesheet_service

router = APIRouter(prefix="/api/reports", tags=["Rapports de présence"])

Month = Annotated[int, Path(ge=1, le=12, description="Mois (1 à 12)")]


@router.post("/receive", response_model=IngestionResponse, summary="Recevoir un lot de pointages")
def receive_reports(data: ReportRequest, db: Session = Depends(get_db)):
    """
    Reçoit un lot de pointages depuis un terminal et l'enregistre en une seule transaction.

    Comportement :
    - Lot vide ou absent → 400 avec le motif
    - Identifiants illisibles régénérés, horodatages ramenés en UTC
    - check_in_date déduit de check_in / check_out si absent
    - Aucune déduplication (append-only)
    """
    try:
        return report_service.save_reports(db, data.reports)
    except InvalidInputError as e:
        raise HTTPException(status_code=400, detail=str(e))


@router.get("/facility-summary", response_model=List[FacilitySummary],
            summary="Synthèse par établissement (tous temps)")
def facility_summary(db: Session = Depends(get_db)):
    """Effectif du personnel vs pointages réussis, par établissement."""
    return aggregation_service.get_facility_summary(db)


@router.get("/facility-today-summary", response_model=List[FacilityTodaySummary],
            summary="Synthèse du jour par établissement")
def facility_today_summary(db: Session = Depends(get_db)):
    """Agents distincts pointés aujourd'hui (UTC) et taux de présence, du meilleur au plus faible."""
    return aggregation_service.get_facility_today_summary(db)


@router.get("/analytics/{year}/{month}", response_model=ChartAnalytics, summary="Données mensuelles pour graphiques")
def chart_analytics(year: int, month: Month, db: Session = Depends(get_db)):
    try:
        return aggregation_service.get_chart_analytics(db, year, month)
    except InvalidInputError as e:
        raise HTTPException(status_code=400, detail=str(e))


@router.get("/timesheet/{user_id}/{year}/{month}", response_model=UserTimesheet,
            summary="Feuille de temps mensuelle d'un agent")
def user_timesheet(user_id: uuid.UUID, year: int, month: Month, db: Session = Depends(get_db)):
    """Pointages du mois triés par date ; 404 si l'agent est absent du répertoire du personnel."""
    try:
        return timesheet_service.get_user_timesheet(db, user_id, year, month)
    except NotFoundError as e:
        raise HTTPException(status_code=404, detail=str(e))
    except InvalidInputError as e:
        raise HTTPException(status_code=400, detail=str(e))


@router.get("/timesheet-pdf/{user_id}/{year}/{month}", summary="Feuille de temps d'un agent (PDF)")
def user_timesheet_pdf(user_id: uuid.UUID, year: int, month: Month, db: Session = Depends(get_db)):
    try:
        timesheet = timesheet_service.get_user_timesheet(db, user_id, year, month)
    except NotFoundError as e:
        raise HTTPException(status_code=404, detail=str(e))
    except InvalidInputError as e:
        raise HTTPException(status_code=400, detail=str(e))

    document = timesheet_service.build_user_timesheet_document(timesheet)
    pdf_bytes = pdf_renderer.render_timesheet_pdf(document)

    return StreamingResponse(
        iter([pdf_bytes]),
        media_type="application/pdf",
        headers={"Content-Disposition": f"attachment; filename=Timesheet_{user_id}_{year}_{month:02d}.pdf"},
    )


@router.get("/facility-timesheet-data/{facility}/{year}/{month}", response_model=FacilityTimesheet,
            summary="Feuille de temps mensuelle d'un établissement")
def facility_timesheet(facility: str, year: int, month: Month, db: Session = Depends(get_db)):
    """
    Tous les agents de l'établissement (triés par nom) avec leurs pointages du mois.
    Les agents sans pointage apparaissent avec has_records=false.
    """
    try:
        return timesheet_service.get_facility_timesheet(db, facility, year, month)
    except NotFoundError as e:
        raise HTTPException(status_code=404, detail=str(e))
    except InvalidInputError as e:
        raise HTTPException(status_code=400, detail=str(e))


@router.get("/facility-timesheet-pdf/{facility}/{year}/{month}", summary="Feuille de temps d'un établissement (PDF)")
def facility_timesheet_pdf(facility: str, year: int, month: Month, db: Session = Depends(get_db)):
    try:
        timesheet = timesheet_service.get_facility_timesheet(db, facility, year, month)
    except NotFoundError as e:
        raise HTTPException(status_code=404, detail=str(e))
    except InvalidInputError as e:
        raise HTTPException(status_code=400, detail=str(e))

    document = timesheet_service.build_facility_timesheet_document(timesheet)
    pdf_bytes = pdf_renderer.render_timesheet_pdf(document)

    return StreamingResponse(
        iter([pdf_bytes]),
        media_type="application/pdf",
        headers={
            "Content-Disposition": f"attachment; filename=Facility_Timesheet_{facility}_{year}_{month:02d}.pdf"
        },
    )
