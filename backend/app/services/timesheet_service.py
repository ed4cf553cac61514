"""
Construction des feuilles de temps mensuelles (par agent et par établissement).

- Fenêtre : [1er du mois, 1er du mois suivant) en UTC
- Date de référence d'un pointage : COALESCE(check_in_date, check_in, check_out),
  utilisée à la fois pour le filtrage et pour le tri ascendant
- L'identité de l'agent est résolue dans le répertoire du personnel avant toute lecture
  des pointages : un id inconnu ou un établissement sans effectif fait échouer
  l'opération entière (NotFoundError), sans sortie partielle
"""

import uuid
import logging
from collections import defaultdict
from datetime import datetime, timezone
from typing import Dict, Iterable, List, Optional, Sequence

from sqlalchemy import func, select
from sqlalchemy.orm import Session

from app.exceptions import NotFoundError
from app.models.attendance import AttendanceLog
from app.models.staff import Staff
from app.schemas.timesheet import (
    FacilityTimesheet,
    FacilityTimesheetMember,
    HeaderField,
    StaffIdentity,
    TimesheetDocument,
    TimesheetRow,
    TimesheetSummary,
    UserTimesheet,
)
from app.services.periods import month_window

logger = logging.getLogger(__name__)

# Expression SQL de la date coalescée
COALESCED_DATE = func.coalesce(
    AttendanceLog.check_in_date,
    AttendanceLog.check_in,
    AttendanceLog.check_out,
)

ROW_COLUMNS = ["Date", "Check-in", "Check-out", "Status", "Message"]


def coalesced_date(record: AttendanceLog) -> Optional[datetime]:
    """Première valeur présente parmi check_in_date, check_in, check_out."""
    return record.check_in_date or record.check_in or record.check_out


def to_row(record: AttendanceLog) -> TimesheetRow:
    return TimesheetRow(
        id=record.id,
        date=coalesced_date(record),
        check_in=record.check_in,
        check_out=record.check_out,
        message=record.message,
        success=bool(record.success),
        full_name=record.full_name,
        facility=record.facility,
        designation=record.designation,
    )


def summarize(rows: Sequence[TimesheetRow]) -> TimesheetSummary:
    """Totaux d'une feuille de temps ; taux de réussite arrondi à 1 décimale (0 si vide)."""
    total = len(rows)
    successful = sum(1 for row in rows if row.success)
    dates = [row.date for row in rows if row.date is not None]
    return TimesheetSummary(
        total_records=total,
        successful_records=successful,
        failed_records=total - successful,
        success_rate=round(successful / total * 100, 1) if total else 0.0,
        first_date=min(dates) if dates else None,
        last_date=max(dates) if dates else None,
    )


def fetch_user_records(
    db: Session,
    user_ids: Iterable[uuid.UUID],
    start: datetime,
    end: datetime,
) -> List[AttendanceLog]:
    """Pointages des agents donnés dans la fenêtre, triés par date coalescée."""
    ids = list(user_ids)
    if not ids:
        return []
    return db.execute(
        select(AttendanceLog)
        .where(
            AttendanceLog.user_id.in_(ids),
            COALESCED_DATE >= start,
            COALESCED_DATE < end,
        )
        .order_by(COALESCED_DATE)
    ).scalars().all()


def get_user_timesheet(db: Session, user_id: uuid.UUID, year: int, month: int) -> UserTimesheet:
    """
    Feuille de temps mensuelle d'un agent.
    Un mois sans pointage produit une feuille vide valide (résumé à zéro).
    Lève NotFoundError si l'agent n'existe pas dans le répertoire du personnel.
    """
    start, end = month_window(year, month)

    staff = db.get(Staff, user_id)
    if staff is None:
        raise NotFoundError(f"User {user_id} not found in staff directory.")

    rows = [to_row(record) for record in fetch_user_records(db, [staff.id], start, end)]

    logger.info(
        "Feuille de temps %s %04d-%02d : %d pointages",
        user_id, year, month, len(rows),
    )

    return UserTimesheet(
        user=StaffIdentity.model_validate(staff),
        year=year,
        month=month,
        period_start=start,
        period_end=end,
        records=rows,
        summary=summarize(rows),
    )


def get_facility_timesheet(db: Session, facility: str, year: int, month: int) -> FacilityTimesheet:
    """
    Feuille de temps mensuelle de tout un établissement.

    Étapes :
    1. Effectif de l'établissement trié par nom (vide → NotFoundError)
    2. Pointages du mois pour tous ces agents en une seule lecture
    3. Regroupement en mémoire par agent, dans l'ordre de l'effectif ;
       les agents sans pointage figurent avec has_records=False
    """
    start, end = month_window(year, month)

    roster = db.execute(
        select(Staff)
        .where(Staff.facility == facility)
        .order_by(Staff.full_name)
    ).scalars().all()
    if not roster:
        raise NotFoundError(f"No staff found for facility '{facility}'.")

    records = fetch_user_records(db, [m.id for m in roster], start, end)

    rows_by_user: Dict[uuid.UUID, List[TimesheetRow]] = defaultdict(list)
    for record in records:
        rows_by_user[record.user_id].append(to_row(record))

    members = []
    for staff in roster:
        rows = rows_by_user.get(staff.id, [])
        members.append(
            FacilityTimesheetMember(
                user=StaffIdentity.model_validate(staff),
                has_records=bool(rows),
                records=rows,
                summary=summarize(rows),
            )
        )

    with_records = sum(1 for m in members if m.has_records)

    logger.info(
        "Feuille de temps établissement '%s' %04d-%02d : %d agents, %d avec pointages",
        facility, year, month, len(members), with_records,
    )

    return FacilityTimesheet(
        facility=facility,
        year=year,
        month=month,
        period_start=start,
        period_end=end,
        total_users=len(members),
        users_with_records=with_records,
        users_without_records=len(members) - with_records,
        members=members,
    )


# ============================================================
# Documents pour le moteur de rendu
# ============================================================

def _fmt_date(value: Optional[datetime]) -> str:
    return value.strftime("%Y-%m-%d") if value else "-"


def _fmt_time(value: Optional[datetime]) -> str:
    return value.strftime("%H:%M") if value else "-"


def _row_cells(row: TimesheetRow) -> List[str]:
    return [
        _fmt_date(row.date),
        _fmt_time(row.check_in),
        _fmt_time(row.check_out),
        "Success" if row.success else "Failed",
        row.message or "",
    ]


def _period_label(year: int, month: int) -> str:
    return datetime(year, month, 1).strftime("%B %Y")


def build_user_timesheet_document(timesheet: UserTimesheet) -> TimesheetDocument:
    """Charge utile de rendu d'une feuille de temps individuelle."""
    user = timesheet.user
    summary = timesheet.summary
    return TimesheetDocument(
        title="Monthly Timesheet",
        header=[
            HeaderField(label="Name", value=user.full_name or "-"),
            HeaderField(label="Designation", value=user.designation or "-"),
            HeaderField(label="Facility", value=user.facility or "-"),
            HeaderField(label="State / LGA", value=f"{user.state or '-'} / {user.lga or '-'}"),
            HeaderField(label="Period", value=_period_label(timesheet.year, timesheet.month)),
            HeaderField(label="Total records", value=str(summary.total_records)),
            HeaderField(label="Successful", value=str(summary.successful_records)),
            HeaderField(label="Success rate", value=f"{summary.success_rate}%"),
        ],
        columns=ROW_COLUMNS,
        rows=[_row_cells(row) for row in timesheet.records],
        generated_at=datetime.now(timezone.utc),
    )


def build_facility_timesheet_document(timesheet: FacilityTimesheet) -> TimesheetDocument:
    """
    Charge utile de rendu d'une feuille de temps d'établissement :
    une ligne par pointage, précédée du nom de l'agent ; une ligne « aucun pointage »
    pour les agents sans enregistrement.
    """
    rows: List[List[str]] = []
    for member in timesheet.members:
        name = member.user.full_name or "-"
        if not member.has_records:
            rows.append([name, "-", "-", "-", "No records", ""])
            continue
        for row in member.records:
            rows.append([name] + _row_cells(row))

    return TimesheetDocument(
        title="Facility Monthly Timesheet",
        header=[
            HeaderField(label="Facility", value=timesheet.facility),
            HeaderField(label="Period", value=_period_label(timesheet.year, timesheet.month)),
            HeaderField(label="Total staff", value=str(timesheet.total_users)),
            HeaderField(label="With records", value=str(timesheet.users_with_records)),
            HeaderField(label="Without records", value=str(timesheet.users_without_records)),
        ],
        columns=["Name"] + ROW_COLUMNS,
        rows=rows,
        generated_at=datetime.now(timezone.utc),
    )
