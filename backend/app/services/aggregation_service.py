"""
Moteur d'agrégation : synthèses par établissement et analyses du personnel.

Principe central : la présence est exprimée par rapport à l'effectif attendu
(répertoire du personnel), pas par rapport au nombre de pointages reçus.
- total   = nombre de membres du personnel pour la clé (établissement, État, fonction)
- success = nombre de pointages réussis (ou d'agents distincts pour la synthèse du jour)
- failed  = total - success, calculé arithmétiquement : un agent absent et un agent
  dont le pointage a échoué ne sont pas distingués

Chaque opération lit les données en bloc puis effectue les jointures en mémoire.
Les fonctions `compute_*` / `breakdown_*` sont pures et testables sans base.
"""

import logging
from collections import Counter, defaultdict
from datetime import datetime, timezone
from typing import Dict, Iterable, List, Optional, Sequence, Set, Tuple

from sqlalchemy import func, select
from sqlalchemy.orm import Session

from app.models.attendance import AttendanceLog
from app.models.staff import Staff
from app.schemas.summary import (
    CategoryShare,
    ChartAnalytics,
    ChartAnalyticsItem,
    ComprehensiveStaffAnalysis,
    DesignationBreakdown,
    DesignationContacts,
    DesignationCoverage,
    FacilitySummary,
    FacilityTodaySummary,
    OverallCoverage,
    StaffBrief,
    StaffContact,
    StateBreakdown,
    StateContacts,
    StateCoverage,
    StateDesignationGroup,
    TopCategory,
)
from app.services.periods import day_window, month_window
from app.services.staff_service import get_all_staff

logger = logging.getLogger(__name__)

# (succès, dernière date de pointage) par établissement
EventStats = Dict[str, Tuple[int, Optional[datetime]]]


def percentage(part: int, total: int, digits: int = 2) -> float:
    """part / total * 100 arrondi ; 0.0 si le groupe est vide."""
    if not total:
        return 0.0
    return round(part / total * 100, digits)


def has_text(value: Optional[str]) -> bool:
    return bool(value and value.strip())


# ============================================================
# Lectures en bloc
# ============================================================

def fetch_roster_totals(db: Session) -> Dict[str, int]:
    """Effectif par établissement (établissements sans nom exclus)."""
    rows = db.execute(
        select(Staff.facility, func.count(Staff.id))
        .where(Staff.facility.is_not(None), Staff.facility != "")
        .group_by(Staff.facility)
    ).all()
    return {facility: total for facility, total in rows}


def fetch_event_stats(
    db: Session,
    start: Optional[datetime] = None,
    end: Optional[datetime] = None,
) -> EventStats:
    """Nombre de pointages réussis et dernière check_in_date par établissement."""
    query = select(
        AttendanceLog.facility,
        func.count(AttendanceLog.id).filter(AttendanceLog.success.is_(True)),
        func.max(AttendanceLog.check_in_date),
    ).group_by(AttendanceLog.facility)

    if start is not None and end is not None:
        query = query.where(
            AttendanceLog.check_in_date >= start,
            AttendanceLog.check_in_date < end,
        )

    rows = db.execute(query).all()
    return {facility: (success or 0, last) for facility, success, last in rows}


def fetch_events_between(db: Session, start: datetime, end: datetime) -> List[AttendanceLog]:
    """Pointages dont la check_in_date tombe dans [start, end)."""
    return db.execute(
        select(AttendanceLog).where(
            AttendanceLog.check_in_date >= start,
            AttendanceLog.check_in_date < end,
        )
    ).scalars().all()


# ============================================================
# Synthèses par établissement
# ============================================================

def compute_facility_summary(totals: Dict[str, int], stats: EventStats) -> List[FacilitySummary]:
    """
    Jointure effectif / pointages, pilotée par le répertoire du personnel.
    Les établissements présents uniquement dans les pointages ne sont pas listés.
    """
    summaries = []
    for facility in sorted(totals):
        total = totals[facility]
        success, last_check_in = stats.get(facility, (0, None))
        summaries.append(
            FacilitySummary(
                facility=facility,
                total=total,
                success=success,
                failed=total - success,
                last_check_in=last_check_in,
            )
        )
    return summaries


def compute_facility_today_summary(
    totals: Dict[str, int],
    events: Iterable[AttendanceLog],
) -> List[FacilityTodaySummary]:
    """
    Synthèse du jour : un agent compte une seule fois, quel que soit son nombre
    de pointages réussis. Triée par taux de présence décroissant.
    """
    checked_in: Dict[str, Set] = defaultdict(set)
    last_check_in: Dict[str, datetime] = {}

    for event in events:
        if event.success and event.user_id is not None:
            checked_in[event.facility].add(event.user_id)
        if event.check_in_date is not None:
            current = last_check_in.get(event.facility)
            if current is None or event.check_in_date > current:
                last_check_in[event.facility] = event.check_in_date

    summaries = []
    for facility, total in totals.items():
        unique_checked_in = len(checked_in.get(facility, ()))
        summaries.append(
            FacilityTodaySummary(
                facility=facility,
                total=total,
                checked_in=unique_checked_in,
                success=unique_checked_in,
                not_checked_in=total - unique_checked_in,
                failed=total - unique_checked_in,
                attendance_rate=percentage(unique_checked_in, total),
                last_check_in=last_check_in.get(facility),
            )
        )

    summaries.sort(key=lambda s: (-s.attendance_rate, s.facility))
    return summaries


def get_facility_summary(db: Session) -> List[FacilitySummary]:
    """Synthèse tous temps confondus de chaque établissement."""
    return compute_facility_summary(fetch_roster_totals(db), fetch_event_stats(db))


def get_facility_today_summary(db: Session, now: Optional[datetime] = None) -> List[FacilityTodaySummary]:
    """Synthèse du jour UTC courant pour chaque établissement."""
    start, end = day_window(now)
    totals = fetch_roster_totals(db)
    events = fetch_events_between(db, start, end)

    summaries = compute_facility_today_summary(totals, events)
    logger.info(
        "Synthèse du jour %s : %d établissements, %d pointages",
        start.date(), len(summaries), len(events),
    )
    return summaries


def get_chart_analytics(db: Session, year: int, month: int) -> ChartAnalytics:
    """Synthèse par établissement restreinte à un mois, pour les graphiques."""
    start, end = month_window(year, month)
    totals = fetch_roster_totals(db)
    stats = fetch_event_stats(db, start, end)

    facilities = [
        ChartAnalyticsItem(**summary.model_dump())
        for summary in compute_facility_summary(totals, stats)
    ]
    return ChartAnalytics(
        year=year,
        month=month,
        total_staff=sum(item.total for item in facilities),
        total_success=sum(item.success for item in facilities),
        facilities=facilities,
    )


# ============================================================
# Répartitions démographiques
# ============================================================

def _shares(counter: Counter, total: int) -> Tuple[List[CategoryShare], Optional[TopCategory]]:
    """Parts de chaque sous-catégorie (ordre décroissant, ex aequo dans l'ordre de rencontre)."""
    ranked = counter.most_common()
    shares = [
        CategoryShare(name=name, count=count, percentage=percentage(count, total))
        for name, count in ranked
    ]
    top = TopCategory(name=ranked[0][0], count=ranked[0][1]) if ranked else None
    return shares, top


def breakdown_by_state_and_designation(staff: Sequence[Staff]) -> List[StateDesignationGroup]:
    """Effectif par couple (État, fonction) avec sa part dans l'État."""
    groups: Dict[Tuple[str, str], List[Staff]] = defaultdict(list)
    state_totals: Counter = Counter()

    for member in staff:
        if not (has_text(member.state) and has_text(member.designation)):
            continue
        groups[(member.state, member.designation)].append(member)
        state_totals[member.state] += 1

    return [
        StateDesignationGroup(
            state=state,
            designation=designation,
            count=len(members),
            percentage=percentage(len(members), state_totals[state]),
            staff=[
                StaffBrief(
                    id=m.id,
                    full_name=m.full_name,
                    facility=m.facility,
                    phone_number=m.phone_number,
                    lga=m.lga,
                )
                for m in members
            ],
        )
        for (state, designation), members in sorted(groups.items())
    ]


def breakdown_by_state(staff: Sequence[Staff]) -> List[StateBreakdown]:
    """Répartition des fonctions dans chaque État, triée par État."""
    by_state: Dict[str, Counter] = defaultdict(Counter)
    for member in staff:
        if has_text(member.state):
            by_state[member.state][member.designation] += 1

    result = []
    for state in sorted(by_state):
        counter = by_state[state]
        total = sum(counter.values())
        shares, top = _shares(counter, total)
        result.append(
            StateBreakdown(state=state, total_staff=total, designations=shares, top_designation=top)
        )
    return result


def breakdown_by_designation(staff: Sequence[Staff]) -> List[DesignationBreakdown]:
    """Répartition des États pour chaque fonction, triée par effectif décroissant."""
    by_designation: Dict[str, Counter] = defaultdict(Counter)
    for member in staff:
        if has_text(member.designation):
            by_designation[member.designation][member.state] += 1

    result = []
    for designation, counter in by_designation.items():
        total = sum(counter.values())
        shares, top = _shares(counter, total)
        result.append(
            DesignationBreakdown(designation=designation, total_staff=total, states=shares, top_state=top)
        )
    result.sort(key=lambda b: (-b.total_staff, b.designation))
    return result


def get_state_designation_analysis(db: Session) -> List[StateDesignationGroup]:
    return breakdown_by_state_and_designation(get_all_staff(db))


def get_state_analysis(db: Session) -> List[StateBreakdown]:
    return breakdown_by_state(get_all_staff(db))


def get_designation_analysis(db: Session) -> List[DesignationBreakdown]:
    return breakdown_by_designation(get_all_staff(db))


# ============================================================
# Couverture des contacts téléphoniques
# ============================================================

def _coverage_groups(staff: Sequence[Staff], key: str) -> Dict[Optional[str], List[Staff]]:
    groups: Dict[Optional[str], List[Staff]] = defaultdict(list)
    for member in staff:
        groups[getattr(member, key)].append(member)
    return groups


def compute_contact_coverage(
    staff: Sequence[Staff],
    now: Optional[datetime] = None,
) -> ComprehensiveStaffAnalysis:
    """Part du personnel disposant d'un numéro de téléphone, globale, par État et par fonction."""
    with_contacts = [m for m in staff if has_text(m.phone_number)]

    overall = OverallCoverage(
        total_staff=len(staff),
        staff_with_contacts=len(with_contacts),
        contact_coverage_percentage=percentage(len(with_contacts), len(staff)),
        unique_states=len({m.state for m in staff}),
        unique_designations=len({m.designation for m in staff}),
        unique_facilities=len({m.facility for m in staff}),
    )

    states = []
    for state, members in _coverage_groups(staff, "state").items():
        contacts = sum(1 for m in members if has_text(m.phone_number))
        states.append(
            StateCoverage(
                state=state,
                total_staff=len(members),
                staff_with_contacts=contacts,
                contact_percentage=percentage(contacts, len(members)),
                unique_designations=len({m.designation for m in members}),
                unique_facilities=len({m.facility for m in members}),
            )
        )
    states.sort(key=lambda s: (-s.total_staff, s.state or ""))

    designations = []
    for designation, members in _coverage_groups(staff, "designation").items():
        contacts = sum(1 for m in members if has_text(m.phone_number))
        designations.append(
            DesignationCoverage(
                designation=designation,
                total_staff=len(members),
                staff_with_contacts=contacts,
                contact_percentage=percentage(contacts, len(members)),
                unique_states=len({m.state for m in members}),
                unique_facilities=len({m.facility for m in members}),
            )
        )
    designations.sort(key=lambda d: (-d.total_staff, d.designation or ""))

    return ComprehensiveStaffAnalysis(
        overall_summary=overall,
        state_breakdown=states,
        designation_breakdown=designations,
        generated_at=now or datetime.now(timezone.utc),
    )


def get_comprehensive_staff_analysis(db: Session) -> ComprehensiveStaffAnalysis:
    return compute_contact_coverage(get_all_staff(db))


def _to_contact(member: Staff) -> StaffContact:
    return StaffContact(
        id=member.id,
        full_name=member.full_name,
        phone_number=member.phone_number,
        state=member.state,
        designation=member.designation,
        facility=member.facility,
        lga=member.lga,
    )


def get_staff_contacts(
    db: Session,
    state: Optional[str] = None,
    designation: Optional[str] = None,
    facility: Optional[str] = None,
) -> List[StaffContact]:
    """Personnel avec numéro de téléphone, filtré, trié par État puis par nom."""
    query = select(Staff).where(Staff.phone_number.is_not(None), Staff.phone_number != "")
    if state:
        query = query.where(Staff.state == state)
    if designation:
        query = query.where(Staff.designation == designation)
    if facility:
        query = query.where(Staff.facility == facility)

    staff = db.execute(query.order_by(Staff.state, Staff.full_name)).scalars().all()
    return [_to_contact(m) for m in staff]


def get_staff_contacts_for_state(db: Session, state: str) -> StateContacts:
    """Contacts d'un État regroupés par fonction (fonctions triées par nom)."""
    staff = db.execute(
        select(Staff)
        .where(
            Staff.state == state,
            Staff.phone_number.is_not(None),
            Staff.phone_number != "",
        )
        .order_by(Staff.full_name)
    ).scalars().all()

    groups: Dict[Optional[str], List[Staff]] = defaultdict(list)
    for member in staff:
        groups[member.designation].append(member)

    breakdown = [
        DesignationContacts(
            designation=designation,
            count=len(members),
            contacts=[_to_contact(m) for m in members],
        )
        for designation, members in sorted(groups.items(), key=lambda item: item[0] or "")
    ]
    return StateContacts(
        state=state,
        total_staff_with_contacts=sum(group.count for group in breakdown),
        designation_breakdown=breakdown,
    )
