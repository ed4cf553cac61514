"""
Tests unitaires pour le moteur d'agrégation.
Couverture : failed = total - success, synthèse du jour (agents distincts, taux, tri),
idempotence, analyses mensuelles, répartitions démographiques, couverture des contacts.
"""

import uuid
from datetime import datetime, timezone
from unittest.mock import MagicMock

from app.models.attendance import AttendanceLog
from app.models.staff import Staff
from app.services.aggregation_service import (
    breakdown_by_designation,
    breakdown_by_state,
    breakdown_by_state_and_designation,
    compute_contact_coverage,
    compute_facility_summary,
    compute_facility_today_summary,
    get_chart_analytics,
    get_facility_summary,
    get_facility_today_summary,
    percentage,
)

TODAY = datetime(2026, 3, 10, tzinfo=timezone.utc)


# --- Helpers ---

def make_staff(facility="Clinic-A", state="Kano", designation="Nurse", phone="0803", name="Agent"):
    return Staff(
        id=uuid.uuid4(),
        full_name=name,
        facility=facility,
        state=state,
        designation=designation,
        phone_number=phone,
        lga="Nassarawa",
    )


def make_event(user_id=None, facility="Clinic-A", success=True, check_in_date=TODAY):
    return AttendanceLog(
        id=uuid.uuid4(),
        user_id=user_id or uuid.uuid4(),
        facility=facility,
        success=success,
        check_in_date=check_in_date,
    )


def rows_result(rows):
    result = MagicMock()
    result.all.return_value = rows
    return result


def scalars_result(items):
    result = MagicMock()
    result.scalars.return_value.all.return_value = items
    return result


# ============================================================
# Pourcentages
# ============================================================

def test_percentage_groupe_vide():
    """Division par zéro → 0.0, aucune exception."""
    assert percentage(0, 0) == 0.0
    assert percentage(5, 0) == 0.0


def test_percentage_arrondi():
    assert percentage(2, 3) == 66.67
    assert percentage(1, 3, digits=1) == 33.3


# ============================================================
# Synthèse tous temps
# ============================================================

def test_failed_egal_total_moins_success():
    """10 agents, 3 succès → failed = 7, même si des pointages ont échoué."""
    totals = {"Clinic-A": 10}
    stats = {"Clinic-A": (3, TODAY)}

    [summary] = compute_facility_summary(totals, stats)

    assert summary.total == 10
    assert summary.success == 3
    assert summary.failed == 7
    assert summary.last_check_in == TODAY


def test_failed_pour_chaque_etablissement():
    totals = {"Clinic-A": 4, "Clinic-B": 2, "Clinic-C": 0}
    stats = {"Clinic-A": (1, None), "Clinic-B": (5, None)}

    for summary in compute_facility_summary(totals, stats):
        assert summary.failed == summary.total - summary.success


def test_etablissement_sans_effectif_tout_a_zero():
    [summary] = compute_facility_summary({"Clinic-Z": 0}, {})
    assert (summary.total, summary.success, summary.failed) == (0, 0, 0)


def test_etablissement_absent_du_personnel_ignore():
    """Les pointages d'un établissement inconnu du répertoire ne créent pas de ligne."""
    summaries = compute_facility_summary({"Clinic-A": 2}, {"Orphelin": (4, TODAY)})
    assert [s.facility for s in summaries] == ["Clinic-A"]


def test_get_facility_summary_lectures_en_bloc():
    db = MagicMock()
    db.execute.side_effect = [
        rows_result([("Clinic-A", 3), ("Clinic-B", 1)]),
        rows_result([("Clinic-A", 2, TODAY)]),
    ]

    summaries = get_facility_summary(db)

    assert [s.facility for s in summaries] == ["Clinic-A", "Clinic-B"]
    assert summaries[0].failed == 1
    assert summaries[1].success == 0
    assert summaries[1].failed == 1
    assert db.execute.call_count == 2


# ============================================================
# Synthèse du jour
# ============================================================

def test_scenario_clinic_a():
    """3 agents, 2 pointent avec succès, 1 rien → 3/2/2/1 et 66.67 %."""
    roster = [make_staff(), make_staff(), make_staff()]
    events = [make_event(user_id=roster[0].id), make_event(user_id=roster[1].id)]

    [summary] = compute_facility_today_summary({"Clinic-A": 3}, events)

    assert summary.total == 3
    assert summary.checked_in == 2
    assert summary.success == 2
    assert summary.not_checked_in == 1
    assert summary.attendance_rate == 66.67


def test_agents_distincts_comptes_une_fois():
    """Plusieurs pointages réussis du même agent → compté une seule fois."""
    uid = uuid.uuid4()
    events = [make_event(user_id=uid), make_event(user_id=uid), make_event(user_id=uid)]

    [summary] = compute_facility_today_summary({"Clinic-A": 5}, events)

    assert summary.checked_in == 1
    assert summary.not_checked_in == 4


def test_pointages_echoues_non_comptes():
    events = [make_event(success=False), make_event(success=False)]
    [summary] = compute_facility_today_summary({"Clinic-A": 2}, events)
    assert summary.checked_in == 0
    assert summary.failed == 2


def test_taux_effectif_nul():
    [summary] = compute_facility_today_summary({"Vide": 0}, [])
    assert summary.attendance_rate == 0.0


def test_tri_par_taux_decroissant():
    events = [make_event(facility="B")] + [make_event(facility="C") for _ in range(2)]
    summaries = compute_facility_today_summary({"A": 4, "B": 4, "C": 2}, events)
    assert [s.facility for s in summaries] == ["C", "B", "A"]
    assert [s.attendance_rate for s in summaries] == [100.0, 25.0, 0.0]


def test_synthese_du_jour_idempotente():
    """Deux calculs sur les mêmes données → résultats identiques."""
    roster_rows = [("Clinic-A", 3), ("Clinic-B", 2)]
    events = [make_event(), make_event(facility="Clinic-B")]

    def make_db():
        db = MagicMock()
        db.execute.side_effect = [rows_result(roster_rows), scalars_result(events)]
        return db

    now = datetime(2026, 3, 10, 15, 0, tzinfo=timezone.utc)
    first = get_facility_today_summary(make_db(), now=now)
    second = get_facility_today_summary(make_db(), now=now)

    assert [s.model_dump() for s in first] == [s.model_dump() for s in second]


# ============================================================
# Analyses mensuelles
# ============================================================

def test_chart_analytics_mois():
    db = MagicMock()
    db.execute.side_effect = [
        rows_result([("Clinic-A", 4), ("Clinic-B", 6)]),
        rows_result([("Clinic-A", 3, TODAY), ("Clinic-B", 1, TODAY)]),
    ]

    analytics = get_chart_analytics(db, 2026, 3)

    assert analytics.year == 2026
    assert analytics.month == 3
    assert analytics.total_staff == 10
    assert analytics.total_success == 4
    assert [f.failed for f in analytics.facilities] == [1, 5]


# ============================================================
# Répartitions démographiques
# ============================================================

def test_repartition_par_etat():
    staff = [
        make_staff(state="Kano", designation="Nurse"),
        make_staff(state="Kano", designation="Doctor"),
        make_staff(state="Kano", designation="Nurse"),
        make_staff(state="Lagos", designation="CHEW"),
        make_staff(state="", designation="Nurse"),
    ]

    result = breakdown_by_state(staff)

    assert [r.state for r in result] == ["Kano", "Lagos"]
    kano = result[0]
    assert kano.total_staff == 3
    assert kano.top_designation.name == "Nurse"
    assert kano.top_designation.count == 2
    assert kano.designations[0].percentage == 66.67
    assert kano.designations[1].percentage == 33.33


def test_ex_aequo_premier_rencontre():
    """Égalité de comptes → la première fonction rencontrée l'emporte."""
    staff = [
        make_staff(state="Kano", designation="Doctor"),
        make_staff(state="Kano", designation="Nurse"),
    ]
    [kano] = breakdown_by_state(staff)
    assert kano.top_designation.name == "Doctor"


def test_repartition_par_fonction():
    staff = [
        make_staff(state="Kano", designation="Nurse"),
        make_staff(state="Lagos", designation="Nurse"),
        make_staff(state="Lagos", designation="Nurse"),
        make_staff(state="Kano", designation="Doctor"),
    ]

    result = breakdown_by_designation(staff)

    assert [r.designation for r in result] == ["Nurse", "Doctor"]
    assert result[0].total_staff == 3
    assert result[0].top_state.name == "Lagos"
    assert result[0].states[0].percentage == 66.67


def test_repartition_etat_et_fonction():
    staff = [
        make_staff(state="Kano", designation="Nurse"),
        make_staff(state="Kano", designation="Nurse"),
        make_staff(state="Kano", designation="Doctor"),
        make_staff(state="Kano", designation=None),
    ]

    result = breakdown_by_state_and_designation(staff)

    assert [(g.state, g.designation, g.count) for g in result] == [
        ("Kano", "Doctor", 1),
        ("Kano", "Nurse", 2),
    ]
    assert result[1].percentage == 66.67
    assert len(result[1].staff) == 2


def test_repartitions_sur_liste_vide():
    assert breakdown_by_state([]) == []
    assert breakdown_by_designation([]) == []
    assert breakdown_by_state_and_designation([]) == []


# ============================================================
# Couverture des contacts
# ============================================================

def test_couverture_des_contacts():
    staff = [
        make_staff(state="Kano", designation="Nurse", phone="0803"),
        make_staff(state="Kano", designation="Nurse", phone=""),
        make_staff(state="Kano", designation="Doctor", phone=None),
        make_staff(state="Lagos", designation="Nurse", phone="0805", facility="Clinic-B"),
    ]

    analysis = compute_contact_coverage(staff)

    overall = analysis.overall_summary
    assert overall.total_staff == 4
    assert overall.staff_with_contacts == 2
    assert overall.contact_coverage_percentage == 50.0
    assert overall.unique_states == 2
    assert overall.unique_facilities == 2

    kano = analysis.state_breakdown[0]
    assert kano.state == "Kano"
    assert kano.staff_with_contacts == 1
    assert kano.contact_percentage == 33.33

    nurse = analysis.designation_breakdown[0]
    assert nurse.designation == "Nurse"
    assert nurse.contact_percentage == 66.67


def test_couverture_personnel_vide():
    """Aucun membre → pourcentage 0, pas de division par zéro."""
    analysis = compute_contact_coverage([])
    assert analysis.overall_summary.total_staff == 0
    assert analysis.overall_summary.contact_coverage_percentage == 0.0
    assert analysis.state_breakdown == []
