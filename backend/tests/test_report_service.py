"""
Tests unitaires pour la réception des lots de pointages.
Couverture : lot vide (base intacte), insertion en une transaction,
rollback et propagation en cas d'échec du commit.
"""

import uuid
from datetime import datetime, timezone
from unittest.mock import MagicMock

import pytest
from sqlalchemy.exc import OperationalError

from app.exceptions import InvalidInputError
from app.models.attendance import AttendanceLog
from app.schemas.report import AttendanceReportItem
from app.services.report_service import save_reports

NOW = datetime(2026, 3, 10, 9, 0, tzinfo=timezone.utc)


def make_item(**kwargs) -> AttendanceReportItem:
    data = {
        "user_id": str(uuid.uuid4()),
        "full_name": "Musa Ibrahim",
        "facility": "Clinic-A",
        "check_in": "2026-03-10T07:55:00Z",
        "success": True,
    }
    data.update(kwargs)
    return AttendanceReportItem(**data)


# ============================================================
# Lot vide
# ============================================================

def test_lot_vide_base_intacte():
    """Lot vide → InvalidInputError, aucun accès à la base."""
    db = MagicMock()

    with pytest.raises(InvalidInputError, match="Empty report list"):
        save_reports(db, [])

    db.add_all.assert_not_called()
    db.commit.assert_not_called()


def test_lot_none_base_intacte():
    db = MagicMock()
    with pytest.raises(InvalidInputError):
        save_reports(db, None)
    db.commit.assert_not_called()


# ============================================================
# Insertion
# ============================================================

def test_lot_enregistre_en_une_transaction():
    """3 pointages → un seul add_all et un seul commit."""
    db = MagicMock()
    items = [make_item(), make_item(), make_item(success=False)]

    result = save_reports(db, items, now=NOW)

    assert result.status == "success"
    assert result.count == 3
    assert result.message == "3 records saved successfully."
    db.add_all.assert_called_once()
    db.commit.assert_called_once()

    added = db.add_all.call_args[0][0]
    assert len(added) == 3
    assert all(isinstance(r, AttendanceLog) for r in added)
    assert all(r.received_at == NOW for r in added)


def test_champs_normalises_persistes():
    db = MagicMock()
    save_reports(db, [make_item(full_name="  Musa Ibrahim  ")], now=NOW)

    record = db.add_all.call_args[0][0][0]
    assert record.full_name == "Musa Ibrahim"
    assert record.check_in_date == datetime(2026, 3, 10, tzinfo=timezone.utc)
    assert record.success is True


# ============================================================
# Échec de la base
# ============================================================

def test_echec_commit_rollback_et_propagation():
    """Erreur de commit → rollback puis propagation du message d'origine."""
    db = MagicMock()
    db.commit.side_effect = OperationalError("INSERT", {}, Exception("connexion perdue"))

    with pytest.raises(OperationalError, match="connexion perdue"):
        save_reports(db, [make_item()], now=NOW)

    db.rollback.assert_called_once()
