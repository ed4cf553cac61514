"""
Tests unitaires pour la santé des terminaux.
Couverture : ping (création / mise à jour), balayage hors ligne, absence de commit inutile.
"""

from datetime import datetime, timedelta, timezone
from unittest.mock import MagicMock

from app.models.device_health import DeviceHealth
from app.schemas.device import DevicePing
from app.services.device_health_service import mark_offline_devices, save_device_health

NOW = datetime(2026, 3, 10, 12, 0, tzinfo=timezone.utc)


def make_device(minutes_ago, is_online=True, name="terminal-1"):
    return DeviceHealth(
        device_name=name,
        facility="Clinic-A",
        is_online=is_online,
        last_checked=NOW - timedelta(minutes=minutes_ago),
    )


# ============================================================
# Ping
# ============================================================

def test_ping_nouveau_terminal_cree():
    db = MagicMock()
    db.execute.return_value.scalar.return_value = None

    result = save_device_health(db, DevicePing(device_name="terminal-1", facility="Clinic-A", ip_address="10.0.0.5"), now=NOW)

    assert result.status == "success"
    db.add.assert_called_once()
    device = db.add.call_args[0][0]
    assert device.device_name == "terminal-1"
    assert device.ip_address == "10.0.0.5"
    assert device.is_online is True
    assert device.last_checked == NOW
    db.commit.assert_called_once()


def test_ping_terminal_connu_mis_a_jour():
    device = make_device(minutes_ago=30, is_online=False)
    db = MagicMock()
    db.execute.return_value.scalar.return_value = device

    save_device_health(db, DevicePing(device_name="terminal-1", facility="Clinic-A"), now=NOW)

    db.add.assert_not_called()
    assert device.is_online is True
    assert device.last_checked == NOW


# ============================================================
# Balayage
# ============================================================

def test_terminaux_silencieux_passes_hors_ligne():
    stale = [make_device(20, name="t1"), make_device(60, name="t2")]
    db = MagicMock()
    db.execute.return_value.scalars.return_value.all.return_value = stale

    updated = mark_offline_devices(db, minutes_threshold=15, now=NOW)

    assert updated == 2
    assert all(d.is_online is False for d in stale)
    db.commit.assert_called_once()


def test_aucun_terminal_pas_de_commit():
    db = MagicMock()
    db.execute.return_value.scalars.return_value.all.return_value = []

    assert mark_offline_devices(db, now=NOW) == 0
    db.commit.assert_not_called()
