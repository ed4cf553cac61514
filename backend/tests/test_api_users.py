"""
Tests d'intégration API pour le répertoire du personnel.
"""

import uuid
from unittest.mock import patch

from app.exceptions import InvalidInputError
from app.models.staff import Staff
from app.schemas.staff import StaffSyncResponse


# ============================================================
# POST /api/users/sync
# ============================================================

def test_sync_succes(client):
    with patch("app.routers.users.staff_service.sync_staff") as mock:
        mock.return_value = StaffSyncResponse(
            message="1 users saved/updated successfully.", total_received=1, created=1, updated=0,
        )
        response = client.post("/api/users/sync", json=[
            {"id": str(uuid.uuid4()), "full_name": "Amina Bello", "facility": "Clinic-A"},
        ])

    assert response.status_code == 200
    assert response.json()["created"] == 1


def test_sync_lot_vide_400(client):
    with patch("app.routers.users.staff_service.sync_staff") as mock:
        mock.side_effect = InvalidInputError("Empty user list")
        response = client.post("/api/users/sync", json=[])

    assert response.status_code == 400
    assert response.json()["detail"] == "Empty user list"


def test_sync_id_manquant_422(client):
    response = client.post("/api/users/sync", json=[{"full_name": "Sans Id"}])
    assert response.status_code == 422


# ============================================================
# Lectures
# ============================================================

def test_get_user_introuvable_404(client):
    with patch("app.routers.users.staff_service.get_staff_by_id", return_value=None):
        response = client.get(f"/api/users/{uuid.uuid4()}")
    assert response.status_code == 404


def test_get_user_succes(client):
    staff_id = uuid.uuid4()
    staff = Staff(id=staff_id, full_name="Amina Bello", facility="Clinic-A")
    with patch("app.routers.users.staff_service.get_staff_by_id", return_value=staff):
        response = client.get(f"/api/users/{staff_id}")

    assert response.status_code == 200
    assert response.json()["id"] == str(staff_id)


def test_list_facilities(client):
    with patch("app.routers.users.staff_service.get_all_facilities", return_value=["Clinic-A", "Clinic-B"]):
        response = client.get("/api/users/facilities")

    assert response.status_code == 200
    assert response.json() == ["Clinic-A", "Clinic-B"]


def test_contacts_filtres_transmis(client):
    with patch("app.routers.users.aggregation_service.get_staff_contacts", return_value=[]) as mock:
        response = client.get("/api/users/contacts", params={"state": "Kano", "facility": "Clinic-A"})

    assert response.status_code == 200
    assert mock.call_args.kwargs == {"state": "Kano", "designation": None, "facility": "Clinic-A"}


def test_analysis_state_route_non_capturee_par_id(client):
    """/analysis/state ne doit pas être interprété comme un user_id."""
    with patch("app.routers.users.aggregation_service.get_state_analysis", return_value=[]):
        response = client.get("/api/users/analysis/state")
    assert response.status_code == 200
    assert response.json() == []
