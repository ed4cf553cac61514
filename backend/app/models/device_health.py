"""
Modèle SQLAlchemy pour l'état de santé des terminaux de pointage.
Un enregistrement par couple (device_name, facility), mis à jour à chaque ping.
"""

import uuid
from sqlalchemy import Boolean, Column, DateTime, String, UniqueConstraint
from sqlalchemy.dialects.postgresql import UUID

from app.database import Base


class DeviceHealth(Base):
    __tablename__ = "device_health"
    __table_args__ = (
        UniqueConstraint("device_name", "facility", name="uq_device_health_device_facility"),
    )

    id = Column(UUID(as_uuid=True), primary_key=True, default=uuid.uuid4)
    device_name = Column(String(200), nullable=False)
    facility = Column(String(200), nullable=False)
    ip_address = Column(String(64), nullable=True)
    is_online = Column(Boolean, nullable=False, default=True)
    last_checked = Column(DateTime(timezone=True), nullable=False)  # UTC, horodatage serveur

    facility_code = Column(String(50), nullable=True)
    facility_state = Column(String(100), nullable=True)
    facility_lga = Column(String(100), nullable=True)
