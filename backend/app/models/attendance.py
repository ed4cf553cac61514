"""
Modèle SQLAlchemy pour les pointages reçus des terminaux (journal append-only).

- Les champs d'identité (nom, fonction, établissement...) sont une copie figée
  au moment du pointage : ils ne sont jamais resynchronisés avec le personnel.
- user_id n'est pas une clé étrangère : un pointage orphelin est toléré.
- Tous les horodatages sont stockés en UTC.
"""

import uuid
from sqlalchemy import Boolean, Column, DateTime, String, Text
from sqlalchemy.dialects.postgresql import UUID

from app.database import Base


class AttendanceLog(Base):
    """Pointage normalisé (entrée ou sortie) d'un membre du personnel."""
    __tablename__ = "attendance_logs"

    id = Column(UUID(as_uuid=True), primary_key=True, default=uuid.uuid4)
    user_id = Column(UUID(as_uuid=True), nullable=True, index=True)

    full_name = Column(String(200), nullable=True)
    designation = Column(String(100), nullable=True)
    facility = Column(String(200), nullable=True, index=True)
    phone_number = Column(String(50), nullable=True)
    state = Column(String(100), nullable=True)
    lga = Column(String(100), nullable=True)

    check_in_date = Column(DateTime(timezone=True), nullable=True, index=True)  # Ancre jour (minuit UTC)
    check_out_date = Column(DateTime(timezone=True), nullable=True)
    check_in = Column(DateTime(timezone=True), nullable=True)
    check_out = Column(DateTime(timezone=True), nullable=True)

    message = Column(Text, nullable=True)
    success = Column(Boolean, nullable=False, default=False)

    received_at = Column(DateTime(timezone=True), nullable=False)  # Horodatage serveur, jamais celui du client
