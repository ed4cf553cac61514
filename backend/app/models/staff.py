"""
Modèle SQLAlchemy pour le répertoire du personnel (effectif attendu).
Alimenté uniquement par la synchronisation du personnel (upsert par id).
"""

import uuid
from sqlalchemy import Column, DateTime, String, func
from sqlalchemy.dialects.postgresql import UUID

from app.database import Base


class Staff(Base):
    __tablename__ = "staff"

    id = Column(UUID(as_uuid=True), primary_key=True, default=uuid.uuid4)
    full_name = Column(String(200), nullable=True)
    designation = Column(String(100), nullable=True, index=True)
    facility = Column(String(200), nullable=True, index=True)
    phone_number = Column(String(50), nullable=True)
    state = Column(String(100), nullable=True, index=True)
    lga = Column(String(100), nullable=True)
    created_at = Column(DateTime, server_default=func.now())
    updated_at = Column(DateTime, server_default=func.now(), onupdate=func.now())
