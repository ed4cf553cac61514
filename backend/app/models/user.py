"""
Modèle SQLAlchemy pour les comptes utilisateurs de l'application.
Seul le compte administrateur initial est géré ici (création au démarrage).
"""

import uuid
from sqlalchemy import Column, DateTime, String, func
from sqlalchemy.dialects.postgresql import UUID

from app.database import Base


class User(Base):
    __tablename__ = "users"

    id = Column(UUID(as_uuid=True), primary_key=True, default=uuid.uuid4)
    full_name = Column(String(100), nullable=False)
    email = Column(String(120), unique=True, nullable=False)
    password_hash = Column(String(255), nullable=False)
    role = Column(String(20), nullable=False, default="User")  # Admin, User, Compliance
    created_at = Column(DateTime, server_default=func.now())
