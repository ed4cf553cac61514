"""
Création du compte administrateur au démarrage de l'application.

Contrat idempotent « créer si absent » : exécuté une seule fois au lancement
du processus, sans effet si un administrateur existe déjà.
"""

import logging
from typing import Optional

from passlib.context import CryptContext
from sqlalchemy import select
from sqlalchemy.orm import Session

from app.config import settings
from app.models.user import User

logger = logging.getLogger(__name__)

pwd_context = CryptContext(schemes=["bcrypt"], deprecated="auto")


def get_password_hash(password: str) -> str:
    return pwd_context.hash(password)


def seed_admin_user(db: Session) -> Optional[User]:
    """Crée l'administrateur configuré s'il n'existe aucun compte Admin. Retourne le compte créé ou None."""
    existing = db.execute(select(User).where(User.role == "Admin").limit(1)).scalar()
    if existing:
        logger.debug("Administrateur déjà présent : %s", existing.email)
        return None

    admin = User(
        full_name=settings.ADMIN_FULL_NAME,
        email=settings.ADMIN_EMAIL,
        password_hash=get_password_hash(settings.ADMIN_PASSWORD),
        role="Admin",
    )
    db.add(admin)
    db.commit()
    logger.info("Compte administrateur créé : %s", admin.email)
    return admin
