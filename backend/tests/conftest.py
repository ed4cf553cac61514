"""
Configuration partagée pour tous les tests.
Override la dépendance get_db, l'initialisation au démarrage et le planificateur
pour éviter toute connexion réelle à PostgreSQL.
Les requêtes elles-mêmes sont testées sur une base SQLite en mémoire (fixture sqlite_db).
"""

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool
from unittest.mock import MagicMock, patch

import app.models  # noqa: F401 : enregistre les tables dans Base.metadata
from app.database import Base, get_db
from app.main import app


@pytest.fixture
def mock_db():
    return MagicMock()


@pytest.fixture
def client(mock_db):
    """Client HTTP de test avec la BDD mockée."""
    app.dependency_overrides[get_db] = lambda: mock_db
    with patch("app.main.bootstrap"), patch("app.main.start_scheduler"), patch("app.main.stop_scheduler"):
        with TestClient(app) as c:
            yield c
    app.dependency_overrides.clear()


@pytest.fixture
def sqlite_db():
    """Session sur une base SQLite en mémoire, schéma créé depuis les modèles."""
    engine = create_engine("sqlite://", poolclass=StaticPool)
    Base.metadata.create_all(bind=engine)
    session = sessionmaker(autocommit=False, autoflush=False, bind=engine)()
    try:
        yield session
    finally:
        session.close()
        engine.dispose()
