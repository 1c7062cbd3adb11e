"""
tests/conftest.py — Shared pytest configuration and fixtures.

Sets dummy environment variables BEFORE any app module is imported,
so that pydantic-settings doesn't fail on missing required fields.
"""

import os
import pytest

# ── Set dummy env vars before any app module is imported ─────────────────────
# This runs at collection time, before tests execute.
os.environ.setdefault("DATABASE_URL", "sqlite:///:memory:")
os.environ.setdefault("SMTP_USER", "alerts@example.com")
os.environ.setdefault("SMTP_PASSWORD", "test-password")
os.environ.setdefault("NOTIFY_EMAIL", "sales@example.com")
os.environ.setdefault("MAILER_DRY_RUN", "true")


@pytest.fixture
def db():
    """
    Provide a fresh in-memory SQLite session for each test.

    SQLite doesn't support PostgreSQL native ENUMs, so we temporarily
    set native_enum=False on all Enum columns before creating tables.
    """
    import sqlalchemy as sa
    from sqlalchemy.orm import sessionmaker

    from app.db.models import Base

    # Patch: disable native enums for SQLite compatibility
    for table in Base.metadata.tables.values():
        for col in table.columns:
            if isinstance(col.type, sa.Enum):
                col.type.native_enum = False

    engine = sa.create_engine(
        "sqlite:///:memory:",
        connect_args={"check_same_thread": False},
    )
    Base.metadata.create_all(engine)
    Session = sessionmaker(bind=engine)
    session = Session()

    try:
        yield session
    finally:
        session.close()
        Base.metadata.drop_all(engine)
        # Restore native_enum so production code is unaffected
        for table in Base.metadata.tables.values():
            for col in table.columns:
                if isinstance(col.type, sa.Enum):
                    col.type.native_enum = True


# Answers that earn the maximum on every canonical select question (70 points)
PERFECT_ANSWERS = {
    "nome": "Maria Silva",
    "email": "maria@example.com",
    "telefone": "+1 555 123 4567",
    "localizacao": "I already live in the US",
    "cidadeEstado": "Orlando, FL",
    "tipoNegocio": "Cleaning Services",
    "tempoNegocio": "1 to 3 years",
    "situacaoMarketing": "I tried ads on my own without much success",
    "orcamentoAnuncios": "Yes, I can invest in marketing to speed up growth",
    "principalDesafio": "I spend on marketing but see no return",
    "expectativaTempo": "Yes, I understand solid results take time",
}


@pytest.fixture
def perfect_answers():
    return dict(PERFECT_ANSWERS)
