"""Shared test fixtures for VitalGuard tests."""

from __future__ import annotations

import sys
from pathlib import Path

import pytest

# ---------------------------------------------------------------------------
# Test hermeticity
# ---------------------------------------------------------------------------

@pytest.fixture(autouse=True)
def _force_hermetic_test_env(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("ENCRYPTION_KEY", "")
    monkeypatch.setenv("PREDICTION_MODE", "ensemble")
    monkeypatch.setenv("CONFIDENCE_MODE", "fixed")
    monkeypatch.setenv("DB_PATH", ":memory:")

# Allow running tests without `pip install -e .` by making `src/` importable.
_PROJECT_ROOT = Path(__file__).resolve().parent.parent
_SRC_DIR = _PROJECT_ROOT / "src"
if str(_SRC_DIR) not in sys.path:
    sys.path.insert(0, str(_SRC_DIR))

from vitalguard.core.storage.models import AssessmentRecord  # noqa: E402
from vitalguard.domains.health.domain_logic.confidence import FixedConfidence  # noqa: E402
from vitalguard.domains.health.domain_logic.risk_models import (  # noqa: E402
    UserProfile,
    VitalsReading,
)


def make_vitals(**overrides) -> VitalsReading:
    """A healthy adult reading unless overridden."""
    defaults = dict(
        heart_rate=72,
        blood_pressure_systolic=118,
        blood_pressure_diastolic=76,
        spo2=98,
        temperature=36.8,
        timestamp="2026-03-01T12:00:00+00:00",
    )
    defaults.update(overrides)
    return VitalsReading(**defaults)


def _make_record(
    timestamp: str = "2026-03-01T12:00:00+00:00",
    risk_score: int = 10,
    risk_level: str = "LOW",
    **vitals_overrides,
) -> AssessmentRecord:
    """An AssessmentRecord with a plausible reading and prediction."""
    vitals = make_vitals(timestamp=timestamp, **vitals_overrides).to_dict()
    return AssessmentRecord(
        timestamp=timestamp,
        mode="ensemble",
        vitals=vitals,
        prediction={"risk_score": risk_score, "risk_level": risk_level, "predicted_conditions": []},
        risk_score=risk_score,
        risk_level=risk_level,
        confidence=80,
    )


@pytest.fixture
def make_record():
    """Factory for AssessmentRecord rows."""
    return _make_record


@pytest.fixture
def healthy_vitals() -> VitalsReading:
    return make_vitals()


@pytest.fixture
def senior_profile() -> UserProfile:
    return UserProfile(age=70, gender="female", name="Ada")


@pytest.fixture
def fixed_confidence() -> FixedConfidence:
    """Jitter at the midpoint of every span."""
    return FixedConfidence(0.5)


# ---------------------------------------------------------------------------
# In-memory storage fixtures
# ---------------------------------------------------------------------------

@pytest.fixture
def assessment_db():
    """Create an in-memory AssessmentDatabase for testing."""
    from vitalguard.core.storage.database import AssessmentDatabase

    db = AssessmentDatabase(":memory:")
    db.initialize()
    yield db
    db.close()


@pytest.fixture
def field_encryptor():
    """Create a FieldEncryptor with a test key."""
    from cryptography.fernet import Fernet

    from vitalguard.core.storage.encryption import FieldEncryptor

    return FieldEncryptor(Fernet.generate_key().decode())


@pytest.fixture
def assessment_repository(assessment_db, field_encryptor):
    """Create an AssessmentRepository backed by in-memory SQLite."""
    from vitalguard.core.storage.repository import AssessmentRepository

    return AssessmentRepository(assessment_db, field_encryptor)


@pytest.fixture
def audit_logger(assessment_db):
    """Create an AuditLogger backed by in-memory SQLite."""
    from vitalguard.core.audit.logger import AuditLogger

    return AuditLogger(assessment_db)
