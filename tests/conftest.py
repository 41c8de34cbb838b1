"""Pytest configuration and shared fixtures."""
from datetime import datetime

import pytest
from sqlalchemy.orm import sessionmaker

from ehs_audit.api.schemas import Finding
from ehs_audit.database import Base, make_engine
from ehs_audit.models.domain import FindingRecord
from ehs_audit.models.audit import AuditEvent
from ehs_audit.services.register import FindingRegister

# Fixed evaluation instant so overdue math is reproducible
AS_OF = datetime(2024, 1, 10, 9, 0, 0)


@pytest.fixture
def db_session():
    """Create a fresh in-memory database for each test."""
    engine = make_engine("sqlite://")
    Base.metadata.create_all(engine)

    TestingSessionLocal = sessionmaker(bind=engine)
    session = TestingSessionLocal()

    yield session

    session.close()
    engine.dispose()


@pytest.fixture
def as_of():
    return AS_OF


@pytest.fixture
def register(db_session):
    return FindingRegister(db_session)


@pytest.fixture
def finding_payload():
    """One finding as the analysis service returns it."""
    return {
        "id": "F-01",
        "site": "Factory A",
        "area": "Sewing Line 1",
        "audit_type": "Daily Walk",
        "date": "2024-01-08",
        "finding_title": {"vi": "Bình chữa cháy bị che chắn", "en": "Fire extinguisher obstructed"},
        "category": "Fire",
        "observation": {"vi": "Thùng hàng chắn trước bình", "en": "Boxes stacked in front of extinguisher"},
        "evidence": {"vi": "Ảnh 1 cho thấy thùng hàng", "en": "Photo 1 shows cartons"},
        "potential_impact": {"vi": "Chậm ứng phó khi cháy", "en": "Delayed fire response"},
        "compliance_flag": True,
        "reference_to_verify": {"vi": "QCVN 06", "en": "National fire code"},
        "likelihood": 3,
        "severity": 4,
        "risk_score": 99,
        "risk_level": "Low",
        "containment_0_24h": {"vi": "Dọn thùng hàng ngay", "en": "Remove cartons now"},
        "corrective_action": {"vi": "Kẻ vạch cấm để hàng", "en": "Paint keep-clear zone"},
        "preventive_action": {"vi": "Kiểm tra hàng tuần", "en": "Weekly walk check"},
        "root_cause": {"vi": "Thiếu khu vực lưu kho", "en": "Insufficient storage space"},
        "owner": "Line Supervisor",
        "owner_confirmed": False,
        "due_date": "2024-01-20",
        "status": "Open",
        "status_reason": {"vi": "", "en": ""},
        "completion_date": None,
        "evidence_links": [],
        "evidence_types": [],
        "verification_result": "Pending",
        "verifier": "",
        "verification_date": None,
        "verification_method": {"vi": "Kiểm tra hiện trường", "en": "Site check"},
        "evidence_to_keep": {"vi": "Ảnh trước/sau", "en": "Before/after photos"},
        "effectiveness_review_date": None,
        "days_to_due": 0,
        "overdue_flag": False,
        "photo_index": 0,
    }


@pytest.fixture
def sample_finding(register, finding_payload, as_of):
    """A seeded finding in its creation state (Open)."""
    register.insert_many([Finding.model_validate(finding_payload)], as_of)
    return register.get("F-01")
