"""Domain model - one row per audit finding held in the register."""
from sqlalchemy import Boolean, Column, Date, DateTime, Enum as SQLEnum, Integer, JSON, String

from ehs_audit.database import Base
from ehs_audit.models.enums import FindingStatus, RiskLevel, VerificationResult

# Narrative fields stored as {"vi": ..., "en": ...}
BILINGUAL_FIELDS = (
    "finding_title",
    "observation",
    "evidence",
    "potential_impact",
    "reference_to_verify",
    "containment_0_24h",
    "corrective_action",
    "preventive_action",
    "root_cause",
    "status_reason",
    "verification_method",
    "evidence_to_keep",
)


def empty_bilingual():
    return {"vi": "", "en": ""}


class FindingRecord(Base):
    """
    A finding progresses through statuses: Open → In-progress → Closed (or Rejected).

    Invariants enforced by the register, not here:
    - risk_score / risk_level are derived from likelihood × severity
    - days_to_due / overdue_flag are derived from due_date, status and the evaluation instant
    - completion_date is written once, on the first transition into Closed
    """
    __tablename__ = "findings"

    # Identity, assigned by the analysis collaborator
    pk = Column(Integer, primary_key=True, autoincrement=True)
    id = Column(String, nullable=False, unique=True, index=True)

    # Descriptive
    site = Column(String, nullable=False, default="")
    area = Column(String, nullable=False, default="")
    audit_type = Column(String, nullable=False, default="")
    date = Column(Date, nullable=True)  # Day of the audit walk
    category = Column(String, nullable=False, default="")
    compliance_flag = Column(Boolean, nullable=False, default=False)
    photo_index = Column(Integer, nullable=False, default=0)  # Never dereferenced

    # Bilingual narrative
    finding_title = Column(JSON, nullable=False, default=empty_bilingual)
    observation = Column(JSON, nullable=False, default=empty_bilingual)
    evidence = Column(JSON, nullable=False, default=empty_bilingual)
    potential_impact = Column(JSON, nullable=False, default=empty_bilingual)
    reference_to_verify = Column(JSON, nullable=False, default=empty_bilingual)
    containment_0_24h = Column(JSON, nullable=False, default=empty_bilingual)
    corrective_action = Column(JSON, nullable=False, default=empty_bilingual)
    preventive_action = Column(JSON, nullable=False, default=empty_bilingual)
    root_cause = Column(JSON, nullable=False, default=empty_bilingual)
    status_reason = Column(JSON, nullable=False, default=empty_bilingual)
    verification_method = Column(JSON, nullable=False, default=empty_bilingual)
    evidence_to_keep = Column(JSON, nullable=False, default=empty_bilingual)

    # Risk (derived)
    likelihood = Column(Integer, nullable=False, default=1)
    severity = Column(Integer, nullable=False, default=1)
    risk_score = Column(Integer, nullable=False, default=1)
    risk_level = Column(SQLEnum(RiskLevel), nullable=False, default=RiskLevel.LOW)

    # Ownership / workflow
    owner = Column(String, nullable=False, default="")
    owner_confirmed = Column(Boolean, nullable=False, default=False)
    status = Column(SQLEnum(FindingStatus), nullable=False, default=FindingStatus.OPEN)

    # Scheduling
    due_date = Column(Date, nullable=True)
    days_to_due = Column(Integer, nullable=False, default=0)
    overdue_flag = Column(Boolean, nullable=False, default=False)
    completion_date = Column(Date, nullable=True)
    effectiveness_review_date = Column(Date, nullable=True)

    # Evidence / verification
    evidence_links = Column(JSON, nullable=False, default=list)
    evidence_types = Column(JSON, nullable=False, default=list)
    verification_result = Column(
        SQLEnum(VerificationResult), nullable=False, default=VerificationResult.PENDING
    )
    verifier = Column(String, nullable=False, default="")
    verification_date = Column(Date, nullable=True)

    # Timestamps
    created_at = Column(DateTime, nullable=False)
    updated_at = Column(DateTime, nullable=False)
