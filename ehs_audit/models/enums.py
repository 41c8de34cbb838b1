"""Enums for the audit register - these define the valid values for statuses and tiers."""
from enum import Enum


class LanguageMode(str, Enum):
    """Which halves of a bilingual field are shown to the reader."""
    BILINGUAL = "bilingual"
    VI = "vi"
    EN = "en"

    @property
    def shows_vi(self) -> bool:
        return self in (LanguageMode.BILINGUAL, LanguageMode.VI)

    @property
    def shows_en(self) -> bool:
        return self in (LanguageMode.BILINGUAL, LanguageMode.EN)


class RiskLevel(str, Enum):
    """The four risk tiers, lowest first. Ordering is part of the export contract."""
    LOW = "Low"
    MEDIUM = "Medium"
    HIGH = "High"
    CRITICAL = "Critical"


class FindingStatus(str, Enum):
    """Remediation status of a finding."""
    OPEN = "Open"
    IN_PROGRESS = "In-progress"
    CLOSED = "Closed"
    REJECTED = "Rejected"


class VerificationResult(str, Enum):
    """Outcome of the closure verification."""
    PENDING = "Pending"
    PASS = "Pass"
    FAIL = "Fail"


class EvidenceType(str, Enum):
    """Closure evidence tags."""
    BEFORE_AFTER_PHOTO = "before_after_photo"
    TRAINING_RECORD = "training_record"
    MAINTENANCE_LOG = "maintenance_log"
    INSPECTION_CHECKLIST = "inspection_checklist"
    MEASUREMENT_RESULT = "measurement_result"
    PERMIT = "permit"
    SOP_UPDATE = "SOP_update"
    TEST_RECORD = "test_record"
    OTHER = "other"
