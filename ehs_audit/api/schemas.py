"""Pydantic schemas for the register's wire shape and request/response validation."""
import datetime as dt
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

from ehs_audit.models.enums import (
    EvidenceType,
    FindingStatus,
    LanguageMode,
    RiskLevel,
    VerificationResult,
)


class BilingualText(BaseModel):
    """A Vietnamese/English pair. Both keys are always present, either may be empty."""
    vi: str = ""
    en: str = ""

    @field_validator("vi", "en", mode="before")
    @classmethod
    def none_as_empty(cls, value):
        return "" if value is None else value


class AuditContext(BaseModel):
    """Audit session metadata; fixed for the whole review."""
    model_config = ConfigDict(frozen=True)

    site: str = ""
    area: str = ""
    audit_type: str = ""
    date: Optional[dt.date] = None
    language_mode: LanguageMode = LanguageMode.BILINGUAL

    def context_line(self) -> str:
        parts = [self.site, self.area, self.audit_type, self.date.isoformat() if self.date else ""]
        return " | ".join(p for p in parts if p)


def _unique(values: list) -> list:
    seen = []
    for value in values:
        if value not in seen:
            seen.append(value)
    return seen


# Finding schemas
class Finding(BaseModel):
    """
    One audit finding with its full remediation record.

    Field order is the stable export order.
    """
    model_config = ConfigDict(from_attributes=True)

    id: str = Field(..., min_length=1)
    site: str = ""
    area: str = ""
    audit_type: str = ""
    date: Optional[dt.date] = None
    finding_title: BilingualText = Field(default_factory=BilingualText)
    category: str = ""
    observation: BilingualText = Field(default_factory=BilingualText)
    evidence: BilingualText = Field(default_factory=BilingualText)
    potential_impact: BilingualText = Field(default_factory=BilingualText)
    compliance_flag: bool = False
    reference_to_verify: BilingualText = Field(default_factory=BilingualText)
    likelihood: int = Field(1, ge=1, le=5)
    severity: int = Field(1, ge=1, le=5)
    risk_score: int = 1
    risk_level: RiskLevel = RiskLevel.LOW
    containment_0_24h: BilingualText = Field(default_factory=BilingualText)
    corrective_action: BilingualText = Field(default_factory=BilingualText)
    preventive_action: BilingualText = Field(default_factory=BilingualText)
    root_cause: BilingualText = Field(default_factory=BilingualText)
    owner: str = ""
    owner_confirmed: bool = False
    due_date: Optional[dt.date] = None
    status: FindingStatus = FindingStatus.OPEN
    status_reason: BilingualText = Field(default_factory=BilingualText)
    created_at: Optional[dt.datetime] = None
    updated_at: Optional[dt.datetime] = None
    completion_date: Optional[dt.date] = None
    evidence_links: List[str] = Field(default_factory=list)
    evidence_types: List[EvidenceType] = Field(default_factory=list)
    verification_result: VerificationResult = VerificationResult.PENDING
    verifier: str = ""
    verification_date: Optional[dt.date] = None
    verification_method: BilingualText = Field(default_factory=BilingualText)
    evidence_to_keep: BilingualText = Field(default_factory=BilingualText)
    effectiveness_review_date: Optional[dt.date] = None
    days_to_due: int = 0
    overdue_flag: bool = False
    photo_index: int = Field(0, ge=0)

    @field_validator("evidence_types")
    @classmethod
    def evidence_types_are_a_set(cls, value):
        return _unique(value)


# Fields a caller may never write through a partial update
DERIVED_FIELDS = frozenset({
    "id",
    "risk_score",
    "risk_level",
    "status",
    "days_to_due",
    "overdue_flag",
    "completion_date",
    "created_at",
    "updated_at",
})

NULLABLE_FIELDS = frozenset({
    "date",
    "due_date",
    "effectiveness_review_date",
    "verification_date",
})


class FindingUpdate(BaseModel):
    """
    Typed partial update. Only fields explicitly sent are merged.

    Unknown fields and derived fields are refused; status changes go through
    the status endpoint instead.
    """
    model_config = ConfigDict(extra="forbid")

    site: Optional[str] = None
    area: Optional[str] = None
    audit_type: Optional[str] = None
    date: Optional[dt.date] = None
    finding_title: Optional[BilingualText] = None
    category: Optional[str] = None
    observation: Optional[BilingualText] = None
    evidence: Optional[BilingualText] = None
    potential_impact: Optional[BilingualText] = None
    compliance_flag: Optional[bool] = None
    reference_to_verify: Optional[BilingualText] = None
    likelihood: Optional[int] = Field(None, ge=1, le=5)
    severity: Optional[int] = Field(None, ge=1, le=5)
    containment_0_24h: Optional[BilingualText] = None
    corrective_action: Optional[BilingualText] = None
    preventive_action: Optional[BilingualText] = None
    root_cause: Optional[BilingualText] = None
    owner: Optional[str] = None
    owner_confirmed: Optional[bool] = None
    due_date: Optional[dt.date] = None
    status_reason: Optional[BilingualText] = None
    evidence_links: Optional[List[str]] = None
    evidence_types: Optional[List[EvidenceType]] = None
    verification_result: Optional[VerificationResult] = None
    verifier: Optional[str] = None
    verification_date: Optional[dt.date] = None
    verification_method: Optional[BilingualText] = None
    evidence_to_keep: Optional[BilingualText] = None
    effectiveness_review_date: Optional[dt.date] = None
    photo_index: Optional[int] = Field(None, ge=0)

    @field_validator("evidence_types")
    @classmethod
    def evidence_types_are_a_set(cls, value):
        return None if value is None else _unique(value)

    @model_validator(mode="after")
    def no_null_for_required_fields(self):
        for name in self.model_fields_set:
            if getattr(self, name) is None and name not in NULLABLE_FIELDS:
                raise ValueError(f"{name} cannot be null")
        return self

    def changes(self) -> dict:
        """Explicitly set fields, ready to merge onto a stored finding."""
        changes = self.model_dump(exclude_unset=True)
        if "evidence_types" in changes:
            changes["evidence_types"] = [t.value for t in self.evidence_types]
        return changes


class StatusChangeRequest(BaseModel):
    status: FindingStatus


class TransitionResponse(BaseModel):
    """Outcome of a status change request."""
    valid: bool
    message: Optional[str] = None
    finding: Optional[Finding] = None


# Analysis collaborator payload
class AnalysisResult(BaseModel):
    """Output of the photo analysis service; only the register items are consumed."""
    markdown_report: str = ""
    action_register_json: List[Finding] = Field(default_factory=list)
    pdf_report_html: str = ""


class RefusalResponse(BaseModel):
    """Response when a status change is refused."""
    message: str
