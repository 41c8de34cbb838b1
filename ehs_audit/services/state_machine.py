"""
Status transition guards for audit findings.

Every status change MUST be admitted here before the register writes it.
A refusal is an expected outcome the operator reacts to, so it is returned
as a value rather than raised.
"""
from typing import NamedTuple, Optional

from ehs_audit.models.domain import FindingRecord
from ehs_audit.models.enums import FindingStatus, VerificationResult

START_WORK_REFUSED = (
    "To move to In-progress, please Confirm Owner, add Evidence Links, "
    "or provide a Status Reason (VI/EN)."
)
VERIFICATION_NOT_PASSED = 'Verification Result must be "Pass" to Close.'
VERIFICATION_INCOMPLETE = "Verifier and Verification Date are required."
REOPEN_REASON_REQUIRED = "Provide a Status Reason (recurrence evidence) to Reopen."


class TransitionResult(NamedTuple):
    valid: bool
    message: Optional[str] = None


ACCEPTED = TransitionResult(valid=True)


def has_reason(finding: FindingRecord) -> bool:
    """True if either language of status_reason holds non-blank text."""
    reason = finding.status_reason or {}
    return any((reason.get(lang) or "").strip() for lang in ("vi", "en"))


def validate_status_transition(
    finding: FindingRecord,
    new_status: FindingStatus,
) -> TransitionResult:
    """
    Decide whether finding may move from its current status to new_status.

    Guards:
    - Open → In-progress needs a confirmed owner, an evidence link, or a reason
    - anything → Closed needs a Pass verification with verifier and date
    - Closed → In-progress (reopen) needs a reason

    Every other transition is admitted, including those into and out of
    Rejected, which carry no guard.
    """
    current = finding.status

    if current == FindingStatus.OPEN and new_status == FindingStatus.IN_PROGRESS:
        if not (finding.owner_confirmed or finding.evidence_links or has_reason(finding)):
            return TransitionResult(False, START_WORK_REFUSED)

    if new_status == FindingStatus.CLOSED:
        if finding.verification_result != VerificationResult.PASS:
            return TransitionResult(False, VERIFICATION_NOT_PASSED)
        if not (finding.verifier or "").strip() or finding.verification_date is None:
            return TransitionResult(False, VERIFICATION_INCOMPLETE)

    if current == FindingStatus.CLOSED and new_status == FindingStatus.IN_PROGRESS:
        if not has_reason(finding):
            return TransitionResult(False, REOPEN_REASON_REQUIRED)

    return ACCEPTED
