"""Shared test helpers."""
from datetime import date

from ehs_audit.services.register import FindingRegister

PASSING_VERIFICATION = {
    "verification_result": "Pass",
    "verifier": "Jane",
    "verification_date": date(2024, 1, 1),
}


def make_close_ready(register: FindingRegister, finding_id: str, as_of) -> None:
    """Fill in a passing verification so the finding may be Closed."""
    register.update_fields(finding_id, PASSING_VERIFICATION, as_of)


def close_finding(register: FindingRegister, finding_id: str, as_of) -> None:
    """Walk a finding from Open to Closed through the guarded path."""
    register.update_fields(finding_id, {"owner_confirmed": True}, as_of)
    register.request_status_change(finding_id, "In-progress", as_of)
    make_close_ready(register, finding_id, as_of)
    result = register.request_status_change(finding_id, "Closed", as_of)
    assert result.valid, result.message
