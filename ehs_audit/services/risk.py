"""
Risk scoring and overdue tracking.

Both functions are pure: the evaluation instant is always an argument,
never read from the clock here.
"""
import math
from datetime import date, datetime, time, timezone
from typing import NamedTuple, Optional, Union

from ehs_audit.models.enums import FindingStatus, RiskLevel

# Lower bound (inclusive) of each tier, highest first
RISK_THRESHOLDS = (
    (17, RiskLevel.CRITICAL),
    (10, RiskLevel.HIGH),
    (5, RiskLevel.MEDIUM),
)

# Badge colour identity per tier, in tier order (Low → Critical)
RISK_BADGE_COLORS = {
    RiskLevel.LOW: "#22c55e",
    RiskLevel.MEDIUM: "#facc15",
    RiskLevel.HIGH: "#f97316",
    RiskLevel.CRITICAL: "#dc2626",
}

SECONDS_PER_DAY = 24 * 60 * 60


class RiskRating(NamedTuple):
    score: int
    level: RiskLevel


class OverdueStatus(NamedTuple):
    days_to_due: int
    overdue_flag: bool


def calculate_risk(likelihood: int, severity: int) -> RiskRating:
    """
    Score a likelihood/severity pair and place it in a tier.

    Precondition: both inputs are already clamped to 1..5 by the caller.
    Out-of-range values are not checked here.
    """
    score = likelihood * severity
    for threshold, level in RISK_THRESHOLDS:
        if score >= threshold:
            return RiskRating(score, level)
    return RiskRating(score, RiskLevel.LOW)


def _as_naive_utc(instant: Union[date, datetime]) -> datetime:
    if isinstance(instant, datetime):
        if instant.tzinfo is not None:
            instant = instant.astimezone(timezone.utc).replace(tzinfo=None)
        return instant
    return datetime.combine(instant, time.min)


def compute_overdue(
    due_date: Optional[date],
    status: FindingStatus,
    as_of: Union[date, datetime],
) -> Optional[OverdueStatus]:
    """
    Days remaining until the due date, and whether the finding is overdue.

    The due date is taken as midnight UTC; days_to_due is the ceiling of the
    fractional day difference, so a finding due today is not yet overdue.
    Returns None when no due date is set (not tracked).
    """
    if due_date is None:
        return None

    delta = datetime.combine(due_date, time.min) - _as_naive_utc(as_of)
    days_to_due = math.ceil(delta.total_seconds() / SECONDS_PER_DAY)

    return OverdueStatus(
        days_to_due=days_to_due,
        overdue_flag=days_to_due < 0 and status != FindingStatus.CLOSED,
    )
