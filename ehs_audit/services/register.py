"""
The finding register: the single owner of every write to a finding.

Each mutation entry point recomputes the derived fields before committing,
so risk and overdue values can never go stale relative to the last edit.
"""
from datetime import date, datetime, timezone
from typing import Iterable, List, Optional, Union

from loguru import logger
from sqlalchemy.orm import Session

from ehs_audit.api.schemas import Finding, FindingUpdate
from ehs_audit.models.audit import AuditEvent, AuditEventType
from ehs_audit.models.domain import FindingRecord
from ehs_audit.models.enums import FindingStatus, VerificationResult
from ehs_audit.services.risk import calculate_risk, compute_overdue
from ehs_audit.services.state_machine import TransitionResult, validate_status_transition

Instant = Union[date, datetime]


class FindingNotFoundError(LookupError):
    """Raised when a mutation references a finding id the register does not hold."""
    def __init__(self, finding_id: str):
        self.finding_id = finding_id
        super().__init__(f"Finding not found: {finding_id}")


class DuplicateFindingError(ValueError):
    """Raised when a seeded finding reuses an id already in the register."""
    def __init__(self, finding_ids: List[str]):
        self.finding_ids = finding_ids
        super().__init__(f"Finding ids already in use: {', '.join(finding_ids)}")


def _timestamp(as_of: Instant) -> datetime:
    """Naive UTC timestamp for created_at / updated_at."""
    if isinstance(as_of, datetime):
        if as_of.tzinfo is not None:
            return as_of.astimezone(timezone.utc).replace(tzinfo=None)
        return as_of
    return datetime.combine(as_of, datetime.min.time())


def _calendar_day(as_of: Instant) -> date:
    return _timestamp(as_of).date()


class FindingRegister:
    """In-session register of audit findings."""

    def __init__(self, db: Session):
        self.db = db

    # Reads
    def get(self, finding_id: str) -> FindingRecord:
        record = self.db.query(FindingRecord).filter(FindingRecord.id == finding_id).first()
        if record is None:
            raise FindingNotFoundError(finding_id)
        return record

    def records(self) -> List[FindingRecord]:
        """All findings in insertion order."""
        return self.db.query(FindingRecord).order_by(FindingRecord.pk).all()

    def snapshot(self) -> List[Finding]:
        """Detached, read-only copies of every finding, in insertion order."""
        return [Finding.model_validate(record) for record in self.records()]

    def by_risk(self) -> List[Finding]:
        """Display order: highest risk score first, ties kept in insertion order."""
        return sorted(self.snapshot(), key=lambda f: f.risk_score, reverse=True)

    # Writes
    def insert_many(self, findings: Iterable[Finding], as_of: Instant) -> List[FindingRecord]:
        """
        Seed the register from the analysis result.

        Every finding enters in its creation state (Open, owner unconfirmed,
        verification pending, no completion/verification/review dates).
        Either every finding is inserted or none is.
        """
        findings = list(findings)
        incoming = [f.id for f in findings]
        held = {
            row.id
            for row in self.db.query(FindingRecord.id).filter(FindingRecord.id.in_(incoming))
        }
        duplicates = sorted(held | {i for i in incoming if incoming.count(i) > 1})
        if duplicates:
            raise DuplicateFindingError(duplicates)

        stamp = _timestamp(as_of)
        records = []
        for finding in findings:
            if finding.status != FindingStatus.OPEN:
                logger.warning(
                    f"Finding {finding.id} seeded as {finding.status.value}; reset to Open"
                )
            values = finding.model_dump()
            values.update(
                status=FindingStatus.OPEN,
                owner_confirmed=False,
                verification_result=VerificationResult.PENDING,
                verifier="",
                verification_date=None,
                completion_date=None,
                effectiveness_review_date=None,
                evidence_types=[t.value for t in finding.evidence_types],
                created_at=_timestamp(finding.created_at or stamp),
                updated_at=_timestamp(finding.updated_at or stamp),
            )

            record = FindingRecord(**values)
            self._recompute(record, as_of, risk_changed=True)
            self.db.add(record)
            records.append(record)
            self._audit(AuditEventType.FINDING_INSERTED, record, stamp, {
                "risk_score": record.risk_score,
                "risk_level": record.risk_level.value,
            })

        self.db.commit()
        logger.info(f"Register seeded with {len(records)} findings")
        return records

    def update_fields(
        self,
        finding_id: str,
        update: Union[FindingUpdate, dict],
        as_of: Instant,
    ) -> FindingRecord:
        """
        Merge a partial update onto a finding.

        Risk is recomputed when likelihood or severity changes; overdue and
        updated_at are always refreshed.
        """
        if not isinstance(update, FindingUpdate):
            update = FindingUpdate.model_validate(update)
        record = self.get(finding_id)
        changes = update.changes()

        for name, value in changes.items():
            setattr(record, name, value)
        self._commit_edit(record, as_of, risk_changed=bool({"likelihood", "severity"} & changes.keys()))
        self._audit(AuditEventType.FINDING_UPDATED, record, _timestamp(as_of), {
            "fields": sorted(changes),
        })
        self.db.commit()

        logger.info(f"Finding {finding_id} updated: {', '.join(sorted(changes)) or 'no fields'}")
        return record

    def request_status_change(
        self,
        finding_id: str,
        new_status: FindingStatus,
        as_of: Instant,
    ) -> TransitionResult:
        """
        Move a finding to new_status if the transition guards admit it.

        On refusal the finding is left untouched and the guard message is
        returned. On acceptance the status is written together with its side
        effects (completion date on first close, owner auto-confirmation when
        work starts).
        """
        new_status = FindingStatus(new_status)
        record = self.get(finding_id)
        previous = record.status
        stamp = _timestamp(as_of)

        result = validate_status_transition(record, new_status)
        if not result.valid:
            self._audit(AuditEventType.STATUS_CHANGE_REFUSED, record, stamp, {
                "from": previous.value,
                "to": new_status.value,
                "message": result.message,
            })
            self.db.commit()
            logger.warning(
                f"Finding {finding_id} refused {previous.value} -> {new_status.value}: {result.message}"
            )
            return result

        record.status = new_status
        if new_status == FindingStatus.CLOSED and record.completion_date is None:
            record.completion_date = _calendar_day(as_of)
        if previous == FindingStatus.OPEN and new_status == FindingStatus.IN_PROGRESS:
            record.owner_confirmed = True

        self._commit_edit(record, as_of, risk_changed=False)
        self._audit(AuditEventType.STATUS_CHANGED, record, stamp, {
            "from": previous.value,
            "to": new_status.value,
        })
        self.db.commit()

        logger.info(f"Finding {finding_id} moved {previous.value} -> {new_status.value}")
        return result

    def refresh_overdue(self, as_of: Instant) -> None:
        """Re-evaluate overdue fields for every finding at a new instant."""
        for record in self.records():
            self._recompute(record, as_of, risk_changed=False)
        self.db.commit()

    # Internals
    def _commit_edit(self, record: FindingRecord, as_of: Instant, risk_changed: bool) -> None:
        self._recompute(record, as_of, risk_changed)
        record.updated_at = _timestamp(as_of)

    @staticmethod
    def _recompute(record: FindingRecord, as_of: Instant, risk_changed: bool) -> None:
        if risk_changed:
            record.risk_score, record.risk_level = calculate_risk(record.likelihood, record.severity)

        overdue = compute_overdue(record.due_date, record.status, as_of)
        if overdue is not None:
            record.days_to_due, record.overdue_flag = overdue
        elif record.status == FindingStatus.CLOSED:
            record.overdue_flag = False

    def _audit(
        self,
        event_type: str,
        record: FindingRecord,
        stamp: datetime,
        payload: Optional[dict] = None,
    ) -> None:
        self.db.add(AuditEvent(
            event_type=event_type,
            entity_type="Finding",
            entity_id=record.id,
            created_at=stamp,
            payload_json=payload,
        ))
