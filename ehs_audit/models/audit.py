"""
Internal audit logging model - NOT part of the exported register.

Provides an append-only trail of register mutations and refused
status transitions so that no refusal is silent.
"""
from sqlalchemy import Column, DateTime, Integer, JSON, String

from ehs_audit.database import Base


class AuditEvent(Base):
    """
    Immutable audit event.

    Invariants:
    - Once written, never edited or deleted
    - Append-only
    """
    __tablename__ = "audit_events"

    id = Column(Integer, primary_key=True, index=True, autoincrement=True)
    event_type = Column(String, nullable=False, index=True)  # e.g., "status_change_refused"
    entity_type = Column(String, nullable=False)  # e.g., "Finding"
    entity_id = Column(String, nullable=False, index=True)
    created_at = Column(DateTime, nullable=False, index=True)
    payload_json = Column(JSON, nullable=True)


class AuditEventType:
    """Enumeration of audit event types."""
    FINDING_INSERTED = "finding_inserted"
    FINDING_UPDATED = "finding_updated"

    STATUS_CHANGED = "status_changed"
    STATUS_CHANGE_REFUSED = "status_change_refused"
