"""API routes for the finding review and export workflow."""
import datetime as dt
from typing import List, Optional

from fastapi import APIRouter, Depends, HTTPException, status
from fastapi.responses import HTMLResponse, PlainTextResponse, Response
from sqlalchemy.orm import Session

from ehs_audit.api.schemas import (
    AnalysisResult,
    AuditContext,
    Finding,
    FindingUpdate,
    RefusalResponse,
    StatusChangeRequest,
    TransitionResponse,
)
from ehs_audit.database import get_db
from ehs_audit.models.enums import LanguageMode
from ehs_audit.services.ingestion import seed_register
from ehs_audit.services.register import DuplicateFindingError, FindingNotFoundError, FindingRegister
from ehs_audit.services.reports import ReportGenerator

router = APIRouter()


def get_register(db: Session = Depends(get_db)) -> FindingRegister:
    return FindingRegister(db)


def evaluation_instant() -> dt.datetime:
    """The one place the request clock is read; everything below takes it as an argument."""
    return dt.datetime.now(dt.timezone.utc)


def audit_context(
    site: str = "",
    area: str = "",
    audit_type: str = "",
    date: Optional[dt.date] = None,
    language_mode: LanguageMode = LanguageMode.BILINGUAL,
) -> AuditContext:
    return AuditContext(
        site=site,
        area=area,
        audit_type=audit_type,
        date=date,
        language_mode=language_mode,
    )


def _finding_or_404(register: FindingRegister, finding_id: str):
    try:
        return register.get(finding_id)
    except FindingNotFoundError:
        raise HTTPException(status_code=404, detail="Finding not found")


# Finding endpoints
@router.post("/findings/analysis", response_model=List[Finding], status_code=status.HTTP_201_CREATED)
def seed_findings(
    analysis: AnalysisResult,
    register: FindingRegister = Depends(get_register),
    as_of: dt.datetime = Depends(evaluation_instant),
):
    """Seed the register from the photo analysis result."""
    try:
        return seed_register(register, analysis, as_of)
    except DuplicateFindingError as e:
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail=str(e))


@router.get("/findings", response_model=List[Finding])
def list_findings(
    register: FindingRegister = Depends(get_register),
    as_of: dt.datetime = Depends(evaluation_instant),
):
    """List all findings, highest risk first."""
    register.refresh_overdue(as_of)
    return register.by_risk()


@router.get("/findings/{finding_id}", response_model=Finding)
def get_finding(finding_id: str, register: FindingRegister = Depends(get_register)):
    """Get a specific finding."""
    return _finding_or_404(register, finding_id)


@router.patch("/findings/{finding_id}", response_model=Finding)
def update_finding(
    finding_id: str,
    update: FindingUpdate,
    register: FindingRegister = Depends(get_register),
    as_of: dt.datetime = Depends(evaluation_instant),
):
    """
    Edit finding fields.
    Side effect: risk and overdue values are recomputed.
    """
    _finding_or_404(register, finding_id)
    return register.update_fields(finding_id, update, as_of)


@router.post("/findings/{finding_id}/status", response_model=TransitionResponse, responses={
    409: {"model": RefusalResponse, "description": "Refusal - transition guard not satisfied"}
})
def change_status(
    finding_id: str,
    request: StatusChangeRequest,
    register: FindingRegister = Depends(get_register),
    as_of: dt.datetime = Depends(evaluation_instant),
):
    """
    Request a status change.

    WILL REFUSE if:
    - Open → In-progress without a confirmed owner, evidence link or reason
    - → Closed without a Pass verification, verifier and verification date
    - Closed → In-progress without a reopen reason
    """
    _finding_or_404(register, finding_id)
    result = register.request_status_change(finding_id, request.status, as_of)
    if not result.valid:
        raise HTTPException(
            status_code=status.HTTP_409_CONFLICT,
            detail={"message": result.message},
        )
    return TransitionResponse(
        valid=True,
        finding=Finding.model_validate(register.get(finding_id)),
    )


# Report endpoints
@router.get("/reports/html", response_class=HTMLResponse)
def html_report(
    context: AuditContext = Depends(audit_context),
    register: FindingRegister = Depends(get_register),
    as_of: dt.datetime = Depends(evaluation_instant),
):
    """HTML report for the external print/PDF facility."""
    register.refresh_overdue(as_of)
    return ReportGenerator().generate_html(register.by_risk(), context)


@router.get("/reports/markdown", response_class=PlainTextResponse)
def markdown_report(
    context: AuditContext = Depends(audit_context),
    register: FindingRegister = Depends(get_register),
    as_of: dt.datetime = Depends(evaluation_instant),
):
    """Markdown report, filtered by language mode."""
    register.refresh_overdue(as_of)
    return PlainTextResponse(
        ReportGenerator().generate_markdown(register.by_risk(), context),
        media_type="text/markdown; charset=utf-8",
    )


@router.get("/reports/json")
def json_export(
    register: FindingRegister = Depends(get_register),
    as_of: dt.datetime = Depends(evaluation_instant),
):
    """Raw register export."""
    register.refresh_overdue(as_of)
    return Response(
        ReportGenerator().generate_json(register.snapshot()),
        media_type="application/json",
    )
