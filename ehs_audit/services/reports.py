"""
Report generation for the finding register.

Produces the three export formats handed to document sinks:
  - HTML (self-contained, printed to PDF by an external print facility)
  - Markdown (language-gated by the audit's language mode)
  - JSON (the raw finding list, stable key order)

All generators are pure: same findings and context in, same bytes out.
"""
from pathlib import Path
from typing import List, Sequence

from jinja2 import Environment, FileSystemLoader, StrictUndefined, select_autoescape
from loguru import logger
from pydantic import TypeAdapter

from ehs_audit.api.schemas import AuditContext, BilingualText, Finding
from ehs_audit.config import settings
from ehs_audit.models.enums import FindingStatus, LanguageMode
from ehs_audit.services.risk import RISK_BADGE_COLORS

TEMPLATE_DIR = Path(__file__).parent / "templates"

MARKDOWN_TITLE = "EHS Photo Audit Report"
MARKDOWN_SEPARATOR = "-" * 50

_finding_list = TypeAdapter(List[Finding])


class ReportGenerator:
    """Projects a snapshot of the register into shareable documents."""

    def __init__(self, title: str = None, footer: str = None):
        self.title = title or settings.REPORT_TITLE
        self.footer = footer or settings.REPORT_FOOTER
        self.env = Environment(
            loader=FileSystemLoader(str(TEMPLATE_DIR)),
            autoescape=select_autoescape(["html"]),
            undefined=StrictUndefined,
            keep_trailing_newline=True,
        )

    def generate_html(self, findings: Sequence[Finding], context: AuditContext) -> str:
        """Full HTML report: summary table, per-finding detail, closure evidence."""
        findings = list(findings)
        closed = [f for f in findings if f.status == FindingStatus.CLOSED]

        template = self.env.get_template("audit_report.html")
        html = template.render(
            title=self.title,
            footer=self.footer,
            context_line=context.context_line(),
            findings=findings,
            closed=closed,
            badge_colors=[(level.value, color) for level, color in RISK_BADGE_COLORS.items()],
        )
        logger.debug(f"HTML report rendered: {len(findings)} findings, {len(closed)} closed")
        return html

    def generate_markdown(self, findings: Sequence[Finding], context: AuditContext) -> str:
        """
        Markdown report, one section per finding.

        Each bilingual field yields up to two lines depending on the language
        mode; a suppressed language contributes neither its text nor its label.
        """
        mode = context.language_mode
        lines = [f"# {MARKDOWN_TITLE}", "", context.context_line(), ""]

        for f in findings:
            lines.extend(self._markdown_section(f, mode))

        logger.debug(f"Markdown report rendered: {len(findings)} findings, mode={mode.value}")
        return "\n".join(lines)

    def generate_json(self, findings: Sequence[Finding]) -> str:
        """Pretty-printed JSON array of findings in export field order."""
        return _finding_list.dump_json(list(findings), indent=2).decode("utf-8")

    def _markdown_section(self, f: Finding, mode: LanguageMode) -> List[str]:
        title = " / ".join(_gated_values(f.finding_title, mode))
        lines = [
            f"## Finding #{f.id}" + (f" - {title}" if title else ""),
            "",
            f"**{_label(mode, 'Khu vực', 'Area')}**: {f.area}",
            f"**{_label(mode, 'Phân loại', 'Category')}**: {f.category}",
            f"**{_label(mode, 'Rủi ro', 'Risk')}**: {f.risk_level.value} (Score: {f.risk_score})",
        ]
        if f.compliance_flag:
            lines.append(f"**{_label(mode, 'Tuân thủ', 'Compliance')}**: Yes")
        lines.append("")

        lines.extend(_gated_lines(f.observation, mode, "Quan sát", "Observation"))
        lines.append("")
        lines.extend(_gated_lines(f.evidence, mode, "Bằng chứng từ ảnh", "Evidence from photo"))
        lines.append("")
        lines.extend(_gated_lines(f.potential_impact, mode, "Tác động tiềm ẩn", "Potential impact"))
        lines.append("")

        lines.append("### CAP")
        lines.extend(_gated_lines(f.containment_0_24h, mode, "Ngăn chặn (0-24h)", "Containment (0-24h)", "- "))
        lines.extend(_gated_lines(f.corrective_action, mode, "Khắc phục", "Corrective", "- "))
        lines.extend(_gated_lines(f.preventive_action, mode, "Phòng ngừa", "Preventive", "- "))
        lines.extend(_gated_lines(f.root_cause, mode, "Nguyên nhân", "Root Cause", "- "))
        lines.append("")

        lines.append(
            f"**{_label(mode, 'Phụ trách', 'Owner')}**: {f.owner} | "
            f"**{_label(mode, 'Hạn', 'Due')}**: {f.due_date or 'N/A'} | "
            f"**{_label(mode, 'Trạng thái', 'Status')}**: {f.status.value}"
        )
        if f.status_reason.vi.strip() or f.status_reason.en.strip():
            lines.extend(_gated_lines(f.status_reason, mode, "Lý do", "Reason"))
        if f.status == FindingStatus.CLOSED:
            lines.append(
                f"**{_label(mode, 'Xác minh', 'Verification')}**: {f.verification_result.value} "
                f"by {f.verifier} on {f.verification_date or 'N/A'}"
            )
        lines.append(MARKDOWN_SEPARATOR)
        lines.append("")
        return lines


def _label(mode: LanguageMode, vi_label: str, en_label: str) -> str:
    if mode == LanguageMode.VI:
        return vi_label
    if mode == LanguageMode.EN:
        return en_label
    return f"{en_label}/{vi_label}"


def _gated_values(text: BilingualText, mode: LanguageMode) -> List[str]:
    values = []
    if mode.shows_vi and text.vi:
        values.append(text.vi)
    if mode.shows_en and text.en:
        values.append(text.en)
    return values


def _gated_lines(
    text: BilingualText,
    mode: LanguageMode,
    vi_label: str,
    en_label: str,
    prefix: str = "",
) -> List[str]:
    lines = []
    if mode.shows_vi:
        lines.append(f"{prefix}**{vi_label}**: {text.vi}")
    if mode.shows_en:
        lines.append(f"{prefix}**{en_label}**: {text.en}")
    return lines


def parse_findings_json(data) -> List[Finding]:
    """Inverse of ReportGenerator.generate_json."""
    return _finding_list.validate_json(data)
