"""
Validation of the photo analysis service's output before it reaches the register.

The analysis service is external; anything it returns that does not match
the finding shape is refused here so the register never sees a partial list.
"""
import json
from typing import List, Union

from loguru import logger
from pydantic import ValidationError

from ehs_audit.api.schemas import AnalysisResult, Finding
from ehs_audit.services.register import FindingRegister, Instant


class InvalidFindingPayloadError(ValueError):
    """The analysis output could not be parsed into a finding list."""
    def __init__(self, message: str, errors: List[dict] = None):
        self.message = message
        self.errors = errors or []
        super().__init__(self.message)


def parse_analysis_result(raw: Union[str, bytes, dict]) -> AnalysisResult:
    """
    Parse the analysis JSON object.

    Optional finding fields may be omitted; they default to the creation
    state (empty text, null dates, no evidence).
    """
    try:
        if isinstance(raw, (str, bytes)):
            raw = json.loads(raw)
        if not isinstance(raw, dict):
            raise InvalidFindingPayloadError("Analysis output must be a JSON object")
        return AnalysisResult.model_validate(raw)
    except json.JSONDecodeError as e:
        raise InvalidFindingPayloadError(f"Analysis output is not valid JSON: {e.msg}") from e
    except ValidationError as e:
        logger.error(f"Analysis output failed validation with {e.error_count()} errors")
        raise InvalidFindingPayloadError(
            "Analysis output does not match the finding shape",
            errors=e.errors(include_url=False, include_context=False, include_input=False),
        ) from e


def seed_register(
    register: FindingRegister,
    raw: Union[str, bytes, dict, AnalysisResult],
    as_of: Instant,
) -> List[Finding]:
    """Validate an analysis result and bulk-insert its findings."""
    result = raw if isinstance(raw, AnalysisResult) else parse_analysis_result(raw)
    records = register.insert_many(result.action_register_json, as_of)
    return [Finding.model_validate(record) for record in records]
