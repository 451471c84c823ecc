from __future__ import annotations

from dataclasses import replace
from datetime import datetime, timezone
from typing import Any, Mapping

from dealfindr.adapters.config import config
from dealfindr.adapters.logging_utils import get_logger
from dealfindr.domain.assessment import AssessmentResult
from dealfindr.domain.criteria import DEFAULT_CRITERIA, AssessmentCriteria, criteria_from_payload
from dealfindr.domain.finance import calculate_financials
from dealfindr.domain.opportunity import OpportunityInput
from dealfindr.domain.ports import TextGenerator
from dealfindr.domain.rules import determine_status, evaluate_criteria, round_half_up, total_score
from dealfindr.services.insights import generate_insights
from dealfindr.services.validation import validate_and_prepare_payload

logger = get_logger(__name__)


def _now_iso() -> str:
    return datetime.now(timezone.utc).isoformat()


def quick_assess(
    opp: OpportunityInput,
    criteria: AssessmentCriteria = DEFAULT_CRITERIA,
) -> AssessmentResult:
    """
    Score and classify without the narrative call.

    Synchronous and I/O free; used for previews and drafts. Everything except
    ``assessed_at`` is a pure function of (opp, criteria).
    """
    fin = calculate_financials(opp)
    ev = evaluate_criteria(opp, fin, criteria)

    # classification uses the rounded score
    score = total_score(ev)
    status = determine_status(score, fin.gross_margin_percent, criteria, ev.has_critical_failures)

    return AssessmentResult(
        status=status,
        score=score,
        gm_score=round_half_up(ev.gm_score),
        de_risk_score=ev.de_risk_score,
        risk_score=ev.risk_score,
        financials=fin,
        passed_criteria=ev.passed,
        failed_criteria=ev.failed,
        attention_items=ev.attention,
        assessed_at=_now_iso(),
        criteria_version=config.CRITERIA_VERSION,
    )


def assess(
    opp: OpportunityInput,
    criteria: AssessmentCriteria = DEFAULT_CRITERIA,
    *,
    generator: TextGenerator | None = None,
) -> AssessmentResult:
    """
    Full assessment: quick path plus narrative insights.

    The narrative never changes status or score, and a provider failure
    degrades to templated text instead of raising.
    """
    result = quick_assess(opp, criteria)

    outcome = generate_insights(
        generator,
        opp,
        result.financials,
        result.status,
        criteria,
        result.attention_items,
        temperature=config.LLM_TEMPERATURE,
        max_tokens=config.LLM_MAX_TOKENS,
    )

    logger.info(
        "assessment_completed",
        extra={
            "context": {
                "opportunity": opp.name,
                "status": result.status,
                "score": result.score,
                "insights_source": outcome.source,
            }
        },
    )

    return replace(
        result,
        summary=outcome.insights.summary,
        path_to_green=outcome.insights.path_to_green,
        recommendations=outcome.insights.recommendations,
        insights_source=outcome.source,
    )


def assess_payload(
    raw_opportunity: dict[str, Any] | None,
    raw_criteria: Mapping[str, Any] | None = None,
    *,
    quick: bool = False,
    generator: TextGenerator | None = None,
) -> AssessmentResult:
    """
    Validate raw dicts (API / CLI shape) and dispatch to the right entry point.

    Raises ValueError / pydantic.ValidationError on bad input.
    """
    payload = validate_and_prepare_payload(raw_opportunity)
    opp = OpportunityInput.model_validate(payload)
    criteria = criteria_from_payload(raw_criteria)

    if quick:
        return quick_assess(opp, criteria)
    return assess(opp, criteria, generator=generator)
