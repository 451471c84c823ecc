# src/dealfindr/services/insights.py
from __future__ import annotations

import json
import re
from dataclasses import dataclass
from typing import Literal, Sequence, Union

from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator

from dealfindr.adapters.logging_utils import get_logger
from dealfindr.domain.assessment import CriterionResult, FinancialSummary, Insights, RAGStatus
from dealfindr.domain.criteria import AssessmentCriteria
from dealfindr.domain.opportunity import OpportunityInput
from dealfindr.domain.ports import ChatMessage, TextGenerator
from dealfindr.domain.rules import GREEN_MIN_SCORE

logger = get_logger(__name__)

DEFAULT_TEMPERATURE = 0.3
DEFAULT_MAX_TOKENS = 4096

_FENCE_RE = re.compile(r"```(?:json)?\s*|\s*```", re.IGNORECASE)


# ---------------------------------------------------------------------
# Provider response schema + tagged parse result
# ---------------------------------------------------------------------

class InsightsPayload(BaseModel):
    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    summary: str = Field(min_length=1)
    path_to_green: list[str] = Field(default_factory=list, alias="pathToGreen")
    recommendations: list[str] = Field(default_factory=list)

    @field_validator("summary")
    @classmethod
    def _strip_summary(cls, v: str) -> str:
        v = v.strip()
        if not v:
            raise ValueError("summary must not be blank")
        return v

    @field_validator("path_to_green", "recommendations")
    @classmethod
    def _drop_blank_items(cls, v: list[str]) -> list[str]:
        return [s.strip() for s in v if s and s.strip()]


@dataclass(frozen=True)
class ParsedInsights:
    insights: Insights
    kind: Literal["parsed"] = "parsed"


@dataclass(frozen=True)
class UnparseableInsights:
    error: str
    raw: str
    kind: Literal["unparseable"] = "unparseable"


InsightsParse = Union[ParsedInsights, UnparseableInsights]


@dataclass(frozen=True)
class InsightsOutcome:
    insights: Insights
    source: Literal["provider", "fallback"]
    error: str | None = None


def strip_code_fences(raw: str) -> str:
    return _FENCE_RE.sub("", raw).strip()


def parse_insights(raw: str) -> InsightsParse:
    cleaned = strip_code_fences(raw or "")
    try:
        data = json.loads(cleaned)
    except json.JSONDecodeError as e:
        return UnparseableInsights(error=f"invalid json: {e.msg}", raw=raw)

    if not isinstance(data, dict):
        return UnparseableInsights(error="expected a JSON object", raw=raw)

    try:
        payload = InsightsPayload.model_validate(data)
    except ValidationError as e:
        return UnparseableInsights(error=f"schema mismatch: {e.error_count()} error(s)", raw=raw)

    return ParsedInsights(
        insights=Insights(
            summary=payload.summary,
            path_to_green=tuple(payload.path_to_green),
            recommendations=tuple(payload.recommendations),
        )
    )


# ---------------------------------------------------------------------
# Prompt
# ---------------------------------------------------------------------

def _money(v: float) -> str:
    return f"${v:,.0f}"


def build_insights_prompt(
    opp: OpportunityInput,
    fin: FinancialSummary,
    status: RAGStatus,
    criteria: AssessmentCriteria,
    attention: Sequence[CriterionResult],
) -> list[ChatMessage]:
    """
    Embed the computed facts; the provider explains them but never re-scores.
    """
    label = status.upper()
    attention_lines = "\n".join(f"- {item.name}: {item.detail or ''}" for item in attention) or "- None"

    prompt = f"""You are a property development assessment assistant for DealFindrs. Explain this opportunity's assessment.

## Opportunity Details
- Name: {opp.name}
- Location: {opp.address}, {opp.city}, {opp.state}
- Property Size: {opp.property_size:g} {opp.property_size_unit}
- Land Stage: {opp.land_stage}
- Number of Lots/Units: {opp.unit_count}

## Financial Summary
- Total Cost: {_money(fin.total_cost)}
- Total Revenue: {_money(fin.total_revenue)}
- Gross Margin: {_money(fin.gross_margin)} ({fin.gross_margin_percent:.1f}%)
- Land Purchase: {_money(opp.land_purchase_price)}
- Avg Sale Price/Unit: {_money(opp.avg_sale_price)}

## Assessment Result (final, do not change it)
- Status: {label}
- Green GM Threshold: {criteria.green_gm_threshold:g}%
- Current GM: {fin.gross_margin_percent:.1f}%

## Attention Items
{attention_lines}

## Your Task
Provide a JSON response with:
1. "summary": A 2-3 sentence explanation of the {label} rating
2. "pathToGreen": Array of 2-3 specific actions to reach GREEN status (with numbers)
3. "recommendations": Array of 2-3 general recommendations for this opportunity

Be specific with numbers. For example, if GM needs to increase from 22% to 25%, calculate the exact dollar change needed.

Respond ONLY with valid JSON, no markdown."""

    return [{"role": "user", "content": prompt}]


# ---------------------------------------------------------------------
# Deterministic fallback
# ---------------------------------------------------------------------

def fallback_insights(
    status: RAGStatus,
    fin: FinancialSummary,
    criteria: AssessmentCriteria,
) -> Insights:
    gm = fin.gross_margin_percent
    green = criteria.green_gm_threshold
    gap = green - gm

    summary = f"This opportunity scored {status.upper()} with a gross margin of {gm:.1f}%."

    if status == "green":
        path = (
            f"Already meets GREEN criteria; hold the gross margin at or above {green:g}% through delivery",
        )
    elif gap > 0:
        step = f"Increase gross margin from {gm:.1f}% to {green:g}% or higher"
        if fin.total_revenue > 0:
            step += f" (about {_money(gap / 100 * fin.total_revenue)} of cost savings or added revenue)"
        path = (
            step,
            "Secure additional de-risk factors (DA approval, vendor finance, pre-sales)",
        )
    elif status == "red":
        path = (
            "Resolve the failed critical criteria (ownership, legal disputes, approvals) before re-assessing",
            "Secure additional de-risk factors (DA approval, vendor finance, pre-sales)",
        )
    else:
        path = (
            f"Lift the overall score to {GREEN_MIN_SCORE} by securing additional de-risk factors "
            "(DA approval, vendor finance, pre-sales)",
        )

    recommendations = (
        "Review financial projections with current market data",
        "Verify all due diligence items before proceeding",
    )

    return Insights(summary=summary, path_to_green=path, recommendations=recommendations)


# ---------------------------------------------------------------------
# Generator
# ---------------------------------------------------------------------

def generate_insights(
    generator: TextGenerator | None,
    opp: OpportunityInput,
    fin: FinancialSummary,
    status: RAGStatus,
    criteria: AssessmentCriteria,
    attention: Sequence[CriterionResult],
    *,
    temperature: float = DEFAULT_TEMPERATURE,
    max_tokens: int = DEFAULT_MAX_TOKENS,
) -> InsightsOutcome:
    """
    Single attempt at provider narrative; any failure yields the template.

    Never raises.
    """
    if generator is None:
        return InsightsOutcome(
            insights=fallback_insights(status, fin, criteria),
            source="fallback",
            error="no text generator configured",
        )

    messages = build_insights_prompt(opp, fin, status, criteria, attention)
    try:
        raw = generator.complete(messages, temperature=temperature, max_tokens=max_tokens)
    except Exception as e:
        logger.warning(
            "insights_provider_failed",
            extra={"context": {"opportunity": opp.name, "error": str(e)}},
        )
        return InsightsOutcome(
            insights=fallback_insights(status, fin, criteria),
            source="fallback",
            error=str(e),
        )

    parsed = parse_insights(raw)
    if isinstance(parsed, UnparseableInsights):
        logger.warning(
            "insights_unparseable",
            extra={"context": {"opportunity": opp.name, "error": parsed.error}},
        )
        return InsightsOutcome(
            insights=fallback_insights(status, fin, criteria),
            source="fallback",
            error=parsed.error,
        )

    return InsightsOutcome(insights=parsed.insights, source="provider")
