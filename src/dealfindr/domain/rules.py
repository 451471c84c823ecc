from __future__ import annotations

import math
from dataclasses import dataclass
from typing import Callable, Optional

from dealfindr.domain.assessment import (
    CriteriaEvaluation,
    CriterionResult,
    FinancialSummary,
    RAGStatus,
    Severity,
)
from dealfindr.domain.criteria import AssessmentCriteria
from dealfindr.domain.opportunity import OpportunityInput

GM_POINTS_PER_PERCENT = 3
GM_SCORE_CAP = 75
GREEN_MIN_SCORE = 80
AMBER_MIN_SCORE = 60
PRE_SALES_BONUS_MIN_PERCENT = 50


@dataclass(frozen=True)
class _Factor:
    key: str                                   # attribute on DeRiskFactors / RiskFactors
    label: str
    applies: Callable[[OpportunityInput], bool]
    severity: Optional[Severity] = None
    detail: Optional[Callable[[OpportunityInput, int], str]] = None


def _fmt_num(v: float) -> str:
    return f"{v:g}"


def _pre_sales_pct(opp: OpportunityInput) -> float:
    return float(opp.pre_sales_percent or 0.0)


DE_RISK_FACTORS: tuple[_Factor, ...] = (
    _Factor("da_approved", "DA Approved", lambda o: o.has_da_approval),
    _Factor("vendor_finance", "Vendor Finance Available", lambda o: o.has_vendor_finance),
    _Factor("fixed_price_construction", "Fixed-Price Construction (F2K)", lambda o: o.has_fixed_price_construction),
    _Factor("experienced_pm", "Experienced PM Available", lambda o: o.has_experienced_pm),
    _Factor("clear_title", "Clear Title", lambda o: o.has_clear_title),
    _Factor("growth_corridor", "Located in Growth Corridor", lambda o: o.is_in_growth_corridor),
    _Factor(
        "pre_sales_50_plus",
        f"Pre-sales ≥{PRE_SALES_BONUS_MIN_PERCENT}%",
        lambda o: o.has_pre_sales and _pre_sales_pct(o) >= PRE_SALES_BONUS_MIN_PERCENT,
        detail=lambda o, pts: f"{_fmt_num(_pre_sales_pct(o))}% pre-sold",
    ),
)

RISK_FACTORS: tuple[_Factor, ...] = (
    _Factor(
        "previous_legal_disputes",
        "Previous legal dispute (resolved)",
        lambda o: o.has_previous_legal_disputes,
        severity="low",
        detail=lambda o, pts: f"{pts} points deducted",
    ),
    _Factor(
        "needs_rezoning",
        "Requires rezoning",
        lambda o: o.land_stage == "needs_rezoning",
        severity="high",
        detail=lambda o, pts: f"{pts} points deducted - adds time and risk",
    ),
    # default state: fires unless pre-sales exist
    _Factor(
        "no_pre_sales",
        "No pre-sales secured",
        lambda o: not o.has_pre_sales,
        severity="low",
        detail=lambda o, pts: f"{pts} points deducted",
    ),
)


def gm_score(gm_percent: float) -> float:
    return min(gm_percent * GM_POINTS_PER_PERCENT, GM_SCORE_CAP)


def round_half_up(x: float) -> int:
    return int(math.floor(x + 0.5))


def _evaluate_gm(
    fin: FinancialSummary,
    criteria: AssessmentCriteria,
    passed: list[CriterionResult],
    failed: list[CriterionResult],
    attention: list[CriterionResult],
) -> None:
    gm = fin.gross_margin_percent
    green = _fmt_num(criteria.green_gm_threshold)
    amber = _fmt_num(criteria.amber_gm_threshold)

    if gm >= criteria.green_gm_threshold:
        passed.append(
            CriterionResult(
                name=f"Gross Margin ≥{green}%",
                passed=True,
                detail=f"Current: {gm:.1f}%",
            )
        )
    elif gm >= criteria.amber_gm_threshold:
        attention.append(
            CriterionResult(
                name=f"Gross Margin below {green}% threshold",
                passed=False,
                severity="medium",
                detail=f"Current: {gm:.1f}% | Required: {green}%",
            )
        )
    else:
        failed.append(
            CriterionResult(
                name=f"Gross Margin below {amber}% minimum",
                passed=False,
                severity="critical",
                detail=f"Current: {gm:.1f}% | Minimum: {amber}%",
            )
        )


def _evaluate_gates(
    opp: OpportunityInput,
    criteria: AssessmentCriteria,
    passed: list[CriterionResult],
    failed: list[CriterionResult],
) -> None:
    gates = (
        (criteria.require_proof_of_ownership, opp.has_proof_of_ownership,
         "Proof of Ownership Verified", "Proof of Ownership Required"),
        (criteria.require_no_legal_disputes, not opp.has_legal_disputes,
         "No Legal Disputes", "Active Legal Disputes"),
        (criteria.require_da_approval, opp.has_da_approval,
         "DA Approval Confirmed", "DA Approval Required"),
    )
    for enabled, ok, pass_name, fail_name in gates:
        if not enabled:
            continue
        if ok:
            passed.append(CriterionResult(name=pass_name, passed=True))
        else:
            failed.append(CriterionResult(name=fail_name, passed=False, severity="critical"))


def evaluate_criteria(
    opp: OpportunityInput,
    fin: FinancialSummary,
    criteria: AssessmentCriteria,
) -> CriteriaEvaluation:
    passed: list[CriterionResult] = []
    failed: list[CriterionResult] = []
    attention: list[CriterionResult] = []

    # 1. Gross margin bucket
    _evaluate_gm(fin, criteria, passed, failed, attention)

    # 2. Critical gates
    _evaluate_gates(opp, criteria, passed, failed)

    # 3. De-risk bonuses
    de_risk_score = 0
    for f in DE_RISK_FACTORS:
        if not f.applies(opp):
            continue
        pts = getattr(criteria.de_risk_factors, f.key)
        de_risk_score += pts
        passed.append(
            CriterionResult(
                name=f.label,
                passed=True,
                points=pts,
                detail=f.detail(opp, pts) if f.detail else None,
            )
        )

    # 4. Risk penalties (informational, never disqualifying)
    risk_score = 0
    for f in RISK_FACTORS:
        if not f.applies(opp):
            continue
        pts = getattr(criteria.risk_factors, f.key)
        risk_score += pts
        attention.append(
            CriterionResult(
                name=f.label,
                passed=False,
                points=pts,
                severity=f.severity,
                detail=f.detail(opp, pts) if f.detail else None,
            )
        )

    return CriteriaEvaluation(
        passed=tuple(passed),
        failed=tuple(failed),
        attention=tuple(attention),
        gm_score=gm_score(fin.gross_margin_percent),
        de_risk_score=de_risk_score,
        risk_score=risk_score,
    )


def total_score(evaluation: CriteriaEvaluation) -> int:
    raw = evaluation.gm_score + evaluation.de_risk_score + evaluation.risk_score
    return round_half_up(max(0.0, min(100.0, raw)))


def determine_status(
    score: float,
    gm_percent: float,
    criteria: AssessmentCriteria,
    has_critical_failures: bool,
) -> RAGStatus:
    # Hard fails first
    if has_critical_failures:
        return "red"
    if gm_percent < criteria.amber_gm_threshold:
        return "red"

    # Green needs BOTH score and margin
    if score >= GREEN_MIN_SCORE and gm_percent >= criteria.green_gm_threshold:
        return "green"

    # Amber needs EITHER
    if score >= AMBER_MIN_SCORE or gm_percent >= criteria.amber_gm_threshold:
        return "amber"

    return "red"
