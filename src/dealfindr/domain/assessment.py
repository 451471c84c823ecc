from __future__ import annotations

from dataclasses import asdict, dataclass, field
from typing import Any, Literal, Optional, Tuple

RAGStatus = Literal["green", "amber", "red"]
Severity = Literal["critical", "high", "medium", "low"]


@dataclass(frozen=True)
class FinancialSummary:
    total_cost: float          # land + infra + construction + contingency
    total_revenue: float       # avg sale price * units
    gross_margin: float        # revenue - cost ($)
    gross_margin_percent: float  # margin / revenue * 100, 0 when revenue is 0
    cost_per_unit: float
    revenue_per_unit: float
    profit_per_unit: float


@dataclass(frozen=True)
class CriterionResult:
    name: str
    passed: bool
    points: int = 0
    detail: Optional[str] = None
    severity: Optional[Severity] = None


@dataclass(frozen=True)
class CriteriaEvaluation:
    passed: Tuple[CriterionResult, ...]
    failed: Tuple[CriterionResult, ...]
    attention: Tuple[CriterionResult, ...]
    gm_score: float      # unrounded; min(GM% * 3, 75)
    de_risk_score: int
    risk_score: int      # always <= 0

    @property
    def has_critical_failures(self) -> bool:
        return any(c.severity == "critical" for c in self.failed)


@dataclass(frozen=True)
class Insights:
    summary: str
    path_to_green: Tuple[str, ...]
    recommendations: Tuple[str, ...]


@dataclass(frozen=True)
class AssessmentResult:
    # Overall
    status: RAGStatus
    score: int  # 0-100

    # Breakdown
    gm_score: int
    de_risk_score: int
    risk_score: int

    # Details
    financials: FinancialSummary
    passed_criteria: Tuple[CriterionResult, ...]
    failed_criteria: Tuple[CriterionResult, ...]
    attention_items: Tuple[CriterionResult, ...]

    # Metadata
    assessed_at: str
    criteria_version: str

    # Narrative (None on the quick path)
    summary: Optional[str] = None
    path_to_green: Optional[Tuple[str, ...]] = None
    recommendations: Optional[Tuple[str, ...]] = None
    insights_source: Optional[Literal["provider", "fallback"]] = field(default=None)

    def to_dict(self) -> dict[str, Any]:
        out = asdict(self)
        for key in ("passed_criteria", "failed_criteria", "attention_items", "path_to_green", "recommendations"):
            if out[key] is not None:
                out[key] = list(out[key])
        return out
