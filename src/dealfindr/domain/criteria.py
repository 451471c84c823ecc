from __future__ import annotations

from typing import Any, Mapping

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator


class DeRiskFactors(BaseModel):
    model_config = ConfigDict(populate_by_name=True, frozen=True)

    da_approved: int = Field(default=15, alias="daApproved")
    vendor_finance: int = Field(default=10, alias="vendorFinance")
    fixed_price_construction: int = Field(default=10, alias="fixedPriceConstruction")
    experienced_pm: int = Field(default=5, alias="experiencedPM")
    clear_title: int = Field(default=5, alias="clearTitle")
    growth_corridor: int = Field(default=5, alias="growthCorridor")
    pre_sales_50_plus: int = Field(default=10, alias="preSales50Plus")

    @field_validator("*")
    @classmethod
    def _bonus_non_negative(cls, v: int) -> int:
        if v < 0:
            raise ValueError("de-risk points must be >= 0")
        return v


class RiskFactors(BaseModel):
    model_config = ConfigDict(populate_by_name=True, frozen=True)

    previous_legal_disputes: int = Field(default=-5, alias="previousLegalDisputes")
    needs_rezoning: int = Field(default=-10, alias="needsRezoning")
    no_pre_sales: int = Field(default=-5, alias="noPreSales")

    @field_validator("*")
    @classmethod
    def _penalty_non_positive(cls, v: int) -> int:
        if v > 0:
            raise ValueError("risk points must be <= 0")
        return v


class AssessmentCriteria(BaseModel):
    """
    Tenant-configurable rule set. Read-only once built.

    Thresholds are gross-margin percentages (25 means 25%).
    """
    model_config = ConfigDict(populate_by_name=True, frozen=True)

    green_gm_threshold: float = Field(default=25.0, alias="greenGMThreshold")
    amber_gm_threshold: float = Field(default=18.0, alias="amberGMThreshold")

    # Critical gates: failing an enabled gate forces RED
    require_proof_of_ownership: bool = Field(default=True, alias="requireProofOfOwnership")
    require_no_legal_disputes: bool = Field(default=True, alias="requireNoLegalDisputes")
    require_da_approval: bool = Field(default=False, alias="requireDAApproval")

    de_risk_factors: DeRiskFactors = Field(default_factory=DeRiskFactors, alias="deRiskFactors")
    risk_factors: RiskFactors = Field(default_factory=RiskFactors, alias="riskFactors")

    @model_validator(mode="after")
    def _green_above_amber(self) -> AssessmentCriteria:
        if self.green_gm_threshold <= self.amber_gm_threshold:
            raise ValueError(
                f"greenGMThreshold ({self.green_gm_threshold}) must be greater than "
                f"amberGMThreshold ({self.amber_gm_threshold})"
            )
        return self


DEFAULT_CRITERIA = AssessmentCriteria()


def criteria_from_payload(payload: Mapping[str, Any] | None) -> AssessmentCriteria:
    """
    Build criteria from a (possibly partial) tenant override.

    Keys missing from the override keep their default; the nested factor
    dicts are merged key by key rather than replaced wholesale.
    """
    if not payload:
        return DEFAULT_CRITERIA

    merged: dict[str, Any] = DEFAULT_CRITERIA.model_dump(by_alias=True)
    for key, value in payload.items():
        field_key = _canonical_key(key)
        if field_key in ("deRiskFactors", "riskFactors") and isinstance(value, Mapping):
            nested = dict(merged[field_key])
            aliases = _NESTED_ALIASES[field_key]
            nested.update({aliases.get(k, k): v for k, v in value.items()})
            merged[field_key] = nested
        else:
            merged[field_key] = value

    return AssessmentCriteria.model_validate(merged)


def _alias_map(model: type[BaseModel]) -> dict[str, str]:
    return {name: (field.alias or name) for name, field in model.model_fields.items()}


_SNAKE_TO_ALIAS = _alias_map(AssessmentCriteria)
_NESTED_ALIASES = {
    "deRiskFactors": _alias_map(DeRiskFactors),
    "riskFactors": _alias_map(RiskFactors),
}


def _canonical_key(key: str) -> str:
    return _SNAKE_TO_ALIAS.get(key, key)
