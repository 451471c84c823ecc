from typing import Literal

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

SizeUnit = Literal["sqm", "acres", "sqft"]

LandStage = Literal[
    "da_approved",
    "needs_rezoning",
    "vacant",
    "redevelopment",
]


class OpportunityInput(BaseModel):
    """
    Raw facts about a candidate development site.

    Field names are snake_case; the camelCase keys sent by the web forms and
    voice webhooks (``landPurchasePrice``, ``hasDAApproval`` ...) are accepted
    as aliases.
    """
    model_config = ConfigDict(populate_by_name=True, extra="ignore", allow_inf_nan=False)

    # Basics
    name: str
    address: str = ""
    city: str = ""
    state: str = ""
    country: str = ""

    # Property details
    property_size: float = Field(default=0.0, ge=0, alias="propertySize")
    property_size_unit: SizeUnit = Field(default="sqm", alias="propertySizeUnit")
    land_stage: LandStage = Field(default="vacant", alias="landStage")
    current_zoning: str | None = Field(default=None, alias="currentZoning")
    num_lots: int = Field(default=0, ge=0, alias="numLots")
    num_dwellings: int | None = Field(default=None, ge=0, alias="numDwellings")
    existing_structures: str | None = Field(default=None, alias="existingStructures")

    # Financial
    land_purchase_price: float = Field(default=0.0, alias="landPurchasePrice")
    infrastructure_costs: float = Field(default=0.0, alias="infrastructureCosts")
    construction_per_unit: float = Field(default=0.0, alias="constructionPerUnit")
    avg_sale_price: float = Field(default=0.0, alias="avgSalePrice")
    contingency_percent: float = Field(default=0.0, alias="contingencyPercent")
    timeframe_months: float = Field(default=0.0, alias="timeframeMonths")

    # Critical / de-risk / risk flags
    has_proof_of_ownership: bool = Field(default=False, alias="hasProofOfOwnership")
    has_legal_disputes: bool = Field(default=False, alias="hasLegalDisputes")
    has_previous_legal_disputes: bool = Field(default=False, alias="hasPreviousLegalDisputes")
    has_da_approval: bool = Field(default=False, alias="hasDAApproval")
    has_vendor_finance: bool = Field(default=False, alias="hasVendorFinance")
    has_fixed_price_construction: bool = Field(default=False, alias="hasFixedPriceConstruction")
    has_experienced_pm: bool = Field(default=False, alias="hasExperiencedPM")
    has_clear_title: bool = Field(default=False, alias="hasClearTitle")
    is_in_growth_corridor: bool = Field(default=False, alias="isInGrowthCorridor")
    has_pre_sales: bool = Field(default=False, alias="hasPreSales")
    pre_sales_percent: float | None = Field(default=None, alias="preSalesPercent")

    @field_validator("name")
    @classmethod
    def _name_not_blank(cls, v: str) -> str:
        v = v.strip()
        if not v:
            raise ValueError("name must not be empty")
        return v

    @model_validator(mode="after")
    def _dwellings_default_to_lots(self) -> "OpportunityInput":
        if self.num_dwellings is None:
            self.num_dwellings = self.num_lots
        return self

    @property
    def unit_count(self) -> int:
        # dwellings win when set; a subdivision with no dwelling count sells lots
        if self.num_dwellings and self.num_dwellings > 0:
            return self.num_dwellings
        return self.num_lots
