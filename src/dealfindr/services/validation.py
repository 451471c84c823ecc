# src/dealfindr/services/validation.py

import math
from typing import Any

# Numeric fields (snake_case and the camelCase the forms send)
NUMERIC_FIELDS = {
    "property_size", "propertySize",
    "num_lots", "numLots",
    "num_dwellings", "numDwellings",
    "land_purchase_price", "landPurchasePrice",
    "infrastructure_costs", "infrastructureCosts",
    "construction_per_unit", "constructionPerUnit",
    "avg_sale_price", "avgSalePrice",
    "contingency_percent", "contingencyPercent",
    "timeframe_months", "timeframeMonths",
    "pre_sales_percent", "preSalesPercent",
}

INTEGER_FIELDS = {"num_lots", "numLots", "num_dwellings", "numDwellings"}

BOOLEAN_FIELDS = {
    "has_proof_of_ownership", "hasProofOfOwnership",
    "has_legal_disputes", "hasLegalDisputes",
    "has_previous_legal_disputes", "hasPreviousLegalDisputes",
    "has_da_approval", "hasDAApproval",
    "has_vendor_finance", "hasVendorFinance",
    "has_fixed_price_construction", "hasFixedPriceConstruction",
    "has_experienced_pm", "hasExperiencedPM",
    "has_clear_title", "hasClearTitle",
    "is_in_growth_corridor", "isInGrowthCorridor",
    "has_pre_sales", "hasPreSales",
}

_TRUE = {"true", "yes", "y", "1"}
_FALSE = {"false", "no", "n", "0", ""}


def _to_num(val: Any, field_name: str) -> float | None:
    """
    Coerce values like:
      - 2000000
      - "2,000,000"
      - "$600000"
      - "5%"
    into a finite float. Blank strings and None stay None; inf/nan are rejected.
    """
    if val is None:
        return None
    if isinstance(val, bool):
        raise ValueError(f"Invalid type for {field_name}: bool")
    if isinstance(val, str):
        s = val.strip().replace(",", "").replace("$", "")
        if s.endswith("%"):
            s = s[:-1]
        if not s:
            return None
    elif isinstance(val, (int, float)):
        s = val
    else:
        raise ValueError(f"Invalid type for {field_name}: {type(val)}")

    try:
        f = float(s)
    except (ValueError, OverflowError) as err:
        raise ValueError(f"Invalid number for {field_name}: {val!r}") from err
    if not math.isfinite(f):
        raise ValueError(f"Invalid number for {field_name}: {val!r}")
    return f


def _to_bool(val: Any, field_name: str) -> bool:
    if isinstance(val, bool):
        return val
    if val is None:
        return False
    if isinstance(val, (int, float)):
        return val != 0
    if isinstance(val, str):
        s = val.strip().lower()
        if s in _TRUE:
            return True
        if s in _FALSE:
            return False
    raise ValueError(f"Invalid boolean for {field_name}: {val!r}")


def validate_and_prepare_payload(raw: dict[str, Any] | None) -> dict[str, Any]:
    """
    Normalize an incoming opportunity payload before it reaches the core.

    Responsibilities:
      - Reject payloads without an opportunity name.
      - Coerce numeric strings ("2,000,000", "5%") and yes/no flags.
      - Drop blank numeric values so model defaults apply
        (num_dwellings then falls back to num_lots).
    """
    if not raw or not str(raw.get("name") or "").strip():
        raise ValueError("Missing required opportunity data")

    payload: dict[str, Any] = {}
    for key, val in raw.items():
        if key in NUMERIC_FIELDS:
            num = _to_num(val, key)
            if num is None:
                continue
            if key in INTEGER_FIELDS:
                if not num.is_integer():
                    raise ValueError(f"Invalid whole number for {key}: {val!r}")
                num = int(num)
            payload[key] = num
        elif key in BOOLEAN_FIELDS:
            payload[key] = _to_bool(val, key)
        else:
            payload[key] = val

    payload["name"] = str(payload["name"]).strip()
    return payload
