from dealfindr.domain.assessment import FinancialSummary
from dealfindr.domain.opportunity import OpportunityInput


def _safe_div(num: float, den: float) -> float:
    return num / den if den else 0.0


def calculate_financials(opp: OpportunityInput) -> FinancialSummary:
    """
    Feasibility numbers for a development site.

    Only four cost buckets are modelled (land, infrastructure, construction,
    contingency). Contingency is a percentage of the first three; professional,
    marketing and finance costs are not part of this model.
    """
    units = opp.unit_count

    # Costs
    land_cost = opp.land_purchase_price
    infra_cost = opp.infrastructure_costs
    construction_cost = opp.construction_per_unit * units
    contingency = (land_cost + infra_cost + construction_cost) * (opp.contingency_percent / 100)
    total_cost = land_cost + infra_cost + construction_cost + contingency

    # Revenue / margin
    total_revenue = opp.avg_sale_price * units
    gross_margin = total_revenue - total_cost

    # zero units or zero revenue => 0, never NaN/inf
    gross_margin_percent = _safe_div(gross_margin, total_revenue) * 100

    return FinancialSummary(
        total_cost=total_cost,
        total_revenue=total_revenue,
        gross_margin=gross_margin,
        gross_margin_percent=gross_margin_percent,
        cost_per_unit=_safe_div(total_cost, units),
        revenue_per_unit=opp.avg_sale_price,
        profit_per_unit=_safe_div(gross_margin, units),
    )
