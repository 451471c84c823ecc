import math

import pytest

from dealfindr.domain.finance import calculate_financials


def test_finance_reference_scenario(deals):
    """
    2.0M land + 10 x 330k build = 5.3M, 5% contingency = 265k.
    Revenue 10 x 600k = 6.0M.
    """
    fin = calculate_financials(deals["red"])

    assert fin.total_cost == pytest.approx(5_565_000.0)
    assert fin.total_revenue == pytest.approx(6_000_000.0)
    assert fin.gross_margin == pytest.approx(435_000.0)
    assert fin.gross_margin_percent == pytest.approx(7.25)
    assert fin.cost_per_unit == pytest.approx(556_500.0)
    assert fin.revenue_per_unit == pytest.approx(600_000.0)
    assert fin.profit_per_unit == pytest.approx(43_500.0)


def test_contingency_only_applies_to_land_infra_construction(opportunity_factory):
    opp = opportunity_factory(
        land_purchase_price=1_000_000.0,
        infrastructure_costs=500_000.0,
        construction_per_unit=100_000.0,
        contingency_percent=10,
        num_lots=5,
    )
    fin = calculate_financials(opp)

    # (1.0M + 0.5M + 0.5M) * 1.10
    assert fin.total_cost == pytest.approx(2_200_000.0)


def test_zero_units_returns_zeros_not_nan(opportunity_factory):
    opp = opportunity_factory(
        num_lots=0,
        num_dwellings=0,
        land_purchase_price=1_000_000.0,
        construction_per_unit=300_000.0,
    )
    fin = calculate_financials(opp)

    assert fin.total_revenue == 0.0
    assert fin.total_cost == pytest.approx(1_000_000.0)
    assert fin.gross_margin_percent == 0.0
    assert fin.cost_per_unit == 0.0
    assert fin.profit_per_unit == 0.0
    for v in (fin.gross_margin_percent, fin.cost_per_unit, fin.profit_per_unit):
        assert not math.isnan(v)
        assert not math.isinf(v)


def test_zero_sale_price_gives_zero_margin_percent(opportunity_factory):
    opp = opportunity_factory(avg_sale_price=0.0, land_purchase_price=500_000.0)
    fin = calculate_financials(opp)

    assert fin.total_revenue == 0.0
    assert fin.gross_margin == pytest.approx(-500_000.0)
    assert fin.gross_margin_percent == 0.0


def test_dwellings_take_precedence_over_lots(opportunity_factory):
    opp = opportunity_factory(num_lots=4, num_dwellings=8, construction_per_unit=200_000.0)
    fin = calculate_financials(opp)

    assert opp.unit_count == 8
    assert fin.total_revenue == pytest.approx(800_000.0)
    assert fin.total_cost == pytest.approx(1_600_000.0)


def test_dwellings_default_to_lots(opportunity_factory):
    opp = opportunity_factory(num_lots=6)

    assert opp.num_dwellings == 6
    assert opp.unit_count == 6


def test_zero_dwellings_fall_back_to_lots(opportunity_factory):
    opp = opportunity_factory(num_lots=6, num_dwellings=0)

    assert opp.unit_count == 6
    assert calculate_financials(opp).total_revenue == pytest.approx(600_000.0)
