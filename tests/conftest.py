# tests/conftest.py
import pytest
from fastapi.testclient import TestClient

from dealfindr.api.http import create_app
from dealfindr.domain.opportunity import OpportunityInput


class StaticGenerator:
    """Returns a fixed reply and records every call."""

    def __init__(self, reply: str):
        self.reply = reply
        self.calls = []

    def complete(self, messages, *, temperature, max_tokens) -> str:
        self.calls.append({"messages": list(messages), "temperature": temperature, "max_tokens": max_tokens})
        return self.reply


class FailingGenerator:
    """Simulates a provider outage."""

    def __init__(self):
        self.calls = 0

    def complete(self, messages, *, temperature, max_tokens) -> str:
        self.calls += 1
        raise RuntimeError("provider unavailable")


GOOD_REPLY = """```json
{
  "summary": "Strong margin and approvals in place.",
  "pathToGreen": ["Already green"],
  "recommendations": ["Lock in the builder contract", "Start marketing pre-sales"]
}
```"""


def _base_fields() -> dict:
    return dict(
        name="Test Estate",
        address="1 Test Rd",
        city="Brisbane",
        state="QLD",
        country="Australia",
        property_size=2.5,
        property_size_unit="acres",
        land_stage="vacant",
        num_lots=10,
        land_purchase_price=0.0,
        infrastructure_costs=0.0,
        construction_per_unit=0.0,
        avg_sale_price=100_000.0,
        contingency_percent=0.0,
        timeframe_months=18,
        has_proof_of_ownership=True,
    )


def make_opportunity(**overrides) -> OpportunityInput:
    fields = _base_fields()
    fields.update(overrides)
    return OpportunityInput(**fields)


def green_deal() -> OpportunityInput:
    """
    Revenue 1.0M, cost 700k => GM 30% (gm score 75), DA +15, pre-sales 60% +10.
    Raw 100 => score 100, GREEN.
    """
    return make_opportunity(
        land_purchase_price=700_000.0,
        has_da_approval=True,
        has_pre_sales=True,
        pre_sales_percent=60,
    )


def amber_deal() -> OpportunityInput:
    """
    Revenue 1.0M, cost 800k => GM 20% (gm score 60), DA +15, vendor finance +10,
    pre-sales below 50% (no bonus, no penalty). Score 85 but margin < 25 => AMBER.
    """
    return make_opportunity(
        land_purchase_price=800_000.0,
        has_da_approval=True,
        has_vendor_finance=True,
        has_pre_sales=True,
        pre_sales_percent=20,
    )


def red_deal() -> OpportunityInput:
    """
    2.0M land, 10 lots at 330k build / 600k sale, 5% contingency => GM 7.25%.
    """
    return make_opportunity(
        land_purchase_price=2_000_000.0,
        infrastructure_costs=0.0,
        construction_per_unit=330_000.0,
        avg_sale_price=600_000.0,
        contingency_percent=5,
        has_da_approval=True,
        has_clear_title=True,
    )


@pytest.fixture
def opportunity_factory():
    return make_opportunity


@pytest.fixture
def deals():
    return {"green": green_deal(), "amber": amber_deal(), "red": red_deal()}


@pytest.fixture
def static_generator():
    return StaticGenerator(GOOD_REPLY)


@pytest.fixture
def generator_with_reply():
    return StaticGenerator


@pytest.fixture
def failing_generator():
    return FailingGenerator()


@pytest.fixture
def client(static_generator):
    return TestClient(create_app(generator=static_generator))
