"""Shared pytest fixtures: a small customer/address/orders model graph and its rule-sets."""

from dataclasses import dataclass, field
from typing import Optional

import pytest

from formbridge.config import get_settings
from formbridge.forms.edit_context import EditContext
from formbridge.providers.rule_set_provider import RuleSetValidationProvider
from formbridge.validators.registry import RuleSetRegistry
from formbridge.validators.rules import RuleSet


# ---------------------------------------------------------------------------
# Model graph
# ---------------------------------------------------------------------------


@dataclass(eq=False)
class Address:
    city: str = ""
    postcode: str = ""


@dataclass(eq=False)
class Order:
    reference: str = ""
    total: float = 0.0


@dataclass(eq=False)
class Customer:
    name: str = ""
    address: Optional[Address] = None
    orders: list[Order] = field(default_factory=list)
    referrer: Optional["Customer"] = None


# ---------------------------------------------------------------------------
# Rule-sets
# ---------------------------------------------------------------------------


class AddressRules(RuleSet):
    model_type = Address

    def __init__(self):
        super().__init__()
        self.rule_for("city").not_empty("City is required")


class OrderRules(RuleSet):
    model_type = Order

    def __init__(self):
        super().__init__()
        self.rule_for("total").must(lambda total, _: total > 0, "Total must be positive")


class CustomerRules(RuleSet):
    model_type = Customer

    def __init__(self):
        super().__init__()
        self.rule_for("name").not_empty("Name is required")
        self.rule_for("address").child(AddressRules())
        self.rule_for("orders").each(OrderRules())


# ---------------------------------------------------------------------------
# Fixtures
# ---------------------------------------------------------------------------


@pytest.fixture(autouse=True)
def _fresh_settings(monkeypatch: pytest.MonkeyPatch):
    """Each test sees settings built from its own environment."""
    for name in (
        "FORMBRIDGE_DEBUG",
        "FORMBRIDGE_LOG_LEVEL",
        "FORMBRIDGE_PARALLEL_RULE_SETS",
        "FORMBRIDGE_SERIALIZE_VALIDATION",
        "FORMBRIDGE_UNRESOLVED_FAILURE_POLICY",
    ):
        monkeypatch.delenv(name, raising=False)
    get_settings.cache_clear()
    yield
    get_settings.cache_clear()


@pytest.fixture
def customer() -> Customer:
    """A customer with a filled address and two orders, all valid."""
    return Customer(
        name="Ada",
        address=Address(city="London", postcode="N1"),
        orders=[Order("A-1", 10.0), Order("A-2", 25.0)],
    )


@pytest.fixture
def invalid_customer() -> Customer:
    """Name missing, city missing, second order non-positive."""
    return Customer(
        name="",
        address=Address(city="", postcode="N1"),
        orders=[Order("A-1", 10.0), Order("A-2", 0.0)],
    )


@pytest.fixture
def registry() -> RuleSetRegistry:
    reg = RuleSetRegistry()
    reg.register_rule_set(CustomerRules())
    return reg


@pytest.fixture
def provider() -> RuleSetValidationProvider:
    return RuleSetValidationProvider()


@pytest.fixture
def edit_context(invalid_customer: Customer) -> EditContext:
    return EditContext(invalid_customer)
