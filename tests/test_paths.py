"""Tests for property path parsing and resolution."""

from typing import Optional

import pytest
from pydantic import BaseModel

from formbridge.exceptions import (
    PropertyIndexOutOfRangeError,
    PropertyNotFoundError,
    PropertyPathError,
    PropertyPathParseError,
    PropertyPathTypeError,
)
from formbridge.forms.fields import FieldIdentifier
from formbridge.paths import (
    PathSegment,
    describe_type,
    format_property_path,
    parse_property_path,
    resolve_field,
    resolve_property_path,
)
from tests.conftest import Address, Customer, Order


# ---------------------------------------------------------------------------
# Parsing
# ---------------------------------------------------------------------------


class TestParsePropertyPath:
    def test_single_segment(self):
        assert parse_property_path("name") == [PathSegment("name")]

    def test_dotted_and_indexed(self):
        assert parse_property_path("orders[2].total") == [
            PathSegment("orders", 2),
            PathSegment("total"),
        ]

    def test_empty_path_is_one_empty_segment(self):
        assert parse_property_path("") == [PathSegment("")]

    def test_signed_index_parses(self):
        assert parse_property_path("orders[-1].total")[0] == PathSegment("orders", -1)

    @pytest.mark.parametrize(
        "path",
        ["orders[x].total", "orders[].total", "orders[1.total", "orders]1[.total", "a..b", "a.", "[0].total"],
    )
    def test_malformed_paths_raise(self, path: str):
        with pytest.raises(PropertyPathParseError):
            parse_property_path(path)

    def test_parse_error_is_a_value_error(self):
        with pytest.raises(ValueError):
            parse_property_path("orders[one].total")

    def test_format_inverts_parse(self):
        path = "orders[3].lines[0].sku"
        assert format_property_path(parse_property_path(path)) == path


# ---------------------------------------------------------------------------
# Resolution
# ---------------------------------------------------------------------------


class TestResolvePropertyPath:
    def test_single_segment_resolves_to_root(self, customer: Customer):
        parent, name = resolve_property_path(customer, "name")
        assert parent is customer
        assert name == "name"

    def test_nested_object(self, customer: Customer):
        parent, name = resolve_property_path(customer, "address.city")
        assert parent is customer.address
        assert name == "city"

    def test_list_element(self, customer: Customer):
        parent, name = resolve_property_path(customer, "orders[1].total")
        assert parent is customer.orders[1]
        assert name == "total"

    def test_index_on_last_segment_is_stripped(self, customer: Customer):
        parent, name = resolve_property_path(customer, "orders[0]")
        assert parent is customer
        assert name == "orders"

    def test_empty_path_addresses_the_model(self, customer: Customer):
        assert resolve_property_path(customer, "") == (customer, "")

    def test_cycles_are_followed_for_finite_paths(self, customer: Customer):
        customer.referrer = customer
        parent, name = resolve_property_path(customer, "referrer.referrer.address.city")
        assert parent is customer.address
        assert name == "city"

    def test_out_of_range_index(self, customer: Customer):
        with pytest.raises(PropertyIndexOutOfRangeError) as exc_info:
            resolve_property_path(customer, "orders[5].total")
        assert exc_info.value.index == 5
        assert exc_info.value.length == 2
        assert isinstance(exc_info.value, IndexError)

    def test_negative_index_is_out_of_range(self, customer: Customer):
        with pytest.raises(PropertyIndexOutOfRangeError):
            resolve_property_path(customer, "orders[-1].total")

    def test_unknown_property_names_property_and_type(self, customer: Customer):
        with pytest.raises(PropertyNotFoundError) as exc_info:
            resolve_property_path(customer, "billing.city")
        assert exc_info.value.property_name == "billing"
        assert exc_info.value.owner_type is Customer
        assert "billing" in str(exc_info.value)
        assert "Customer" in str(exc_info.value)

    def test_indexing_a_non_sequence(self, customer: Customer):
        with pytest.raises(PropertyPathTypeError):
            resolve_property_path(customer, "name[0].x")

    def test_indexing_a_missing_collection(self):
        model = Customer(orders=None)
        with pytest.raises(PropertyPathTypeError):
            resolve_property_path(model, "orders[0].total")

    def test_missing_intermediate_yields_absent_parent(self):
        model = Customer(address=None)
        parent, name = resolve_property_path(model, "address.city")
        assert parent is None
        assert name == "city"

    def test_missing_intermediate_still_checks_declared_type(self):
        model = Customer(referrer=None)
        # referrer is declared Optional[Customer]; "address" exists on Customer
        assert resolve_property_path(model, "referrer.address.city") == (None, "city")
        with pytest.raises(PropertyNotFoundError) as exc_info:
            resolve_property_path(model, "referrer.billing.city")
        assert exc_info.value.owner_type is Customer

    def test_element_runtime_type_governs_next_lookup(self):
        class SpecialOrder(Order):
            def __init__(self):
                super().__init__("S-1", 5.0)
                self.gift_wrap = Address(city="Paris")

        model = Customer(orders=[SpecialOrder()])
        parent, name = resolve_property_path(model, "orders[0].gift_wrap.city")
        assert parent is model.orders[0].gift_wrap
        assert name == "city"

    def test_unannotated_missing_member_walk_is_permissive(self):
        class Loose:
            def __init__(self):
                self.child = None

        assert resolve_property_path(Loose(), "child.grandchild.leaf") == (None, "leaf")

    def test_pydantic_models_resolve(self):
        class Line(BaseModel):
            sku: str = ""

        class Invoice(BaseModel):
            lines: list[Line] = []

        invoice = Invoice(lines=[Line(sku="a"), Line(sku="b")])
        parent, name = resolve_property_path(invoice, "lines[1].sku")
        assert parent is invoice.lines[1]
        assert name == "sku"

    def test_none_model_rejected(self):
        with pytest.raises(ValueError):
            resolve_property_path(None, "name")

    def test_all_resolution_errors_share_a_base(self, customer: Customer):
        for path in ("orders[9].total", "nope.x", "name[0].x", "orders[z].total"):
            with pytest.raises(PropertyPathError):
                resolve_property_path(customer, path)


class TestResolveField:
    def test_returns_field_identifier(self, customer: Customer):
        assert resolve_field(customer, "orders[1].total") == FieldIdentifier(customer.orders[1], "total")

    def test_absent_parent_is_none(self):
        assert resolve_field(Customer(address=None), "address.city") is None


class TestDescribeType:
    def test_unwraps_optional_annotations(self):
        members = describe_type(Customer)
        assert members["address"] is Address
        assert members["referrer"] is Customer
        assert members["name"] is str

    def test_includes_property_return_annotations(self):
        class WithProperty:
            @property
            def primary_address(self) -> Optional[Address]:
                return None

        assert describe_type(WithProperty)["primary_address"] is Address

    def test_is_cached_per_type(self):
        assert describe_type(Order) is describe_type(Order)
