from __future__ import annotations

from decimal import Decimal

import pytest

from landscape_inventory.domain.dimensions import MeasurementsDimension
from landscape_inventory.inventory.parser import JsonValidationError, apply_payload, parse_product_payload
from landscape_inventory.inventory.session import InventorySession


def test_parse_collects_text_fields_and_drops_read_only_keys() -> None:
    parsed = parse_product_payload(
        {"id": "abc", "name": "Fern", "cost_price": 12.5, "markup": None, "selling_price": "99.00"}
    )
    assert parsed.fields == {"name": "Fern", "cost_price": "12.5", "markup": ""}
    assert parsed.dimension is None


@pytest.mark.parametrize(
    "payload",
    [
        [],
        {"colour": "green"},
        {"name": True},
        {"name": ["Fern"]},
        {"dimension": "big"},
        {"dimension": {"kind": "colour"}},
        {"dimension": {"kind": "weight", "width": 3}},
    ],
)
def test_parse_rejects_bad_payloads(payload) -> None:
    with pytest.raises(JsonValidationError):
        parse_product_payload(payload)


def test_apply_payload_fills_the_draft(session: InventorySession) -> None:
    form = session.new_form()
    parsed = parse_product_payload(
        {
            "name": "Paver",
            "cost_price": "2",
            "markup": 50,
            "dimension": {"kind": "measurements", "width": "30", "unit": "cm"},
        }
    )
    apply_payload(form, parsed)
    assert form.draft.name == "Paver"
    assert form.draft.selling_price == "3.00"
    assert form.draft.dimension == MeasurementsDimension(width=Decimal("30"), unit="cm")


def test_apply_payload_reports_bad_dimension_values(session: InventorySession) -> None:
    form = session.new_form()
    parsed = parse_product_payload({"dimension": {"kind": "volume", "unit": "gallon"}})
    with pytest.raises(JsonValidationError):
        apply_payload(form, parsed)
