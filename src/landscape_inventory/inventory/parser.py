from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, Optional

from ..domain.dimensions import DIMENSION_KINDS, payload_fields
from ..logging import get_logger
from .form import TEXT_FIELDS, FormFieldError, ProductForm


LOG = get_logger("inventory-parser")

# Present on drafts returned by the API; accepted and dropped on the way in.
READ_ONLY_KEYS = ("id", "selling_price")


class JsonValidationError(Exception):
    pass


@dataclass
class ProductPayload:
    fields: Dict[str, str] = field(default_factory=dict)
    dimension: Optional[Dict[str, Any]] = None


def parse_product_payload(payload: Any) -> ProductPayload:
    """Validate a JSON product body into form updates.

    Expected shape (every key optional):
    - name, sku, description, category, brand, preferred_supplier: text
    - cost_price, markup: text or number
    - dimension: { kind: weight|measurements|volume|size|units, ...fields of that kind }
    """
    if not isinstance(payload, dict):
        raise JsonValidationError("Payload must be a JSON object")

    parsed = ProductPayload()
    for key, value in payload.items():
        if key in READ_ONLY_KEYS:
            continue
        if key == "dimension":
            parsed.dimension = _parse_dimension(value)
            continue
        if key not in TEXT_FIELDS:
            raise JsonValidationError(f"unknown field: {key}")
        if value is None:
            parsed.fields[key] = ""
        elif isinstance(value, bool) or not isinstance(value, (str, int, float)):
            raise JsonValidationError(f"{key} must be text or a number")
        else:
            parsed.fields[key] = str(value)
    return parsed


def _parse_dimension(value: Any) -> Optional[Dict[str, Any]]:
    if value is None:
        return None
    if not isinstance(value, dict):
        raise JsonValidationError("dimension must be an object")
    kind = value.get("kind")
    if kind not in DIMENSION_KINDS:
        raise JsonValidationError(f"dimension.kind must be one of {', '.join(DIMENSION_KINDS)}")
    allowed = payload_fields(kind)
    out: Dict[str, Any] = {"kind": kind}
    for key, item in value.items():
        if key == "kind":
            continue
        if key not in allowed:
            raise JsonValidationError(f"{key!r} is not a {kind} dimension field")
        out[key] = item
    return out


def apply_payload(form: ProductForm, parsed: ProductPayload) -> None:
    """Feed parsed updates through the form, as a user typing would."""
    for key, value in parsed.fields.items():
        form.update(key, value)
    if parsed.dimension is not None:
        form.set_dimension_kind(parsed.dimension["kind"])
        for key, value in parsed.dimension.items():
            if key == "kind":
                continue
            try:
                form.update_dimension(key, value)
            except FormFieldError as exc:
                raise JsonValidationError(str(exc)) from exc
    LOG.debug("Applied %d field(s) to draft", len(parsed.fields))
