from __future__ import annotations

from dataclasses import dataclass, field, replace
from datetime import datetime
from decimal import Decimal
from typing import TYPE_CHECKING, Any, Callable, Dict, Optional, Sequence, Tuple

from ..domain.dimensions import (
    DEFAULT_DIMENSION_KIND,
    Dimension,
    dimension_to_dict,
    empty_dimension,
    with_field,
)
from ..domain.models import ProductRecord, TaxonomyEntry, utcnow
from ..domain.pricing import derive_selling_price, parse_decimal, preview_selling_price
from ..logging import get_logger
from ..store.documents import StoreError
from .constants import (
    COPY_SUFFIX,
    MSG_COST_REQUIRED,
    MSG_DESCRIPTION_REQUIRED,
    MSG_NAME_REQUIRED,
    MSG_NOT_CONNECTED,
    MSG_SKU_TAKEN,
    PRODUCT_FIELDS,
)

if TYPE_CHECKING:
    from .session import InventorySession


LOG = get_logger("inventory-form")

TEXT_FIELDS: Tuple[str, ...] = (
    "name",
    "sku",
    "description",
    "category",
    "brand",
    "preferred_supplier",
    "cost_price",
    "markup",
)
PRICE_FIELDS = ("cost_price", "markup")


class FormFieldError(ValueError):
    """Raised for a field the form does not have or cannot accept."""


@dataclass
class ProductDraft:
    """Product being authored. Text fields hold what the user typed."""

    id: Optional[str] = None
    name: str = ""
    sku: str = ""
    description: str = ""
    category: str = ""
    brand: str = ""
    preferred_supplier: str = ""
    dimension: Dimension = field(default_factory=empty_dimension)
    cost_price: str = ""
    markup: str = ""
    selling_price: str = "0.00"
    created_at: Optional[datetime] = None

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "name": self.name,
            "sku": self.sku,
            "description": self.description,
            "category": self.category,
            "brand": self.brand,
            "preferred_supplier": self.preferred_supplier,
            "dimension": dimension_to_dict(self.dimension),
            "cost_price": self.cost_price,
            "markup": self.markup,
            "selling_price": self.selling_price,
        }


def _first_name(entries: Sequence[TaxonomyEntry]) -> str:
    return entries[0].name if entries else ""


def new_draft(
    categories: Sequence[TaxonomyEntry],
    brands: Sequence[TaxonomyEntry],
    suppliers: Sequence[TaxonomyEntry],
) -> ProductDraft:
    return ProductDraft(
        category=_first_name(categories),
        brand=_first_name(brands),
        preferred_supplier=_first_name(suppliers),
        dimension=empty_dimension(DEFAULT_DIMENSION_KIND),
    )


def draft_from_record(record: ProductRecord) -> ProductDraft:
    draft = ProductDraft(
        id=record.id,
        name=record.name,
        sku=record.sku,
        description=record.description,
        category=record.category,
        brand=record.brand,
        preferred_supplier=record.preferred_supplier,
        dimension=record.dimension or empty_dimension(DEFAULT_DIMENSION_KIND),
        cost_price=format(record.cost_price, "f"),
        markup=format(record.markup_percent, "f"),
        created_at=record.created_at,
    )
    draft.selling_price = preview_selling_price(draft.cost_price, draft.markup)
    return draft


def duplicate_draft(record: ProductRecord) -> ProductDraft:
    """New, unsaved draft copied from `record` with a suffixed name and no SKU."""
    source = draft_from_record(record)
    return replace(source, id=None, created_at=None, name=f"{record.name}{COPY_SUFFIX}", sku="")


@dataclass
class SubmitResult:
    ok: bool
    product_id: Optional[str] = None
    errors: Dict[str, str] = field(default_factory=dict)
    message: str = ""


class ProductForm:
    """Create/edit controller for one product draft.

    A draft without an id is submitted as a new product, a draft with an id
    overwrites that product. The selling price is recomputed on every cost or
    markup change and cannot be set directly.
    """

    def __init__(
        self,
        session: "InventorySession",
        draft: Optional[ProductDraft] = None,
        *,
        on_success: Optional[Callable[[], None]] = None,
    ) -> None:
        self.session = session
        if draft is None:
            draft = new_draft(session.categories, session.brands, session.suppliers)
        self.draft = draft
        self.draft.selling_price = preview_selling_price(draft.cost_price, draft.markup)
        self.errors: Dict[str, str] = {}
        self.message = ""
        self.submitting = False
        self.completed = False
        self.on_success = on_success

    @property
    def is_edit(self) -> bool:
        return self.draft.id is not None

    # ---------- field updates ----------
    def update(self, name: str, value: Any) -> None:
        if name == "dimension_kind":
            self.set_dimension_kind(str(value))
            return
        if name not in TEXT_FIELDS:
            raise FormFieldError(f"{name!r} is not an editable field")
        setattr(self.draft, name, "" if value is None else str(value))
        self.errors.pop(name, None)
        if name in PRICE_FIELDS:
            self.draft.selling_price = preview_selling_price(self.draft.cost_price, self.draft.markup)

    def set_dimension_kind(self, kind: str) -> None:
        """Switch kind; the payload always starts empty for the new kind."""
        try:
            self.draft.dimension = empty_dimension(kind)
        except ValueError as exc:
            raise FormFieldError(str(exc)) from exc
        self.errors.pop("dimension", None)

    def update_dimension(self, name: str, value: Any) -> None:
        try:
            self.draft.dimension = with_field(self.draft.dimension, name, value)
        except ValueError as exc:
            raise FormFieldError(str(exc)) from exc
        self.errors.pop("dimension", None)

    def add_taxonomy(self, kind: str, name: str) -> Optional[TaxonomyEntry]:
        """Add an entry inline and select it on the draft."""
        entry = self.session.taxonomy.add(name, kind)
        if entry is not None:
            setattr(self.draft, PRODUCT_FIELDS[kind], entry.name)
        return entry

    # ---------- validation + submit ----------
    def validate(self) -> Dict[str, str]:
        d = self.draft
        errors: Dict[str, str] = {}
        if not d.name.strip():
            errors["name"] = MSG_NAME_REQUIRED
        if not d.description.strip():
            errors["description"] = MSG_DESCRIPTION_REQUIRED
        cost = parse_decimal(d.cost_price)
        if (
            cost is None
            or cost <= 0
            or derive_selling_price(cost, parse_decimal(d.markup, Decimal(0))) is None
        ):
            errors["cost_price"] = MSG_COST_REQUIRED
        sku = d.sku.strip()
        if sku and any(
            p.sku == sku and p.category == d.category and p.id != d.id
            for p in self.session.products
        ):
            errors["sku"] = MSG_SKU_TAKEN
        return errors

    def build_record(self) -> ProductRecord:
        d = self.draft
        return ProductRecord(
            id=d.id,
            name=d.name.strip(),
            sku=d.sku.strip(),
            description=d.description.strip(),
            category=d.category,
            brand=d.brand,
            preferred_supplier=d.preferred_supplier,
            dimension=d.dimension,
            cost_price=parse_decimal(d.cost_price, Decimal(0)),
            markup_percent=parse_decimal(d.markup, Decimal(0)),
            created_at=d.created_at or utcnow(),
        )

    def submit(self) -> SubmitResult:
        self.errors = self.validate()
        if self.errors:
            LOG.info("Product draft rejected: %s", ", ".join(sorted(self.errors)))
            return SubmitResult(ok=False, errors=dict(self.errors))

        if self.session.user_id is None:
            self.message = MSG_NOT_CONNECTED
            return SubmitResult(ok=False, message=self.message)

        record = self.build_record()
        self.submitting = True
        self.message = ""
        try:
            if self.is_edit:
                self.session.update_product(record)
                product_id = record.id
            else:
                product_id = self.session.create_product(record)
        except StoreError as exc:
            LOG.exception("Saving product failed")
            self.message = f"Error: {exc}"
            return SubmitResult(ok=False, message=self.message)
        finally:
            self.submitting = False

        self.completed = True
        if self.on_success is not None:
            self.on_success()
        return SubmitResult(ok=True, product_id=product_id)


__all__ = [
    "FormFieldError",
    "ProductDraft",
    "ProductForm",
    "SubmitResult",
    "draft_from_record",
    "duplicate_draft",
    "new_draft",
]
