from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime, timezone
from decimal import Decimal
from typing import Any, Dict, Mapping, Optional

from .dimensions import Dimension, dimension_from_dict, dimension_to_dict
from .pricing import derive_selling_price, format_money, parse_decimal

RECORD_TYPE_PRODUCT = "product"


@dataclass(frozen=True)
class TaxonomyEntry:
    id: str
    name: str

    @classmethod
    def from_document(cls, doc_id: str, data: Mapping[str, Any]) -> "TaxonomyEntry":
        return cls(id=doc_id, name=str(data.get("name") or ""))

    def to_dict(self) -> Dict[str, str]:
        return {"id": self.id, "name": self.name}


def utcnow() -> datetime:
    return datetime.now(timezone.utc).replace(microsecond=0)


def _parse_timestamp(value: Any) -> Optional[datetime]:
    if not value:
        return None
    try:
        return datetime.fromisoformat(str(value))
    except ValueError:
        return None


@dataclass
class ProductRecord:
    id: Optional[str]
    name: str
    description: str
    cost_price: Decimal
    sku: str = ""
    category: str = ""
    brand: str = ""
    preferred_supplier: str = ""
    dimension: Optional[Dimension] = None
    markup_percent: Decimal = field(default_factory=lambda: Decimal(0))
    created_at: Optional[datetime] = None

    @property
    def selling_price(self) -> Optional[Decimal]:
        # Always derived; a stored selling price is never read back.
        return derive_selling_price(self.cost_price, self.markup_percent)

    @property
    def dimension_kind(self) -> Optional[str]:
        return self.dimension.kind if self.dimension is not None else None

    def to_document(self) -> Dict[str, Any]:
        """Document body as written to the store (id lives in the key)."""
        return {
            "type": RECORD_TYPE_PRODUCT,
            "name": self.name,
            "sku": self.sku,
            "description": self.description,
            "category": self.category,
            "brand": self.brand,
            "preferred_supplier": self.preferred_supplier,
            "dimension": dimension_to_dict(self.dimension),
            "cost_price": format(self.cost_price, "f"),
            "markup_percent": format(self.markup_percent, "f"),
            "selling_price": format_money(self.selling_price),
            "created_at": self.created_at.isoformat() if self.created_at else None,
        }

    def to_dict(self) -> Dict[str, Any]:
        out = self.to_document()
        out["id"] = self.id
        return out

    @classmethod
    def from_document(cls, doc_id: str, data: Mapping[str, Any]) -> "ProductRecord":
        return cls(
            id=doc_id,
            name=str(data.get("name") or ""),
            sku=str(data.get("sku") or ""),
            description=str(data.get("description") or ""),
            category=str(data.get("category") or ""),
            brand=str(data.get("brand") or ""),
            preferred_supplier=str(data.get("preferred_supplier") or ""),
            dimension=dimension_from_dict(data.get("dimension")),
            cost_price=parse_decimal(data.get("cost_price"), Decimal(0)),
            markup_percent=parse_decimal(data.get("markup_percent"), Decimal(0)),
            created_at=_parse_timestamp(data.get("created_at")),
        )
