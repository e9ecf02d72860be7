from __future__ import annotations

from typing import TYPE_CHECKING, Optional, Sequence

from ..domain.models import TaxonomyEntry
from ..logging import get_logger
from .constants import PRODUCT_FIELDS, TAXONOMY_KINDS
from .feedback import ConfirmationPrompt

if TYPE_CHECKING:
    from .session import InventorySession


LOG = get_logger("inventory-taxonomy")


class UnknownTaxonomyKindError(ValueError):
    pass


def check_kind(kind: str) -> str:
    if kind not in TAXONOMY_KINDS:
        raise UnknownTaxonomyKindError(
            f"unknown taxonomy kind {kind!r}; expected one of {', '.join(TAXONOMY_KINDS)}"
        )
    return kind


class TaxonomyManager:
    """Add and delete categories, brands and suppliers.

    Entries are referenced from products by name only. Deleting an entry that
    any product still names is refused with a toast; otherwise the deletion
    waits for the user to confirm it.
    """

    def __init__(self, session: "InventorySession") -> None:
        self.session = session

    def entries(self, kind: str) -> Sequence[TaxonomyEntry]:
        return self.session.taxonomy_entries(check_kind(kind))

    def find(self, kind: str, entry_id: str) -> Optional[TaxonomyEntry]:
        for entry in self.entries(kind):
            if entry.id == entry_id:
                return entry
        return None

    def add(self, name: str, kind: str) -> Optional[TaxonomyEntry]:
        """Append an entry; blank names are ignored and return None."""
        check_kind(kind)
        cleaned = (name or "").strip()
        if not cleaned:
            LOG.debug("Ignoring blank %s name", kind)
            return None
        entry_id = self.session.add_taxonomy_entry(kind, cleaned)
        LOG.info("Added %s %r (%s)", kind, cleaned, entry_id)
        return TaxonomyEntry(id=entry_id, name=cleaned)

    def in_use(self, entry: TaxonomyEntry, kind: str) -> bool:
        field_name = PRODUCT_FIELDS[check_kind(kind)]
        return any(getattr(p, field_name) == entry.name for p in self.session.products)

    def request_delete(self, entry: TaxonomyEntry, kind: str) -> Optional[ConfirmationPrompt]:
        """Open a confirmation for deleting `entry`, or refuse with a toast.

        Returns the prompt, or None when the entry is still in use.
        """
        check_kind(kind)
        if self.in_use(entry, kind):
            LOG.info("Refusing to delete %s %r: still in use", kind, entry.name)
            self.session.toasts.show(f'Cannot delete "{entry.name}" as it is currently in use.')
            return None

        def _delete() -> None:
            self.session.delete_taxonomy_entry(kind, entry.id)
            self.session.reset_filter(kind, entry.name)
            LOG.info("Deleted %s %r (%s)", kind, entry.name, entry.id)

        return self.session.confirmations.request(
            title=f"Delete {kind}?",
            message=f'Are you sure you want to delete "{entry.name}"? This cannot be undone.',
            on_confirm=_delete,
        )
