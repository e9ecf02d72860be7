"""Product authoring and listing workflow.

Modules:
- session: application context owning the live collections of one user
- form: create/edit/duplicate controller with validation and derived pricing
- taxonomy: category/brand/supplier add + guarded delete
- listing: filter selection and list projection
- feedback: toast and confirmation prompts
- parser: JSON payload validation for the HTTP API
"""

from .feedback import ConfirmationCenter, ConfirmationError, ConfirmationPrompt, ToastCenter
from .form import FormFieldError, ProductDraft, ProductForm, SubmitResult
from .listing import ProductFilters, filter_products, product_row
from .session import InventorySession
from .taxonomy import TaxonomyManager, UnknownTaxonomyKindError

__all__ = [
    "ConfirmationCenter",
    "ConfirmationError",
    "ConfirmationPrompt",
    "FormFieldError",
    "InventorySession",
    "ProductDraft",
    "ProductFilters",
    "ProductForm",
    "SubmitResult",
    "TaxonomyManager",
    "ToastCenter",
    "UnknownTaxonomyKindError",
    "filter_products",
    "product_row",
]
