"""
Landscape inventory – product catalogue with category, brand and supplier taxonomies.

Shared foundations (config, logging, paths) live at the top level; the
document store, domain types and the interactive workflow live in the
`store`, `domain` and `inventory` subpackages.
"""

__all__ = [
    "config",
    "logging",
    "paths",
]
