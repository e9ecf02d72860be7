"""JSON API over the inventory workflow."""

from .app import create_app

__all__ = ["create_app"]
