"""Route modules for the Scanlog API."""
from . import products, users

__all__ = ["users", "products"]
