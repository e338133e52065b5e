"""SQLAlchemy models exposed for metadata creation and imports."""
from .product import Product
from .scan import ScanEvent
from .session import UserSession
from .user import User

__all__ = ["User", "ScanEvent", "Product", "UserSession"]
