"""Screen controllers: login, event selection, scan, search, confirmation."""
from .auth import AuthController
from .confirmation import ConfirmationController
from .events import EventSelectionController
from .scan import ScanController
from .search import SearchController

__all__ = [
    "AuthController",
    "ConfirmationController",
    "EventSelectionController",
    "ScanController",
    "SearchController",
]
