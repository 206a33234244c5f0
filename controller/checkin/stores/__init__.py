"""Session, app and registration state shared by the controllers."""
from .app_state import AppStateStore, normalize_profile
from .registration import RegistrationStore
from .session import SessionStore

__all__ = ["AppStateStore", "RegistrationStore", "SessionStore", "normalize_profile"]
