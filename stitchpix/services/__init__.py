"""HTTP clients and local storage."""

from .auth_client import AuthClient, AuthResult
from .providers import AdapterOutput, DeepAIAdapter, NanoBananaAdapter, TryOnAdapter
from .session_store import SessionStore
from .storage import LocalStorage

__all__ = [
    "AuthClient",
    "AuthResult",
    "AdapterOutput",
    "DeepAIAdapter",
    "NanoBananaAdapter",
    "TryOnAdapter",
    "SessionStore",
    "LocalStorage",
]
