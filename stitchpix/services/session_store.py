"""Session persistence over local key/value storage."""

import logging

from pydantic import ValidationError as PydanticValidationError

from ..models.session import SessionState, UserProfile
from .storage import LocalStorage


logger = logging.getLogger(__name__)

TOKEN_KEY = "stitchpix_token"
USER_KEY = "stitchpix_user"
CREDENTIAL_KEY = "stitchpix_api_key"


class SessionStore:
    """Loads, saves and clears the persisted session.
    
    The three entries are independent: token, JSON-serialized user profile and
    the provider API key. Whether the API key survives ``clear()`` is decided by
    ``keep_credential_on_logout``.
    """
    
    def __init__(self, storage: LocalStorage, keep_credential_on_logout: bool = True):
        self.storage = storage
        self.keep_credential_on_logout = keep_credential_on_logout
    
    def load(self) -> SessionState:
        """Hydrate the session. A corrupt profile entry is dropped, not fatal."""
        token = self.storage.get_item(TOKEN_KEY)
        credential = self.storage.get_item(CREDENTIAL_KEY)
        
        user = None
        raw_user = self.storage.get_item(USER_KEY)
        if raw_user:
            try:
                user = UserProfile.model_validate_json(raw_user)
            except PydanticValidationError as e:
                logger.warning("Discarding corrupt stored user profile: %s", e.errors()[0]["msg"])
                self.storage.remove_item(USER_KEY)
        
        return SessionState(auth_token=token or None, user=user, credential=credential or None)
    
    def save(self, state: SessionState) -> None:
        self._put(TOKEN_KEY, state.auth_token)
        self._put(USER_KEY, state.user.model_dump_json() if state.user else None)
        self._put(CREDENTIAL_KEY, state.credential)
    
    def save_credential(self, credential: str | None) -> None:
        self._put(CREDENTIAL_KEY, credential)
    
    def clear(self) -> None:
        """Forget the signed-in user."""
        self.storage.remove_item(TOKEN_KEY)
        self.storage.remove_item(USER_KEY)
        if not self.keep_credential_on_logout:
            self.storage.remove_item(CREDENTIAL_KEY)
    
    def _put(self, key: str, value: str | None) -> None:
        if value:
            self.storage.set_item(key, value)
        else:
            self.storage.remove_item(key)
