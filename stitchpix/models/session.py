"""Session state models."""

from pydantic import BaseModel, Field


class UserProfile(BaseModel):
    """The signed-in user as returned by the auth backend."""
    name: str | None = None
    email: str
    
    @property
    def display_name(self) -> str:
        return self.name or self.email


class SessionState(BaseModel):
    """Token, profile and API key that survive restarts."""
    
    auth_token: str | None = None
    user: UserProfile | None = None
    credential: str | None = Field(default=None, repr=False)
    
    @property
    def is_authenticated(self) -> bool:
        return self.user is not None
    
    def signed_out(self, keep_credential: bool = True) -> "SessionState":
        """Copy with token and profile dropped, and the credential unless told otherwise."""
        return SessionState(credential=self.credential if keep_credential else None)
