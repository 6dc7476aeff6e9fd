"""Client for the StitchPix auth backend (signup and login)."""

import logging
import re
from typing import Any

import httpx
from pydantic import BaseModel
from pydantic import ValidationError as PydanticValidationError

from ..errors import AuthError
from ..models.session import UserProfile


logger = logging.getLogger(__name__)

EMAIL_PATTERN = re.compile(r'^[^\s@]+@[^\s@]+\.[^\s@]+$')
MIN_NAME_LENGTH = 2
MIN_PASSWORD_LENGTH = 6


class AuthResult(BaseModel):
    """What a successful signup or login yields."""
    token: str | None = None
    user: UserProfile


def is_valid_email(email: str) -> bool:
    return bool(EMAIL_PATTERN.match(email or ""))


def is_valid_password(password: str) -> bool:
    return isinstance(password, str) and len(password) >= MIN_PASSWORD_LENGTH


class AuthClient:
    """Async client for ``/api/auth/signup`` and ``/api/auth/login``."""
    
    def __init__(
        self,
        base_url: str,
        client: httpx.AsyncClient | None = None,
        timeout: float = 30.0,
    ):
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self._client = client
    
    @property
    def client(self) -> httpx.AsyncClient:
        """Get or create the HTTP client."""
        if self._client is None or self._client.is_closed:
            self._client = httpx.AsyncClient(timeout=self.timeout)
        return self._client
    
    async def signup(self, name: str, email: str, password: str) -> AuthResult:
        """Create an account.
        
        Raises:
            AuthError: on invalid input (no request is made) or a failed request.
        """
        name = (name or "").strip()
        email = (email or "").strip()
        if len(name) < MIN_NAME_LENGTH:
            raise AuthError(f"Name must be at least {MIN_NAME_LENGTH} characters")
        if not is_valid_email(email):
            raise AuthError("Invalid email")
        if not is_valid_password(password):
            raise AuthError(f"Password must be at least {MIN_PASSWORD_LENGTH} characters")
        
        data = await self._post(
            "/api/auth/signup",
            {"name": name, "email": email, "password": password},
            action="Signup",
        )
        return self._to_result(data, fallback_user={"name": name, "email": email})
    
    async def login(self, email: str, password: str) -> AuthResult:
        """Sign in with email and password.
        
        Raises:
            AuthError: on invalid input (no request is made) or a failed request.
        """
        email = (email or "").strip()
        if not is_valid_email(email):
            raise AuthError("Enter valid email")
        if not password:
            raise AuthError("Enter password")
        if not is_valid_password(password):
            raise AuthError(f"Password must be at least {MIN_PASSWORD_LENGTH} characters")
        
        data = await self._post(
            "/api/auth/login",
            {"email": email, "password": password},
            action="Login",
        )
        return self._to_result(data, fallback_user={"email": email})
    
    async def _post(self, path: str, payload: dict[str, Any], action: str) -> dict[str, Any]:
        try:
            response = await self.client.post(f"{self.base_url}{path}", json=payload)
        except httpx.HTTPError as e:
            logger.error("%s request to %s failed: %s", action, path, e)
            raise AuthError(f"{action} failed. Check network or server.") from e
        
        data = _json_or_empty(response)
        if not response.is_success:
            message = data.get("message") if isinstance(data.get("message"), str) else None
            logger.info("%s rejected with status %s", action, response.status_code)
            raise AuthError(
                message or f"{action} failed (status {response.status_code})",
                status=response.status_code,
            )
        return data
    
    def _to_result(self, data: dict[str, Any], fallback_user: dict[str, str]) -> AuthResult:
        token = data.get("token") if isinstance(data.get("token"), str) else None
        user = None
        if isinstance(data.get("user"), dict):
            try:
                user = UserProfile.model_validate(data["user"])
            except PydanticValidationError as e:
                logger.warning("Auth backend returned an unusable user profile: %s", e.errors()[0]["msg"])
        if user is None:
            user = UserProfile.model_validate(fallback_user)
        return AuthResult(token=token or None, user=user)
    
    async def close(self):
        """Close the HTTP client."""
        if self._client is not None and not self._client.is_closed:
            await self._client.aclose()
            self._client = None


def _json_or_empty(response: httpx.Response) -> dict[str, Any]:
    try:
        data = response.json()
    except ValueError:
        return {}
    return data if isinstance(data, dict) else {}
