"""Error taxonomy for the try-on studio."""

from enum import Enum


class StitchPixError(Exception):
    """Base class for every error the studio reports to a user."""
    
    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class ValidationError(StitchPixError):
    """A selected file was rejected before it was read."""
    
    def __init__(self, reason: str):
        super().__init__(reason)
        self.reason = reason


class AuthError(StitchPixError):
    """Signup or login failed, client-side or on the server."""
    
    def __init__(self, message: str, status: int | None = None):
        super().__init__(message)
        self.status = status


class AdapterError(StitchPixError):
    """A remote try-on provider could not produce an image."""
    
    def __init__(self, provider: str, message: str, status: int | None = None):
        super().__init__(message)
        self.provider = provider
        self.status = status


class CompositionError(StitchPixError):
    """Neither input image could be decoded by the compositor."""


class GenerationErrorKind(str, Enum):
    MISSING_IMAGES = "missing_images"
    MISSING_CREDENTIAL = "missing_credential"
    GENERATION_FAILED = "generation_failed"


class GenerationError(StitchPixError):
    """A generate action failed and produced no result."""
    
    def __init__(
        self,
        kind: GenerationErrorKind,
        message: str,
        cause: BaseException | None = None,
    ):
        super().__init__(message)
        self.kind = kind
        self.cause = cause


class StudioBusyError(StitchPixError):
    """The same action is already in flight."""
