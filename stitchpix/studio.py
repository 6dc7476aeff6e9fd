"""Try-on studio: the login -> upload -> results flow."""

import logging
from enum import Enum
from pathlib import Path
from typing import Any, Coroutine

import httpx

from .config import AppConfig
from .errors import (
    AuthError,
    GenerationError,
    StitchPixError,
    StudioBusyError,
    ValidationError,
)
from .models import (
    Backend,
    EncodedImage,
    GenerationOutcome,
    GenerationRequest,
    GenerationResult,
    ModelDescriptor,
    ModelRegistry,
    SessionState,
)
from .models.catalog import DEFAULT_MODEL_ID
from .pipeline import Compositor, TryOnDispatcher, ingest_bytes, ingest_data_url, ingest_path
from .services import (
    AuthClient,
    AuthResult,
    DeepAIAdapter,
    LocalStorage,
    NanoBananaAdapter,
    SessionStore,
)
from .utils.liveness import TicketCounter


logger = logging.getLogger(__name__)

DEFAULT_DOWNLOAD_NAME = "stitchpix-result.png"


class Page(str, Enum):
    LOGIN = "login"
    UPLOAD = "upload"
    RESULTS = "results"


class PhotoRole(str, Enum):
    SUBJECT = "subject"  # the user's face photo
    GARMENT = "garment"  # a model wearing the garment


class TryOnStudio:
    """Holds the screen state and runs user actions against the services.

    Each action type has at most one operation in flight; a second submission
    while one is pending raises ``StudioBusyError``. Results of generate calls
    are applied only while their liveness ticket is current, so a ``reset()``
    or ``close()`` during an outstanding request discards its late result.
    """

    def __init__(
        self,
        config: AppConfig,
        session_store: SessionStore,
        auth_client: AuthClient,
        dispatcher: TryOnDispatcher,
    ):
        self.config = config
        self.session_store = session_store
        self.auth_client = auth_client
        self.dispatcher = dispatcher

        self.page = Page.LOGIN
        self.session = SessionState()
        self.photos: dict[PhotoRole, EncodedImage] = {}
        self.selected_model: ModelDescriptor = self.registry.resolve(DEFAULT_MODEL_ID)
        self.results: list[GenerationResult] = []
        self.error_message: str | None = None
        self.advisory: str | None = None

        self.auth_loading = False
        self.is_generating = False
        self._tickets = TicketCounter()
        self._closed = False

    @classmethod
    def from_config(cls, config: AppConfig) -> "TryOnStudio":
        """Wire the default services for a config."""
        registry = ModelRegistry()
        adapters = {
            Backend.NANOBANANA: NanoBananaAdapter(config.nanobanana_url, timeout=config.http_timeout),
            Backend.DEEPAI: DeepAIAdapter(config.deepai_url, timeout=config.http_timeout),
        }
        return cls(
            config=config,
            session_store=SessionStore(
                LocalStorage(config.storage_path),
                keep_credential_on_logout=config.keep_credential_on_logout,
            ),
            auth_client=AuthClient(config.backend_url, timeout=config.http_timeout),
            dispatcher=TryOnDispatcher(registry, Compositor(), adapters),
        )

    @property
    def registry(self) -> ModelRegistry:
        return self.dispatcher.registry

    @property
    def subject_photo(self) -> EncodedImage | None:
        return self.photos.get(PhotoRole.SUBJECT)

    @property
    def garment_photo(self) -> EncodedImage | None:
        return self.photos.get(PhotoRole.GARMENT)

    @property
    def result(self) -> GenerationResult | None:
        return self.results[0] if self.results else None

    @property
    def can_generate(self) -> bool:
        """Mirrors the enabled state of the Generate button."""
        if self.is_generating or self.subject_photo is None or self.garment_photo is None:
            return False
        return not (self.selected_model.requires_credential and not self.session.credential)

    # Session

    def hydrate(self) -> SessionState:
        """Restore the persisted session; a known user skips the login page."""
        self.session = self.session_store.load()
        if self.session.is_authenticated:
            self.page = Page.UPLOAD
        return self.session

    async def signup(self, name: str, email: str, password: str) -> AuthResult:
        return await self._authenticate(self.auth_client.signup(name, email, password))

    async def login(self, email: str, password: str) -> AuthResult:
        return await self._authenticate(self.auth_client.login(email, password))

    async def _authenticate(self, request: Coroutine[Any, Any, AuthResult]) -> AuthResult:
        if self.auth_loading:
            request.close()
            raise StudioBusyError("Authentication already in progress")

        self.error_message = None
        self.auth_loading = True
        try:
            auth = await request
        except AuthError as e:
            self.error_message = e.message
            raise
        finally:
            self.auth_loading = False

        if self._closed:
            logger.info("Studio closed before authentication finished; result discarded")
            return auth

        self.session = SessionState(
            auth_token=auth.token or self.session.auth_token,
            user=auth.user,
            credential=self.session.credential,
        )
        self.session_store.save(self.session)
        self.page = Page.UPLOAD
        logger.info("Signed in as %s", auth.user.display_name)
        return auth

    def logout(self) -> None:
        self.session_store.clear()
        self.session = self.session.signed_out(self.session_store.keep_credential_on_logout)
        self._drop_work()
        self.page = Page.LOGIN

    def set_credential(self, credential: str | None) -> None:
        credential = (credential or "").strip() or None
        self.session = self.session.model_copy(update={"credential": credential})
        self.session_store.save_credential(credential)

    # Upload

    def select_model(self, model_id: str) -> ModelDescriptor:
        self.selected_model = self.registry.resolve(model_id)
        return self.selected_model

    def upload_photo(
        self,
        role: PhotoRole,
        source: Path | str | bytes,
        content_type: str | None = None,
    ) -> EncodedImage:
        """Ingest a photo from a ``Path``, raw bytes, or a (base64) data URL string.

        Raises:
            ValidationError: the file was rejected; ``error_message`` is set.
        """
        role = PhotoRole(role)
        self.error_message = None
        max_bytes = self.config.max_image_bytes
        try:
            if isinstance(source, bytes):
                image = ingest_bytes(source, content_type, max_bytes)
            elif isinstance(source, Path):
                image = ingest_path(source, content_type, max_bytes)
            else:
                image = ingest_data_url(source, max_bytes)
        except ValidationError as e:
            self.error_message = e.reason
            raise

        self.photos[role] = image
        return image

    async def generate(self) -> GenerationOutcome | None:
        """Run the selected model on the two photos.

        Returns:
            The outcome, or None if the studio was reset or closed while the
            request was in flight.

        Raises:
            StudioBusyError: a generation is already running.
            GenerationError: nothing could be produced; ``error_message`` is set.
        """
        if self.is_generating:
            raise StudioBusyError("Generation already in progress")

        self.error_message = None
        self.advisory = None
        request = GenerationRequest(
            subject_image=self.subject_photo,
            garment_image=self.garment_photo,
            model_id=self.selected_model.id,
            credential=self.session.credential,
        )

        ticket = self._tickets.issue()
        self.is_generating = True
        try:
            outcome = await self.dispatcher.generate(request)
        except GenerationError as e:
            if self._tickets.is_current(ticket) and not self._closed:
                self.error_message = e.message
            raise
        finally:
            self.is_generating = False

        if self._closed or not self._tickets.is_current(ticket):
            logger.info("Discarding stale generation result")
            return None

        self.results = [outcome.result]
        self.advisory = outcome.advisory
        self.error_message = outcome.advisory
        self.page = Page.RESULTS
        return outcome

    # Results

    def reset(self) -> None:
        """Start over with new photos ("try another dress")."""
        self._drop_work()
        self.page = Page.UPLOAD

    async def download(self, destination: Path) -> Path:
        """Write the current result to ``destination`` (a file or directory)."""
        result = self.result
        if result is None:
            raise StitchPixError("Nothing to download")

        destination = Path(destination)
        if destination.is_dir():
            destination = destination / DEFAULT_DOWNLOAD_NAME

        if result.is_local:
            data = result.image.data  # type: ignore[union-attr]
        else:
            try:
                async with httpx.AsyncClient(timeout=self.config.http_timeout) as client:
                    response = await client.get(result.url, follow_redirects=True)
                    response.raise_for_status()
                    data = response.content
            except httpx.HTTPError as e:
                self.error_message = "Download failed"
                raise StitchPixError("Download failed") from e

        destination.parent.mkdir(parents=True, exist_ok=True)
        destination.write_bytes(data)
        return destination

    async def close(self) -> None:
        """Tear down; results that arrive afterwards are discarded."""
        self._closed = True
        self._tickets.invalidate()
        await self.auth_client.close()
        for adapter in self.dispatcher.adapters.values():
            close = getattr(adapter, "close", None)
            if close is not None:
                await close()

    def _drop_work(self) -> None:
        self._tickets.invalidate()
        self.photos.clear()
        self.results = []
        self.error_message = None
        self.advisory = None
