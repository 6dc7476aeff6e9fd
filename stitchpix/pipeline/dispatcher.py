"""Generation dispatch with a single compositor fallback."""

import logging

from ..errors import AdapterError, CompositionError, GenerationError, GenerationErrorKind
from ..models.catalog import Backend, ModelDescriptor, ModelRegistry
from ..models.generation import GenerationOutcome, GenerationRequest, GenerationResult
from ..services.providers import TryOnAdapter
from .compositor import Compositor


logger = logging.getLogger(__name__)


class TryOnDispatcher:
    """Routes a request to the compositor or a remote adapter.
    
    Flow:
    1. Resolve the model descriptor once
    2. Canvas models go straight to the compositor
    3. Remote models get one adapter call
    4. Any adapter failure falls back to the compositor, once; the adapter
       error travels back as an advisory instead of being raised
    """
    
    def __init__(
        self,
        registry: ModelRegistry,
        compositor: Compositor,
        adapters: dict[Backend, TryOnAdapter] | None = None,
    ):
        self.registry = registry
        self.compositor = compositor
        self.adapters = dict(adapters or {})
    
    async def generate(self, request: GenerationRequest) -> GenerationOutcome:
        """Produce one result for the request.
        
        Raises:
            GenerationError: missing photos or API key (before any network
                call), or both the remote and the local path failed.
        """
        if not request.has_images:
            raise GenerationError(GenerationErrorKind.MISSING_IMAGES, "Please upload both photos.")
        
        descriptor = self.registry.resolve(request.model_id)
        if descriptor.requires_credential and not request.has_credential:
            raise GenerationError(
                GenerationErrorKind.MISSING_CREDENTIAL,
                f"API key required for {descriptor.display_name}",
            )
        
        if descriptor.backend is Backend.CANVAS:
            return GenerationOutcome(result=await self._compose(request))
        
        try:
            result = await self._invoke_remote(descriptor, request)
        except AdapterError as e:
            logger.warning("%s failed, falling back to canvas merge: %s", descriptor.display_name, e.message)
            fallback = await self._compose(request)
            return GenerationOutcome(
                result=fallback,
                advisory=f"{e.message}; falling back to canvas merge",
                cause=e,
            )
        return GenerationOutcome(result=result)
    
    async def _invoke_remote(self, descriptor: ModelDescriptor, request: GenerationRequest) -> GenerationResult:
        adapter = self.adapters.get(descriptor.backend)
        if adapter is None:
            raise AdapterError(descriptor.display_name, f"{descriptor.display_name} is not available")
        
        try:
            outputs = await adapter.invoke(
                request.subject_image,  # type: ignore[arg-type]
                request.garment_image,  # type: ignore[arg-type]
                request.credential,
            )
        except AdapterError:
            raise
        except Exception as e:
            raise AdapterError(descriptor.display_name, f"{descriptor.display_name} failed: {e}") from e
        
        if not outputs:
            raise AdapterError(descriptor.display_name, "Model returned no images")
        
        first = outputs[0]
        return GenerationResult(remote_url=first.url, label=first.label, source=first.source)
    
    async def _compose(self, request: GenerationRequest) -> GenerationResult:
        try:
            return await self.compositor.compose_async(
                request.subject_image,  # type: ignore[arg-type]
                request.garment_image,  # type: ignore[arg-type]
            )
        except CompositionError as e:
            logger.error("Canvas merge failed: %s", e)
            raise GenerationError(GenerationErrorKind.GENERATION_FAILED, "Generation failed.", cause=e) from e
        except Exception as e:
            logger.exception("Canvas merge crashed")
            raise GenerationError(GenerationErrorKind.GENERATION_FAILED, "Generation failed.", cause=e) from e
