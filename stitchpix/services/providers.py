"""Remote try-on provider adapters.

Each adapter turns the two photos and the caller's API key into one
provider-specific HTTP request and parses the provider's JSON reply into
``AdapterOutput`` values. Adapters make exactly one request and never retry;
falling back is the dispatcher's job.
"""

import logging
from dataclasses import dataclass
from typing import Any, Protocol

import httpx

from ..errors import AdapterError
from ..models.generation import SourceTag
from ..models.image import EncodedImage


logger = logging.getLogger(__name__)

NANOBANANA_URL = "https://api.nanobanana.ai/api/try-on"
DEEPAI_URL = "https://api.deepai.org/api/image-editor"
DEEPAI_INSTRUCTION = "merge with dress image and create virtual try-on"


@dataclass(frozen=True)
class AdapterOutput:
    url: str
    label: str
    source: SourceTag


class TryOnAdapter(Protocol):
    name: str
    
    async def invoke(
        self,
        subject: EncodedImage,
        garment: EncodedImage,
        credential: str | None,
    ) -> list[AdapterOutput]: ...


class HTTPAdapter:
    """Shared plumbing: lazy client, one request, error mapping."""
    
    name = "provider"
    source: SourceTag
    
    def __init__(
        self,
        url: str,
        client: httpx.AsyncClient | None = None,
        timeout: float = 60.0,
    ):
        self.url = url
        self.timeout = timeout
        self._client = client
    
    @property
    def client(self) -> httpx.AsyncClient:
        """Get or create the HTTP client."""
        if self._client is None or self._client.is_closed:
            self._client = httpx.AsyncClient(timeout=self.timeout)
        return self._client
    
    def _require_credential(self, credential: str | None) -> str:
        if not credential:
            raise AdapterError(self.name, f"{self.name} requires API key")
        return credential
    
    async def _send(self, **kwargs: Any) -> dict[str, Any]:
        try:
            response = await self.client.post(self.url, **kwargs)
        except httpx.HTTPError as e:
            raise AdapterError(self.name, f"{self.name} request failed: {e}") from e
        
        if not response.is_success:
            raise AdapterError(
                self.name,
                f"{self.name} failed ({response.status_code})",
                status=response.status_code,
            )
        
        try:
            data = response.json()
        except ValueError as e:
            raise AdapterError(
                self.name, f"{self.name} returned no image", status=response.status_code
            ) from e
        return data if isinstance(data, dict) else {}
    
    def _output(self, url: Any) -> list[AdapterOutput]:
        if not isinstance(url, str) or not url:
            raise AdapterError(self.name, f"{self.name} returned no image")
        return [AdapterOutput(url=url, label=self.name, source=self.source)]
    
    async def close(self):
        """Close the HTTP client."""
        if self._client is not None and not self._client.is_closed:
            await self._client.aclose()
            self._client = None


class NanoBananaAdapter(HTTPAdapter):
    """Multipart upload of both photos with a bearer token."""
    
    name = "NanoBanana"
    source = SourceTag.NANOBANANA
    
    def __init__(self, url: str = NANOBANANA_URL, **kwargs: Any):
        super().__init__(url, **kwargs)
    
    async def invoke(
        self,
        subject: EncodedImage,
        garment: EncodedImage,
        credential: str | None,
    ) -> list[AdapterOutput]:
        credential = self._require_credential(credential)
        files = {
            "person_image": ("user.jpg", subject.data, subject.mime_type),
            "garment_image": ("dress.jpg", garment.data, garment.mime_type),
        }
        data = await self._send(
            files=files,
            headers={"Authorization": f"Bearer {credential}"},
        )
        return self._output(data.get("output_url") or data.get("image_url"))


class DeepAIAdapter(HTTPAdapter):
    """JSON image-editor call; only the subject photo is sent."""
    
    name = "DeepAI"
    source = SourceTag.DEEPAI
    
    def __init__(self, url: str = DEEPAI_URL, instruction: str = DEEPAI_INSTRUCTION, **kwargs: Any):
        super().__init__(url, **kwargs)
        self.instruction = instruction
    
    async def invoke(
        self,
        subject: EncodedImage,
        garment: EncodedImage,
        credential: str | None,
    ) -> list[AdapterOutput]:
        credential = self._require_credential(credential)
        data = await self._send(
            json={"image": subject.to_data_url(), "text": self.instruction},
            headers={"api-key": credential},
        )
        return self._output(data.get("output_url"))
