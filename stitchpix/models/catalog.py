"""Catalog of generation backends."""

from __future__ import annotations

from enum import Enum
from typing import Iterable

from pydantic import BaseModel, ConfigDict


class Tier(str, Enum):
    FREE = "free"
    PAID = "paid"


class Backend(str, Enum):
    """Which implementation serves a model."""
    CANVAS = "canvas"
    NANOBANANA = "nanobanana"
    DEEPAI = "deepai"
    REPLICATE = "replicate"
    STABILITY = "stability"


class ModelDescriptor(BaseModel):
    """A selectable generation backend."""

    model_config = ConfigDict(frozen=True)

    id: str
    display_name: str
    description: str = ""
    requires_credential: bool = False
    tier: Tier = Tier.FREE
    backend: Backend


DEFAULT_MODELS: tuple[ModelDescriptor, ...] = (
    ModelDescriptor(
        id="canvas",
        display_name="Canvas Merge (Free)",
        description="Local canvas merging fallback",
        requires_credential=False,
        tier=Tier.FREE,
        backend=Backend.CANVAS,
    ),
    ModelDescriptor(
        id="nanobanana",
        display_name="NanoBanana",
        description="Virtual try-on API",
        requires_credential=True,
        tier=Tier.FREE,
        backend=Backend.NANOBANANA,
    ),
    ModelDescriptor(
        id="deepai",
        display_name="DeepAI",
        description="Image editing API",
        requires_credential=True,
        tier=Tier.FREE,
        backend=Backend.DEEPAI,
    ),
    ModelDescriptor(
        id="replicate",
        display_name="Replicate",
        description="Community models",
        requires_credential=True,
        tier=Tier.PAID,
        backend=Backend.REPLICATE,
    ),
    ModelDescriptor(
        id="stability",
        display_name="Stability AI",
        description="Image generation",
        requires_credential=True,
        tier=Tier.PAID,
        backend=Backend.STABILITY,
    ),
)

DEFAULT_MODEL_ID = "canvas"


class ModelRegistry:
    """Static, ordered lookup of model descriptors by id."""

    def __init__(
        self,
        descriptors: Iterable[ModelDescriptor] = DEFAULT_MODELS,
        default_id: str = DEFAULT_MODEL_ID,
    ):
        self._descriptors: dict[str, ModelDescriptor] = {}
        for descriptor in descriptors:
            if descriptor.id in self._descriptors:
                raise ValueError(f"Duplicate model id: {descriptor.id}")
            self._descriptors[descriptor.id] = descriptor

        if default_id not in self._descriptors:
            raise ValueError(f"Default model {default_id!r} is not registered")
        self._default_id = default_id

    @property
    def default(self) -> ModelDescriptor:
        return self._descriptors[self._default_id]

    def resolve(self, model_id: str | None) -> ModelDescriptor:
        """Look up a model; unknown ids resolve to the default entry."""
        if model_id is None:
            return self.default
        return self._descriptors.get(model_id, self.default)

    def list(self) -> list[ModelDescriptor]:
        """All models, free tier first, declaration order within a tier."""
        order = list(Tier)
        # sorted() is stable: declaration order survives inside each tier
        return sorted(self._descriptors.values(), key=lambda d: order.index(d.tier))

    def grouped(self) -> dict[Tier, list[ModelDescriptor]]:
        groups: dict[Tier, list[ModelDescriptor]] = {tier: [] for tier in Tier}
        for descriptor in self.list():
            groups[descriptor.tier].append(descriptor)
        return groups

