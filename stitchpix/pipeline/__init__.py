"""Image ingestion, local composition and generation dispatch."""

from .compositor import Compositor
from .dispatcher import TryOnDispatcher
from .ingestion import ingest_bytes, ingest_data_url, ingest_path

__all__ = [
    "Compositor",
    "TryOnDispatcher",
    "ingest_bytes",
    "ingest_data_url",
    "ingest_path",
]
