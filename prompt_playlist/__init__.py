"""Prompt-to-playlist generation over a label's track catalog."""
from .catalog import InMemoryCatalogStore, JsonCatalogStore, SqliteCatalogStore, open_catalog
from .config import PipelineConfig, default_pipeline_config
from .errors import (
    CatalogEmptyError,
    MalformedResponseError,
    PipelineError,
    ProviderUnavailableError,
    ReconciliationEmptyError,
    RetryableSelectionError,
)
from .models import CatalogTrack, PlaylistRequest, PlaylistResult
from .pipeline import PlaylistPipeline

__version__ = "0.1.0"

__all__ = [
    "InMemoryCatalogStore",
    "JsonCatalogStore",
    "SqliteCatalogStore",
    "open_catalog",
    "PipelineConfig",
    "default_pipeline_config",
    "CatalogEmptyError",
    "MalformedResponseError",
    "PipelineError",
    "ProviderUnavailableError",
    "ReconciliationEmptyError",
    "RetryableSelectionError",
    "CatalogTrack",
    "PlaylistRequest",
    "PlaylistResult",
    "PlaylistPipeline",
]
