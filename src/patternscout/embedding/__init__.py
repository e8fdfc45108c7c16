"""Embedding providers and the startup factory that selects one.

Each backend implements the same capability interface (`name`, `is_ready()`,
`embed(text)`). `get_embedding_provider` picks one from configuration once at
startup.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from patternscout.core.config import EmbeddingConfig
from patternscout.core.console import get_logger
from patternscout.core.result import CapabilityMissingError, ConfigurationError

from .hashing import HashEmbeddingProvider, hash_embedding
from .remote import RemoteEmbeddingProvider
from .sentence import SentenceTransformerProvider

if TYPE_CHECKING:
    from patternscout.search.protocols import EmbeddingProvider

logger = get_logger(__name__)


def get_embedding_provider(config: EmbeddingConfig | None = None) -> EmbeddingProvider:
    """Select the embedding backend named by `config.provider`.

    "auto" prefers a reachable remote server, then a local model, and falls
    back to hashing so that search always has a provider.
    """
    config = config or EmbeddingConfig()

    match config.provider:
        case "hash":
            return HashEmbeddingProvider(config.dimension)
        case "sentence-transformers":
            st_provider = SentenceTransformerProvider(config.model_name)
            if not st_provider.is_ready():
                raise CapabilityMissingError(
                    "sentence-transformers provider requested but unavailable",
                    context={"model": config.model_name},
                )
            return st_provider
        case "remote":
            if not config.server_url:
                raise ConfigurationError("Remote embedding provider requires server_url")
            return RemoteEmbeddingProvider(config.server_url, config.model_name)
        case "auto":
            if config.server_url:
                remote = RemoteEmbeddingProvider(config.server_url, config.model_name)
                if remote.is_ready():
                    logger.debug("Using remote embeddings at %s", remote.server_url)
                    return remote
            local = SentenceTransformerProvider(config.model_name)
            if local.is_ready():
                logger.debug("Using local model %s", config.model_name)
                return local
            logger.debug("No model backend available; using hash embeddings")
            return HashEmbeddingProvider(config.dimension)

    raise ConfigurationError(
        "Unknown embedding provider", context={"provider": config.provider}
    )


__all__ = [
    "HashEmbeddingProvider",
    "RemoteEmbeddingProvider",
    "SentenceTransformerProvider",
    "get_embedding_provider",
    "hash_embedding",
]
