"""
Services - Embeddings and text similarity used by semantic routing.
"""

from agent_router.services.embedding_service import (
    EmbeddingConfig,
    EmbeddingService,
    HashEmbeddingProvider,
    LocalEmbeddingProvider,
)
from agent_router.services.similarity import (
    TextSimilarity,
    cosine_similarity,
    jaccard_similarity,
)

__all__ = [
    "EmbeddingConfig",
    "EmbeddingService",
    "HashEmbeddingProvider",
    "LocalEmbeddingProvider",
    "TextSimilarity",
    "cosine_similarity",
    "jaccard_similarity",
]
