"""
Text Similarity - Vector and word-set similarity measures.

``TextSimilarity`` scores texts with cosine similarity over
embeddings and falls back to Jaccard similarity of their word sets when
embedding fails for that pair.
"""

import logging
from typing import Any, List, Sequence

logger = logging.getLogger(__name__)


def cosine_similarity(a: Sequence[float], b: Sequence[float]) -> float:
    """Calculate cosine similarity between two vectors."""
    if len(a) != len(b):
        raise ValueError(f"Vector dimensions differ: {len(a)} != {len(b)}")
    dot_product = sum(x * y for x, y in zip(a, b))
    norm_a = sum(x * x for x in a) ** 0.5
    norm_b = sum(x * x for x in b) ** 0.5
    if norm_a == 0 or norm_b == 0:
        return 0.0
    return dot_product / (norm_a * norm_b)


def _words(text: str) -> set:
    # Empty string still counts as one word
    return set(text.lower().split()) or {""}


def jaccard_similarity(text1: str, text2: str) -> float:
    """Jaccard similarity of the lower-cased whitespace word sets."""
    words1 = _words(text1)
    words2 = _words(text2)
    union = words1 | words2
    if not union:
        return 0.0
    return len(words1 & words2) / len(union)


class TextSimilarity:
    """
    Pairwise text similarity backed by an embedding service.

    Args:
        embedding_service: Object with async ``embed(text) -> List[float]``
    """

    def __init__(self, embedding_service: Any):
        self.embedding_service = embedding_service

    async def vector_similarity(self, text1: str, text2: str) -> float:
        vector1: List[float] = await self.embedding_service.embed(text1)
        vector2: List[float] = await self.embedding_service.embed(text2)
        return cosine_similarity(vector1, vector2)

    async def similarity(self, text1: str, text2: str) -> float:
        """Cosine similarity of the embeddings, Jaccard when embedding fails."""
        try:
            return await self.vector_similarity(text1, text2)
        except Exception as e:
            logger.warning(f"Vector similarity failed, falling back to Jaccard: {e}")
            return jaccard_similarity(text1, text2)

    async def similarities(self, text: str, documents: List[str]) -> List[float]:
        """
        Similarity of ``text`` to each document, in document order.

        Documents are embedded in one batch when the service offers
        ``embed_many``. If the batch fails, every pair is scored on its
        own so the Jaccard fallback still applies per pair.
        """
        embed_many = getattr(self.embedding_service, "embed_many", None)
        if embed_many is not None and documents:
            try:
                query: List[float] = await self.embedding_service.embed(text)
                vectors: List[List[float]] = await embed_many(documents)
                return [cosine_similarity(query, vector) for vector in vectors]
            except Exception as e:
                logger.warning(f"Batch similarity failed, scoring {len(documents)} documents one by one: {e}")

        return [await self.similarity(text, document) for document in documents]
