"""
Embedding Service - Vector embeddings for semantic route matching.

RESPONSIBILITY:
Converts text into dense vectors so the semantic similarity strategy can
compare a request against route documents.

PROVIDERS:
- hash: Deterministic placeholder. A 32-bit string hash seeds a sine wave
  over a fixed dimension. Cheap and stable, carries no real semantics.
- local: Sentence Transformers model loaded lazily on first use.

Anything with an async ``embed(text) -> List[float]`` can replace this
service in the router.
"""

import hashlib
import logging
import math
from collections import OrderedDict
from dataclasses import dataclass
from typing import List, Optional

logger = logging.getLogger(__name__)


@dataclass
class EmbeddingConfig:
    """Configuration for embedding service."""
    provider: str = "hash"  # "hash" or "local"
    model: str = "all-MiniLM-L6-v2"
    dimension: int = 1536
    batch_size: int = 100
    cache_enabled: bool = True
    cache_size: int = 1024  # least recently used entries are evicted past this
    device: str = "cpu"  # "cpu", "cuda", or "mps"


def _to_int32(value: int) -> int:
    value &= 0xFFFFFFFF
    if value >= 0x80000000:
        value -= 0x100000000
    return value


def simple_hash(text: str) -> int:
    """
    Signed 32-bit rolling hash (``h * 31 + c``) over UTF-16 code units.
    """
    h = 0
    data = text.encode("utf-16-le")
    for i in range(0, len(data), 2):
        code = data[i] | (data[i + 1] << 8)
        h = _to_int32(_to_int32(h << 5) - h + code)
    return h


class HashEmbeddingProvider:
    """
    Placeholder embedding provider.

    Every component is ``sin(hash + i) * 0.1``, so equal texts map to equal
    vectors and no model or network is needed.
    """

    def __init__(self, dimension: int = 1536):
        self.dimension = dimension

    async def embed_text(self, text: str) -> List[float]:
        seed = simple_hash(text)
        return [math.sin(seed + i) * 0.1 for i in range(self.dimension)]

    async def embed_batch(self, texts: List[str]) -> List[List[float]]:
        return [await self.embed_text(text) for text in texts]


class LocalEmbeddingProvider:
    """
    Local embedding provider using Sentence Transformers.

    No API calls - runs entirely on local hardware.
    Model is loaded once and reused for all embeddings.
    """

    def __init__(self, model_name: str = "all-MiniLM-L6-v2", device: str = "cpu"):
        """
        Initialize the local embedding provider.

        Args:
            model_name: Sentence Transformer model name
            device: Device to run on ("cpu", "cuda", "mps")
        """
        self.model_name = model_name
        self.device = device
        self._model = None
        logger.info(f"Initialized LocalEmbeddingProvider with model: {model_name}")

    @property
    def model(self):
        """Lazy load the model on first use."""
        if self._model is None:
            logger.info(f"Loading embedding model: {self.model_name}")
            from sentence_transformers import SentenceTransformer
            self._model = SentenceTransformer(self.model_name, device=self.device)
            logger.info(f"Model loaded successfully on device: {self.device}")
        return self._model

    async def embed_text(self, text: str) -> List[float]:
        embedding = self.model.encode(text, convert_to_numpy=True)
        return embedding.tolist()

    async def embed_batch(self, texts: List[str]) -> List[List[float]]:
        embeddings = self.model.encode(texts, convert_to_numpy=True)
        return embeddings.tolist()


class EmbeddingService:
    """
    Main embedding service with caching and batching support.

    The cache is a bounded LRU keyed by the md5 of the text, so a long
    running process keeps at most ``cache_size`` vectors.

    Usage:
        service = EmbeddingService(EmbeddingConfig(provider="hash"))

        # Single embedding
        embedding = await service.embed("route documents to reviewers")

        # Batch embeddings, used for the route documents of a routing call
        embeddings = await service.embed_many(["text1", "text2"])
    """

    def __init__(self, config: Optional[EmbeddingConfig] = None):
        """
        Initialize embedding service.

        Args:
            config: Embedding configuration
        """
        self.config = config or EmbeddingConfig()
        self._provider = self._create_provider()
        self._cache: Optional[OrderedDict] = OrderedDict() if self.config.cache_enabled else None

    def _create_provider(self):
        """Create the configured provider."""
        if self.config.provider == "hash":
            return HashEmbeddingProvider(dimension=self.config.dimension)

        elif self.config.provider == "local":
            return LocalEmbeddingProvider(
                model_name=self.config.model,
                device=self.config.device
            )

        else:
            raise ValueError(f"Unknown embedding provider: {self.config.provider}")

    async def embed(self, text: str) -> List[float]:
        """
        Generate embedding for text.

        Args:
            text: Text to embed

        Returns:
            Vector embedding as list of floats
        """
        cached = self._cache_get(text)
        if cached is not None:
            return cached

        embedding = await self._provider.embed_text(text)
        self._cache_put(text, embedding)
        return embedding

    async def embed_many(self, texts: List[str]) -> List[List[float]]:
        """
        Embed several texts, sending only cache misses to the provider.

        Misses go out in chunks of ``batch_size``. Results keep input order.
        """
        results: List[Optional[List[float]]] = [self._cache_get(text) for text in texts]
        missing = [i for i, embedding in enumerate(results) if embedding is None]

        for start in range(0, len(missing), self.config.batch_size):
            chunk = missing[start:start + self.config.batch_size]
            embeddings = await self._provider.embed_batch([texts[i] for i in chunk])
            for i, embedding in zip(chunk, embeddings):
                results[i] = embedding
                self._cache_put(texts[i], embedding)

        logger.debug(f"Embedded {len(texts)} texts ({len(missing)} cache misses)")
        return results

    def _get_cache_key(self, text: str) -> str:
        """Generate cache key for text."""
        return hashlib.md5(text.encode()).hexdigest()

    def _cache_get(self, text: str) -> Optional[List[float]]:
        if self._cache is None:
            return None
        key = self._get_cache_key(text)
        embedding = self._cache.get(key)
        if embedding is not None:
            self._cache.move_to_end(key)
        return embedding

    def _cache_put(self, text: str, embedding: List[float]) -> None:
        if self._cache is None:
            return
        key = self._get_cache_key(text)
        self._cache[key] = embedding
        self._cache.move_to_end(key)
        while len(self._cache) > max(1, self.config.cache_size):
            self._cache.popitem(last=False)

    @property
    def dimension(self) -> int:
        """Return embedding dimension."""
        return self.config.dimension

    @property
    def cached_count(self) -> int:
        """Number of vectors currently held in the cache."""
        return len(self._cache) if self._cache is not None else 0

    def clear_cache(self) -> None:
        """Clear the embedding cache."""
        if self._cache is not None:
            self._cache.clear()
