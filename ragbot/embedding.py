"""
Embedding providers.
Both expose embed(text) and embed_batch(texts); batch output keeps input order.
"""
from typing import List
import numpy as np
import openai

from . import config
from .errors import ProviderError
from .logging_config import logger


class OpenAIEmbeddingProvider:
    """Embeddings from the OpenAI API (1536 dimensions for ada-002)."""

    def __init__(self, client, model: str = config.OPENAI_EMBED_MODEL,
                 batch_size: int = config.EMBED_BATCH_SIZE):
        self.client = client
        self.model = model
        self.batch_size = max(1, batch_size)

    def embed(self, text: str) -> List[float]:
        return self.embed_batch([text])[0]

    def embed_batch(self, texts: List[str]) -> List[List[float]]:
        """Embed `texts` in requests of at most `batch_size` inputs; output keeps input order."""
        vectors = []
        for start in range(0, len(texts), self.batch_size):
            vectors.extend(self._request(texts[start:start + self.batch_size]))
        return vectors

    def _request(self, texts: List[str]) -> List[List[float]]:
        try:
            response = self.client.embeddings.create(model=self.model, input=texts)
        except openai.OpenAIError as e:
            logger.error("Embedding request failed", model=self.model, count=len(texts), error=str(e))
            raise ProviderError(f"Embedding request failed: {e}") from e

        # the API tags every vector with the position of its input
        data = sorted(response.data, key=lambda item: item.index)
        if len(data) != len(texts):
            raise ProviderError(
                f"Embedding provider returned {len(data)} vectors for {len(texts)} inputs"
            )
        return [list(item.embedding) for item in data]


class LocalEmbeddingProvider:
    """
    Embeddings from a local sentence-transformers model.
    Set EMBED_DIM to the model's output size (384 for all-MiniLM-L6-v2).
    """

    def __init__(self, model_name: str = config.EMBED_MODEL):
        self.model_name = model_name
        self._model = None

    def preload(self):
        """Load the model up front to avoid first-request delay."""
        if self._model is None:
            from sentence_transformers import SentenceTransformer
            logger.info("Loading embedding model", model=self.model_name)

            # explicit tokenizer settings avoid a FutureWarning
            self._model = SentenceTransformer(
                self.model_name,
                tokenizer_kwargs={'clean_up_tokenization_spaces': False}
            )

            # Warm up with a test embedding
            self._model.encode(["test"], normalize_embeddings=True, show_progress_bar=False)
            logger.info("Embedding model loaded", model=self.model_name)
        return self._model

    def embed(self, text: str) -> List[float]:
        return self.embed_batch([text])[0]

    def embed_batch(self, texts: List[str]) -> List[List[float]]:
        if not texts:
            return []
        try:
            model = self.preload()
            vecs = model.encode(texts, normalize_embeddings=True, show_progress_bar=False)
        except Exception as e:
            raise ProviderError(f"Local embedding failed: {e}") from e
        if isinstance(vecs, np.ndarray):
            return vecs.tolist()
        return [list(v) for v in vecs]
