"""
Embedding generation via an OpenAI-compatible embeddings API.

Used for both document chunks (one batched call per document) and queries.
"""

import logging
import time
from typing import Optional

import httpx
import numpy as np
from numpy.typing import NDArray

from askdocs.errors import ProviderError

logger = logging.getLogger(__name__)


class OpenAIEmbedder:
    """
    Generate embeddings using the /embeddings endpoint.

    Retries rate limits and server errors with exponential backoff.

    Example:
        >>> embedder = OpenAIEmbedder(api_key="sk-...")
        >>> vectors = embedder.embed_texts(["How do I reset my password?"])
        >>> vectors.shape
        (1, 1536)
    """

    def __init__(
        self,
        api_key: str,
        model: str = "text-embedding-ada-002",
        base_url: str = "https://api.openai.com/v1",
        batch_size: int = 2048,
        timeout: float = 60.0,
        max_retries: int = 3,
        initial_retry_delay: float = 1.0,
    ) -> None:
        """
        Initialize the embedder.

        Args:
            api_key: Provider API key
            model: Embedding model name
            base_url: Base URL of the provider API
            batch_size: Maximum number of texts per API call
            timeout: Request timeout in seconds
            max_retries: Attempts per request on 429/5xx responses
            initial_retry_delay: First backoff delay in seconds
        """
        self.api_key = api_key
        self.model = model
        self.base_url = base_url.rstrip("/")
        self.batch_size = batch_size
        self.timeout = timeout
        self.max_retries = max_retries
        self.initial_retry_delay = initial_retry_delay

    @classmethod
    def from_settings(cls, settings) -> "OpenAIEmbedder":
        """Build an embedder from application settings."""
        return cls(
            api_key=settings.require_api_key(),
            model=settings.embedding_model,
            base_url=settings.api_base_url,
            batch_size=settings.embedding_batch_size,
            timeout=settings.request_timeout,
            max_retries=settings.max_retries,
        )

    def __call__(self, texts: list[str]) -> NDArray[np.float64]:
        return self.embed_texts(texts)

    def embed_texts(self, texts: list[str]) -> NDArray[np.float64]:
        """
        Generate embeddings for a list of texts.

        Args:
            texts: List of texts to embed

        Returns:
            Array of shape (len(texts), dimension), rows in input order

        Raises:
            ProviderError: If any request fails or returns a malformed body
        """
        if not texts:
            return np.empty((0, 0), dtype=np.float64)

        batches: list[NDArray[np.float64]] = []
        with httpx.Client(timeout=self.timeout) as client:
            for i in range(0, len(texts), self.batch_size):
                batch = texts[i : i + self.batch_size]
                batches.append(self._embed_batch(client, batch))

        return np.vstack(batches)

    def embed_query(self, query: str) -> NDArray[np.float64]:
        """
        Generate the embedding for a single query.

        Returns:
            Array of shape (dimension,)
        """
        return self.embed_texts([query])[0]

    def _embed_batch(self, client: httpx.Client, texts: list[str]) -> NDArray[np.float64]:
        """
        Embed one batch of texts with retry logic.

        Args:
            client: Open HTTP client
            texts: Texts to embed (at most batch_size)

        Returns:
            Array of embeddings in input order
        """
        url = f"{self.base_url}/embeddings"
        headers = {
            "Authorization": f"Bearer {self.api_key}",
            "Content-Type": "application/json",
        }
        payload = {"model": self.model, "input": texts}

        retry_delay = self.initial_retry_delay
        response: Optional[httpx.Response] = None

        for attempt in range(self.max_retries):
            try:
                response = client.post(url, json=payload, headers=headers)
            except httpx.HTTPError as e:
                raise ProviderError(f"Embedding request failed: {e}") from e

            retryable = response.status_code == 429 or response.status_code >= 500
            if retryable and attempt < self.max_retries - 1:
                logger.warning(
                    f"Embedding endpoint returned {response.status_code}, "
                    f"retrying in {retry_delay:.1f}s (attempt {attempt + 1}/{self.max_retries})"
                )
                time.sleep(retry_delay)
                retry_delay *= 2
                continue
            break

        assert response is not None
        try:
            response.raise_for_status()
        except httpx.HTTPStatusError as e:
            raise ProviderError(
                f"Embedding request failed with HTTP {response.status_code}"
            ) from e

        return self._parse_response(response, len(texts))

    @staticmethod
    def _parse_response(response: httpx.Response, expected: int) -> NDArray[np.float64]:
        """Extract vectors from an embeddings response, ordered by item index."""
        try:
            data = response.json()["data"]
            items = sorted(data, key=lambda item: item["index"])
            vectors = np.array([item["embedding"] for item in items], dtype=np.float64)
        except (ValueError, KeyError, TypeError) as e:
            raise ProviderError(f"Malformed embedding response: {e}") from e

        if vectors.ndim != 2 or vectors.shape[0] != expected:
            raise ProviderError(
                f"Expected {expected} embeddings, got {vectors.shape[0] if vectors.ndim else 0}"
            )
        return vectors
