"""
LLM client for OpenAI-compatible text completion endpoints.

Sampling is fixed for reproducible answers: temperature 0, top-p 1 and no
frequency or presence penalty.
"""

import logging
import time

import requests

from askdocs.errors import ProviderError

logger = logging.getLogger(__name__)

RETRYABLE_STATUS = (429, 502, 503, 504)


class CompletionEndpointLLM:
    """LLM client for the /completions endpoint."""

    def __init__(
        self,
        api_key: str,
        model: str = "gpt-3.5-turbo-instruct",
        base_url: str = "https://api.openai.com/v1",
        max_tokens: int = 300,
        timeout: float = 60.0,
        max_retries: int = 3,
        retry_delay: float = 2.0,
    ):
        """
        Initialize the completion client.

        Args:
            api_key: Provider API key
            model: Completion model name
            base_url: Base URL of the provider API
            max_tokens: Maximum tokens to generate
            timeout: Request timeout in seconds
            max_retries: Attempts on 429/502/503/504 and connection errors
            retry_delay: Initial delay between retries (exponential backoff)
        """
        self.api_key = api_key
        self.model = model
        self.endpoint_url = f"{base_url.rstrip('/')}/completions"
        self.max_tokens = max_tokens
        self.timeout = timeout
        self.max_retries = max_retries
        self.retry_delay = retry_delay

    def build_payload(self, prompt: str) -> dict:
        return {
            "model": self.model,
            "prompt": prompt,
            "max_tokens": self.max_tokens,
            "temperature": 0,
            "top_p": 1,
            "frequency_penalty": 0,
            "presence_penalty": 0,
        }

    def invoke(self, prompt: str) -> str:
        """
        Generate a completion for ``prompt``.

        Args:
            prompt: The input prompt text

        Returns:
            The generated text, verbatim

        Raises:
            ProviderError: If the request fails after all retries or the
                response has no completion text
        """
        payload = self.build_payload(prompt)
        headers = {"Authorization": f"Bearer {self.api_key}"}

        for attempt in range(self.max_retries):
            try:
                response = requests.post(
                    self.endpoint_url, json=payload, headers=headers, timeout=self.timeout
                )
                response.raise_for_status()
                result = response.json()
                return result["choices"][0]["text"]

            except requests.HTTPError as e:
                status = e.response.status_code if e.response is not None else None
                if status in RETRYABLE_STATUS and attempt < self.max_retries - 1:
                    delay = self.retry_delay * (2 ** attempt)
                    logger.warning(
                        f"Endpoint returned {status}, "
                        f"retrying in {delay:.1f}s (attempt {attempt + 1}/{self.max_retries})"
                    )
                    time.sleep(delay)
                    continue
                raise ProviderError(f"Completion request failed with HTTP {status}") from e

            except (requests.Timeout, requests.ConnectionError) as e:
                if attempt < self.max_retries - 1:
                    delay = self.retry_delay * (2 ** attempt)
                    logger.warning(
                        f"Connection error: {e}, "
                        f"retrying in {delay:.1f}s (attempt {attempt + 1}/{self.max_retries})"
                    )
                    time.sleep(delay)
                    continue
                raise ProviderError(f"Completion request failed: {e}") from e

            except (ValueError, KeyError, IndexError, TypeError) as e:
                raise ProviderError(f"Malformed completion response: {e}") from e

        raise ProviderError("All retry attempts failed")
