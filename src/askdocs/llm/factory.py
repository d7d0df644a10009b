"""
LLM factory for creating the answer-generation client from settings.
"""

from typing import TYPE_CHECKING, Protocol

if TYPE_CHECKING:
    from askdocs.config import Settings


class LLMProtocol(Protocol):
    """Protocol that all LLM clients must implement."""

    def invoke(self, prompt: str) -> str:
        """Call the LLM with a prompt and return the response."""
        ...


def create_llm(settings: "Settings") -> LLMProtocol:
    """
    Create an LLM client based on configuration settings.

    Args:
        settings: Application settings

    Returns:
        LLM client that implements the LLMProtocol

    Raises:
        ConfigMissingError: If the provider API key is not configured
    """
    from askdocs.llm.completions import CompletionEndpointLLM

    return CompletionEndpointLLM(
        api_key=settings.require_api_key(),
        model=settings.completion_model,
        base_url=settings.api_base_url,
        max_tokens=settings.llm_max_tokens,
        timeout=settings.request_timeout,
        max_retries=settings.max_retries,
    )
