"""LLM clients for askdocs."""

from askdocs.llm.completions import CompletionEndpointLLM
from askdocs.llm.factory import LLMProtocol, create_llm

__all__ = ["CompletionEndpointLLM", "LLMProtocol", "create_llm"]
