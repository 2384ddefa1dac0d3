"""LLM provider clients."""

from .openai_client import OpenAIClient, extract_output_text

__all__ = ["OpenAIClient", "extract_output_text"]
