"""LLM provider adapters."""

from foliolab.adapters.llm.chat_client import ChatCompletionClient
from foliolab.adapters.llm.decoding import decode_response, extract_json

__all__ = ["ChatCompletionClient", "decode_response", "extract_json"]
