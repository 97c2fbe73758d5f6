"""Clients for the Linear and Gemini APIs."""

from .gemini_client import GeminiClient
from .linear_client import Issue, LinearClient

__all__ = ["GeminiClient", "Issue", "LinearClient"]
