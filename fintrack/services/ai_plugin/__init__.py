"""
AI Plug-in Architecture.

One provider contract, three implementations (mock, OpenAI, Gemini), and a
registry that picks one from configuration and falls back to mock.
"""

from fintrack.services.ai_plugin.base import AIProvider
from fintrack.services.ai_plugin.mock_provider import MockAIProvider
from fintrack.services.ai_plugin.registry import (
    ProviderLoadResult,
    ProviderRegistry,
    default_registry,
    select_provider,
)

__all__ = [
    "AIProvider",
    "MockAIProvider",
    "ProviderLoadResult",
    "ProviderRegistry",
    "default_registry",
    "select_provider",
]
