"""
AI Provider Registry.

Maps a configuration key ("mock", "openai", "gemini") to a factory and picks
the provider the app will use.

DESIGN NOTES:
- load() returns a ProviderLoadResult instead of raising, so the reason a
  remote provider was skipped can be inspected (tests, /ai/provider)
- select_provider() never raises: unknown names and load failures fall back
  to the mock provider with a warning
- Nothing is cached here; the app factory builds one provider and keeps it
  on app.state
"""

from dataclasses import dataclass
from typing import Callable, Dict, List, Optional
import logging

from fintrack.core.exceptions import ProviderUnavailableError
from fintrack.core.settings import Settings
from fintrack.services.ai_plugin.base import AIProvider
from fintrack.services.ai_plugin.mock_provider import MockAIProvider

logger = logging.getLogger(__name__)

DEFAULT_PROVIDER = "mock"

ProviderFactory = Callable[[], AIProvider]


@dataclass
class ProviderLoadResult:
    """Outcome of building one provider."""
    name: str
    provider: Optional[AIProvider] = None
    error: Optional[Exception] = None

    @property
    def ok(self) -> bool:
        return self.provider is not None and self.error is None


class ProviderRegistry:
    """Lowercase provider key -> factory."""

    def __init__(self):
        self._factories: Dict[str, ProviderFactory] = {}

    def register(self, name: str, factory: ProviderFactory) -> None:
        self._factories[name.strip().lower()] = factory

    def names(self) -> List[str]:
        return sorted(self._factories)

    def __contains__(self, name: str) -> bool:
        return name.strip().lower() in self._factories

    def load(self, name: str) -> ProviderLoadResult:
        """
        Build the provider registered under name.

        Returns:
            ProviderLoadResult with either provider or error set
        """
        key = name.strip().lower()
        factory = self._factories.get(key)
        if factory is None:
            return ProviderLoadResult(
                name=key,
                error=ProviderUnavailableError(f"Unknown AI provider: {key!r}"),
            )

        try:
            return ProviderLoadResult(name=key, provider=factory())
        except ProviderUnavailableError as e:
            return ProviderLoadResult(name=key, error=e)
        except Exception as e:  # import errors, bad config, SDK construction failures
            wrapped = ProviderUnavailableError(f"Failed to load AI provider {key!r}: {e}")
            wrapped.__cause__ = e
            return ProviderLoadResult(name=key, error=wrapped)


def default_registry(settings: Settings) -> ProviderRegistry:
    """Registry with the built-in providers wired to settings."""
    registry = ProviderRegistry()

    registry.register("mock", MockAIProvider)

    def openai_factory() -> AIProvider:
        from fintrack.services.ai_plugin.openai_provider import OpenAIProvider
        return OpenAIProvider(
            api_key=settings.OPENAI_API_KEY,
            model=settings.OPENAI_MODEL,
            api_url=settings.OPENAI_API_URL,
            timeout_seconds=settings.AI_TIMEOUT_SECONDS,
        )

    def gemini_factory() -> AIProvider:
        from fintrack.services.ai_plugin.gemini_provider import GeminiAIProvider
        return GeminiAIProvider(
            api_key=settings.GEMINI_API_KEY,
            model=settings.GEMINI_MODEL,
            timeout_seconds=settings.AI_TIMEOUT_SECONDS,
        )

    registry.register("openai", openai_factory)
    registry.register("gemini", gemini_factory)
    return registry


def _fallback(registry: ProviderRegistry) -> AIProvider:
    """The registry's mock provider, or a default-built one when it cannot load."""
    if DEFAULT_PROVIDER in registry:
        result = registry.load(DEFAULT_PROVIDER)
        if result.ok:
            return result.provider
    return MockAIProvider()


def select_provider(name: Optional[str], registry: ProviderRegistry) -> AIProvider:
    """
    Pick the provider for a configuration value.

    Empty -> mock. Unknown name or load failure -> mock with a warning.

    Args:
        name: Configured provider name (case-insensitive)
        registry: Provider factories

    Returns:
        A ready provider, never None
    """
    key = (name or "").strip().lower() or DEFAULT_PROVIDER

    if key not in registry:
        logger.warning(f"⚠️ Unknown AI_PROVIDER={key!r}, falling back to mock provider")
        return _fallback(registry)

    result = registry.load(key)
    if result.ok:
        logger.info(f"✅ AI provider selected: {result.provider.name}")
        return result.provider

    logger.warning(f"⚠️ AI provider {key!r} unavailable ({result.error}), falling back to mock provider")
    return _fallback(registry)
