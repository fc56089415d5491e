"""
OpenAI AI Provider - chat-completions adapter.

Requires OPENAI_API_KEY. Construction fails with ProviderUnavailableError when
the key is missing, which makes the registry fall back to the mock provider.
"""

from typing import Any, Dict, Optional
import logging

import requests

from fintrack.core.exceptions import ProviderCallError, ProviderUnavailableError
from fintrack.services.ai_plugin.remote import RemoteAIProvider
from fintrack.utils.sanitizer import safe_json

logger = logging.getLogger(__name__)

DEFAULT_API_URL = "https://api.openai.com/v1/chat/completions"
DEFAULT_MODEL = "gpt-4o-mini"


class OpenAIProvider(RemoteAIProvider):
    """OpenAI chat-completions provider (temperature 0, JSON answers)."""

    name = "openai"

    def __init__(
        self,
        api_key: Optional[str],
        model: str = DEFAULT_MODEL,
        api_url: str = DEFAULT_API_URL,
        timeout_seconds: float = 20.0,
        session: Optional[requests.Session] = None,
    ):
        if not api_key or not api_key.strip():
            raise ProviderUnavailableError(
                "OPENAI_API_KEY is missing. Set it before using AI_PROVIDER=openai."
            )
        super().__init__(timeout_seconds=timeout_seconds, session=session)
        self.api_key = api_key.strip()
        self.model = model or DEFAULT_MODEL
        self.api_url = api_url or DEFAULT_API_URL
        logger.info(f"✅ OpenAI AI Provider initialized: {self.model}")

    def get_model_info(self) -> Dict[str, Optional[str]]:
        return {"provider": self.name, "model": self.model, "endpoint": self.api_url}

    def _call_json(self, system: str, user: str) -> Any:
        headers = {
            "Authorization": f"Bearer {self.api_key}",
            "Content-Type": "application/json",
        }
        payload = {
            "model": self.model,
            "messages": [
                {"role": "system", "content": system},
                {"role": "user", "content": user},
            ],
            "temperature": 0,
        }

        try:
            response = self.session.post(
                self.api_url,
                headers=headers,
                json=payload,
                timeout=self.timeout_seconds,
            )
        except requests.RequestException as e:
            raise ProviderCallError(f"OpenAI request failed: {e}") from e

        if not response.ok:
            raise ProviderCallError(
                f"OpenAI error {response.status_code}: {response.text}",
                status_code=response.status_code,
            )

        body = safe_json(response.text)
        if not isinstance(body, dict):
            raise ProviderCallError("OpenAI returned a non-JSON envelope.")

        try:
            content = body["choices"][0]["message"]["content"] or "{}"
        except (KeyError, IndexError, TypeError, AttributeError) as e:
            raise ProviderCallError("OpenAI returned a malformed envelope.") from e
        if not isinstance(content, str):
            raise ProviderCallError("OpenAI returned a malformed envelope.")

        parsed = safe_json(content)
        if parsed is None:
            raise ProviderCallError("OpenAI returned non-JSON response.")
        return parsed
