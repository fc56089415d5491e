"""
Gemini AI Provider - Google Generative Language API adapter.

Requires GEMINI_API_KEY. Model availability differs between API versions and
regions, so calls fall back across (model, API version) pairs:

1. current model on the base guessed from its name
2. same model on the other base
3. every model in MODEL_POOL on both bases

Only 404/405 (version/method mismatch) move on to the next pair; any other
failure is raised immediately. The first pair that works is kept for later
calls.
"""

from typing import Any, Dict, List, Optional, Tuple
import logging
import re

import requests

from fintrack.core.exceptions import ProviderCallError, ProviderUnavailableError
from fintrack.services.ai_plugin.remote import RemoteAIProvider
from fintrack.utils.sanitizer import safe_json

logger = logging.getLogger(__name__)

API_V1 = "https://generativelanguage.googleapis.com/v1"
API_V1BETA = "https://generativelanguage.googleapis.com/v1beta"

# Stable names first, "-latest" aliases after
MODEL_POOL = [
    "models/gemini-2.5-flash",
    "models/gemini-2.5-pro",
    "models/gemini-flash-latest",
    "models/gemini-pro-latest",
    "models/gemini-2.0-flash",
]

RETRYABLE_STATUSES = (404, 405)

FENCED_JSON = re.compile(r"```json\s*([\s\S]*?)```", re.IGNORECASE)
BRACED_JSON = re.compile(r"(\{[\s\S]*\})")


def normalize_model_name(model: str) -> str:
    """Gemini paths are "models/<name>"; accept the bare name too."""
    model = model.strip()
    return model if model.startswith("models/") else f"models/{model}"


def api_base_for_model(model: str) -> str:
    """2.5 and "-latest" models are better served by v1beta; others by v1."""
    m = model.lower()
    if "2.5" in m or "latest" in m:
        return API_V1BETA
    return API_V1


def other_base(api_base: str) -> str:
    return API_V1BETA if api_base == API_V1 else API_V1


def extract_json_from_text(text: str) -> Optional[Any]:
    """
    Pull a JSON value out of model text.

    Tries the raw text, then a ```json fenced block, then the outermost
    brace-delimited span.
    """
    direct = safe_json(text)
    if direct is not None:
        return direct

    fenced = FENCED_JSON.search(text)
    if fenced:
        parsed = safe_json(fenced.group(1))
        if parsed is not None:
            return parsed

    braced = BRACED_JSON.search(text)
    if braced:
        parsed = safe_json(braced.group(1))
        if parsed is not None:
            return parsed

    return None


class GeminiAIProvider(RemoteAIProvider):
    """
    Google Gemini provider with model/API-version fallback.

    Sends the system prompt via systemInstruction and asks for JSON through
    generationConfig.responseMimeType.
    """

    name = "gemini"

    SYSTEM_PROMPTS: Dict[str, str] = {
        "summarizeReport": (
            'Return JSON exactly: {"text": string}. '
            "Keep it to 2-3 concise finance summary sentences. No extra fields."
        ),
        "suggestCategory": (
            'Return JSON exactly: {"categoryName": string, "confidence": number}. '
            "Category is a single high-level word (Food, Transport, Utilities, Rent, "
            "Shopping, Salary, Investment, Misc). No extra fields."
        ),
        "budgetCoach": (
            'Return JSON exactly: {"text": string}. '
            "Be an empathetic budgeting coach; under 120 words; actionable "
            "next-month adjustments. No extra fields."
        ),
        "findDuplicates": 'Return JSON exactly: {"ids": string[]}. No extra fields.',
        "nlFilterToQuery": (
            "Return JSON with any of these fields only: "
            '{"type":"income"|"expense","categoryId":string,"from":"YYYY-MM-DD",'
            '"to":"YYYY-MM-DD","maxAmount":number}. '
            "Omit fields you can't infer. No extra fields."
        ),
    }

    def __init__(
        self,
        api_key: Optional[str],
        model: Optional[str] = None,
        timeout_seconds: float = 20.0,
        session: Optional[requests.Session] = None,
    ):
        if not api_key or not api_key.strip():
            raise ProviderUnavailableError(
                "GEMINI_API_KEY is missing. Set it before using AI_PROVIDER=gemini."
            )
        super().__init__(timeout_seconds=timeout_seconds, session=session)
        self.api_key = api_key.strip()
        self.model = normalize_model_name(model) if model and model.strip() else MODEL_POOL[0]
        self.api_base = api_base_for_model(self.model)
        logger.info(f"✅ Gemini AI Provider initialized: {self.model} @ {self.api_base}")

    def endpoint(self, model: Optional[str] = None, api_base: Optional[str] = None) -> str:
        # The "models/..." segment must not be URL-encoded.
        return f"{api_base or self.api_base}/{model or self.model}:generateContent"

    def get_model_info(self) -> Dict[str, Optional[str]]:
        return {
            "provider": self.name,
            "model": self.model,
            "api_base": self.api_base,
            "endpoint": self.endpoint(),
        }

    def attempt_order(self) -> List[Tuple[str, str]]:
        """(model, api_base) pairs in the order they will be tried."""
        order = [
            (self.model, self.api_base),
            (self.model, other_base(self.api_base)),
        ]
        for model in MODEL_POOL:
            if model == self.model:
                continue
            base = api_base_for_model(model)
            order.append((model, base))
            order.append((model, other_base(base)))
        return order

    def list_models(self) -> Dict[str, Any]:
        """List models visible to this key (v1 listing)."""
        try:
            response = self.session.get(
                f"{API_V1}/models",
                headers={"x-goog-api-key": self.api_key},
                timeout=self.timeout_seconds,
            )
        except requests.RequestException as e:
            raise ProviderCallError(f"Gemini request failed: {e}") from e

        body = safe_json(response.text)
        if not response.ok or not isinstance(body, dict):
            raise ProviderCallError(
                f"Gemini model listing failed ({response.status_code})",
                status_code=response.status_code,
            )
        return body

    def _post(self, model: str, api_base: str, system: str, user: str) -> requests.Response:
        payload = {
            "systemInstruction": {"role": "system", "parts": [{"text": system}]},
            "contents": [{"role": "user", "parts": [{"text": user}]}],
            "generationConfig": {
                "temperature": 0.2,
                "responseMimeType": "application/json",
            },
        }
        try:
            return self.session.post(
                self.endpoint(model, api_base),
                headers={
                    "Content-Type": "application/json",
                    "x-goog-api-key": self.api_key,
                },
                json=payload,
                timeout=self.timeout_seconds,
            )
        except requests.RequestException as e:
            raise ProviderCallError(f"Gemini request failed: {e} [model={model} base={api_base}]") from e

    def _call_json(self, system: str, user: str) -> Any:
        tried: List[str] = []
        last_status = 404
        last_body = ""

        for model, api_base in self.attempt_order():
            response = self._post(model, api_base, system, user)

            if response.ok:
                if (model, api_base) != (self.model, self.api_base):
                    logger.info(f"Gemini switched to {model} @ {api_base}")
                # Lock onto the working pair
                self.model = model
                self.api_base = api_base
                return self._parse_generate_response(response)

            last_status = response.status_code
            last_body = response.text or ""
            tried.append(f"{model}@{api_base.rsplit('/', 1)[-1]}")

            if last_status not in RETRYABLE_STATUSES:
                raise ProviderCallError(
                    f"Gemini error {last_status}: {last_body or '(no body)'} "
                    f"[model={model} base={api_base}]",
                    status_code=last_status,
                )

        raise ProviderCallError(
            f"Gemini error {last_status}: {last_body or '(no body)'} [tried={', '.join(tried)}]",
            status_code=last_status,
        )

    @staticmethod
    def _parse_generate_response(response: requests.Response) -> Any:
        body = safe_json(response.text)
        text = ""
        if isinstance(body, dict):
            try:
                text = body["candidates"][0]["content"]["parts"][0].get("text") or ""
            except (KeyError, IndexError, TypeError, AttributeError):
                text = ""

        parsed = extract_json_from_text(text)
        if parsed is None:
            raise ProviderCallError("Gemini returned non-JSON response.")
        return parsed
