"""
Error types shared by the AI layer and the ledger services.

Rate-limit denial is a RateLimitDecision value, not an exception.
"""

from typing import Optional


class AIError(Exception):
    """Base class for AI layer failures."""


class InputValidationError(AIError):
    """Request payload failed schema constraints (shape or bounds)."""


class ProviderUnavailableError(AIError):
    """
    A remote provider could not be built (missing credentials, load error).

    Only raised inside the provider registry, which recovers by falling back
    to the mock provider.
    """


class ProviderCallError(AIError):
    """A live call to a remote provider failed."""

    def __init__(self, message: str, status_code: Optional[int] = None):
        super().__init__(message)
        self.status_code = status_code


class RecordNotFoundError(Exception):
    """Ledger record does not exist or belongs to another user."""

    def __init__(self, collection: str, record_id: str):
        super().__init__(f"{collection}/{record_id} not found")
        self.collection = collection
        self.record_id = record_id
