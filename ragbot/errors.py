"""
Error kinds raised by the ingestion and retrieval services.
The HTTP layer maps each kind to a status code (see ragbot.main).
"""


class RagbotError(Exception):
    """Base class for all application errors."""


class InputError(RagbotError):
    """A required field is empty, missing or out of range."""


class ProviderError(RagbotError):
    """The embedding or completion provider failed. Never retried."""


class StoreError(RagbotError):
    """The document/chunk store failed to persist or query."""


class NotFoundError(RagbotError):
    """The referenced document or record does not exist."""
