from functools import lru_cache

from openai import OpenAI

from . import config
from .errors import ProviderError


@lru_cache(maxsize=1)
def get_openai_client() -> OpenAI:
    """Build the shared client on first use so imports never need a key."""
    if not config.OPENAI_API_KEY:
        raise ProviderError("OPENAI_API_KEY is not set. Put it in env or .env (server-side only).")
    # retries are off; a failed call surfaces to the caller
    return OpenAI(api_key=config.OPENAI_API_KEY, timeout=config.OPENAI_TIMEOUT, max_retries=0)
