"""
English -> Arabic translation gateway.

Translation is best effort: any provider failure is logged and the source
text is returned unchanged, so writes never fail because of it.
"""

import logging
from functools import lru_cache
from typing import Protocol

import httpx

from config import get_settings

logger = logging.getLogger(__name__)


class Translator(Protocol):
    def translate(self, text: str) -> str:
        ...


class PassthroughTranslator:
    """Used when translation is disabled; returns the text as given."""

    def translate(self, text: str) -> str:
        return text


class GoogleTranslator:
    """
    Client for Google's public `translate_a/single` endpoint.

    The endpoint answers with nested arrays; the first element holds one
    `[translated, original, ...]` entry per sentence.
    """

    def __init__(
        self,
        client: httpx.Client,
        url: str,
        source: str = "en",
        target: str = "ar",
    ):
        self.client = client
        self.url = url
        self.source = source
        self.target = target

    def translate(self, text: str) -> str:
        if not text or not text.strip():
            return text
        params = {
            "client": "gtx",
            "sl": self.source,
            "tl": self.target,
            "dt": "t",
            "q": text,
        }
        try:
            response = self.client.get(self.url, params=params)
            response.raise_for_status()
            body = response.json()
            if not isinstance(body, list) or not body or not isinstance(body[0], list):
                raise ValueError(f"unexpected response shape: {str(body)[:100]}")
            translated = "".join(
                segment[0] for segment in body[0] if segment and segment[0]
            )
        except (httpx.HTTPError, ValueError, TypeError, IndexError, KeyError) as e:
            logger.warning("Translation failed, keeping source text: %s", e)
            return text
        if not translated:
            logger.warning("Translation returned no text, keeping source text")
            return text
        return translated


@lru_cache(maxsize=1)
def get_translator() -> Translator:
    settings = get_settings()
    if not settings.translation_enabled:
        logger.info("Translation disabled; Arabic fields mirror English")
        return PassthroughTranslator()
    client = httpx.Client(timeout=settings.translation_timeout)
    return GoogleTranslator(client, settings.translation_url)
