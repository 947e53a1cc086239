"""Best-effort machine translation of excuse summaries.

Translation is a capability, not a requirement: every failure mode of the
remote service degrades to returning the untranslated text.
"""

from typing import Protocol

import httpx

from salaysay.utils.logger import get_logger

logger = get_logger(__name__)


class Translator(Protocol):
    """Translates short text into English."""

    async def translate(self, text: str) -> str: ...


class IdentityTranslator:
    """Translator used when translation is disabled; returns its input."""

    async def translate(self, text: str) -> str:
        return text


class MyMemoryTranslator:
    """Translator backed by the MyMemory public HTTP API.

    Args:
        base_url: The ``/get`` endpoint of the service.
        source_lang: Source language code.
        target_lang: Target language code.
        timeout_seconds: Bound on a single request, connect included.
        client: Optional shared client. When omitted, a short-lived client
            is opened per request.
    """

    def __init__(
        self,
        base_url: str = "https://api.mymemory.translated.net/get",
        source_lang: str = "tl",
        target_lang: str = "en",
        timeout_seconds: float = 10.0,
        client: httpx.AsyncClient | None = None,
    ) -> None:
        self.base_url = base_url
        self.source_lang = source_lang
        self.target_lang = target_lang
        self.timeout_seconds = timeout_seconds
        self._client = client

    @property
    def langpair(self) -> str:
        return f"{self.source_lang}|{self.target_lang}"

    async def translate(self, text: str) -> str:
        """Translate ``text``, returning it unchanged on any failure.

        Args:
            text: Text in the source language.

        Returns:
            The translated text, or ``text`` itself if the request failed,
            timed out, or the response was not a successful translation.
        """
        if not text.strip():
            return text

        params = {"q": text, "langpair": self.langpair}
        try:
            if self._client is not None:
                response = await self._client.get(
                    self.base_url, params=params, timeout=self.timeout_seconds
                )
            else:
                async with httpx.AsyncClient(timeout=self.timeout_seconds) as client:
                    response = await client.get(self.base_url, params=params)
            response.raise_for_status()
            translated = self._parse(response.json())
        except httpx.HTTPError as exc:
            logger.warning("Translation request failed, keeping original text: %s", exc)
            return text
        except (ValueError, KeyError, TypeError, AttributeError) as exc:
            logger.warning(
                "Malformed translation response, keeping original text: %s", exc
            )
            return text

        if translated is None:
            return text

        logger.info("Translated %d characters (%s)", len(text), self.langpair)
        return translated

    def _parse(self, payload: dict) -> str | None:
        if payload.get("responseStatus") != 200:
            logger.warning(
                "Translation service answered status %s, keeping original text",
                payload.get("responseStatus"),
            )
            return None

        translated = payload["responseData"]["translatedText"]
        if not isinstance(translated, str) or not translated.strip():
            logger.warning("Translation service returned no text")
            return None
        return translated
