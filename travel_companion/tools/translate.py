"""Guide profile translation through Google Cloud Translation."""
from __future__ import annotations

from dataclasses import dataclass
from typing import Optional, Protocol

import httpx

from travel_companion.errors import UpstreamError
from travel_companion.log import get_logger

logger = get_logger(__name__)


@dataclass
class TranslationResult:
    original_text: str
    translated_text: str
    detected_source_language: Optional[str] = None


class Translator(Protocol):
    async def translate(self, text: str, target_language: str) -> TranslationResult:
        ...


class GoogleTranslator:
    """Google Cloud Translation v2 with API-key auth, over plain REST."""

    ENDPOINT = "https://translation.googleapis.com/language/translate/v2"

    def __init__(self, api_key: str, project_id: str, *, timeout: float = 10.0):
        self.api_key = api_key
        self.project_id = project_id
        self.timeout = timeout

    async def translate(self, text: str, target_language: str) -> TranslationResult:
        if not text:
            return TranslationResult(original_text=text, translated_text=text)

        logger.info(
            "Translating %d chars to %s (project %s)", len(text), target_language, self.project_id
        )
        payload = {"q": text, "target": target_language, "format": "text"}
        try:
            async with httpx.AsyncClient(timeout=self.timeout) as client:
                response = await client.post(
                    self.ENDPOINT,
                    params={"key": self.api_key},
                    json=payload,
                )
                response.raise_for_status()
                data = response.json()
        except httpx.HTTPError as exc:
            logger.exception("Translation request failed")
            raise UpstreamError("Failed to translate text") from exc

        translations = (data.get("data") or {}).get("translations") or []
        if not translations:
            logger.warning("Translation response had no translations: %s", data)
            raise UpstreamError("Failed to translate text")

        first = translations[0]
        return TranslationResult(
            original_text=text,
            translated_text=first.get("translatedText", ""),
            detected_source_language=first.get("detectedSourceLanguage"),
        )
