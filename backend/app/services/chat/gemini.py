"""
Gemini generateContent client.

Sends the conversation history plus the new user turn, with the farm doctor
system instruction and the Google Search grounding tool. Failed or empty
responses are retried with exponential backoff.
"""

import base64
import binascii
import logging
import re
import time
from typing import Dict, List, Optional, Tuple

import requests

from app.config.settings import settings
from app.services.chat.prompts import FARM_ASSISTANT_SYSTEM_INSTRUCTION
from app.services.exceptions import GeminiError, InvalidStateError

logger = logging.getLogger(__name__)

# {"role": "user" | "model", "parts": [{"text": ...}]}
ContentPart = Dict[str, object]

DATA_URL_PATTERN = re.compile(r"^data:(?P<mime>[\w.+-]+/[\w.+-]+);base64,(?P<data>.+)$", re.DOTALL)


def user_turn(text: str) -> ContentPart:
    return {"role": "user", "parts": [{"text": text}]}


def model_turn(text: str) -> ContentPart:
    return {"role": "model", "parts": [{"text": text}]}


def split_image_data(image_data: str, default_mime: str = "image/jpeg") -> Tuple[str, str]:
    """
    Split a data URL (or bare base64) into (mime_type, base64 payload).
    Raises InvalidStateError when the payload is not base64.
    """
    match = DATA_URL_PATTERN.match(image_data.strip())
    if match:
        mime, data = match.group("mime"), match.group("data")
    else:
        mime, data = default_mime, image_data.strip()

    try:
        base64.b64decode(data, validate=True)
    except (binascii.Error, ValueError):
        raise InvalidStateError("imageData must be a base64 data URL")
    return mime, data


class GeminiClient:
    """
    REST client for models/{model}:generateContent.

    API Documentation: https://ai.google.dev/api/generate-content
    """

    BASE_URL = "https://generativelanguage.googleapis.com/v1beta/models"

    def __init__(
        self,
        api_key: Optional[str] = None,
        model: Optional[str] = None,
        max_retries: Optional[int] = None,
        backoff_base: float = 1.0
    ):
        self.api_key = api_key or settings.GEMINI_API_KEY
        self.model = model or settings.GEMINI_MODEL
        self.max_retries = max_retries or settings.GEMINI_MAX_RETRIES
        self.backoff_base = backoff_base
        self.timeout = settings.HTTP_TIMEOUT

    @property
    def is_configured(self) -> bool:
        return bool(self.api_key)

    @property
    def url(self) -> str:
        return f"{self.BASE_URL}/{self.model}:generateContent"

    def build_payload(
        self,
        history: List[ContentPart],
        message: str,
        image: Optional[Tuple[str, str]] = None,
        system_instruction: str = FARM_ASSISTANT_SYSTEM_INSTRUCTION,
        use_search: bool = True
    ) -> dict:
        turn = user_turn(message)
        if image:
            mime, data = image
            turn["parts"] = [{"inline_data": {"mime_type": mime, "data": data}}] + turn["parts"]

        payload = {
            "contents": list(history) + [turn],
            "systemInstruction": {"parts": [{"text": system_instruction}]},
        }
        if use_search:
            payload["tools"] = [{"google_search": {}}]
        return payload

    def generate(
        self,
        history: List[ContentPart],
        message: str,
        image: Optional[Tuple[str, str]] = None,
        system_instruction: str = FARM_ASSISTANT_SYSTEM_INSTRUCTION,
        use_search: bool = True
    ) -> str:
        """
        Return the first candidate's text.

        Raises:
            GeminiError: not configured, or every attempt failed
        """
        if not self.is_configured:
            raise GeminiError("AI service is not configured.")

        payload = self.build_payload(history, message, image, system_instruction, use_search)

        last_error: Optional[Exception] = None
        for attempt in range(self.max_retries):
            try:
                response = requests.post(
                    self.url,
                    params={"key": self.api_key},
                    json=payload,
                    timeout=self.timeout
                )
                response.raise_for_status()
                text = self._extract_text(response.json())
                if text:
                    return text
                raise GeminiError("Empty content returned from Gemini API.")
            except (requests.RequestException, ValueError, GeminiError) as e:
                last_error = e
                logger.error("[GEMINI_API] Attempt %d failed: %s", attempt + 1, e)
                if attempt < self.max_retries - 1:
                    time.sleep(self.backoff_base * (2 ** attempt))

        raise GeminiError(f"Gemini API unavailable: {last_error}")

    @staticmethod
    def _extract_text(result: dict) -> Optional[str]:
        candidates = result.get("candidates") or []
        if not candidates:
            return None
        parts = (candidates[0].get("content") or {}).get("parts") or []
        texts = [p.get("text", "") for p in parts if isinstance(p, dict)]
        text = "".join(texts).strip()
        return text or None
