"""
Crop photo analysis via Gemini vision.
"""

import logging
from typing import Optional

from app.services.chat.gemini import GeminiClient, split_image_data
from app.services.chat.prompts import CROP_ANALYSIS_INSTRUCTION

logger = logging.getLogger(__name__)


class CropAnalysisService:
    def __init__(self, gemini: Optional[GeminiClient] = None):
        self.gemini = gemini or GeminiClient()

    def analyze(self, image_data: str, prompt: str) -> str:
        image = split_image_data(image_data)
        logger.info("Analyzing crop image (%s, %d base64 chars)", image[0], len(image[1]))
        return self.gemini.generate(
            history=[],
            message=prompt,
            image=image,
            system_instruction=CROP_ANALYSIS_INSTRUCTION,
            use_search=False
        )
