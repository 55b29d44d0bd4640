# Chat module
from app.services.chat.gemini import GeminiClient, split_image_data, user_turn, model_turn
from app.services.chat.chat import ChatService, make_title, to_content
from app.services.chat.analysis import CropAnalysisService
from app.services.chat.prompts import WELCOME_MESSAGE, FARM_ASSISTANT_SYSTEM_INSTRUCTION

__all__ = [
    "GeminiClient",
    "split_image_data",
    "user_turn",
    "model_turn",
    "ChatService",
    "make_title",
    "to_content",
    "CropAnalysisService",
    "WELCOME_MESSAGE",
    "FARM_ASSISTANT_SYSTEM_INSTRUCTION"
]
