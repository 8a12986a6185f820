"""
Gemini AI service - plain text completion for quizzes and hints
"""
import google.generativeai as genai
from elearning.config import settings
from elearning.exceptions import GeminiConfigurationError
import logging
from typing import Optional

logger = logging.getLogger(__name__)


class GeminiService:
    """Service for all Gemini AI operations"""

    def __init__(self, api_key: Optional[str] = None, model_name: str = "gemini-2.0-flash"):
        self.api_key = api_key
        self.model_name = model_name
        self._model = None

    def _get_model(self):
        """Configure the SDK lazily so the app can boot without an API key"""
        if not self.api_key:
            raise GeminiConfigurationError("GEMINI_API_KEY is not set in the environment variables")

        if self._model is None:
            genai.configure(api_key=self.api_key)
            self._model = genai.GenerativeModel(self.model_name)
        return self._model

    async def generate_content(self, prompt: str) -> str:
        """
        Generate text for a prompt

        Args:
            prompt: Full natural-language prompt

        Returns:
            Generated response text

        Raises:
            GeminiConfigurationError: API key missing
            Exception: any SDK/transport failure, re-raised after logging
        """
        model = self._get_model()
        try:
            response = await model.generate_content_async(prompt)
            return response.text
        except Exception as e:
            logger.error(f"Error generating content with Gemini: {str(e)}")
            raise


# Global instance
gemini_service = GeminiService(api_key=settings.GEMINI_API_KEY, model_name=settings.GEMINI_MODEL)


def get_gemini_service() -> GeminiService:
    """FastAPI dependency returning the shared Gemini client"""
    return gemini_service
