"""
AI Service Module

This module handles AI content generation using Google's Gemini API.
It drafts blog post bodies for the editor and enforces the word cap on what
the model returns.
"""

import re
from typing import Optional, List

import google.generativeai as genai

from config import settings
from utils.exceptions import (
    AIServiceError, ConfigurationError, ContentGenerationError, ContentTooLongError, ValidationError
)
from utils.helpers import count_words
from utils.logger import get_logger

logger = get_logger(__name__)

PROMPT_TEMPLATE = """Generate a high-quality blog content for the following topic.
Requirements:
- Maximum length: {max_words} words
- Make it engaging, well-structured with proper headings, and informative
- Format it in clean HTML with proper heading tags (h2, h3), paragraphs, and lists where appropriate
- Include a brief introduction and conclusion
- Focus on key points and maintain concise paragraphs

Topic: {topic}

Important: The content MUST NOT exceed {max_words} words while maintaining quality and coherence."""


def clean_generated_content(text: str) -> str:
    """
    Strip markdown fences and convert markdown emphasis to HTML.

    Args:
        text: Raw model output

    Returns:
        str: HTML ready for the editor
    """
    cleaned = text.replace("```html", "").replace("```", "")
    cleaned = re.sub(r"\*\*(.*?)\*\*", r"<strong>\1</strong>", cleaned)
    cleaned = re.sub(r"\*(.*?)\*", r"<em>\1</em>", cleaned)
    return cleaned.strip()


def append_generated_content(existing: str, generated: str) -> str:
    """Append generated HTML to the editor's current content."""
    if not existing:
        return generated
    return existing + "<br><br>" + generated


class ContentGenerator:
    """Service for drafting post content with Google's Gemini API."""

    def __init__(self, api_key: Optional[str] = None, preferred_models: Optional[List[str]] = None):
        """
        Initialize the generator with the Gemini API.

        Configures the API key and selects an appropriate model based on availability.

        Raises:
            ConfigurationError: If no API key is configured.
            AIServiceError: If no Gemini model is available.
        """
        api_key = api_key or settings.GEMINI_API_KEY
        if not api_key:
            raise ConfigurationError("Missing required GEMINI_API_KEY")

        genai.configure(api_key=api_key)
        self.max_words = settings.AI_MAX_WORDS
        self.max_attempts = settings.AI_MAX_GENERATION_ATTEMPTS
        self.generation_config = {
            "temperature": settings.AI_TEMPERATURE,
            "top_k": settings.AI_TOP_K,
            "top_p": settings.AI_TOP_P,
            "max_output_tokens": settings.AI_MAX_OUTPUT_TOKENS,
        }

        model_name = self._select_model(preferred_models or settings.DEFAULT_AI_MODELS)
        logger.info(f"Selected AI model: {model_name}")
        self.model = genai.GenerativeModel(model_name=model_name)

    def _select_model(self, preferred_models: List[str]) -> str:
        """Pick the first preferred model the key can use, else any available one."""
        try:
            available_models = [m.name for m in genai.list_models()]
        except Exception as e:
            logger.error(f"Error listing Gemini models: {e}")
            raise AIServiceError(f"Could not list Gemini models: {e}") from e

        for preferred in preferred_models:
            for available in available_models:
                if preferred in available:
                    return available

        if available_models:
            # None of the preferred models are available, use the first one
            return available_models[0]

        raise AIServiceError("No Gemini models available")

    def build_prompt(self, topic: str) -> str:
        return PROMPT_TEMPLATE.format(topic=topic.strip(), max_words=self.max_words)

    def generate_post_content(self, topic: str) -> str:
        """
        Generate HTML post content for a topic.

        Output over the word cap is discarded and regenerated, up to
        AI_MAX_GENERATION_ATTEMPTS times.

        Args:
            topic: What the post should be about.

        Returns:
            str: Cleaned HTML content within the word cap.

        Raises:
            ValidationError: If the topic is blank.
            ContentGenerationError: If the model fails or returns nothing.
            ContentTooLongError: If every attempt exceeded the word cap.
        """
        if not topic or not topic.strip():
            raise ValidationError("Please enter a prompt for content generation")

        prompt = self.build_prompt(topic)
        word_count = 0
        for attempt in range(1, self.max_attempts + 1):
            try:
                response = self.model.generate_content(prompt, generation_config=self.generation_config)
                text = response.text
            except Exception as e:
                logger.error(f"Error generating content: {e}")
                raise ContentGenerationError(f"Failed to generate content: {e}") from e

            if not text or not text.strip():
                raise ContentGenerationError("Empty content received from the API")

            word_count = count_words(text)
            logger.info(f"Generated content attempt {attempt}: {word_count} words")
            if word_count <= self.max_words:
                return clean_generated_content(text)

            logger.warning(f"Generated content exceeds {self.max_words} words "
                           f"({word_count}), requesting new generation")

        raise ContentTooLongError(
            f"Generated content exceeded {self.max_words} words after {self.max_attempts} attempts "
            f"(last: {word_count} words)"
        )
