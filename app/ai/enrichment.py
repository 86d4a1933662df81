"""
AI enrichment for publishing: summary, tags and writing prompts.

Talks to any OpenAI-compatible chat endpoint (Gemini by default). Every
call has a deterministic local fallback so publishing never waits on, or
fails because of, the AI service.
"""

import logging
from functools import lru_cache
from typing import List, Optional

from openai import AsyncOpenAI

from app.core.config import get_settings

logger = logging.getLogger(__name__)

SUMMARY_INPUT_CHARS = 5000
TAGS_INPUT_CHARS = 3000
FALLBACK_SUMMARY_CHARS = 150
DEFAULT_TAGS = ["General"]
NO_KEY_INSPIRATION = "Please configure your API key to use AI features."
FAILED_INSPIRATION = "Could not generate content."


def fallback_summary(text: str) -> str:
    return text[:FALLBACK_SUMMARY_CHARS] + "..."


def parse_tags(raw: str) -> List[str]:
    return [t.strip() for t in raw.split(",") if t.strip()]


class EnrichmentClient:
    """Summary/tag generation with fallbacks. Construct once, pass around."""

    def __init__(self, api_key: str = "", model: str = "gemini-2.5-flash", base_url: Optional[str] = None,
                 client: Optional[AsyncOpenAI] = None):
        self.model = model
        self.enabled = bool(api_key) or client is not None
        self.client = client
        if self.client is None and api_key:
            self.client = AsyncOpenAI(api_key=api_key, base_url=base_url)

    async def _generate(self, prompt: str) -> str:
        response = await self.client.chat.completions.create(
            model=self.model,
            messages=[{"role": "user", "content": prompt}],
        )
        if not response.choices:
            return ""
        return (response.choices[0].message.content or "").strip()

    async def summarize(self, text: str) -> str:
        """Short preview paragraph (max ~200 chars)."""
        if not self.enabled:
            return fallback_summary(text)
        prompt = (
            "Summarize the following blog post content into a short, engaging preview "
            f"paragraph (max 200 characters). Content: {text[:SUMMARY_INPUT_CHARS]}"
        )
        try:
            summary = await self._generate(prompt)
        except Exception as e:
            logger.warning(f"Summary generation failed, using fallback: {e}")
            return fallback_summary(text)
        return summary or fallback_summary(text)

    async def suggest_tags(self, text: str) -> List[str]:
        """3-5 category tags."""
        if not self.enabled:
            return list(DEFAULT_TAGS)
        prompt = (
            "Analyze the following text and suggest 3-5 relevant category tags. "
            "Return ONLY the tags separated by commas, no other text. "
            f"Text: {text[:TAGS_INPUT_CHARS]}"
        )
        try:
            tags = parse_tags(await self._generate(prompt))
        except Exception as e:
            logger.warning(f"Tag suggestion failed, using default tags: {e}")
            return list(DEFAULT_TAGS)
        return tags or list(DEFAULT_TAGS)

    async def inspire(self, topic: str) -> str:
        """Introductory paragraph for a post about `topic`."""
        if not self.enabled:
            return NO_KEY_INSPIRATION
        prompt = (
            f'Write an engaging introductory paragraph for a blog post about: "{topic}". '
            "Keep it under 100 words."
        )
        try:
            return await self._generate(prompt)
        except Exception as e:
            logger.error(f"Inspiration generation failed: {e}")
            return FAILED_INSPIRATION


@lru_cache
def get_enrichment_client() -> EnrichmentClient:
    settings = get_settings()
    return EnrichmentClient(
        api_key=settings.AI_API_KEY,
        model=settings.AI_MODEL,
        base_url=settings.AI_BASE_URL or None,
    )
