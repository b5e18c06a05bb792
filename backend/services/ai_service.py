"""
ai_service.py — Summaries and flashcards from the hosted LLM
Wraps one provider with a minimum-content gate, boilerplate clean-up and a
content-keyed flashcard cache. Model failures are raised as AIServiceError;
there is no fallback text and no retry.
"""

import logging
import re

from config import (
    FLASHCARD_CACHE_TTL, FLASHCARD_CACHE_MAX_ENTRIES, AI_STATUS_CACHE_TTL,
    OPENROUTER_MODEL_LABEL,
)
from errors import AIServiceError, ValidationError
from providers import BaseProvider, get_provider
from services.cache_service import TTLCache
from services.flashcard_parser import extract_flashcards
from services.note_service import format_deck

logger = logging.getLogger(__name__)

MIN_AI_CONTENT_LENGTH = 100
SUMMARY_INPUT_LIMIT = 4000
FLASHCARD_INPUT_LIMIT = 5000
MAX_ANSWER_LENGTH = 150
SHORT_CONTENT_SUMMARY = "No summary generated (content too short)."

SUMMARY_PROMPT = (
    "Write a concise 3-4 sentence summary of the main content and key findings in this document. "
    "Focus exclusively on the substantive information, core arguments, or primary conclusions.\n\n"
    'IMPORTANT: Do NOT begin with phrases like "Here is a summary" or "This document". '
    "Start directly with the key points.\n\n"
    "Document:\n{text}"
)

FLASHCARD_PROMPT = (
    "Generate as many flashcards as possible from the following text. Each flashcard must have a clear "
    "question and a VERY CONCISE answer (preferably 1-2 sentences maximum). Focus on key facts, definitions, "
    "processes, or important concepts.\n\n"
    "IMPORTANT GUIDELINES:\n"
    "- Keep answers brief and to the point - no longer than 2 sentences when possible\n"
    "- Make each answer focused on a single concept or fact\n"
    "- Avoid lengthy explanations or examples\n"
    "- Questions should be specific and direct\n"
    "- Answers should be factual and precise\n\n"
    "PREFERRED FORMAT:\n"
    '[\n  {{\n    "question": "What is X?",\n    "answer": "X is Y. It has properties Z."\n  }},\n  ...\n]\n\n'
    "Note title: {title}\n{tags_info}\n\nContent:\n{content}"
)

_LEAD_INS = [
    re.compile(r"^(here is|this is|this document provides|this summary presents|below is|following is).*?summary[^.]*\.", re.IGNORECASE),
    re.compile(r"^in summary,?\s*", re.IGNORECASE),
    re.compile(r"^to summarize,?\s*", re.IGNORECASE),
]


def is_content_sufficient(text: str | None) -> bool:
    return bool(text) and len(text.strip()) >= MIN_AI_CONTENT_LENGTH


def clean_summary(summary: str) -> str:
    """Strip lead-in boilerplate and capitalize the first letter."""
    summary = (summary or "").strip()
    for pattern in _LEAD_INS:
        summary = pattern.sub("", summary).strip()
    if summary:
        summary = summary[0].upper() + summary[1:]
    return summary


def clean_card(card: dict) -> tuple[str, str]:
    """Drop leftover Question:/Answer: labels and shorten long answers."""
    question, answer = card["question"], card["answer"]
    if "Question:" in question:
        question = question.split("Question:", 1)[1].strip()
    if "Answer:" in answer:
        answer = answer.split("Answer:", 1)[1].strip()

    if len(answer) > MAX_ANSWER_LENGTH:
        sentence_break = answer.find(". ", 100)
        if 0 < sentence_break < MAX_ANSWER_LENGTH:
            answer = answer[:sentence_break + 1]
        else:
            answer = answer[:MAX_ANSWER_LENGTH] + "..."
    return question, answer


class AIService:
    """Summary and flashcard generation against one LLM provider."""

    def __init__(self, provider: BaseProvider, flashcard_cache: TTLCache | None = None,
                 status_cache: TTLCache | None = None, model_label: str | None = None):
        self.provider = provider
        self.flashcard_cache = flashcard_cache or TTLCache(FLASHCARD_CACHE_TTL, FLASHCARD_CACHE_MAX_ENTRIES)
        self.status_cache = status_cache or TTLCache(AI_STATUS_CACHE_TTL, max_entries=1)
        self.model_label = model_label or provider.model

    # ------------------------------------------------------------------
    async def _complete(self, prompt: str, max_tokens: int, temperature: float, purpose: str) -> str:
        result = await self.provider.chat(
            [{"role": "user", "content": prompt}],
            max_tokens=max_tokens,
            temperature=temperature,
        )
        if result.get("status") != "success" or not result.get("text"):
            error = result.get("error") or "empty response"
            logger.error("Error generating %s with %s: %s", purpose, self.provider.name, error)
            raise AIServiceError(
                f"Failed to generate {purpose} with {self.model_label}: {error}. Please try again later."
            )
        return result["text"]

    # ------------------------------------------------------------------
    async def check_availability(self) -> bool:
        """Whether the provider answers and serves our model (cached)."""
        cached = self.status_cache.get("availability")
        if cached is not None:
            return cached

        models = await self.provider.list_models()
        available = models is not None
        if available and self.provider.model not in models:
            logger.warning("Requested model %s not found, but other models are available", self.provider.model)
        self.status_cache.set("availability", available)
        return available

    # ------------------------------------------------------------------
    async def generate_summary(self, text: str) -> str:
        if not is_content_sufficient(text):
            return SHORT_CONTENT_SUMMARY

        logger.info("Generating summary with %s", self.provider.name)
        prompt = SUMMARY_PROMPT.format(text=text[:SUMMARY_INPUT_LIMIT])
        summary = await self._complete(prompt, max_tokens=1000, temperature=0.5, purpose="summary")
        return clean_summary(summary)

    # ------------------------------------------------------------------
    async def generate_flashcards(self, content: str, title: str | None = None,
                                  tags: list[str] | None = None, force: bool = False) -> dict:
        """Deck of flashcards for the content, served from cache unless forced."""
        if not is_content_sufficient(content):
            raise ValidationError("Content is too short for flashcard generation")

        cache_key = TTLCache.key_for(content)
        if not force:
            cached = self.flashcard_cache.get(cache_key)
            if cached is not None:
                logger.info("Using cached flashcards")
                return cached

        if not await self.check_availability():
            raise AIServiceError("AI service unavailable. Cannot generate flashcards.")

        tags_info = f"The note is tagged with: {', '.join(tags)}." if tags else ""
        prompt = FLASHCARD_PROMPT.format(
            title=title or "Untitled Note",
            tags_info=tags_info,
            content=content[:FLASHCARD_INPUT_LIMIT],
        )
        logger.info("Generating flashcards with %s", self.provider.name)
        response_text = await self._complete(prompt, max_tokens=2000, temperature=0.3, purpose="flashcards")

        cards = [clean_card(card) for card in extract_flashcards(response_text, title)]
        deck = format_deck(cards, tags)
        self.flashcard_cache.set(cache_key, deck)
        return deck

    # ------------------------------------------------------------------
    def info(self) -> dict:
        return {
            "model": self.provider.model,
            "provider": self.provider.name,
            "modelInfo": self.model_label,
            "features": [
                "Summary generation",
                "Flashcard creation",
                "Auto-tagging",
            ],
            "needsLocalSetup": False,
        }


_ai_service = None


def get_ai_service() -> AIService:
    """FastAPI dependency — the process-wide AIService."""
    global _ai_service
    if _ai_service is None:
        _ai_service = AIService(get_provider(), model_label=OPENROUTER_MODEL_LABEL)
    return _ai_service
