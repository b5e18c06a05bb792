"""
flashcard_parser.py — Recover Q/A pairs from free-form model output
Best-effort: each strategy is tried in turn and the first one that yields at
least one card wins. Nothing here guarantees every intended card is found,
or that no spurious ones are.
"""

import json
import logging
import re

logger = logging.getLogger(__name__)

_GENERIC_QUESTION = re.compile(r"^flashcard\s+\d+\??$", re.IGNORECASE)


def _card(question, answer) -> dict:
    return {"question": str(question).strip(), "answer": str(answer).strip()}


def _has_pair(obj) -> bool:
    return isinstance(obj, dict) and bool(obj.get("question")) and bool(obj.get("answer"))


def _long_enough(question: str, answer: str, min_question: int = 3) -> bool:
    return len(question) > min_question and len(answer) > 3


# ── Strategies ────────────────────────────────────────────────────
def from_json_arrays(text: str) -> list[dict]:
    """Any JSON array whose items all carry question and answer."""
    for candidate in re.findall(r"\[[\s\S]*?\]", text):
        try:
            parsed = json.loads(candidate)
        except ValueError:
            continue
        if not isinstance(parsed, list) or not parsed or not all(_has_pair(c) for c in parsed):
            continue
        cards = [
            _card(c["question"], c["answer"]) for c in parsed
            if not _GENERIC_QUESTION.match(str(c["question"]).strip()) and len(str(c["question"])) > 5
        ]
        if cards:
            return cards
    return []


def from_sectioned_json(text: str) -> list[dict]:
    """Numbered JSON objects inside **Section ...** blocks."""
    if "**Section" not in text or "{" not in text:
        return []
    cards = []
    for section in re.finditer(r"\*\*Section.*?\*\*\s*([\s\S]*?)(?=\*\*Section|$)", text):
        for obj in re.finditer(r"\d+\.\s*({[\s\S]*?})", section.group(1)):
            try:
                parsed = json.loads(obj.group(1))
            except ValueError:
                continue
            if _has_pair(parsed):
                cards.append(_card(parsed["question"], parsed["answer"]))
    return cards


def from_bold_numbered(text: str) -> list[dict]:
    """Items like '1. **What is X?** * X is Y'."""
    cards = []
    for match in re.finditer(r"(\d+\.\s+\*\*.*?\*\*\s*[*•].*?)(?=\d+\.\s+\*\*|$)", text, re.DOTALL):
        block = match.group(1).strip()
        question = re.search(r"\d+\.\s+\*\*(.*?)\*\*", block)
        answer = re.search(r"\*\*\s*[*•](.*)$", block, re.DOTALL)
        if question and answer:
            q, a = question.group(1).strip(), answer.group(1).strip()
            if _long_enough(q, a):
                cards.append(_card(q, a))
    return cards


def from_numbered_questions(text: str) -> list[dict]:
    """Numbered lines holding a question, followed by the answer."""
    cards = []
    pattern = re.compile(r"^\s*\d+[.)]\s+(.+?\?)\**\s*(?:[*\-•]\s*)?(.*?)(?=^\s*\d+[.)]\s|\Z)", re.MULTILINE | re.DOTALL)
    for match in pattern.finditer(text):
        question = match.group(1).replace("**", "").strip()
        answer = re.sub(r"^(?:[*\-•]\s*)+", "", match.group(2).replace("**", "").strip()).strip()
        if _long_enough(question, answer):
            cards.append(_card(question, answer))
    return cards


def from_inline_pairs(text: str) -> list[dict]:
    """'What is X? X is Y.' pairs, one per line."""
    cards = []
    for line in text.splitlines():
        match = re.match(r"^\s*([^.!?\n]{2,}\?)\s+([^?\n]+)$", line)
        if not match:
            continue
        question, answer = match.group(1).strip(), match.group(2).strip()
        if _long_enough(question, answer, min_question=5):
            cards.append(_card(question, answer))
    return cards


def from_labels(text: str) -> list[dict]:
    """Explicit 'Question: ... Answer: ...' (or Q:/A:) labels."""
    cards = []
    pattern = re.compile(
        r"(?:\bQuestion|\bQ)\s*:\s*(.*?)\s*(?:\bAnswer|\bA)\s*:\s*(.*?)(?=(?:\bQuestion|\bQ)\s*:|\Z)",
        re.IGNORECASE | re.DOTALL,
    )
    for match in pattern.finditer(text):
        question, answer = match.group(1).strip(), match.group(2).strip()
        if _long_enough(question, answer):
            cards.append(_card(question, answer))
    return cards


def from_section_split(text: str) -> list[dict]:
    """Split on 'N. **' markers and take the first bullet as the answer."""
    if "Section" not in text or "**" not in text:
        return []
    cards = []
    for item in re.split(r"\d+\.\s+\*\*", text)[1:]:
        question = re.search(r"(.*?)\*\*", item)
        bullet = re.search(r"\*\s+(.*?)(?=\n\d+\.|$)", item, re.DOTALL)
        if question and bullet:
            q, a = question.group(1).strip(), bullet.group(1).strip()
            if _long_enough(q, a):
                cards.append(_card(q, a))
    return cards


def from_numbered_objects(text: str) -> list[dict]:
    """Items like '1. {"question": "...", "answer": "..."}'."""
    cards = []
    for match in re.finditer(r"\d+\.\s*(\{[\s\S]*?\})", text):
        try:
            parsed = json.loads(match.group(1))
        except ValueError:
            continue
        if _has_pair(parsed):
            cards.append(_card(parsed["question"], parsed["answer"]))
    return cards


STRATEGIES = [
    from_json_arrays,
    from_sectioned_json,
    from_bold_numbered,
    from_numbered_questions,
    from_inline_pairs,
    from_labels,
    from_section_split,
    from_numbered_objects,
]


def fallback_card(title: str | None) -> dict:
    return {
        "question": f'What is the main topic of "{title or "this note"}"?',
        "answer": "Review the note content for the main topic.",
    }


def extract_flashcards(text: str | None, title: str | None = None) -> list[dict]:
    """Run the strategies in order; never returns an empty list."""
    text = text or ""
    for strategy in STRATEGIES:
        cards = strategy(text)
        if cards:
            logger.info("Extracted %d flashcards with %s", len(cards), strategy.__name__)
            return cards

    logger.info("All extraction methods failed, using default flashcard")
    return [fallback_card(title)]
