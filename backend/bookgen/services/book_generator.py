"""Idea, outline and chapter generation on top of AIService"""
from typing import Any, Dict, List, Optional

from bookgen.exceptions import ParseError
from bookgen.logger import get_logger
from bookgen.services.ai_service import AIService
from bookgen.services.prompt_service import prompt_service

logger = get_logger(__name__)


def _pick(data: dict, *keys, default=None):
    """First present key; models answer in either camelCase or snake_case."""
    for key in keys:
        if key in data and data[key] is not None:
            return data[key]
    return default


def _as_str_list(value) -> List[str]:
    if not isinstance(value, list):
        return []
    return [str(item) for item in value if item is not None]


def _as_int(value) -> int:
    try:
        return max(0, int(value))
    except (TypeError, ValueError):
        return 0


class BookGenerator:
    """The three generation flows: ideas, outline, chapter prose"""

    def __init__(self, ai_service: AIService):
        self.ai_service = ai_service

    async def generate_ideas(
        self,
        genre: str,
        target_audience: Optional[str] = None,
        key_interests: Optional[List[str]] = None,
        count: int = 3,
    ) -> List[Dict[str, Any]]:
        """
        Generate book ideas.

        Returns:
            List of ``{title, description, target_audience, key_points}``
        """
        system_prompt, prompt = prompt_service.ideas(genre, target_audience, key_interests, count)
        logger.info(f"💡 Generating {count} ideas for genre '{genre}'")
        raw = await self.ai_service.generate_json(prompt=prompt, system_prompt=system_prompt)

        if not isinstance(raw, list):
            raise ParseError("AI response is not a JSON array of ideas")

        ideas = []
        for item in raw:
            if not isinstance(item, dict) or not item.get("title"):
                logger.warning(f"⚠️ Skipping malformed idea: {str(item)[:200]}")
                continue
            ideas.append({
                "title": str(item["title"]),
                "description": str(item.get("description") or ""),
                "target_audience": _pick(item, "targetAudience", "target_audience", default=target_audience),
                "key_points": _as_str_list(_pick(item, "keyPoints", "key_points", default=[])),
            })
        if not ideas:
            raise ParseError("AI response contained no usable ideas")
        return ideas

    async def generate_outline(
        self,
        title: str,
        description: str,
        genre: str,
        target_word_count: int,
        target_audience: Optional[str] = None,
    ) -> Dict[str, Any]:
        """
        Generate an outline.

        Totals are always recomputed from the entries rather than trusted,
        and entries without an id get ``chapter-N``.
        """
        system_prompt, prompt = prompt_service.outline(
            title, description, genre, target_word_count, target_audience
        )
        logger.info(f"📑 Generating outline for '{title}' (~{target_word_count} words)")
        raw = await self.ai_service.generate_json(prompt=prompt, system_prompt=system_prompt)

        if not isinstance(raw, dict) or not raw.get("title") or not isinstance(raw.get("chapters"), list):
            raise ParseError("Invalid outline structure in AI response")

        chapters = []
        for index, entry in enumerate(raw["chapters"], start=1):
            if not isinstance(entry, dict) or not entry.get("title"):
                logger.warning(f"⚠️ Skipping malformed outline entry {index}")
                continue
            chapters.append({
                "id": str(entry.get("id") or f"chapter-{index}"),
                "title": str(entry["title"]),
                "description": str(entry.get("description") or ""),
                "key_points": _as_str_list(_pick(entry, "keyPoints", "key_points", default=[])),
                "estimated_word_count": _as_int(_pick(entry, "estimatedWordCount", "estimated_word_count", default=0)),
            })
        if not chapters:
            raise ParseError("AI outline contained no chapters")

        return {
            "title": str(raw["title"]),
            "chapters": chapters,
            "total_chapters": len(chapters),
            "total_estimated_words": sum(c["estimated_word_count"] for c in chapters),
        }

    async def generate_chapter(
        self,
        book_title: str,
        genre: str,
        book_description: str,
        target_audience: str,
        chapter_number: int,
        chapter_title: str,
        chapter_description: str,
        key_points: List[str],
        target_word_count: int,
        previous_chapters: Optional[str] = None,
    ) -> str:
        system_prompt, prompt = prompt_service.chapter(
            book_title=book_title,
            genre=genre,
            book_description=book_description,
            target_audience=target_audience,
            chapter_number=chapter_number,
            chapter_title=chapter_title,
            chapter_description=chapter_description,
            key_points=key_points,
            target_word_count=target_word_count,
            previous_chapters=previous_chapters,
        )
        logger.info(f"✍️ Generating chapter {chapter_number}: {chapter_title}")
        response = await self.ai_service.generate_text(prompt=prompt, system_prompt=system_prompt)
        return response["content"].strip()
