"""AI generation API - ideas, outlines and chapters"""
from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession
from typing import List

from bookgen.database import get_db
from bookgen.logger import get_logger
from bookgen.schemas.chapter import ChapterResponse
from bookgen.schemas.generation import (
    GenerateIdeasRequest,
    GenerateOutlineRequest,
    GenerateChapterRequest,
)
from bookgen.schemas.idea import IdeaResponse
from bookgen.schemas.outline import OutlineCreate, OutlineChapterPlan, OutlineResponse
from bookgen.services.ai_service import AIService
from bookgen.services.book_generator import BookGenerator
from bookgen.services.lifecycle import LifecycleEngine
from bookgen.services.record_store import RecordStore
from bookgen.api.settings import get_user_ai_service
from bookgen.api.users import get_current_user_id

router = APIRouter(prefix="/generate", tags=["AI Generation"])
logger = get_logger(__name__)


@router.post("/ideas", response_model=List[IdeaResponse], summary="Generate book ideas")
async def generate_ideas(
    data: GenerateIdeasRequest,
    user_id: str = Depends(get_current_user_id),
    db: AsyncSession = Depends(get_db),
    user_ai_service: AIService = Depends(get_user_ai_service)
):
    """Generate ideas and save them for the user"""
    ideas = await BookGenerator(user_ai_service).generate_ideas(
        genre=data.genre,
        target_audience=data.target_audience,
        key_interests=data.key_interests,
        count=data.count,
    )

    store = RecordStore(db)
    saved = []
    try:
        for idea in ideas:
            saved.append(await store.create_idea(
                user_id,
                title=idea["title"],
                description=idea["description"],
                genre=data.genre,
                target_audience=idea["target_audience"],
                key_points=idea["key_points"],
                is_selected=False,
            ))
        await store.commit()
    except Exception:
        await store.rollback()
        raise
    logger.info(f"💡 Saved {len(saved)} generated ideas for {user_id}")
    return saved


@router.post("/outline", response_model=OutlineResponse, summary="Generate outline")
async def generate_outline(
    data: GenerateOutlineRequest,
    user_id: str = Depends(get_current_user_id),
    db: AsyncSession = Depends(get_db),
    user_ai_service: AIService = Depends(get_user_ai_service)
):
    """Generate an outline for a book, replacing an unapproved one"""
    engine = LifecycleEngine(RecordStore(db))
    book = await engine.get_book(user_id, data.book_id)

    generated = await BookGenerator(user_ai_service).generate_outline(
        title=data.title or book.title,
        description=data.description or book.description or "",
        genre=data.genre or book.genre,
        target_word_count=data.target_word_count or book.target_word_count,
        target_audience=data.target_audience or book.target_audience,
    )
    outline = OutlineCreate(
        title=generated["title"],
        chapters=[OutlineChapterPlan(**entry) for entry in generated["chapters"]],
    )
    return await engine.create_outline(user_id, book.id, outline, replace_unapproved=True)


@router.post("/chapter", response_model=ChapterResponse, summary="Generate chapter")
async def generate_chapter(
    data: GenerateChapterRequest,
    user_id: str = Depends(get_current_user_id),
    db: AsyncSession = Depends(get_db),
    user_ai_service: AIService = Depends(get_user_ai_service)
):
    """Write one chapter with AI and store it as completed"""
    engine = LifecycleEngine(RecordStore(db))
    book = await engine.get_book(user_id, data.book_id)
    await engine.require_outline(user_id, book.id)

    content = await BookGenerator(user_ai_service).generate_chapter(
        book_title=book.title,
        genre=book.genre,
        book_description=book.description or "",
        target_audience=book.target_audience or "General",
        chapter_number=data.chapter_number,
        chapter_title=data.chapter_title,
        chapter_description=data.chapter_description,
        key_points=data.key_points,
        target_word_count=data.target_word_count,
        previous_chapters=data.previous_chapters,
    )
    return await engine.upsert_generated_chapter(
        user_id,
        book.id,
        data.chapter_number,
        data.chapter_title,
        content,
    )
