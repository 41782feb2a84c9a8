"""Chapter API"""
from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from bookgen.database import get_db
from bookgen.schemas.chapter import ChapterContentUpdate, ChapterResponse
from bookgen.services.lifecycle import LifecycleEngine
from bookgen.services.record_store import RecordStore
from bookgen.api.users import get_current_user_id

router = APIRouter(prefix="/chapters", tags=["Chapters"])


@router.get("/{chapter_id}", response_model=ChapterResponse, summary="Get chapter")
async def get_chapter(
    chapter_id: str,
    user_id: str = Depends(get_current_user_id),
    db: AsyncSession = Depends(get_db)
):
    return await LifecycleEngine(RecordStore(db)).get_chapter(user_id, chapter_id)


@router.put("/{chapter_id}", response_model=ChapterResponse, summary="Write chapter content")
async def update_chapter(
    chapter_id: str,
    data: ChapterContentUpdate,
    user_id: str = Depends(get_current_user_id),
    db: AsyncSession = Depends(get_db)
):
    """Store new content; word count, progress and book status are recomputed"""
    return await LifecycleEngine(RecordStore(db)).write_chapter_content(
        user_id,
        chapter_id,
        data.content,
        title=data.title,
        status=data.status,
    )


@router.delete("/{chapter_id}", summary="Delete chapter")
async def delete_chapter(
    chapter_id: str,
    user_id: str = Depends(get_current_user_id),
    db: AsyncSession = Depends(get_db)
):
    await LifecycleEngine(RecordStore(db)).delete_chapter(user_id, chapter_id)
    return {"message": "Chapter deleted"}
