"""Book idea API"""
from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession
from typing import List

from bookgen.database import get_db
from bookgen.exceptions import NotFoundError
from bookgen.schemas.book import BookResponse
from bookgen.schemas.idea import IdeaCreate, IdeaAcceptRequest, IdeaResponse
from bookgen.services.lifecycle import LifecycleEngine
from bookgen.services.record_store import RecordStore
from bookgen.api.users import get_current_user_id

router = APIRouter(prefix="/ideas", tags=["Ideas"])


@router.get("", response_model=List[IdeaResponse], summary="List ideas")
async def list_ideas(
    user_id: str = Depends(get_current_user_id),
    db: AsyncSession = Depends(get_db)
):
    """The user's ideas, newest first"""
    return await RecordStore(db).list_ideas(user_id)


@router.post("", response_model=IdeaResponse, status_code=201, summary="Save idea")
async def create_idea(
    data: IdeaCreate,
    user_id: str = Depends(get_current_user_id),
    db: AsyncSession = Depends(get_db)
):
    store = RecordStore(db)
    idea = await store.create_idea(user_id, is_selected=False, **data.model_dump())
    await store.commit()
    return idea


@router.delete("/{idea_id}", summary="Delete idea")
async def delete_idea(
    idea_id: str,
    user_id: str = Depends(get_current_user_id),
    db: AsyncSession = Depends(get_db)
):
    store = RecordStore(db)
    if not await store.delete_idea(idea_id, user_id):
        raise NotFoundError("Idea", idea_id)
    await store.commit()
    return {"message": "Idea deleted"}


@router.post("/{idea_id}/accept", response_model=BookResponse, status_code=201, summary="Accept idea")
async def accept_idea(
    idea_id: str,
    data: IdeaAcceptRequest,
    user_id: str = Depends(get_current_user_id),
    db: AsyncSession = Depends(get_db)
):
    """Promote an idea to a new book"""
    return await LifecycleEngine(RecordStore(db)).accept_idea(user_id, idea_id, data.target_word_count)
