"""Outline API"""
from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from bookgen.database import get_db
from bookgen.schemas.outline import OutlineUpdate, OutlineResponse
from bookgen.services.lifecycle import LifecycleEngine
from bookgen.services.record_store import RecordStore
from bookgen.api.users import get_current_user_id

router = APIRouter(prefix="/outlines", tags=["Outlines"])


@router.get("/{outline_id}", response_model=OutlineResponse, summary="Get outline")
async def get_outline(
    outline_id: str,
    user_id: str = Depends(get_current_user_id),
    db: AsyncSession = Depends(get_db)
):
    return await LifecycleEngine(RecordStore(db)).get_outline(user_id, outline_id)


@router.put("/{outline_id}", response_model=OutlineResponse, summary="Update outline")
async def update_outline(
    outline_id: str,
    data: OutlineUpdate,
    user_id: str = Depends(get_current_user_id),
    db: AsyncSession = Depends(get_db)
):
    """Edit an outline; rejected with 409 once approved"""
    return await LifecycleEngine(RecordStore(db)).update_outline(user_id, outline_id, data)


@router.post("/{outline_id}/approve", response_model=OutlineResponse, summary="Approve outline")
async def approve_outline(
    outline_id: str,
    user_id: str = Depends(get_current_user_id),
    db: AsyncSession = Depends(get_db)
):
    """Approve the outline and move the book to approved"""
    return await LifecycleEngine(RecordStore(db)).approve_outline(user_id, outline_id)
