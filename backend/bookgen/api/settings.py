"""Per-user settings API"""
from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession
from typing import Optional

from bookgen.database import get_db
from bookgen.logger import get_logger
from bookgen.models import Settings
from bookgen.schemas.settings import SettingsUpdate, SettingsResponse
from bookgen.services.ai_service import AIService
from bookgen.services.record_store import RecordStore
from bookgen.api.users import get_current_user_id

router = APIRouter(prefix="/settings", tags=["Settings"])
logger = get_logger(__name__)


def mask_api_key(api_key: Optional[str]) -> Optional[str]:
    if not api_key:
        return None
    if len(api_key) <= 10:
        return "*" * len(api_key)
    return f"{api_key[:6]}...{api_key[-4:]}"


def to_response(settings: Settings) -> SettingsResponse:
    response = SettingsResponse.model_validate(settings)
    response.openrouter_api_key = mask_api_key(settings.openrouter_api_key)
    response.has_api_key = bool(settings.openrouter_api_key)
    return response


async def get_user_ai_service(
    user_id: str = Depends(get_current_user_id),
    db: AsyncSession = Depends(get_db)
) -> AIService:
    """Dependency: an AIService configured from the user's settings"""
    store = RecordStore(db)
    settings = await store.get_or_create_settings(user_id)
    await store.commit()
    return AIService(api_key=settings.openrouter_api_key, model=settings.selected_model)


@router.get("", response_model=SettingsResponse, summary="Get settings")
async def get_settings(
    user_id: str = Depends(get_current_user_id),
    db: AsyncSession = Depends(get_db)
):
    """Return the user's settings, created with defaults on first access"""
    store = RecordStore(db)
    settings = await store.get_or_create_settings(user_id)
    await store.commit()
    return to_response(settings)


@router.put("", response_model=SettingsResponse, summary="Update settings")
async def update_settings(
    data: SettingsUpdate,
    user_id: str = Depends(get_current_user_id),
    db: AsyncSession = Depends(get_db)
):
    """Merge the fields present in the request into the user's settings"""
    store = RecordStore(db)
    await store.get_or_create_settings(user_id)
    updates = data.model_dump(exclude_unset=True)
    settings = await store.update_settings(user_id, updates)
    await store.commit()
    logger.info(f"Settings updated for {user_id}: {sorted(k for k in updates if k != 'openrouter_api_key')}")
    return to_response(settings)
