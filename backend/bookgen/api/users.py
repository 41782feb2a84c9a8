"""
User API
"""
from fastapi import APIRouter, HTTPException, Request, Depends
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from bookgen.database import get_db
from bookgen.logger import get_logger
from bookgen.services.record_store import RecordStore

router = APIRouter(prefix="/users", tags=["Users"])
logger = get_logger(__name__)


async def get_current_user_id(request: Request, db: AsyncSession = Depends(get_db)) -> str:
    """Dependency: the request's owner id; the user row is created on first sight."""
    user_id = getattr(request.state, "user_id", None)
    if not user_id:
        raise HTTPException(status_code=401, detail="Authentication required")

    store = RecordStore(db)
    if not await store.get_user(user_id):
        try:
            await store.create_user(user_id)
            await store.commit()
            logger.info(f"👤 New user registered: {user_id}")
        except IntegrityError:
            # Created concurrently by another request
            await store.rollback()
    return user_id


@router.get("/current", summary="Current user")
async def get_current_user(
    user_id: str = Depends(get_current_user_id),
    db: AsyncSession = Depends(get_db)
):
    user = await RecordStore(db).get_user(user_id)
    return user.to_dict()
