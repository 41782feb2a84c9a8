"""ORM-backed record store.

Methods flush but never commit: transaction boundaries belong to the caller
(the lifecycle engine or a router), so a multi-record operation either lands
as a whole or not at all.
"""
from typing import Optional, List, Any, Dict

from sqlalchemy import select, delete, func
from sqlalchemy.ext.asyncio import AsyncSession

from bookgen.models import User, Settings, Book, Outline, Chapter, Idea
from bookgen.models.settings import (
    DEFAULT_GENRE,
    DEFAULT_WORD_COUNT,
    DEFAULT_EXPORT_FORMAT,
    DEFAULT_PAGE_SIZE,
)
from bookgen.logger import get_logger

logger = get_logger(__name__)


class RecordStore:
    """Keyed storage for users, settings, books, outlines, chapters and ideas"""

    def __init__(self, session: AsyncSession):
        self.session = session

    async def commit(self):
        await self.session.commit()

    async def rollback(self):
        if self.session.in_transaction():
            await self.session.rollback()

    async def refresh(self, record):
        await self.session.refresh(record)
        return record

    async def _save(self, record):
        self.session.add(record)
        await self.session.flush()
        return record

    # ---- Users ----

    async def get_user(self, user_id: str) -> Optional[User]:
        return await self.session.get(User, user_id)

    async def create_user(self, user_id: str, username: Optional[str] = None) -> User:
        return await self._save(User(user_id=user_id, username=username or user_id))

    # ---- Settings ----

    async def get_settings(self, user_id: str) -> Optional[Settings]:
        result = await self.session.execute(
            select(Settings).where(Settings.user_id == user_id)
        )
        return result.scalar_one_or_none()

    async def create_settings(self, user_id: str, **values) -> Settings:
        return await self._save(Settings(user_id=user_id, **values))

    async def get_or_create_settings(self, user_id: str) -> Settings:
        """Return the user's settings, creating the row with defaults on first access."""
        settings = await self.get_settings(user_id)
        if settings:
            return settings
        logger.info(f"Creating default settings for user {user_id}")
        return await self.create_settings(
            user_id,
            default_genre=DEFAULT_GENRE,
            default_word_count=DEFAULT_WORD_COUNT,
            auto_save=True,
            export_format=DEFAULT_EXPORT_FORMAT,
            export_page_size=DEFAULT_PAGE_SIZE,
            export_include_toc=True,
            export_include_metadata=True,
            export_kdp_formatting=False,
        )

    async def update_settings(self, user_id: str, updates: Dict[str, Any]) -> Optional[Settings]:
        settings = await self.get_settings(user_id)
        if not settings:
            return None
        for field, value in updates.items():
            setattr(settings, field, value)
        return await self._save(settings)

    # ---- Books ----

    async def get_book(self, book_id: str, user_id: Optional[str] = None) -> Optional[Book]:
        query = select(Book).where(Book.id == book_id)
        if user_id is not None:
            query = query.where(Book.user_id == user_id)
        result = await self.session.execute(query)
        return result.scalar_one_or_none()

    async def list_books(self, user_id: str) -> List[Book]:
        """Books of one owner, most recently updated first."""
        result = await self.session.execute(
            select(Book)
            .where(Book.user_id == user_id)
            .order_by(Book.updated_at.desc())
        )
        return list(result.scalars().all())

    async def create_book(self, user_id: str, **values) -> Book:
        return await self._save(Book(user_id=user_id, **values))

    async def update_book(self, book: Book, **updates) -> Book:
        for field, value in updates.items():
            setattr(book, field, value)
        return await self._save(book)

    async def delete_book(self, book_id: str) -> bool:
        """Delete a book together with its outline and chapters."""
        book = await self.session.get(Book, book_id)
        if not book:
            return False
        await self.session.execute(delete(Chapter).where(Chapter.book_id == book_id))
        await self.session.execute(delete(Outline).where(Outline.book_id == book_id))
        await self.session.delete(book)
        await self.session.flush()
        return True

    # ---- Outlines ----

    async def get_outline(self, outline_id: str) -> Optional[Outline]:
        return await self.session.get(Outline, outline_id)

    async def get_outline_by_book(self, book_id: str) -> Optional[Outline]:
        result = await self.session.execute(
            select(Outline).where(Outline.book_id == book_id)
        )
        return result.scalar_one_or_none()

    async def create_outline(self, book_id: str, **values) -> Outline:
        return await self._save(Outline(book_id=book_id, **values))

    async def update_outline(self, outline: Outline, **updates) -> Outline:
        for field, value in updates.items():
            setattr(outline, field, value)
        return await self._save(outline)

    # ---- Chapters ----

    async def get_chapter(self, chapter_id: str) -> Optional[Chapter]:
        return await self.session.get(Chapter, chapter_id)

    async def list_chapters(self, book_id: str) -> List[Chapter]:
        """Chapters of one book in manuscript order."""
        result = await self.session.execute(
            select(Chapter)
            .where(Chapter.book_id == book_id)
            .order_by(Chapter.chapter_number)
        )
        return list(result.scalars().all())

    async def get_chapter_by_number(self, book_id: str, chapter_number: int) -> Optional[Chapter]:
        result = await self.session.execute(
            select(Chapter).where(
                Chapter.book_id == book_id,
                Chapter.chapter_number == chapter_number,
            )
        )
        return result.scalar_one_or_none()

    async def chapter_totals(self, book_id: str) -> tuple[int, int]:
        """(chapter count, summed word count) read straight from the database."""
        result = await self.session.execute(
            select(func.count(Chapter.id), func.coalesce(func.sum(Chapter.word_count), 0))
            .where(Chapter.book_id == book_id)
        )
        count, words = result.one()
        return int(count), int(words)

    async def create_chapter(self, book_id: str, outline_id: str, **values) -> Chapter:
        return await self._save(Chapter(book_id=book_id, outline_id=outline_id, **values))

    async def update_chapter(self, chapter: Chapter, **updates) -> Chapter:
        for field, value in updates.items():
            setattr(chapter, field, value)
        return await self._save(chapter)

    async def delete_chapter(self, chapter_id: str) -> bool:
        chapter = await self.session.get(Chapter, chapter_id)
        if not chapter:
            return False
        await self.session.delete(chapter)
        await self.session.flush()
        return True

    # ---- Ideas ----

    async def get_idea(self, idea_id: str, user_id: Optional[str] = None) -> Optional[Idea]:
        query = select(Idea).where(Idea.id == idea_id)
        if user_id is not None:
            query = query.where(Idea.user_id == user_id)
        result = await self.session.execute(query)
        return result.scalar_one_or_none()

    async def list_ideas(self, user_id: str) -> List[Idea]:
        """Ideas of one owner, newest first."""
        result = await self.session.execute(
            select(Idea)
            .where(Idea.user_id == user_id)
            .order_by(Idea.created_at.desc())
        )
        return list(result.scalars().all())

    async def create_idea(self, user_id: str, **values) -> Idea:
        return await self._save(Idea(user_id=user_id, **values))

    async def update_idea(self, idea: Idea, **updates) -> Idea:
        for field, value in updates.items():
            setattr(idea, field, value)
        return await self._save(idea)

    async def delete_idea(self, idea_id: str, user_id: Optional[str] = None) -> bool:
        idea = await self.get_idea(idea_id, user_id)
        if not idea:
            return False
        await self.session.delete(idea)
        await self.session.flush()
        return True
