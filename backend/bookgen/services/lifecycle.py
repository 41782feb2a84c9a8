"""Book lifecycle engine.

Owns every Book/Outline/Chapter status transition and the word-count and
progress fields derived from chapter content. Callers never write status
directly; each public method is one named operation and one transaction.
"""
import math
import weakref
from asyncio import Lock
from contextlib import asynccontextmanager
from typing import Optional

from bookgen.exceptions import NotFoundError, ValidationFailedError, InvalidStateError
from bookgen.logger import get_logger
from bookgen.models import Book, BookStatus, Outline, Chapter, ChapterStatus, Idea
from bookgen.models.settings import DEFAULT_WORD_COUNT
from bookgen.schemas.book import BookCreate, BookUpdate
from bookgen.schemas.chapter import ChapterCreate
from bookgen.schemas.outline import OutlineCreate, OutlineUpdate
from bookgen.services.record_store import RecordStore
from bookgen.database import utcnow

logger = get_logger(__name__)

# Per-book write locks serializing the read-sum-write of chapter aggregates.
# An entry lives only while some caller holds its lock.
book_write_locks: "weakref.WeakValueDictionary[str, Lock]" = weakref.WeakValueDictionary()


async def get_book_lock(book_id: str) -> Lock:
    """Get or create the write lock for a book"""
    lock = book_write_locks.get(book_id)
    if lock is None:
        lock = Lock()
        book_write_locks[book_id] = lock
        logger.debug(f"🔒 Created write lock for book {book_id}")
    return lock


def count_words(text: Optional[str]) -> int:
    """Number of whitespace-delimited tokens; 0 for None or blank text."""
    if not text:
        return 0
    return len(text.split())


def compute_progress(total_words: int, target_word_count: int) -> int:
    """Percentage of target reached, rounded half-up and clamped to 0..100."""
    if target_word_count <= 0:
        raise ValidationFailedError(
            "Target word count must be positive",
            {"target_word_count": target_word_count},
        )
    raw = total_words / target_word_count * 100
    return max(0, min(100, int(math.floor(raw + 0.5))))


def _plan_totals(chapters: list) -> tuple[int, int]:
    return len(chapters), sum(int(c.get("estimated_word_count") or 0) for c in chapters)


class LifecycleEngine:
    """Named lifecycle operations over a RecordStore"""

    def __init__(self, store: RecordStore):
        self.store = store

    @asynccontextmanager
    async def _transaction(self):
        try:
            yield
            await self.store.commit()
        except Exception:
            await self.store.rollback()
            raise

    # ---- lookups scoped to the owner ----

    async def get_book(self, owner_id: str, book_id: str) -> Book:
        book = await self.store.get_book(book_id, owner_id)
        if not book:
            raise NotFoundError("Book", book_id)
        return book

    async def get_outline(self, owner_id: str, outline_id: str) -> Outline:
        outline = await self.store.get_outline(outline_id)
        if not outline or not await self.store.get_book(outline.book_id, owner_id):
            raise NotFoundError("Outline", outline_id)
        return outline

    async def get_book_outline(self, owner_id: str, book_id: str) -> Outline:
        await self.get_book(owner_id, book_id)
        outline = await self.store.get_outline_by_book(book_id)
        if not outline:
            raise NotFoundError("Outline", message=f"Book {book_id} has no outline")
        return outline

    async def get_chapter(self, owner_id: str, chapter_id: str) -> Chapter:
        chapter = await self.store.get_chapter(chapter_id)
        if not chapter or not await self.store.get_book(chapter.book_id, owner_id):
            raise NotFoundError("Chapter", chapter_id)
        return chapter

    async def list_chapters(self, owner_id: str, book_id: str) -> list[Chapter]:
        await self.get_book(owner_id, book_id)
        return await self.store.list_chapters(book_id)

    # ---- aggregate recomputation ----

    async def _recompute_book(self, book: Book) -> Book:
        """Re-derive word count, progress and status from the stored chapters.

        Must run under the book's write lock, after the chapter change has
        been flushed.
        """
        await self.store.refresh(book)
        chapter_count, total_words = await self.store.chapter_totals(book.id)
        if chapter_count == 0:
            # Nothing written anymore; status stays where it was
            return await self.store.update_book(book, current_word_count=0, progress=0)

        progress = compute_progress(total_words, book.target_word_count)
        status = BookStatus.COMPLETED if progress == 100 else BookStatus.WRITING
        if status != book.status:
            logger.info(f"Book {book.id} status: {book.status} → {status} ({total_words} words, {progress}%)")
        return await self.store.update_book(
            book,
            current_word_count=total_words,
            progress=progress,
            status=status,
        )

    # ---- books ----

    async def create_book(self, owner_id: str, data: BookCreate) -> Book:
        if data.target_word_count <= 0:
            raise ValidationFailedError("Target word count must be positive")
        async with self._transaction():
            book = await self.store.create_book(
                owner_id,
                title=data.title,
                genre=data.genre,
                target_word_count=data.target_word_count,
                description=data.description,
                target_audience=data.target_audience,
                key_points=list(data.key_points) if data.key_points else [],
                current_word_count=0,
                progress=0,
                status=BookStatus.IDEA,
            )
        logger.info(f"Book created: {book.id} '{book.title}' for user {owner_id}")
        return book

    async def accept_idea(self, owner_id: str, idea_id: str, target_word_count: Optional[int] = None) -> Book:
        """Mark an idea selected and promote it to a new book."""
        idea: Optional[Idea] = await self.store.get_idea(idea_id, owner_id)
        if not idea:
            raise NotFoundError("Idea", idea_id)
        if target_word_count is not None and target_word_count <= 0:
            raise ValidationFailedError("Target word count must be positive")

        async with self._transaction():
            if target_word_count is None:
                settings = await self.store.get_settings(owner_id)
                target_word_count = (settings.default_word_count if settings else None) or DEFAULT_WORD_COUNT
            book = await self.store.create_book(
                owner_id,
                title=idea.title,
                genre=idea.genre,
                target_word_count=target_word_count,
                description=idea.description,
                target_audience=idea.target_audience,
                key_points=list(idea.key_points or []),
                current_word_count=0,
                progress=0,
                status=BookStatus.IDEA,
            )
            await self.store.update_idea(idea, is_selected=True)
        logger.info(f"Idea {idea_id} accepted as book {book.id}")
        return book

    async def update_book_details(self, owner_id: str, book_id: str, data: BookUpdate) -> Book:
        book = await self.get_book(owner_id, book_id)
        updates = data.model_dump(exclude_unset=True)
        # Required columns cannot be cleared
        for field in ("title", "genre", "target_word_count"):
            if field in updates and updates[field] is None:
                updates.pop(field)
        if "target_word_count" in updates and updates["target_word_count"] <= 0:
            raise ValidationFailedError("Target word count must be positive")
        if "key_points" in updates and updates["key_points"] is not None:
            updates["key_points"] = list(updates["key_points"])

        target_changed = "target_word_count" in updates and updates["target_word_count"] != book.target_word_count
        lock = await get_book_lock(book_id)
        async with lock:
            async with self._transaction():
                book = await self.store.update_book(book, **updates)
                if target_changed:
                    # Empty chapters leave the status where approval put it
                    _, total_words = await self.store.chapter_totals(book_id)
                    if total_words:
                        book = await self._recompute_book(book)
        return book

    async def delete_book(self, owner_id: str, book_id: str) -> None:
        """Delete a book with its outline and chapters, all or nothing."""
        await self.get_book(owner_id, book_id)
        lock = await get_book_lock(book_id)
        async with lock:
            async with self._transaction():
                await self.store.delete_book(book_id)
        logger.info(f"Book deleted: {book_id}")

    async def book_stats(self, owner_id: str) -> dict:
        books = await self.store.list_books(owner_id)
        by_status = {status: 0 for status in BookStatus.ALL}
        for book in books:
            by_status[book.status] = by_status.get(book.status, 0) + 1
        total_progress = sum(book.progress or 0 for book in books)
        return {
            "total_books": len(books),
            "by_status": by_status,
            "total_words": sum(book.current_word_count or 0 for book in books),
            "average_progress": round(total_progress / len(books)) if books else 0,
        }

    # ---- outlines ----

    async def create_outline(
        self,
        owner_id: str,
        book_id: str,
        data: OutlineCreate,
        replace_unapproved: bool = False,
    ) -> Outline:
        """Create the book's outline.

        A book has at most one outline. With ``replace_unapproved`` an
        existing, not yet approved outline is overwritten in place instead of
        rejected; an approved outline is never replaced.
        """
        book = await self.get_book(owner_id, book_id)
        chapters = [entry.model_dump() for entry in data.chapters]
        total_chapters, total_words = _plan_totals(chapters)

        async with self._transaction():
            outline = await self.store.get_outline_by_book(book_id)
            if outline:
                if outline.is_approved:
                    raise InvalidStateError("Outline is already approved", {"outline_id": outline.id})
                if not replace_unapproved:
                    raise InvalidStateError("Book already has an outline", {"outline_id": outline.id})
                outline = await self.store.update_outline(
                    outline,
                    title=data.title,
                    chapters=chapters,
                    total_chapters=total_chapters,
                    total_estimated_words=total_words,
                )
            else:
                outline = await self.store.create_outline(
                    book_id,
                    title=data.title,
                    chapters=chapters,
                    is_approved=False,
                    total_chapters=total_chapters,
                    total_estimated_words=total_words,
                )
            # Books already being written keep their status
            if book.status in (BookStatus.IDEA, BookStatus.OUTLINE):
                await self.store.update_book(book, status=BookStatus.OUTLINE)

        logger.info(f"Outline {outline.id} saved for book {book_id}: {total_chapters} chapters, ~{total_words} words")
        return outline

    async def update_outline(self, owner_id: str, outline_id: str, data: OutlineUpdate) -> Outline:
        outline = await self.get_outline(owner_id, outline_id)
        if outline.is_approved:
            raise InvalidStateError("Approved outlines cannot be edited", {"outline_id": outline_id})

        updates = {}
        if data.title is not None:
            updates["title"] = data.title
        if data.chapters is not None:
            chapters = [entry.model_dump() for entry in data.chapters]
            updates["chapters"] = chapters
            updates["total_chapters"], updates["total_estimated_words"] = _plan_totals(chapters)

        async with self._transaction():
            outline = await self.store.update_outline(outline, **updates)
        return outline

    async def approve_outline(self, owner_id: str, outline_id: str) -> Outline:
        """Approve an outline; approval is one-way and re-approving is a no-op."""
        outline = await self.get_outline(owner_id, outline_id)
        if outline.is_approved:
            logger.debug(f"Outline {outline_id} already approved")
            return outline

        book = await self.store.get_book(outline.book_id, owner_id)
        async with self._transaction():
            outline = await self.store.update_outline(outline, is_approved=True, approved_at=utcnow())
            if book.status in (BookStatus.IDEA, BookStatus.OUTLINE):
                await self.store.update_book(book, status=BookStatus.APPROVED)
        logger.info(f"Outline {outline_id} approved, book {book.id} → {book.status}")
        return outline

    # ---- chapters ----

    async def _require_outline(self, book_id: str) -> Outline:
        outline = await self.store.get_outline_by_book(book_id)
        if not outline:
            raise InvalidStateError("Book has no outline yet", {"book_id": book_id})
        return outline

    async def require_outline(self, owner_id: str, book_id: str) -> Outline:
        """The book's outline; InvalidState when chapters cannot be written yet."""
        await self.get_book(owner_id, book_id)
        return await self._require_outline(book_id)

    async def create_chapter(self, owner_id: str, book_id: str, data: ChapterCreate) -> Chapter:
        book = await self.get_book(owner_id, book_id)
        if data.chapter_number <= 0:
            raise ValidationFailedError("Chapter number must be positive", {"chapter_number": data.chapter_number})
        outline = await self._require_outline(book_id)

        lock = await get_book_lock(book_id)
        async with lock:
            async with self._transaction():
                if await self.store.get_chapter_by_number(book_id, data.chapter_number):
                    raise ValidationFailedError(
                        f"Chapter {data.chapter_number} already exists",
                        {"book_id": book_id, "chapter_number": data.chapter_number},
                    )
                word_count = count_words(data.content)
                chapter = await self.store.create_chapter(
                    book_id,
                    outline.id,
                    chapter_number=data.chapter_number,
                    title=data.title,
                    content=data.content,
                    word_count=word_count,
                    status=ChapterStatus.WRITING if word_count else ChapterStatus.PENDING,
                )
                if word_count:
                    await self._recompute_book(book)
        return chapter

    async def write_chapter_content(
        self,
        owner_id: str,
        chapter_id: str,
        content: Optional[str],
        title: Optional[str] = None,
        status: Optional[str] = None,
    ) -> Chapter:
        """Store new chapter content and recompute the parent book aggregate."""
        chapter = await self.get_chapter(owner_id, chapter_id)
        if status is not None and status not in ChapterStatus.ALL:
            raise ValidationFailedError(f"Invalid chapter status: {status}")

        lock = await get_book_lock(chapter.book_id)
        async with lock:
            async with self._transaction():
                word_count = count_words(content)
                if status is None:
                    if word_count == 0:
                        status = ChapterStatus.PENDING
                    elif chapter.status == ChapterStatus.COMPLETED:
                        status = ChapterStatus.COMPLETED
                    else:
                        status = ChapterStatus.WRITING
                updates = {"content": content, "word_count": word_count, "status": status}
                if title is not None:
                    updates["title"] = title
                chapter = await self.store.update_chapter(chapter, **updates)

                book = await self.store.get_book(chapter.book_id, owner_id)
                await self._recompute_book(book)
        logger.info(f"Chapter {chapter_id} written: {word_count} words")
        return chapter

    async def upsert_generated_chapter(
        self,
        owner_id: str,
        book_id: str,
        chapter_number: int,
        title: str,
        content: str,
    ) -> Chapter:
        """Create or overwrite a chapter with generated prose, marked completed."""
        book = await self.get_book(owner_id, book_id)
        if chapter_number <= 0:
            raise ValidationFailedError("Chapter number must be positive", {"chapter_number": chapter_number})
        outline = await self._require_outline(book_id)

        lock = await get_book_lock(book_id)
        async with lock:
            async with self._transaction():
                word_count = count_words(content)
                chapter = await self.store.get_chapter_by_number(book_id, chapter_number)
                if chapter:
                    chapter = await self.store.update_chapter(
                        chapter,
                        title=title,
                        content=content,
                        word_count=word_count,
                        status=ChapterStatus.COMPLETED,
                    )
                else:
                    chapter = await self.store.create_chapter(
                        book_id,
                        outline.id,
                        chapter_number=chapter_number,
                        title=title,
                        content=content,
                        word_count=word_count,
                        status=ChapterStatus.COMPLETED,
                    )
                await self._recompute_book(book)
        logger.info(f"Generated chapter {chapter_number} stored for book {book_id}: {word_count} words")
        return chapter

    async def delete_chapter(self, owner_id: str, chapter_id: str) -> None:
        chapter = await self.get_chapter(owner_id, chapter_id)
        book_id = chapter.book_id
        lock = await get_book_lock(book_id)
        async with lock:
            async with self._transaction():
                await self.store.delete_chapter(chapter_id)
                book = await self.store.get_book(book_id, owner_id)
                await self._recompute_book(book)
        logger.info(f"Chapter {chapter_id} deleted from book {book_id}")
