"""ORM models"""
from bookgen.models.user import User
from bookgen.models.settings import Settings
from bookgen.models.book import Book, BookStatus
from bookgen.models.outline import Outline
from bookgen.models.chapter import Chapter, ChapterStatus
from bookgen.models.idea import Idea

__all__ = [
    "User",
    "Settings",
    "Book",
    "BookStatus",
    "Outline",
    "Chapter",
    "ChapterStatus",
    "Idea",
]
