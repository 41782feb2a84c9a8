"""Chapter data model"""
from sqlalchemy import Column, String, Text, Integer, DateTime, ForeignKey, UniqueConstraint
from bookgen.database import Base, utcnow
import uuid


class ChapterStatus:
    PENDING = "pending"
    WRITING = "writing"
    COMPLETED = "completed"

    ALL = (PENDING, WRITING, COMPLETED)


class Chapter(Base):
    """Chapters table"""
    __tablename__ = "chapters"
    __table_args__ = (
        UniqueConstraint("book_id", "chapter_number", name="uq_chapters_book_number"),
    )

    id = Column(String(36), primary_key=True, default=lambda: str(uuid.uuid4()))
    book_id = Column(String(36), ForeignKey("books.id", ondelete="CASCADE"), nullable=False, index=True)
    outline_id = Column(String(36), ForeignKey("outlines.id", ondelete="CASCADE"), nullable=False, comment="Outline the chapter was planned in")
    chapter_number = Column(Integer, nullable=False, comment="Manuscript order, unique per book")
    title = Column(String(300), nullable=False, comment="Chapter title")
    content = Column(Text, comment="Chapter content")
    word_count = Column(Integer, nullable=False, default=0, comment="Whitespace-delimited word count")
    status = Column(String(20), nullable=False, default=ChapterStatus.PENDING, comment="pending/writing/completed")

    created_at = Column(DateTime, default=utcnow, comment="Created at")
    updated_at = Column(DateTime, default=utcnow, onupdate=utcnow, comment="Updated at")

    def __repr__(self):
        return f"<Chapter(id={self.id}, chapter_number={self.chapter_number}, title={self.title})>"
