"""Book data model"""
from sqlalchemy import Column, String, Text, DateTime, Integer, JSON, ForeignKey
from bookgen.database import Base, utcnow
import uuid


class BookStatus:
    """Lifecycle states, in order: idea → outline → approved → writing → completed"""
    IDEA = "idea"
    OUTLINE = "outline"
    APPROVED = "approved"
    WRITING = "writing"
    COMPLETED = "completed"

    ALL = (IDEA, OUTLINE, APPROVED, WRITING, COMPLETED)


class Book(Base):
    """Books table"""
    __tablename__ = "books"

    id = Column(String(36), primary_key=True, default=lambda: str(uuid.uuid4()))
    user_id = Column(String(100), ForeignKey("users.user_id"), nullable=False, index=True, comment="Owner")
    title = Column(String(300), nullable=False, comment="Book title")
    genre = Column(String(100), nullable=False, comment="Genre")
    target_word_count = Column(Integer, nullable=False, comment="Author-supplied target")
    current_word_count = Column(Integer, nullable=False, default=0, comment="Sum of chapter word counts")
    status = Column(String(20), nullable=False, default=BookStatus.IDEA, comment="idea/outline/approved/writing/completed")
    progress = Column(Integer, nullable=False, default=0, comment="Percentage 0-100")
    description = Column(Text, comment="Description")
    target_audience = Column(Text, comment="Target audience")
    key_points = Column(JSON, comment="Key points list")

    created_at = Column(DateTime, default=utcnow, comment="Created at")
    updated_at = Column(DateTime, default=utcnow, onupdate=utcnow, index=True, comment="Updated at")

    def __repr__(self):
        return f"<Book(id={self.id}, title={self.title}, status={self.status})>"
