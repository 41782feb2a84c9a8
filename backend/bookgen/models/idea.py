"""Book idea data model"""
from sqlalchemy import Column, String, Text, DateTime, Boolean, JSON, ForeignKey
from bookgen.database import Base, utcnow
import uuid


class Idea(Base):
    """Candidate book concepts, independent of books until accepted"""
    __tablename__ = "book_ideas"

    id = Column(String(36), primary_key=True, default=lambda: str(uuid.uuid4()))
    user_id = Column(String(100), ForeignKey("users.user_id"), nullable=False, index=True, comment="Owner")
    title = Column(String(300), nullable=False)
    description = Column(Text, nullable=False)
    genre = Column(String(100), nullable=False)
    target_audience = Column(Text)
    key_points = Column(JSON)
    is_selected = Column(Boolean, nullable=False, default=False, comment="Accepted into a book")

    created_at = Column(DateTime, default=utcnow, index=True, comment="Created at")

    def __repr__(self):
        return f"<Idea(id={self.id}, title={self.title})>"
