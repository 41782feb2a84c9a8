"""Outline data model"""
from sqlalchemy import Column, String, Integer, DateTime, Boolean, JSON, ForeignKey
from bookgen.database import Base, utcnow
import uuid


class Outline(Base):
    """Outlines table - exactly one per book"""
    __tablename__ = "outlines"

    id = Column(String(36), primary_key=True, default=lambda: str(uuid.uuid4()))
    book_id = Column(String(36), ForeignKey("books.id", ondelete="CASCADE"), nullable=False, unique=True, index=True)
    title = Column(String(300), nullable=False, comment="Outline title")
    chapters = Column(JSON, nullable=False, default=list, comment="Chapter plan: [{id, title, description, key_points, estimated_word_count}]")
    is_approved = Column(Boolean, nullable=False, default=False, comment="One-way approval gate")
    approved_at = Column(DateTime, comment="Approval time")
    total_chapters = Column(Integer, nullable=False, default=0, comment="len(chapters)")
    total_estimated_words = Column(Integer, nullable=False, default=0, comment="sum of estimated_word_count")

    created_at = Column(DateTime, default=utcnow, comment="Created at")
    updated_at = Column(DateTime, default=utcnow, onupdate=utcnow, comment="Updated at")

    def __repr__(self):
        return f"<Outline(id={self.id}, book_id={self.book_id}, approved={self.is_approved})>"
