"""Chapter pydantic models"""
from pydantic import BaseModel, Field
from typing import Optional, Literal
from datetime import datetime

ChapterStatusLiteral = Literal["pending", "writing", "completed"]


class ChapterCreate(BaseModel):
    """Request model for creating a chapter"""
    chapter_number: int = Field(..., gt=0, description="Manuscript order, unique per book")
    title: str = Field(..., min_length=1, max_length=300, description="Chapter title")
    content: Optional[str] = Field(None, description="Initial content")


class ChapterContentUpdate(BaseModel):
    """Request model for writing chapter content"""
    content: Optional[str] = Field(None, description="New content; null or empty clears it")
    title: Optional[str] = Field(None, min_length=1, max_length=300)
    # word_count is derived, never written directly
    status: Optional[ChapterStatusLiteral] = Field(None, description="Explicit chapter status")


class ChapterResponse(BaseModel):
    """Chapter response model"""
    id: str
    book_id: str
    outline_id: str
    chapter_number: int
    title: str
    content: Optional[str] = None
    word_count: int = 0
    status: str
    created_at: datetime
    updated_at: datetime

    class Config:
        from_attributes = True
