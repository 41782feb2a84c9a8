"""Outline pydantic models"""
from pydantic import BaseModel, Field
from typing import Optional, List
from datetime import datetime


class OutlineChapterPlan(BaseModel):
    """One planned chapter inside an outline"""
    id: str = Field(..., min_length=1, description="Plan entry id, e.g. chapter-1")
    title: str = Field(..., min_length=1, description="Chapter title")
    description: str = Field("", description="What the chapter covers")
    key_points: List[str] = Field(default_factory=list, description="Subtopics")
    estimated_word_count: int = Field(0, ge=0, description="Estimated length")


class OutlineCreate(BaseModel):
    """Request model for creating an outline"""
    title: str = Field(..., min_length=1, max_length=300, description="Outline title")
    chapters: List[OutlineChapterPlan] = Field(..., description="Ordered chapter plan")


class OutlineUpdate(BaseModel):
    """Request model for editing an unapproved outline"""
    title: Optional[str] = Field(None, min_length=1, max_length=300)
    chapters: Optional[List[OutlineChapterPlan]] = None


class OutlineResponse(BaseModel):
    """Outline response model"""
    id: str
    book_id: str
    title: str
    chapters: List[OutlineChapterPlan]
    is_approved: bool
    approved_at: Optional[datetime] = None
    total_chapters: int
    total_estimated_words: int
    created_at: datetime
    updated_at: datetime

    class Config:
        from_attributes = True
