"""AI generation request models"""
from pydantic import BaseModel, Field
from typing import Optional, List


class GenerateIdeasRequest(BaseModel):
    genre: str = Field(..., min_length=1, description="Genre")
    target_audience: Optional[str] = None
    key_interests: Optional[List[str]] = None
    count: int = Field(3, ge=1, le=10, description="Number of ideas")


class GenerateOutlineRequest(BaseModel):
    book_id: str = Field(..., min_length=1)
    title: Optional[str] = Field(None, description="Defaults to the book title")
    description: Optional[str] = Field(None, description="Defaults to the book description")
    target_word_count: Optional[int] = Field(None, ge=10000, le=200000, description="Defaults to the book target")
    genre: Optional[str] = None
    target_audience: Optional[str] = None


class GenerateChapterRequest(BaseModel):
    book_id: str = Field(..., min_length=1)
    chapter_number: int = Field(..., ge=1)
    chapter_title: str = Field(..., min_length=1)
    chapter_description: str = Field(..., min_length=1)
    key_points: List[str] = Field(default_factory=list)
    target_word_count: int = Field(3000, ge=500, le=10000)
    previous_chapters: Optional[str] = Field(None, description="Summary of earlier chapters")
