"""Book pydantic models"""
from pydantic import BaseModel, Field
from typing import Optional, List
from datetime import datetime


class BookCreate(BaseModel):
    """Request model for creating a book manually"""
    title: str = Field(..., min_length=1, max_length=300, description="Book title")
    genre: str = Field(..., min_length=1, max_length=100, description="Genre")
    target_word_count: int = Field(..., gt=0, description="Target word count")
    description: Optional[str] = Field(None, description="Description")
    target_audience: Optional[str] = Field(None, description="Target audience")
    key_points: Optional[List[str]] = Field(None, description="Key points")


class BookUpdate(BaseModel):
    """Request model for editing book details.

    Status, word count and progress are owned by the lifecycle engine and
    cannot be written here.
    """
    title: Optional[str] = Field(None, min_length=1, max_length=300)
    genre: Optional[str] = Field(None, min_length=1, max_length=100)
    target_word_count: Optional[int] = Field(None, gt=0)
    description: Optional[str] = None
    target_audience: Optional[str] = None
    key_points: Optional[List[str]] = None


class BookResponse(BaseModel):
    """Book response model"""
    id: str
    user_id: str
    title: str
    genre: str
    target_word_count: int
    current_word_count: int = 0
    status: str
    progress: int = 0
    description: Optional[str] = None
    target_audience: Optional[str] = None
    key_points: Optional[List[str]] = None
    created_at: datetime
    updated_at: datetime

    class Config:
        from_attributes = True


class BookStatsResponse(BaseModel):
    """Dashboard totals for one owner"""
    total_books: int
    by_status: dict[str, int]
    total_words: int
    average_progress: int
