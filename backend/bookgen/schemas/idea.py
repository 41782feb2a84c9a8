"""Book idea pydantic models"""
from pydantic import BaseModel, Field
from typing import Optional, List
from datetime import datetime


class IdeaCreate(BaseModel):
    """Request model for saving an idea manually"""
    title: str = Field(..., min_length=1, max_length=300)
    description: str = Field(..., min_length=1)
    genre: str = Field(..., min_length=1, max_length=100)
    target_audience: Optional[str] = None
    key_points: Optional[List[str]] = None


class IdeaAcceptRequest(BaseModel):
    """Promote an idea to a book"""
    target_word_count: Optional[int] = Field(None, gt=0, description="Defaults to the user's default word count")


class IdeaResponse(BaseModel):
    """Idea response model"""
    id: str
    user_id: str
    title: str
    description: str
    genre: str
    target_audience: Optional[str] = None
    key_points: Optional[List[str]] = None
    is_selected: bool
    created_at: datetime

    class Config:
        from_attributes = True
