"""Settings pydantic models"""
from pydantic import BaseModel, Field, ConfigDict
from typing import Optional, Literal
from datetime import datetime


class SettingsUpdate(BaseModel):
    """Partial settings update; only fields present in the request are merged"""
    model_config = ConfigDict(protected_namespaces=())

    openrouter_api_key: Optional[str] = Field(None, description="API key")
    selected_model: Optional[str] = Field(None, description="Model identifier")
    default_genre: Optional[str] = Field(None, description="Default genre")
    default_word_count: Optional[int] = Field(None, gt=0, description="Default target word count")
    auto_save: Optional[bool] = None
    export_format: Optional[Literal["txt", "docx", "pdf", "epub"]] = None
    export_page_size: Optional[Literal["letter", "a4", "kindle"]] = None
    export_include_toc: Optional[bool] = None
    export_include_metadata: Optional[bool] = None
    export_kdp_formatting: Optional[bool] = None


class SettingsResponse(BaseModel):
    """Settings response model; the API key is returned masked"""
    model_config = ConfigDict(from_attributes=True, protected_namespaces=())

    id: str
    user_id: str
    openrouter_api_key: Optional[str] = None
    has_api_key: bool = False
    selected_model: Optional[str] = None
    default_genre: Optional[str] = None
    default_word_count: Optional[int] = None
    auto_save: Optional[bool] = None
    export_format: Optional[str] = None
    export_page_size: Optional[str] = None
    export_include_toc: Optional[bool] = None
    export_include_metadata: Optional[bool] = None
    export_kdp_formatting: Optional[bool] = None
    created_at: datetime
    updated_at: datetime
