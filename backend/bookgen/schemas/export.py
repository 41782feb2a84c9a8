"""Export pydantic models"""
from pydantic import BaseModel, Field
from typing import Optional, Literal


class ExportRequest(BaseModel):
    """Export options; unset fields fall back to the user's export preferences.

    ``format`` is a free string so that unknown tokens reach the exporter and
    fail as an unsupported format rather than a schema error.
    """
    format: Optional[str] = Field(None, description="txt/docx/pdf/epub")
    page_size: Optional[Literal["letter", "a4", "kindle"]] = None
    include_toc: Optional[bool] = None
    include_metadata: Optional[bool] = None
    kdp_formatting: Optional[bool] = None
