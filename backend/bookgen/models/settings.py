"""Per-user settings data model"""
from sqlalchemy import Column, String, Integer, Boolean, DateTime, ForeignKey
from bookgen.database import Base, utcnow
import uuid


# Defaults applied when a user's settings row is created lazily
DEFAULT_GENRE = "Business"
DEFAULT_WORD_COUNT = 50000
DEFAULT_EXPORT_FORMAT = "docx"
DEFAULT_PAGE_SIZE = "letter"


class Settings(Base):
    """User settings table - one row per user"""
    __tablename__ = "settings"

    id = Column(String(36), primary_key=True, default=lambda: str(uuid.uuid4()))
    user_id = Column(String(100), ForeignKey("users.user_id"), nullable=False, unique=True, index=True)
    openrouter_api_key = Column(String(500), comment="Generation API credential")
    selected_model = Column(String(200), comment="Model identifier")
    default_genre = Column(String(100), default=DEFAULT_GENRE)
    default_word_count = Column(Integer, default=DEFAULT_WORD_COUNT)
    auto_save = Column(Boolean, default=True)

    # Export preferences
    export_format = Column(String(10), default=DEFAULT_EXPORT_FORMAT, comment="txt/docx/pdf/epub")
    export_page_size = Column(String(10), default=DEFAULT_PAGE_SIZE, comment="letter/a4/kindle")
    export_include_toc = Column(Boolean, default=True)
    export_include_metadata = Column(Boolean, default=True)
    export_kdp_formatting = Column(Boolean, default=False, comment="Publisher print styling")

    created_at = Column(DateTime, default=utcnow)
    updated_at = Column(DateTime, default=utcnow, onupdate=utcnow)

    def __repr__(self):
        return f"<Settings(user_id={self.user_id}, model={self.selected_model})>"
