"""
User data model
"""
from sqlalchemy import Column, String, DateTime
from bookgen.database import Base, utcnow


class User(Base):
    """Users table. Identity is resolved upstream; this row anchors ownership."""
    __tablename__ = "users"

    user_id = Column(String(100), primary_key=True, index=True, comment="Owner id supplied per request")
    username = Column(String(100), nullable=False, comment="Display username")
    created_at = Column(DateTime, default=utcnow, comment="Created at")
    last_seen = Column(DateTime, default=utcnow, onupdate=utcnow, comment="Last request time")

    def to_dict(self):
        return {
            "user_id": self.user_id,
            "username": self.username,
            "created_at": self.created_at.isoformat() if self.created_at else None,
            "last_seen": self.last_seen.isoformat() if self.last_seen else None,
        }
