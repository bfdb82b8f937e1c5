from core.database import Base
from sqlalchemy import Column, DateTime, String, Integer, ForeignKey
from sqlalchemy.orm import relationship
from models.mixins import CreatedAtMixin


class UserSession(Base, CreatedAtMixin):
    """
    Server-side login session.

    The browser only holds a signed cookie carrying the random session id;
    the id itself is stored hashed. ``expires_at`` slides forward when the
    session is used, but the row is rewritten at most once per touch window.
    """
    __tablename__ = "sessions"

    #pk
    id = Column(Integer, primary_key=True, index=True)

    #fk
    user_id = Column(Integer, ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)

    #relationships
    user = relationship("User", back_populates="sessions")

    session_hash = Column(String(64), nullable=False, unique=True, index=True)
    expires_at = Column(DateTime(timezone=True), nullable=False)
    last_touched_at = Column(DateTime(timezone=True), nullable=False)
