from datetime import datetime
from sqlalchemy import Column, Integer, String, DateTime, Text
from sqlalchemy.orm import relationship

from swimlane.db.base import Base


class Board(Base):
    """Kanban board, the top-level container of swim lanes"""

    __tablename__ = "kanban_board"

    id = Column(Integer, primary_key=True, index=True)
    uuid = Column(String(36), unique=True, nullable=False, index=True)
    name = Column(String(255), nullable=False)
    description = Column(Text, nullable=True)
    date_created = Column(DateTime, default=datetime.utcnow)
    date_updated = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    lanes = relationship("Lane", back_populates="board", cascade="all, delete-orphan")
