from datetime import datetime
from sqlalchemy import Column, Integer, String, DateTime, ForeignKey
from sqlalchemy.orm import relationship

from swimlane.db.base import Base


class Lane(Base):
    """Swim lane: an ordered column of cards within a board"""

    __tablename__ = "kanban_swim_lane"

    id = Column(Integer, primary_key=True, index=True)
    uuid = Column(String(36), unique=True, nullable=False, index=True)
    board_id = Column(Integer, ForeignKey("kanban_board.id", ondelete="CASCADE"), nullable=False)
    name = Column(String(255), nullable=False)
    position = Column(Integer, default=0)  # ранг колонки на доске, 0..n-1
    date_created = Column(DateTime, default=datetime.utcnow)
    date_updated = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    board = relationship("Board", back_populates="lanes")
    cards = relationship("Card", back_populates="lane", cascade="all, delete-orphan")
