from datetime import datetime
import enum
from sqlalchemy import Column, Integer, String, DateTime, ForeignKey, Text
from sqlalchemy.orm import relationship

from swimlane.db.base import Base


class CardPriority(str, enum.Enum):
    LOW = "Low"
    MEDIUM = "Medium"
    HIGH = "High"


class Card(Base):
    """Work item ranked within its swim lane"""

    __tablename__ = "kanban_card"

    id = Column(Integer, primary_key=True, index=True)
    uuid = Column(String(36), unique=True, nullable=False, index=True)
    lane_id = Column(Integer, ForeignKey("kanban_swim_lane.id", ondelete="CASCADE"), nullable=False)
    title = Column(String(255), nullable=False)
    description = Column(Text, nullable=True)
    # Хранится строкой: удаленный SQL-сервис не знает про enum-типы
    priority = Column(String(16), nullable=False, default=CardPriority.MEDIUM.value)
    position = Column(Integer, default=0)  # ранг карточки в колонке, 0..n-1
    date_created = Column(DateTime, default=datetime.utcnow)
    date_updated = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    lane = relationship("Lane", back_populates="cards")
