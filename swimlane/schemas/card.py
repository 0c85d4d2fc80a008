from datetime import datetime
from typing import Optional
from pydantic import BaseModel, Field, field_validator

from swimlane.models.card import CardPriority


class CardCreate(BaseModel):
    """Schema for card creation"""
    title: str = Field(..., min_length=1)
    description: Optional[str] = ""
    priority: CardPriority = CardPriority.MEDIUM
    position: Optional[int] = Field(None, ge=0)

    @field_validator("title")
    @classmethod
    def title_required(cls, value: str) -> str:
        if not value.strip():
            raise ValueError("Title is required")
        return value


class CardUpdate(BaseModel):
    """Schema for card update, only supplied fields change"""
    title: Optional[str] = None
    description: Optional[str] = None
    priority: Optional[CardPriority] = None
    position: Optional[int] = Field(None, ge=0)
    lane_uuid: Optional[str] = None


class CardMove(BaseModel):
    """Schema for moving a card to a lane at a given position"""
    lane_uuid: str = Field(..., min_length=1)
    position: int = Field(..., ge=0)


class CardResponse(BaseModel):
    """Schema for card response"""
    uuid: str
    lane_uuid: str
    title: str
    description: Optional[str] = None
    priority: CardPriority = CardPriority.MEDIUM
    position: int
    date_created: Optional[datetime] = None
    date_updated: Optional[datetime] = None

    class Config:
        from_attributes = True
