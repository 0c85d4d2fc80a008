from datetime import datetime
from typing import Optional
from pydantic import BaseModel, Field, field_validator


class BoardBase(BaseModel):
    """Base schema for board data"""
    name: str = Field(..., min_length=1)
    description: Optional[str] = ""

    @field_validator("name")
    @classmethod
    def name_required(cls, value: str) -> str:
        if not value.strip():
            raise ValueError("Name is required")
        return value


class BoardCreate(BoardBase):
    """Schema for board creation"""
    pass


class BoardUpdate(BaseModel):
    """Schema for board update, only supplied fields change"""
    name: Optional[str] = None
    description: Optional[str] = None


class BoardResponse(BaseModel):
    """Schema for board response"""
    uuid: str
    name: str
    description: Optional[str] = None
    date_created: Optional[datetime] = None
    date_updated: Optional[datetime] = None

    class Config:
        from_attributes = True


class MessageResponse(BaseModel):
    message: str
