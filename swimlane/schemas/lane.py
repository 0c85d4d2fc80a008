from datetime import datetime
from typing import Optional
from pydantic import BaseModel, Field, field_validator


class LaneCreate(BaseModel):
    """Schema for swim lane creation"""
    name: str = Field(..., min_length=1)
    position: Optional[int] = Field(None, ge=0)

    @field_validator("name")
    @classmethod
    def name_required(cls, value: str) -> str:
        if not value.strip():
            raise ValueError("Name is required")
        return value


class LaneUpdate(BaseModel):
    """Schema for swim lane update"""
    name: Optional[str] = None
    position: Optional[int] = Field(None, ge=0)


class LaneResponse(BaseModel):
    """Schema for swim lane response"""
    uuid: str
    board_uuid: str
    name: str
    position: int
    date_created: Optional[datetime] = None
    date_updated: Optional[datetime] = None

    class Config:
        from_attributes = True
