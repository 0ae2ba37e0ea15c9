from pydantic import BaseModel, Field
from datetime import datetime
from typing import Any, Optional


class ResumeCreate(BaseModel):
    content: str = Field(min_length=1)
    domain: Optional[str] = None
    role: Optional[str] = None
    description: Optional[str] = None
    metadata: dict[str, Any] = {}


class ResumeUpdate(BaseModel):
    domain: Optional[str] = None
    role: Optional[str] = None


class ResumeResponse(BaseModel):
    id: str
    user_id: str
    domain: Optional[str] = None
    role: str
    description: str
    content: str
    created_at: Optional[datetime] = None

    class Config:
        from_attributes = True


class ResumeGenerate(BaseModel):
    role: str = Field(min_length=1)
    description: str = Field(min_length=1)
    domain: Optional[str] = None
