from pydantic import BaseModel, Field
from datetime import datetime
from typing import Optional


class ChatRequest(BaseModel):
    question: str = Field(min_length=1)


class HistoryResponse(BaseModel):
    id: str
    user_id: str
    question: str
    answer: str
    fit_score: int
    created_at: Optional[datetime] = None

    class Config:
        from_attributes = True
