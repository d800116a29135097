import uuid
from datetime import datetime
from typing import Optional

from pydantic import BaseModel, Field


class VideoCreate(BaseModel):
    title: str = Field(..., min_length=1, max_length=200, examples=["Boots tutorial"])
    description: str = Field("", max_length=5000)


class VideoOut(BaseModel):
    id: uuid.UUID
    owner_id: uuid.UUID
    title: str
    description: str
    video_key: Optional[str] = None
    video_url: Optional[str] = None
    created_at: datetime
    updated_at: datetime
