from typing import Optional
from pydantic import BaseModel, Field


class NotificationHintCreate(BaseModel):
    block_type: str
    block_id: str
    workspace_id: str
    notify_freq_seconds: Optional[int] = Field(default=None, gt=0)


class NotificationHintOut(BaseModel):
    block_type: str
    block_id: str
    workspace_id: str
    create_at: int
    notify_at: int
