from pydantic import BaseModel, ConfigDict
from datetime import datetime
from typing import Optional

from app.db.models import MessageType

# 1. Shared Properties (Base)
class MessageBase(BaseModel):
    text: str = ""
    media_url: Optional[str] = None
    message_type: MessageType = MessageType.TEXT

# 2. Input: history lookup for one peer
class HistoryRequest(BaseModel):
    to_user_id: int

# 3. Output: the canonical persisted message
class MessageOut(MessageBase):
    model_config = ConfigDict(from_attributes=True)

    id: int
    from_user_id: int
    to_user_id: int
    created_at: datetime
