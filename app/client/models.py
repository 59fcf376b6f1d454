from datetime import datetime
from typing import Optional

from pydantic import BaseModel, ConfigDict


# Server-confirmed message as the client sees it. Frozen: ids never change.
class Message(BaseModel):
    model_config = ConfigDict(frozen=True)

    id: int
    from_user_id: int
    to_user_id: int
    text: str = ""
    message_type: str = "text"
    media_url: Optional[str] = None
    created_at: datetime

    @property
    def is_image(self) -> bool:
        return self.message_type == "image"

    def involves(self, user_id: int) -> bool:
        return user_id in (self.from_user_id, self.to_user_id)


# Profile supplied by the connections directory
class Participant(BaseModel):
    model_config = ConfigDict(frozen=True)

    id: int
    username: str
    full_name: str
    profile_picture: Optional[str] = None
