from pydantic import BaseModel, ConfigDict
from typing import Optional

# Profile as exposed by the connections directory
class ParticipantOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    username: str
    full_name: str
    profile_picture: Optional[str] = None


# Development sign-in
class RegisterRequest(BaseModel):
    username: str
    full_name: str
    profile_picture: Optional[str] = None


class TokenRequest(BaseModel):
    username: str


class TokenOut(BaseModel):
    access_token: str
    token_type: str = "bearer"
    user_id: int
