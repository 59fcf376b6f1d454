import logging

from fastapi import APIRouter, Depends, status
from sqlalchemy.orm import Session

from app.core.errors import AppError
from app.core.security import token_for_user
from app.db.models import User
from app.db.session import get_db
from app.schemas.user import ParticipantOut, RegisterRequest, TokenOut, TokenRequest


logger = logging.getLogger(__name__)

# Stand-in identity provider for local runs; production tokens come from
# any issuer sharing SECRET_KEY with a user id subject.
router = APIRouter(prefix="/api/auth", tags=["auth"])


# --- REGISTER ---

@router.post("/register", status_code=status.HTTP_201_CREATED)
async def register(payload: RegisterRequest, db: Session = Depends(get_db)):
    username = payload.username.strip()
    if not username or not payload.full_name.strip():
        raise AppError("Username and full name are required", status.HTTP_400_BAD_REQUEST)

    if db.query(User).filter(User.username == username).first():
        raise AppError("Username already taken.", status.HTTP_409_CONFLICT)

    new_user = User(
        username=username,
        full_name=payload.full_name.strip(),
        profile_picture=payload.profile_picture,
    )
    db.add(new_user)
    db.commit()
    db.refresh(new_user)

    logger.info("Registered user %s (%s)", new_user.id, new_user.username)
    return {"success": True, "user": ParticipantOut.model_validate(new_user).model_dump()}


# --- TOKEN ---

@router.post("/token", response_model=TokenOut)
async def issue_token(payload: TokenRequest, db: Session = Depends(get_db)):
    user = db.query(User).filter(User.username == payload.username).first()

    if not user:
        raise AppError("Invalid username.", status.HTTP_401_UNAUTHORIZED)

    return TokenOut(access_token=token_for_user(user), user_id=user.id)
