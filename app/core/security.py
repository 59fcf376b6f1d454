import logging
from datetime import datetime, timedelta, timezone
from typing import Awaitable, Callable, Optional

from fastapi import Depends, Request
from jose import jwt, JWTError
from sqlalchemy.orm import Session

from app.core.config import settings
from app.core.errors import AuthResolutionError, AuthResolutionFailure
from app.db.session import get_db
from app.db.models import User


logger = logging.getLogger(__name__)

PrincipalResolver = Callable[[Request, Session], Awaitable[Optional[int]]]

# --- Token Creation ---

def create_access_token(data: dict, expires_delta: Optional[timedelta] = None):
    """Generates a JWT Token string."""
    to_encode = data.copy()

    if expires_delta:
        expire = datetime.now(timezone.utc) + expires_delta
    else:
        expire = datetime.now(timezone.utc) + timedelta(minutes=15)

    to_encode.update({"exp": expire})

    return jwt.encode(to_encode, settings.SECRET_KEY, algorithm=settings.ALGORITHM)


def token_for_user(user: User) -> str:
    return create_access_token(
        data={"sub": str(user.id)},
        expires_delta=timedelta(minutes=int(settings.ACCESS_TOKEN_EXPIRE_MINUTES)),
    )


# --- Principal Resolution ---

def extract_token(request: Request) -> Optional[str]:
    """Bearer header first (API flow), then the ``access_token`` cookie."""
    token = None
    auth_header = request.headers.get("Authorization")
    if auth_header and auth_header.startswith("Bearer "):
        token = auth_header.split(" ", 1)[1]

    if not token:
        token = request.cookies.get("access_token")

    if token and token.startswith("Bearer "):
        token = token.split(" ", 1)[1]

    return token or None


def principal_from_token(token: Optional[str], db: Session) -> Optional[int]:
    if not token:
        return None

    try:
        payload = jwt.decode(token, settings.SECRET_KEY, algorithms=[settings.ALGORITHM])
        subject = payload.get("sub")
        if subject is None:
            return None
        user_id = int(subject)
    except (JWTError, ValueError) as e:
        logger.debug("Rejected token: %s", e)
        return None

    # The principal must still exist
    exists = db.query(User.id).filter(User.id == user_id).first()
    return user_id if exists else None


async def resolve_principal(request: Request, db: Session) -> Optional[int]:
    return principal_from_token(extract_token(request), db)


def get_principal_resolver() -> PrincipalResolver:
    """Auth context used by the gate. Overridden to plug another identity provider."""
    return resolve_principal


# --- Identity Gate ---

async def protect(
    request: Request,
    db: Session = Depends(get_db),
    resolver: PrincipalResolver = Depends(get_principal_resolver),
) -> int:
    """
    Runs before every message handler.
    Binds the principal id to the request or short-circuits with a
    structured response; the handler is never invoked on failure.
    """
    try:
        user_id = await resolver(request, db)
    except Exception as e:
        raise AuthResolutionError(str(e)) from e

    if not user_id:
        raise AuthResolutionFailure()

    request.state.user_id = user_id
    return user_id
