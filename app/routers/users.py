from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from app.core.security import protect
from app.db.models import Connection, User
from app.db.session import get_db
from app.schemas.user import ParticipantOut

router = APIRouter(prefix="/api/user", tags=["user"])


@router.get("/connections")
async def list_connections(
    user_id: int = Depends(protect),
    db: Session = Depends(get_db),
):
    """
    Profiles of everyone the caller is connected to.
    Clients key this by id to resolve conversation headers.
    """
    users = (
        db.query(User)
        .join(Connection, Connection.connection_id == User.id)
        .filter(Connection.owner_id == user_id)
        .order_by(Connection.added_at.desc(), Connection.id.desc())
        .all()
    )

    return {
        "success": True,
        "connections": [ParticipantOut.model_validate(u).model_dump() for u in users],
    }


@router.get("/me")
async def read_me(
    user_id: int = Depends(protect),
    db: Session = Depends(get_db),
):
    user = db.query(User).filter(User.id == user_id).first()
    return {"success": True, "user": ParticipantOut.model_validate(user).model_dump()}
