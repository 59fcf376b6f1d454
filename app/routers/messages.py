import json
import logging
from typing import Optional

from fastapi import (
    APIRouter,
    Depends,
    File,
    Form,
    Query,
    Request,
    UploadFile,
    WebSocket,
    WebSocketDisconnect,
    status,
)
from fastapi.exceptions import RequestValidationError
from pydantic import ValidationError
from sqlalchemy.orm import Session

from app.core.errors import AppError, failure
from app.core.security import principal_from_token, protect
from app.db.session import get_db
from app.schemas.message import HistoryRequest
from app.services import message_service
from app.services.image_service import MediaUploader, get_media_uploader
from app.services.socket_manager import manager


logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/message", tags=["message"])

FORM_TYPES = ("application/x-www-form-urlencoded", "multipart/form-data")


async def history_request(request: Request) -> HistoryRequest:
    """The history lookup arrives as a form or as a JSON body"""
    if request.headers.get("content-type", "").startswith(FORM_TYPES):
        data = dict(await request.form())
    else:
        try:
            data = await request.json()
        except ValueError:
            raise AppError("Invalid request body", status.HTTP_422_UNPROCESSABLE_ENTITY)

    try:
        return HistoryRequest.model_validate(data)
    except ValidationError as e:
        raise RequestValidationError(
            [{**err, "loc": ("body", *err["loc"])} for err in e.errors()]
        )


@router.post("/get")
async def get_chat_messages(
    user_id: int = Depends(protect),
    payload: HistoryRequest = Depends(history_request),
    db: Session = Depends(get_db),
):
    """Full history between the caller and one peer"""
    try:
        messages = message_service.conversation_history(db, user_id, payload.to_user_id)
    except Exception as e:
        logger.exception("History fetch failed for %s <-> %s", user_id, payload.to_user_id)
        return failure(str(e))

    return {
        "success": True,
        "messages": [message_service.serialize(m) for m in messages],
    }


@router.post("/send")
async def send_message(
    to_user_id: int = Form(...),
    text: str = Form(""),
    image: Optional[UploadFile] = File(None),
    user_id: int = Depends(protect),
    db: Session = Depends(get_db),
    upload: MediaUploader = Depends(get_media_uploader),
):
    """Store a text and/or image message and push it to both parties"""
    if image is not None and not image.filename:
        # Browsers post an empty part when no file was picked
        image = None

    if not text and image is None:
        raise AppError("Message must contain text or an image")

    # Nothing is uploaded for a send that cannot be stored
    message_service.validate_recipient(db, user_id, to_user_id)

    try:
        media_url = await upload(image, user_id) if image is not None else None
        message = message_service.create_message(db, user_id, to_user_id, text, media_url)
    except AppError:
        raise
    except Exception as e:
        logger.exception("Send failed for %s -> %s", user_id, to_user_id)
        return failure(str(e))

    data = message_service.serialize(message)

    # Live delivery is best effort
    push = {"type": "message", "message": data}
    await manager.send_personal_message(push, to_user_id)
    await manager.send_personal_message(push, user_id)

    return {"success": True, "message": data}


@router.websocket("/ws")
async def message_socket(
    websocket: WebSocket,
    token: Optional[str] = Query(None),
    db: Session = Depends(get_db),
):
    user_id = principal_from_token(token, db)
    if not user_id:
        await websocket.close(code=status.WS_1008_POLICY_VIOLATION)
        return

    await manager.connect(websocket, user_id)

    try:
        while True:
            data = await websocket.receive_text()
            try:
                msg_data = json.loads(data)
            except ValueError:
                continue

            # Keepalive from the client
            if isinstance(msg_data, dict) and msg_data.get("type") == "ping":
                await websocket.send_json({"type": "pong"})

    except WebSocketDisconnect:
        logger.info("Socket closed by user %s", user_id)
    finally:
        manager.disconnect(websocket, user_id)
