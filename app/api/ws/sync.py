import asyncio
import logging
from typing import Optional

from fastapi import APIRouter, Query, WebSocket, WebSocketDisconnect
from pydantic import ValidationError

from app.core.auth import authenticate_token
from app.core.db import SessionLocal
from app.core.exceptions import AccessDenied, NotFound, StorageFailure
from app.domains.collaboration.messages import parse_client_event
from app.domains.collaboration.realtime import BroadcastEngine
from app.domains.documents.services import DocumentService
from app.infrastructure.messaging.pubsub import Subscription, document_channel, get_pubsub

logger = logging.getLogger(__name__)

router = APIRouter()

# Код закрытия при неуспешной аутентификации
WS_CLOSE_UNAUTHORIZED = 4401
# Код закрытия при отсутствии доступа к документу
WS_CLOSE_FORBIDDEN = 4403

engine = BroadcastEngine()


async def forward_channel(websocket: WebSocket, subscription: Subscription, user_id: int) -> None:
    """Пересылка сообщений канала в сокет"""
    try:
        async for message in subscription:
            await websocket.send_json(message)
    except (WebSocketDisconnect, RuntimeError) as e:
        logger.debug(f"Stopped forwarding to user {user_id}: {e}")


@router.websocket("/ws/documents/{document_id}")
async def document_channel_endpoint(
    websocket: WebSocket,
    document_id: int,
    token: Optional[str] = Query(None)
):
    """WebSocket канал документа для совместного редактирования"""
    await websocket.accept()

    user = await authenticate_token(token)
    if not user:
        logger.info(f"Rejected WebSocket for document {document_id}: invalid token")
        await websocket.close(code=WS_CLOSE_UNAUTHORIZED)
        return

    # Канал несет содержимое документа: подписка только с правом чтения
    try:
        async with SessionLocal() as session:
            await DocumentService(session).require_readable(document_id, user)
    except (NotFound, AccessDenied):
        logger.info(f"Rejected WebSocket for document {document_id}: no access for user {user.id}")
        await websocket.close(code=WS_CLOSE_FORBIDDEN)
        return

    subscription = await get_pubsub().subscribe(document_channel(document_id))
    forwarder = asyncio.create_task(forward_channel(websocket, subscription, user.id))
    logger.info(f"User {user.id} connected to document {document_id}")

    try:
        while True:
            data = await websocket.receive_text()

            try:
                event = parse_client_event(data)
            except ValidationError as e:
                logger.warning(f"Ignored malformed message from user {user.id}: {e.error_count()} errors")
                continue

            if event.document_id != document_id:
                logger.debug(f"Ignored {event.type} for document {event.document_id} on channel {document_id}")
                continue

            try:
                await engine.handle(user, event)
            except StorageFailure:
                logger.exception(f"Failed to process {event.type} from user {user.id} on document {document_id}")

    except WebSocketDisconnect:
        logger.info(f"User {user.id} disconnected from document {document_id}")
    finally:
        forwarder.cancel()
        try:
            await forwarder
        except asyncio.CancelledError:
            pass
        await subscription.close()
