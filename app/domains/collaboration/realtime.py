"""Realtime-движок канала документа.

Каждое событие обрабатывается независимо, в своей сессии и транзакции.
Событие без прав или для несуществующего документа отбрасывается: ничего
не сохраняется, ничего не рассылается и отправителю ничего не отвечает.
Содержимое и заголовок перезаписываются без блокировок, последняя запись
выигрывает.
"""
import logging
from typing import Awaitable, Callable, Dict, Optional

from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from app.core.db import SessionLocal, unit_of_work
from app.core.exceptions import AccessDenied, NotFound
from app.domains.collaboration.entities import ActivityType
from app.domains.collaboration.ledger import ActivityLedger
from app.domains.collaboration.messages import (
    BroadcastBase, ClientEvent, ContentUpdateMessage, EditEvent, JoinEvent,
    LeaveEvent, TitleEvent, TitleUpdateMessage, UserJoinedMessage,
    UserLeftMessage, broadcast_user
)
from app.domains.collaboration.services import CollaboratorRegistry
from app.domains.documents.services import DocumentService
from app.domains.identity.entities import User
from app.infrastructure.messaging.pubsub import PubSubTransport, document_channel, get_pubsub

logger = logging.getLogger(__name__)

Handler = Callable[[AsyncSession, User, ClientEvent], Awaitable[BroadcastBase]]


class BroadcastEngine:
    """Обработка событий клиентов и публикация в канал документа"""

    def __init__(
        self,
        session_factory: async_sessionmaker = SessionLocal,
        pubsub: Optional[PubSubTransport] = None
    ):
        self.session_factory = session_factory
        self._pubsub = pubsub
        self._handlers: Dict[str, Handler] = {
            "join": self._handle_join,
            "leave": self._handle_leave,
            "edit": self._handle_edit,
            "title": self._handle_title,
        }

    @property
    def pubsub(self) -> PubSubTransport:
        return self._pubsub or get_pubsub()

    async def handle(self, principal: User, event: ClientEvent) -> Optional[BroadcastBase]:
        """Опубликованное сообщение либо None, если событие отброшено"""
        handler = self._handlers[event.type]

        try:
            async with self.session_factory() as session:
                message = await handler(session, principal, event)
        except (NotFound, AccessDenied) as e:
            logger.debug(
                f"Dropped {event.type} from user {principal.id} "
                f"on document {event.document_id}: {e.message}"
            )
            return None

        await self.pubsub.publish(document_channel(event.document_id), message.to_payload())
        return message

    async def _handle_join(self, session: AsyncSession, user: User, event: JoinEvent) -> BroadcastBase:
        document = await DocumentService(session).require_access(event.document_id, user)

        async with unit_of_work(session):
            await CollaboratorRegistry(session).join(document, user)
            await ActivityLedger(session).record_activity(
                document, user, ActivityType.USER_JOINED, f"{user.username} joined the document"
            )

        logger.info(f"User {user.id} joined document {document.id}")
        return UserJoinedMessage(document_id=document.id, user=broadcast_user(user))

    async def _handle_leave(self, session: AsyncSession, user: User, event: LeaveEvent) -> BroadcastBase:
        # Выход разрешен всегда; журнал пишется и без записи соавтора
        document = await DocumentService(session).require_document(event.document_id)

        async with unit_of_work(session):
            await CollaboratorRegistry(session).leave(document, user)
            await ActivityLedger(session).record_activity(
                document, user, ActivityType.USER_LEFT, f"{user.username} left the document"
            )

        logger.info(f"User {user.id} left document {document.id}")
        return UserLeftMessage(document_id=document.id, user=broadcast_user(user))

    async def _handle_edit(self, session: AsyncSession, user: User, event: EditEvent) -> BroadcastBase:
        document_service = DocumentService(session)
        document = await document_service.require_edit_permission(event.document_id, user)

        async with unit_of_work(session):
            await document_service.replace_content(document, event.content)
            await CollaboratorRegistry(session).touch_activity(document, user)

        return ContentUpdateMessage(
            document_id=document.id,
            content=document.content,
            user=broadcast_user(user)
        )

    async def _handle_title(self, session: AsyncSession, user: User, event: TitleEvent) -> BroadcastBase:
        document_service = DocumentService(session)
        document = await document_service.require_edit_permission(event.document_id, user)

        async with unit_of_work(session):
            await document_service.rename(document, event.title)
            await CollaboratorRegistry(session).touch_activity(document, user)

        return TitleUpdateMessage(
            document_id=document.id,
            title=document.title,
            user=broadcast_user(user)
        )
