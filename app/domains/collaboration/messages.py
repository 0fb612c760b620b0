"""Типизированные сообщения realtime-канала документа.

Входящие события клиента и исходящие broadcast-сообщения описаны
отдельными вариантами с тегом ``type``. Формат broadcast-сообщений
(camelCase-ключи) является контрактом для клиентов канала.
"""
from typing import Annotated, Any, Dict, Literal, Union

from pydantic import BaseModel, ConfigDict, Field, TypeAdapter

from app.core.dates import utc_now
from app.domains.identity.entities import User


class ClientEventBase(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    document_id: int = Field(..., alias="documentId")


class JoinEvent(ClientEventBase):
    type: Literal["join"] = "join"


class LeaveEvent(ClientEventBase):
    type: Literal["leave"] = "leave"


class EditEvent(ClientEventBase):
    """Полная замена содержимого документа"""
    type: Literal["edit"] = "edit"
    content: str = Field(..., max_length=1000000)


class TitleEvent(ClientEventBase):
    type: Literal["title"] = "title"
    title: str = Field(..., min_length=1, max_length=255)


ClientEvent = Annotated[
    Union[JoinEvent, LeaveEvent, EditEvent, TitleEvent],
    Field(discriminator="type")
]

client_event_adapter = TypeAdapter(ClientEvent)


def parse_client_event(data: Union[str, bytes, Dict[str, Any]]) -> ClientEvent:
    """Разбор входящего события; ValidationError для некорректных данных"""
    if isinstance(data, (str, bytes)):
        return client_event_adapter.validate_json(data)
    return client_event_adapter.validate_python(data)


class BroadcastUser(BaseModel):
    id: int
    username: str


class BroadcastBase(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    document_id: int = Field(..., alias="documentId")
    user: BroadcastUser
    timestamp: str = Field(default_factory=lambda: utc_now().isoformat())

    def to_payload(self) -> Dict[str, Any]:
        """Словарь для публикации в канал"""
        return self.model_dump(by_alias=True, mode="json")


class UserJoinedMessage(BroadcastBase):
    type: Literal["user_joined"] = "user_joined"


class UserLeftMessage(BroadcastBase):
    type: Literal["user_left"] = "user_left"


class ContentUpdateMessage(BroadcastBase):
    type: Literal["content_update"] = "content_update"
    content: str


class TitleUpdateMessage(BroadcastBase):
    type: Literal["title_update"] = "title_update"
    title: str


BroadcastMessage = Annotated[
    Union[UserJoinedMessage, UserLeftMessage, ContentUpdateMessage, TitleUpdateMessage],
    Field(discriminator="type")
]

broadcast_adapter = TypeAdapter(BroadcastMessage)


def broadcast_user(user: User) -> BroadcastUser:
    return BroadcastUser(id=user.id, username=user.username)
