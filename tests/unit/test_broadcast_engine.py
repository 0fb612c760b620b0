import asyncio

import pytest
from sqlalchemy import func, select

from app.core.db import SessionLocal
from app.db.models.collaboration import DocumentActivity as ActivityModel
from app.db.repositories.collaboration_repository import DocumentCollaboratorRepository
from app.domains.collaboration.entities import ActivityType, Permission
from app.domains.collaboration.messages import EditEvent, JoinEvent, LeaveEvent, TitleEvent
from app.domains.collaboration.realtime import BroadcastEngine
from app.domains.collaboration.services import CollaboratorRegistry
from app.domains.documents.schemas import DocumentCreate
from app.domains.documents.services import DocumentService
from app.infrastructure.messaging.pubsub import InMemoryPubSub, document_channel


@pytest.fixture
def transport():
    return InMemoryPubSub()


@pytest.fixture
def broadcast(transport):
    return BroadcastEngine(session_factory=SessionLocal, pubsub=transport)


async def count_activities(document_id: int) -> int:
    async with SessionLocal() as fresh:
        result = await fresh.execute(
            select(func.count()).select_from(ActivityModel).where(ActivityModel.document_id == document_id)
        )
        return result.scalar_one()


async def load_collaborator(document_id: int, user_id: int):
    async with SessionLocal() as fresh:
        return await DocumentCollaboratorRepository(fresh).get_by_document_and_user(document_id, user_id)


async def test_concrete_edit_scenario(session, owner, other_user, broadcast, transport, reload_document):
    document = await DocumentService(session).create_document(
        DocumentCreate(title="T1", content="C1"), owner
    )
    assert document.id == 1
    subscription = await transport.subscribe(document_channel(document.id))

    dropped = await broadcast.handle(other_user, EditEvent(document_id=1, content="C2"))

    assert dropped is None
    assert (await reload_document(1)).content == "C1"
    assert subscription.queue.empty()

    collaborator = await CollaboratorRegistry(session).invite(1, owner, other_user.email, Permission.EDIT)
    assert collaborator.is_active
    before = await reload_document(1)

    message = await broadcast.handle(other_user, EditEvent(document_id=1, content="C2"))

    assert message is not None
    live = await reload_document(1)
    assert live.content == "C2"
    assert live.updated_at >= before.updated_at
    refreshed = await load_collaborator(1, other_user.id)
    assert refreshed.last_activity_at >= collaborator.last_activity_at

    payload = await asyncio.wait_for(subscription.get(), 1)
    assert payload["type"] == "content_update"
    assert payload["documentId"] == 1
    assert payload["content"] == "C2"
    assert payload["user"] == {"id": other_user.id, "username": "bob"}
    assert payload["timestamp"]


async def test_title_from_reader_is_dropped(session, document, owner, other_user, broadcast, transport, reload_document):
    await CollaboratorRegistry(session).invite(document.id, owner, other_user.email, Permission.READ)
    activities_before = await count_activities(document.id)
    subscription = await transport.subscribe(document_channel(document.id))

    result = await broadcast.handle(other_user, TitleEvent(document_id=document.id, title="Hijacked"))

    assert result is None
    assert (await reload_document(document.id)).title == "T1"
    assert await count_activities(document.id) == activities_before
    assert subscription.queue.empty()


async def test_owner_title_update_is_broadcast(document, owner, broadcast, transport, reload_document):
    subscription = await transport.subscribe(document_channel(document.id))

    message = await broadcast.handle(owner, TitleEvent(document_id=document.id, title="Renamed"))

    assert message.type == "title_update"
    assert (await reload_document(document.id)).title == "Renamed"
    payload = await asyncio.wait_for(subscription.get(), 1)
    assert payload["title"] == "Renamed"


async def test_join_requires_access(document, other_user, broadcast, transport):
    subscription = await transport.subscribe(document_channel(document.id))

    assert await broadcast.handle(other_user, JoinEvent(document_id=document.id)) is None
    assert await load_collaborator(document.id, other_user.id) is None
    assert await count_activities(document.id) == 0
    assert subscription.queue.empty()


async def test_join_and_leave_update_presence_and_journal(session, document, owner, other_user, broadcast, transport):
    await CollaboratorRegistry(session).invite(document.id, owner, other_user.email, Permission.READ)
    subscription = await transport.subscribe(document_channel(document.id))

    joined = await broadcast.handle(other_user, JoinEvent(document_id=document.id))
    left = await broadcast.handle(other_user, LeaveEvent(document_id=document.id))

    assert joined.type == "user_joined"
    assert left.type == "user_left"
    assert (await load_collaborator(document.id, other_user.id)).is_active is False

    first = await asyncio.wait_for(subscription.get(), 1)
    second = await asyncio.wait_for(subscription.get(), 1)
    assert [first["type"], second["type"]] == ["user_joined", "user_left"]

    async with SessionLocal() as fresh:
        result = await fresh.execute(
            select(ActivityModel.activity_type, ActivityModel.description)
            .where(ActivityModel.document_id == document.id)
            .order_by(ActivityModel.id)
        )
        journal = result.all()
    assert [tuple(row) for row in journal] == [
        (ActivityType.COLLABORATOR_INVITED.value, "invited bob as a collaborator"),
        (ActivityType.USER_JOINED.value, "bob joined the document"),
        (ActivityType.USER_LEFT.value, "bob left the document"),
    ]


async def test_leave_without_presence_is_still_journaled(document, other_user, broadcast):
    message = await broadcast.handle(other_user, LeaveEvent(document_id=document.id))

    assert message.type == "user_left"
    assert await count_activities(document.id) == 1


async def test_events_for_missing_document_are_dropped(owner, broadcast):
    assert await broadcast.handle(owner, LeaveEvent(document_id=404)) is None
    assert await broadcast.handle(owner, EditEvent(document_id=404, content="x")) is None
