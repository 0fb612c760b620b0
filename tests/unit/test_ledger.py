import pytest
from sqlalchemy import select

from app.core.exceptions import AccessDenied, NotFound, ValidationFailed
from app.db.models.collaboration import DocumentActivity as ActivityModel
from app.domains.collaboration.entities import ActivityType
from app.domains.collaboration.ledger import ActivityLedger, VersionLedger
from app.domains.documents.schemas import DocumentCreate, DocumentUpdate
from app.domains.documents.services import DocumentService


async def test_version_numbers_are_gapless_across_restores(session, document, owner):
    ledger = VersionLedger(session)
    documents = DocumentService(session)

    v1 = await ledger.create_snapshot(document.id, owner, "first")
    await documents.update_document(document.id, DocumentUpdate(content="C2"), owner)
    await ledger.create_snapshot(document.id, owner, "second")
    await ledger.restore_version(document.id, v1.id, owner)
    await ledger.create_snapshot(document.id, owner, "after restore")

    versions = await ledger.list_versions(document.id, owner)
    assert [v.version_number for v in versions] == [4, 3, 2, 1]


async def test_restore_preserves_history(session, document, owner, reload_document):
    ledger = VersionLedger(session)
    documents = DocumentService(session)

    await ledger.create_snapshot(document.id, owner, "v1")
    await documents.update_document(document.id, DocumentUpdate(title="T2", content="C2"), owner)
    v2 = await ledger.create_snapshot(document.id, owner, "v2")
    await documents.update_document(document.id, DocumentUpdate(title="T3", content="C3"), owner)
    await ledger.create_snapshot(document.id, owner, "v3")

    restored = await ledger.restore_version(document.id, v2.id, owner)

    assert restored.content == "C2"
    assert restored.title == "T2"

    live = await reload_document(document.id)
    assert live.content == "C2"
    assert live.title == "T2"

    versions = await ledger.list_versions(document.id, owner)
    latest = versions[0]
    assert latest.version_number == 4
    assert latest.content == "C3"
    assert latest.change_description == "restored to version 2"

    result = await session.execute(
        select(ActivityModel).where(ActivityModel.activity_type == ActivityType.VERSION_RESTORED.value)
    )
    restored_activities = result.scalars().all()
    assert len(restored_activities) == 1
    assert restored_activities[0].description == "restored to version 2"


async def test_restore_rejects_foreign_or_missing_version(session, document, owner):
    ledger = VersionLedger(session)
    other_document = await DocumentService(session).create_document(
        DocumentCreate(title="Other", content="X"), owner
    )
    foreign = await ledger.create_snapshot(other_document.id, owner)

    with pytest.raises(ValidationFailed):
        await ledger.restore_version(document.id, foreign.id, owner)
    with pytest.raises(NotFound):
        await ledger.restore_version(document.id, 999, owner)


async def test_snapshot_requires_edit_permission(session, document, other_user):
    with pytest.raises(AccessDenied):
        await VersionLedger(session).create_snapshot(document.id, other_user)


async def test_recent_activities_are_limited_and_newest_first(session, document, owner):
    ledger = ActivityLedger(session)
    for i in range(12):
        await ledger.record_activity(document, owner, ActivityType.USER_JOINED, f"event {i}")
    await session.commit()

    recent = await ledger.get_activities(document.id, owner)

    assert len(recent) == 10
    assert recent[0].description == "event 11"
    assert recent[-1].description == "event 2"
    assert recent[0].user.username == "alice"
