import pytest

from app.core.exceptions import AccessDenied, NotFound
from app.domains.collaboration.entities import Permission
from app.domains.collaboration.services import CollaboratorRegistry
from app.domains.documents.schemas import DocumentCreate, DocumentUpdate
from app.domains.documents.services import DocumentService


async def test_soft_deleted_document_is_hidden_but_kept(session, owner, reload_document):
    documents = DocumentService(session)
    document = await documents.create_document(
        DocumentCreate(title="Shared notes", content="x", is_public=True), owner
    )

    await documents.delete_document(document.id, owner)

    assert await documents.get_user_documents(owner) == []
    assert await documents.get_public_documents() == []
    assert await documents.search_documents("notes", owner) == []
    assert await documents.search_documents("notes") == []
    with pytest.raises(NotFound):
        await documents.get_document(document.id, owner)

    stored = await reload_document(document.id)
    assert stored is not None
    assert stored.is_deleted


async def test_get_increments_view_count_for_authorized_reads(session, document, owner, other_user, reload_document):
    documents = DocumentService(session)

    await documents.get_document(document.id, owner)
    await documents.get_document(document.id, owner)
    with pytest.raises(AccessDenied):
        await documents.get_document(document.id, other_user)
    with pytest.raises(AccessDenied):
        await documents.get_document(document.id)

    assert (await reload_document(document.id)).view_count == 2


async def test_public_document_readable_anonymously(session, owner):
    documents = DocumentService(session)
    document = await documents.create_document(
        DocumentCreate(title="Public", content="hello", is_public=True), owner
    )

    read = await documents.get_document(document.id)

    assert read.view_count == 1


async def test_collaborator_can_read_private_document(session, document, owner, other_user):
    await CollaboratorRegistry(session).invite(document.id, owner, other_user.email, Permission.READ)

    read = await DocumentService(session).get_document(document.id, other_user)

    assert read.content == "C1"


async def test_update_and_delete_require_owner(session, document, other_user):
    documents = DocumentService(session)

    with pytest.raises(AccessDenied):
        await documents.update_document(document.id, DocumentUpdate(title="Hijacked"), other_user)
    with pytest.raises(AccessDenied):
        await documents.delete_document(document.id, other_user)


async def test_update_refreshes_updated_at(session, document, owner):
    before = document.updated_at

    updated = await DocumentService(session).update_document(
        document.id, DocumentUpdate(content="C2"), owner
    )

    assert updated.content == "C2"
    assert updated.title == "T1"
    assert updated.updated_at >= before


async def test_search_scopes_by_principal(session, owner, other_user):
    documents = DocumentService(session)
    await documents.create_document(DocumentCreate(title="Alpha private"), owner)
    await documents.create_document(DocumentCreate(title="Alpha public", is_public=True), other_user)

    own = await documents.search_documents("Alpha", owner)
    anonymous = await documents.search_documents("Alpha")

    assert [d.title for d in own] == ["Alpha private"]
    assert [d.title for d in anonymous] == ["Alpha public"]


async def test_search_matches_wildcards_literally(session, owner):
    documents = DocumentService(session)
    await documents.create_document(DocumentCreate(title="100% done"), owner)
    await documents.create_document(DocumentCreate(title="1000 done"), owner)

    found = await documents.search_documents("100%", owner)

    assert [d.title for d in found] == ["100% done"]
