async def test_document_crud_flow(client, owner_headers):
    response = await client.post(
        "/api/documents",
        json={"title": "  Plan  ", "content": "one two three"},
        headers=owner_headers
    )
    assert response.status_code == 201
    created = response.json()
    assert created["title"] == "Plan"
    assert created["content"] == "one two three"

    document_id = created["id"]
    response = await client.get(f"/api/documents/{document_id}", headers=owner_headers)
    assert response.status_code == 200
    assert response.json()["view_count"] == 1

    response = await client.put(
        f"/api/documents/{document_id}",
        json={"content": "updated"},
        headers=owner_headers
    )
    assert response.status_code == 200
    assert response.json()["content"] == "updated"

    response = await client.get("/api/documents", headers=owner_headers)
    assert response.json()["total"] == 1

    response = await client.delete(f"/api/documents/{document_id}", headers=owner_headers)
    assert response.status_code == 200

    response = await client.get(f"/api/documents/{document_id}", headers=owner_headers)
    assert response.status_code == 404
    assert response.json()["error_code"] == "NOT_FOUND"
    assert (await client.get("/api/documents", headers=owner_headers)).json()["total"] == 0


async def test_private_document_is_forbidden_for_others(client, document, other_headers):
    response = await client.get(f"/api/documents/{document.id}", headers=other_headers)

    assert response.status_code == 403
    assert response.json()["error_code"] == "ACCESS_DENIED"
    assert (await client.get(f"/api/documents/{document.id}")).status_code == 403


async def test_non_owner_cannot_update_or_delete(client, document, other_headers):
    response = await client.put(f"/api/documents/{document.id}", json={"title": "X"}, headers=other_headers)
    assert response.status_code == 403

    response = await client.delete(f"/api/documents/{document.id}", headers=other_headers)
    assert response.status_code == 403


async def test_public_listing_and_anonymous_search(client, owner_headers):
    await client.post("/api/documents", json={"title": "Open recipe", "is_public": True}, headers=owner_headers)
    await client.post("/api/documents", json={"title": "Secret recipe"}, headers=owner_headers)

    public = (await client.get("/api/documents/public")).json()
    assert [d["title"] for d in public["documents"]] == ["Open recipe"]

    anonymous = (await client.get("/api/documents/search", params={"keyword": "recipe"})).json()
    assert [d["title"] for d in anonymous["documents"]] == ["Open recipe"]

    own = (await client.get("/api/documents/search", params={"keyword": "recipe"}, headers=owner_headers)).json()
    assert own["total"] == 2


async def test_create_requires_authentication_and_title(client, owner_headers):
    assert (await client.post("/api/documents", json={"title": "T"})).status_code == 401

    response = await client.post("/api/documents", json={"title": "   "}, headers=owner_headers)
    assert response.status_code == 422
