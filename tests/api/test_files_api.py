async def test_upload_list_download_delete(client, document, owner_headers):
    response = await client.post(
        "/api/files/upload",
        files={"file": ("report.txt", b"quarterly numbers", "text/plain")},
        data={"documentId": str(document.id)},
        headers=owner_headers
    )
    assert response.status_code == 200
    uploaded = response.json()
    assert uploaded["original_name"] == "report.txt"
    assert uploaded["document_id"] == document.id

    mine = (await client.get("/api/files/my", headers=owner_headers)).json()
    assert [f["id"] for f in mine] == [uploaded["id"]]

    attached = (await client.get(f"/api/files/document/{document.id}", headers=owner_headers)).json()
    assert [f["id"] for f in attached] == [uploaded["id"]]

    response = await client.get(uploaded["public_url"])
    assert response.status_code == 200
    assert response.content == b"quarterly numbers"
    assert "report.txt" in response.headers["content-disposition"]

    response = await client.delete(f"/api/files/{uploaded['id']}", headers=owner_headers)
    assert response.status_code == 200
    assert (await client.get(uploaded["public_url"])).status_code == 404


async def test_upload_to_foreign_document_is_forbidden(client, document, other_headers):
    response = await client.post(
        "/api/files/upload",
        files={"file": ("x.txt", b"data", "text/plain")},
        data={"documentId": str(document.id)},
        headers=other_headers
    )

    assert response.status_code == 403


async def test_empty_upload_is_rejected(client, owner_headers):
    response = await client.post(
        "/api/files/upload",
        files={"file": ("empty.txt", b"", "text/plain")},
        headers=owner_headers
    )

    assert response.status_code == 422
    assert response.json()["error_code"] == "VALIDATION_ERROR"


async def test_stranger_cannot_delete_file(client, owner_headers, other_headers):
    uploaded = (await client.post(
        "/api/files/upload",
        files={"file": ("mine.txt", b"data", "text/plain")},
        headers=owner_headers
    )).json()

    response = await client.delete(f"/api/files/{uploaded['id']}", headers=other_headers)

    assert response.status_code == 403
