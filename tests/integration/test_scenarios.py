"""End-to-end flows across owners, elevated visitors and requesters."""

from collections.abc import Callable

import pytest
from fastapi.testclient import TestClient

from backend.app.db.repositories import RecordStore, UserRecord


@pytest.fixture
def users(make_user: Callable[[str], UserRecord]) -> list[UserRecord]:
    """Users with ids 1 through 8."""
    return [make_user(f"user{i}@example.com") for i in range(1, 9)]


def test_document_names_unique_per_owner(
    users: list[UserRecord],
    client: TestClient,
    login: Callable[..., None],
    upload: Callable,
) -> None:
    """User 7 cannot hold two documents called a.pdf by upload or by rename."""
    assert users[6].id == 7
    login(client, "user7@example.com")

    assert upload(client, "a.pdf").status_code == 201
    assert upload(client, "a.pdf", b"second").status_code == 409

    other = upload(client, "b.pdf").json()
    response = client.patch(f"/api/documents/{other['id']}", json={"name": "a.pdf"})
    assert response.status_code == 409

    names = sorted(doc["name"] for doc in client.get("/api/documents").json())
    assert names == ["a.pdf", "b.pdf"]


def test_pin_elevation_reads_only_target_owner(
    users: list[UserRecord],
    store: RecordStore,
    client: TestClient,
) -> None:
    """A fresh visitor verified for user 7 reads 7's documents but not user 8's."""
    docs_of_7 = [
        store.documents.create_document(7, name, "application/pdf", name.encode())
        for name in ("a.pdf", "b.pdf")
    ]
    doc_of_8 = store.documents.create_document(8, "c.pdf", "application/pdf", b"c")

    assert client.post("/api/verify-pin/7", json={"pin": "1234"}).json() == {"valid": True}

    for doc in docs_of_7:
        response = client.get(f"/api/documents/{doc.id}/view")
        assert response.status_code == 200
        assert response.content == doc.name.encode()

    assert client.get(f"/api/documents/{doc_of_8.id}/view").status_code == 403


def test_approval_does_not_grant_reads(
    users: list[UserRecord],
    store: RecordStore,
    client: TestClient,
    login: Callable[..., None],
    client_factory: Callable[[], TestClient],
) -> None:
    """Approving a request for documents 3 and 4 changes nothing for the requester."""
    for name in ("1.pdf", "2.pdf", "3.pdf", "4.pdf"):
        store.documents.create_document(7, name, "application/pdf", b"x")

    requester = client_factory()
    created = requester.post(
        "/api/access-requests", json={"user_id": 7, "requested_documents": [3, 4]}
    ).json()
    assert requester.get("/api/documents/3/view").status_code == 403

    login(client, "user7@example.com")
    listed = client.get("/api/access-requests").json()
    assert [(req["id"], req["status"]) for req in listed] == [(created["id"], "pending")]

    response = client.patch(f"/api/access-requests/{created['id']}", json={"status": "approved"})
    assert response.status_code == 200

    listed = client.get("/api/access-requests").json()
    assert listed[0]["status"] == "approved"

    assert requester.get("/api/documents/3/view").status_code == 403
    assert requester.get("/api/documents/4/download").status_code == 403
