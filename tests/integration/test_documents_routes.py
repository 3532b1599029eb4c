"""Integration tests for document endpoints."""

from collections.abc import Callable

import pytest
from fastapi.testclient import TestClient

from backend.app.api.routes.documents import content_disposition
from backend.app.config import Settings, get_settings
from backend.app.db.repositories import UserRecord
from backend.app.main import app


@pytest.fixture
def owner_client(
    client: TestClient,
    make_user: Callable[[str], UserRecord],
    login: Callable[..., None],
) -> TestClient:
    """Client logged in as the first user."""
    make_user("owner@example.com")
    login(client, "owner@example.com")
    return client


def test_upload_requires_login(client: TestClient, upload: Callable) -> None:
    """Test uploading without a session is 401."""
    response = upload(client, "a.pdf")

    assert response.status_code == 401


def test_upload_and_list(owner_client: TestClient, upload: Callable) -> None:
    """Test an uploaded document appears in the owner's listing."""
    response = upload(owner_client, "a.pdf", b"%PDF-1.4 abc")

    assert response.status_code == 201
    created = response.json()
    assert created["name"] == "a.pdf"
    assert created["content_type"] == "application/pdf"
    assert created["size_bytes"] == len(b"%PDF-1.4 abc")

    listed = owner_client.get("/api/documents").json()
    assert [doc["id"] for doc in listed] == [created["id"]]


def test_upload_without_file(owner_client: TestClient) -> None:
    """Test an upload with no file part is 400."""
    response = owner_client.post("/api/documents", data={"name": "a.pdf"})

    assert response.status_code == 400
    assert response.json()["detail"] == "No file uploaded"


def test_upload_without_name(owner_client: TestClient) -> None:
    """Test an upload with no name is 400."""
    response = owner_client.post(
        "/api/documents", files={"file": ("a.pdf", b"x", "application/pdf")}
    )

    assert response.status_code == 400
    assert response.json()["detail"] == "Document name is required"


def test_upload_too_large(owner_client: TestClient, upload: Callable) -> None:
    """Test an upload over the configured limit is 400."""
    app.dependency_overrides[get_settings] = lambda: Settings(_env_file=None, max_upload_bytes=4)

    response = upload(owner_client, "a.pdf", b"12345")

    assert response.status_code == 400
    assert owner_client.get("/api/documents").json() == []


def test_upload_duplicate_name(owner_client: TestClient, upload: Callable) -> None:
    """Test a second upload with the same name is 409."""
    upload(owner_client, "a.pdf")

    response = upload(owner_client, "a.pdf")

    assert response.status_code == 409
    assert len(owner_client.get("/api/documents").json()) == 1


def test_public_owner_listing(
    owner_client: TestClient, upload: Callable, client_factory: Callable[[], TestClient]
) -> None:
    """Test anyone can see an owner's document names but not their metadata."""
    created = upload(owner_client, "a.pdf").json()

    stranger = client_factory()
    response = stranger.get(f"/api/documents/{created['owner_id']}")

    assert response.status_code == 200
    assert response.json() == [
        {"id": created["id"], "name": "a.pdf", "content_type": "application/pdf"}
    ]
    assert stranger.get("/api/documents/999").json() == []


def test_rename(owner_client: TestClient, upload: Callable) -> None:
    """Test renaming, conflicts and bad names."""
    first = upload(owner_client, "a.pdf").json()
    upload(owner_client, "b.pdf")

    response = owner_client.patch(f"/api/documents/{first['id']}", json={"name": "c.pdf"})
    assert response.status_code == 200
    assert response.json()["name"] == "c.pdf"

    response = owner_client.patch(f"/api/documents/{first['id']}", json={"name": "b.pdf"})
    assert response.status_code == 409

    response = owner_client.patch(f"/api/documents/{first['id']}", json={"name": "  "})
    assert response.status_code == 400

    response = owner_client.patch(f"/api/documents/{first['id']}", json={})
    assert response.status_code == 400

    response = owner_client.patch("/api/documents/999", json={"name": "z.pdf"})
    assert response.status_code == 404


def test_rename_and_delete_foreign_document(
    owner_client: TestClient,
    upload: Callable,
    make_user: Callable[[str], UserRecord],
    login: Callable[..., None],
    client_factory: Callable[[], TestClient],
) -> None:
    """Test another owner cannot rename or delete the document."""
    created = upload(owner_client, "a.pdf").json()
    make_user("other@example.com")
    other = client_factory()
    login(other, "other@example.com")

    assert other.patch(f"/api/documents/{created['id']}", json={"name": "x.pdf"}).status_code == 404
    assert other.delete(f"/api/documents/{created['id']}").status_code == 404
    assert owner_client.get(f"/api/documents/{created['id']}/view").status_code == 200


def test_delete(owner_client: TestClient, upload: Callable) -> None:
    """Test deleting removes the document and its content."""
    created = upload(owner_client, "a.pdf").json()

    assert owner_client.delete(f"/api/documents/{created['id']}").status_code == 204
    assert owner_client.get("/api/documents").json() == []
    assert owner_client.get(f"/api/documents/{created['id']}/view").status_code == 403
    assert owner_client.delete(f"/api/documents/{created['id']}").status_code == 404


def test_view_and_download(owner_client: TestClient, upload: Callable) -> None:
    """Test view is inline and download an attachment, both with the stored type."""
    created = upload(owner_client, "scan.png", b"\x89PNG data", "image/png").json()

    view = owner_client.get(f"/api/documents/{created['id']}/view")
    assert view.status_code == 200
    assert view.content == b"\x89PNG data"
    assert view.headers["content-type"] == "image/png"
    assert view.headers["content-disposition"] == 'inline; filename="scan.png"'

    download = owner_client.get(f"/api/documents/{created['id']}/download")
    assert download.status_code == 200
    assert download.content == b"\x89PNG data"
    assert download.headers["content-disposition"] == 'attachment; filename="scan.png"'


def test_view_denied_and_missing_are_identical(
    owner_client: TestClient, upload: Callable, client_factory: Callable[[], TestClient]
) -> None:
    """Test a stranger gets the same 403 for existing and missing documents."""
    created = upload(owner_client, "a.pdf").json()
    stranger = client_factory()

    denied = stranger.get(f"/api/documents/{created['id']}/view")
    missing = stranger.get("/api/documents/999/view")

    assert denied.status_code == missing.status_code == 403
    assert denied.json() == missing.json() == {"detail": "Access denied"}


def test_content_disposition_non_ascii() -> None:
    """Test non-ASCII names get an encoded filename* and a safe fallback."""
    value = content_disposition("attachment", 'Führer"schein.pdf')

    assert value.startswith('attachment; filename="F?hrer_schein.pdf"')
    assert "filename*=utf-8''F%C3%BChrer%22schein.pdf" in value
