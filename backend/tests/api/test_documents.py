# backend/tests/api/test_documents.py
from fastapi import status

from prdify.models import DocumentStatus

NEW_PRD = {
    "name": "Invoice tracker",
    "main_problem": "Freelancers forget to chase unpaid invoices",
    "in_scope": "Reminders and payment status",
    "out_of_scope": "Accounting exports",
    "success_criteria": "Fewer overdue invoices"
}


def test_create_document(client, user_id):
    """Test PRD creation"""
    response = client.post("/api/prds", json=NEW_PRD)

    assert response.status_code == status.HTTP_201_CREATED
    data = response.json()
    assert data["name"] == "Invoice tracker"
    assert data["user_id"] == user_id
    assert data["status"] == "collecting_answers"
    assert data["summary"] is None
    assert data["content"] is None
    assert data["current_round_number"] == 0


def test_create_document_validation(client):
    """Test that empty and oversized fields are rejected"""
    response = client.post("/api/prds", json={**NEW_PRD, "main_problem": ""})
    assert response.status_code == 422

    response = client.post("/api/prds", json={**NEW_PRD, "name": "x" * 201})
    assert response.status_code == 422


def test_create_duplicate_name(client):
    """Test that names are unique per owner"""
    client.post("/api/prds", json=NEW_PRD)
    response = client.post("/api/prds", json=NEW_PRD)

    assert response.status_code == status.HTTP_409_CONFLICT
    assert response.json()["kind"] == "conflict"


def test_get_document(client, sample_document, add_questions):
    """Test getting a single PRD with its current round"""
    add_questions(sample_document, 1, ["a"])
    add_questions(sample_document, 2, [None])

    response = client.get(f"/api/prds/{sample_document.id}")

    assert response.status_code == status.HTTP_200_OK
    data = response.json()
    assert data["name"] == sample_document.name
    assert data["current_round_number"] == 2


def test_get_document_of_another_user(client, sample_document, other_user_id):
    """Test that PRDs are invisible to other owners"""
    response = client.get(
        f"/api/prds/{sample_document.id}",
        headers={"X-User-Id": other_user_id}
    )

    assert response.status_code == status.HTTP_404_NOT_FOUND
    assert response.json() == {"error": "PRD not found", "kind": "not_found"}


def test_list_documents(client):
    """Test paginated listing"""
    for name in ["Alpha", "Bravo", "Charlie"]:
        client.post("/api/prds", json={**NEW_PRD, "name": name})

    response = client.get("/api/prds", params={"page": 2, "limit": 2, "sort_by": "name", "order": "asc"})

    assert response.status_code == status.HTTP_200_OK
    data = response.json()
    assert [d["name"] for d in data["data"]] == ["Charlie"]
    assert data["pagination"] == {"page": 2, "limit": 2, "total_items": 3, "total_pages": 2}


def test_list_documents_rejects_unknown_sort(client):
    response = client.get("/api/prds", params={"sort_by": "summary"})
    assert response.status_code == 422


def test_rename_document(client, sample_document):
    """Test renaming a PRD"""
    response = client.patch(f"/api/prds/{sample_document.id}", json={"name": "Renamed"})

    assert response.status_code == status.HTTP_200_OK
    assert response.json()["name"] == "Renamed"


def test_delete_document(client, sample_document, add_questions):
    """Test deleting a PRD"""
    add_questions(sample_document, 1, [None])

    document_id = sample_document.id
    response = client.delete(f"/api/prds/{document_id}")
    assert response.status_code == status.HTTP_204_NO_CONTENT

    response = client.get(f"/api/prds/{document_id}")
    assert response.status_code == status.HTTP_404_NOT_FOUND


def test_complete_and_export(client, document_in_status):
    """Test locking a reviewed PRD and exporting it"""
    document = document_in_status(DocumentStatus.DOCUMENT_REVIEW, summary="s", content="# Test PRD\n\nBody")

    response = client.get(f"/api/prds/{document.id}/export")
    assert response.status_code == status.HTTP_409_CONFLICT

    response = client.post(f"/api/prds/{document.id}/complete")
    assert response.status_code == status.HTTP_200_OK
    assert response.json()["status"] == "completed"

    response = client.post(f"/api/prds/{document.id}/complete")
    assert response.status_code == status.HTTP_409_CONFLICT
    assert response.json()["details"]["current_status"] == "completed"

    response = client.get(f"/api/prds/{document.id}/export")
    assert response.status_code == status.HTTP_200_OK
    assert response.text == "# Test PRD\n\nBody"
    assert response.headers["content-type"].startswith("text/markdown")
    assert response.headers["content-disposition"] == 'attachment; filename="Test-PRD.md"'


def test_nonexistent_document(client):
    """Test handling of nonexistent PRD"""
    response = client.get("/api/prds/99999")
    assert response.status_code == status.HTTP_404_NOT_FOUND
