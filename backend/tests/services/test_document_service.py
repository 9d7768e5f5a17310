# tests/services/test_document_service.py
from unittest.mock import MagicMock

import pytest
from sqlalchemy.exc import OperationalError

from prdify.models import DocumentStatus, Question
from prdify.schemas.document import DocumentCreate, DocumentListQuery
from prdify.services.documents import (
    document_service,
    get_current_round_number,
    sanitize_filename,
    to_schema,
)
from prdify.services.errors import (
    DocumentConflictError,
    DocumentFetchingError,
    DocumentNameConflictError,
    DocumentNotFoundError,
    RoundCalculationError,
)


def make_command(name="Checkout redesign"):
    return DocumentCreate(
        name=name,
        main_problem="Users abandon checkout",
        in_scope="Payment step",
        out_of_scope="Shipping",
        success_criteria="Conversion +5%"
    )


@pytest.mark.asyncio
async def test_create_document_starts_collecting_answers(db_session, user_id):
    document = await document_service.create_document(db_session, user_id, make_command())

    assert document.status == DocumentStatus.COLLECTING_ANSWERS
    assert document.summary is None
    assert document.content is None
    assert document.current_round_number == 0
    assert document.user_id == user_id


@pytest.mark.asyncio
async def test_create_document_strips_whitespace(db_session, user_id):
    document = await document_service.create_document(db_session, user_id, make_command("  Spaced  "))
    assert document.name == "Spaced"


@pytest.mark.asyncio
async def test_name_is_unique_per_owner(db_session, user_id, other_user_id):
    await document_service.create_document(db_session, user_id, make_command())

    with pytest.raises(DocumentNameConflictError):
        await document_service.create_document(db_session, user_id, make_command())

    # Another owner may reuse the name
    other = await document_service.create_document(db_session, other_user_id, make_command())
    assert other.name == "Checkout redesign"


@pytest.mark.asyncio
async def test_get_document_is_scoped_to_owner(db_session, sample_document, other_user_id):
    with pytest.raises(DocumentNotFoundError):
        await document_service.get_document(db_session, sample_document.id, other_user_id)


@pytest.mark.asyncio
async def test_get_missing_document(db_session):
    with pytest.raises(DocumentNotFoundError):
        await document_service.get_document(db_session, "does-not-exist")


@pytest.mark.asyncio
async def test_list_documents_paginates_and_sorts(db_session, user_id, other_user_id):
    for name in ["Charlie", "Alpha", "Bravo"]:
        await document_service.create_document(db_session, user_id, make_command(name))
    await document_service.create_document(db_session, other_user_id, make_command("Zulu"))

    first_page = await document_service.list_documents(
        db_session, user_id, DocumentListQuery(page=1, limit=2, sort_by="name", order="asc")
    )
    second_page = await document_service.list_documents(
        db_session, user_id, DocumentListQuery(page=2, limit=2, sort_by="name", order="asc")
    )

    assert [d.name for d in first_page.data] == ["Alpha", "Bravo"]
    assert [d.name for d in second_page.data] == ["Charlie"]
    assert first_page.pagination.total_items == 3
    assert first_page.pagination.total_pages == 2


@pytest.mark.asyncio
async def test_rename_document(db_session, sample_document, user_id):
    renamed = await document_service.rename_document(db_session, sample_document.id, "New name", user_id)
    assert renamed.name == "New name"


@pytest.mark.asyncio
async def test_rename_to_existing_name_conflicts(db_session, sample_document, user_id):
    await document_service.create_document(db_session, user_id, make_command("Taken"))

    with pytest.raises(DocumentNameConflictError):
        await document_service.rename_document(db_session, sample_document.id, "Taken", user_id)


@pytest.mark.asyncio
async def test_completed_document_cannot_be_renamed(db_session, document_in_status):
    document = document_in_status(DocumentStatus.COMPLETED, summary="s", content="c")

    with pytest.raises(DocumentConflictError):
        await document_service.rename_document(db_session, document.id, "Changed")

    db_session.refresh(document)
    assert document.name == "Test PRD"


@pytest.mark.asyncio
async def test_delete_document_removes_questions(db_session, sample_document, add_questions):
    add_questions(sample_document, 1, [None, None])

    document_id = sample_document.id
    await document_service.delete_document(db_session, document_id)

    assert db_session.query(Question).count() == 0
    with pytest.raises(DocumentNotFoundError):
        await document_service.get_document(db_session, document_id)


@pytest.mark.asyncio
async def test_delete_missing_document(db_session, sample_document, other_user_id):
    with pytest.raises(DocumentNotFoundError):
        await document_service.delete_document(db_session, sample_document.id, other_user_id)


def test_current_round_number(db_session, sample_document, add_questions):
    assert get_current_round_number(db_session, sample_document.id) == 0

    add_questions(sample_document, 1, ["a", "b"])
    add_questions(sample_document, 2, [None])

    assert get_current_round_number(db_session, sample_document.id) == 2


def test_round_calculation_failure(sample_document):
    broken = MagicMock()
    broken.query.side_effect = OperationalError("SELECT", {}, Exception("database is locked"))

    with pytest.raises(RoundCalculationError):
        get_current_round_number(broken, sample_document.id)

    # Mapping to the external representation does not leak the round error
    with pytest.raises(DocumentFetchingError):
        to_schema(broken, sample_document)


@pytest.mark.asyncio
async def test_complete_document(db_session, document_in_status):
    document = document_in_status(DocumentStatus.DOCUMENT_REVIEW, summary="s", content="# PRD")

    completed = await document_service.complete_document(db_session, document.id)

    assert completed.status == DocumentStatus.COMPLETED
    assert completed.content == "# PRD"
    assert completed.summary == "s"


@pytest.mark.asyncio
async def test_complete_twice_is_rejected(db_session, document_in_status):
    document = document_in_status(DocumentStatus.DOCUMENT_REVIEW, summary="s", content="# PRD")
    await document_service.complete_document(db_session, document.id)

    with pytest.raises(DocumentConflictError):
        await document_service.complete_document(db_session, document.id)


@pytest.mark.asyncio
@pytest.mark.parametrize("status", [
    DocumentStatus.COLLECTING_ANSWERS,
    DocumentStatus.SUMMARY_REVIEW,
])
async def test_complete_requires_document_review(db_session, document_in_status, status):
    document = document_in_status(status, summary="s" if status == DocumentStatus.SUMMARY_REVIEW else None)

    with pytest.raises(DocumentConflictError):
        await document_service.complete_document(db_session, document.id)

    db_session.refresh(document)
    assert document.status == status


@pytest.mark.asyncio
async def test_export_markdown(db_session, document_in_status):
    document = document_in_status(DocumentStatus.COMPLETED, summary="s", content="# PRD\n\nBody")

    filename, markdown = await document_service.export_markdown(db_session, document.id)

    assert filename == "Test-PRD.md"
    assert markdown == "# PRD\n\nBody"


@pytest.mark.asyncio
async def test_export_requires_completed(db_session, document_in_status):
    document = document_in_status(DocumentStatus.DOCUMENT_REVIEW, summary="s", content="# PRD")

    with pytest.raises(DocumentConflictError):
        await document_service.export_markdown(db_session, document.id)


def test_sanitize_filename():
    assert sanitize_filename("  My PRD: v2/final  ") == "My-PRD-v2-final"
    assert sanitize_filename("***") == ""
