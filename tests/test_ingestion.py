"""
Tests for the ingestion pipeline.

Tests:
- End-to-end ingestion of a plain-text resume
- Failure wrapping with the failed step
- Temporary file cleanup on success and on every failure path
"""

import pytest
from cvintake.core.errors import ExtractionFailure, IngestionFailure, StoreFailure
from cvintake.crud import candidate as candidate_crud
from cvintake.models.candidate import Candidate
from cvintake.schemas.candidate import NOT_AVAILABLE
from cvintake.services.ingestion import IngestionOrchestrator, RawDocument, scoped_document


def upload(storage, name, content):
    """Place a file in the upload directory the way the upload gate does"""
    path = storage.path_for(name)
    with open(path, "w", encoding="utf-8") as f:
        f.write(content)
    return RawDocument.from_path(path, original_filename=name)


class TestIngestion:
    def test_plain_text_end_to_end(self, db_session, storage, sample_resume_text):
        document = upload(storage, "marie_1700000000000.txt", sample_resume_text)

        result = IngestionOrchestrator(db_session, storage).ingest(document)

        assert result.fields.name == "Marie Curie"
        assert result.fields.email == "marie@example.com"
        assert result.fields.phone.startswith("+")
        assert result.fields.phone.endswith("612345678")
        assert result.fields.skills == "Python, React"
        assert result.fields.languages == "Français, Anglais"
        assert result.stored_filename == "CV_marie_curie.txt"

        candidate = candidate_crud.get_by_id(db_session, result.candidate_id)
        assert candidate.name == "Marie Curie"
        assert candidate.cv_filename == "CV_marie_curie.txt"
        assert candidate.full_text == sample_resume_text
        assert candidate.upload_date is not None

    def test_temp_file_deleted_after_success(self, db_session, storage, sample_resume_text):
        document = upload(storage, "marie.txt", sample_resume_text)

        IngestionOrchestrator(db_session, storage).ingest(document)

        assert "marie.txt" not in storage.list_files()

    def test_unnamed_resume_keeps_upload_name(self, db_session, storage):
        document = upload(storage, "scan_42.txt", "jean@example.com\n0612345678\n")
        document.original_filename = None

        result = IngestionOrchestrator(db_session, storage).ingest(document)

        assert result.fields.name == NOT_AVAILABLE
        assert result.stored_filename == "scan_42.txt"

    def test_filename_used_as_last_resort_name(self, db_session, storage):
        document = upload(storage, "CV_jean_dupont.txt", "jean@example.com\n")

        result = IngestionOrchestrator(db_session, storage).ingest(document)

        assert result.fields.name == "jean dupont"
        assert result.stored_filename == "CV_jean_dupont.txt"


class TestFailures:
    def test_field_extraction_failure_cleans_up(self, db_session, storage, sample_resume_text):
        document = upload(storage, "marie.txt", sample_resume_text)

        def exploding_extractor(text, fallback_filename=None):
            raise RuntimeError("forced failure")

        orchestrator = IngestionOrchestrator(db_session, storage, field_extractor=exploding_extractor)

        with pytest.raises(IngestionFailure) as exc_info:
            orchestrator.ingest(document)

        assert exc_info.value.step == "field_extraction"
        assert isinstance(exc_info.value.cause, RuntimeError)
        assert "marie.txt" not in storage.list_files()
        assert db_session.query(Candidate).count() == 0

    def test_text_extraction_failure(self, db_session, storage):
        document = upload(storage, "broken.pdf", "not a pdf")

        def failing_text(path, extension):
            raise ExtractionFailure("Unable to read PDF")

        with pytest.raises(IngestionFailure) as exc_info:
            IngestionOrchestrator(db_session, storage, text_extractor=failing_text).ingest(document)

        assert exc_info.value.step == "text_extraction"
        assert isinstance(exc_info.value.__cause__, ExtractionFailure)
        assert storage.list_files() == []

    def test_persistence_failure_cleans_up(self, db_session, storage, sample_resume_text, monkeypatch):
        document = upload(storage, "marie.txt", sample_resume_text)

        def failing_create(db, fields, full_text, cv_filename):
            raise StoreFailure("disk full")

        monkeypatch.setattr(candidate_crud, "create", failing_create)

        with pytest.raises(IngestionFailure) as exc_info:
            IngestionOrchestrator(db_session, storage).ingest(document)

        assert exc_info.value.step == "persistence"
        assert storage.list_files() == []

    def test_cleanup_error_does_not_mask_result(self, db_session, storage, sample_resume_text, monkeypatch):
        document = upload(storage, "marie.txt", sample_resume_text)

        def failing_delete(filename):
            raise PermissionError("file busy")

        monkeypatch.setattr(storage, "delete", failing_delete)

        result = IngestionOrchestrator(db_session, storage).ingest(document)

        assert result.fields.name == "Marie Curie"

    def test_cleanup_error_does_not_mask_failure(self, db_session, storage, monkeypatch):
        document = upload(storage, "marie.txt", "whatever")

        def failing_delete(filename):
            raise PermissionError("file busy")

        def failing_text(path, extension):
            raise ExtractionFailure("bad file")

        monkeypatch.setattr(storage, "delete", failing_delete)

        with pytest.raises(IngestionFailure) as exc_info:
            IngestionOrchestrator(db_session, storage, text_extractor=failing_text).ingest(document)
        assert exc_info.value.step == "text_extraction"


def test_scoped_document_tolerates_missing_file(storage, tmp_path):
    document = RawDocument(path=str(tmp_path / "never_stored.txt"), extension=".txt", size=0)

    with scoped_document(storage, document) as doc:
        assert doc is document


def test_cleanup_backend_error_does_not_mask_result(db_session, storage, sample_resume_text, monkeypatch):
    document = upload(storage, "marie.txt", sample_resume_text)

    def failing_delete(filename):
        raise RuntimeError("backend unavailable")

    monkeypatch.setattr(storage, "delete", failing_delete)

    result = IngestionOrchestrator(db_session, storage).ingest(document)

    assert result.stored_filename == "CV_marie_curie.txt"
    assert candidate_crud.get_by_id(db_session, result.candidate_id) is not None


def test_document_outside_upload_directory_refused(db_session, storage, tmp_path):
    outside = tmp_path / "elsewhere"
    outside.mkdir()
    foreign = outside / "marie.txt"
    foreign.write_text("Marie Curie\n", encoding="utf-8")
    with open(storage.path_for("marie.txt"), "w", encoding="utf-8") as f:
        f.write("someone else's upload")

    with pytest.raises(IngestionFailure) as exc_info:
        IngestionOrchestrator(db_session, storage).ingest(RawDocument.from_path(str(foreign), "marie.txt"))

    assert exc_info.value.step == "received"
    assert foreign.exists()
    assert storage.exists("marie.txt")
    assert db_session.query(Candidate).count() == 0
