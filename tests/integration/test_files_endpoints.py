"""Integration tests for document upload, rename and delete."""
import json
import uuid

import pytest
from django.core.files.uploadedfile import SimpleUploadedFile

from materials.models import Document
from quiz.models import Quiz
from quiz.parsers import ParsedQuestion
from quiz.services import StudyMaterialGateway

pytestmark = pytest.mark.django_db

URL = "/api/files/"


def _upload(client, headers, name="notes.txt", content=b"\xd8\xa7\xd9\x84\xd8\xaf\xd8\xb1\xd8\xb3",
            content_type="text/plain"):
    upload = SimpleUploadedFile(name, content, content_type=content_type)
    return client.post(URL, {"file": upload}, **headers)


class TestUpload:
    def test_upload_creates_document(self, api_client, alice_headers):
        response = _upload(api_client, alice_headers)

        assert response.status_code == 201
        data = response.json()["file"]
        assert data["name"] == "notes.txt"
        assert data["type"] == "text/plain"
        assert data["size"] == 10

        document = Document.objects.get(pk=data["id"])
        assert document.owner_id == "user-alice"
        assert document.file.read() == b"\xd8\xa7\xd9\x84\xd8\xaf\xd8\xb1\xd8\xb3"

    def test_missing_file(self, api_client, alice_headers):
        response = api_client.post(URL, {}, **alice_headers)
        assert response.status_code == 400

    def test_too_large(self, api_client, alice_headers, settings):
        settings.MAX_UPLOAD_SIZE = 5

        response = _upload(api_client, alice_headers)

        assert response.status_code == 400
        assert not Document.objects.exists()

    def test_unsupported_type(self, api_client, alice_headers):
        response = _upload(api_client, alice_headers, name="old.doc", content_type="application/msword")

        assert response.status_code == 400
        assert not Document.objects.exists()

    def test_generic_type_uses_extension(self, api_client, alice_headers):
        response = _upload(api_client, alice_headers, name="lesson.pdf", content=b"%PDF-1.4",
                           content_type="application/octet-stream")

        assert response.status_code == 201
        assert response.json()["file"]["type"] == "application/pdf"

    def test_requires_token(self, api_client):
        assert _upload(api_client, {}).status_code == 401


class TestListAndDetail:
    def test_list_only_own_documents(self, api_client, alice_headers, make_document):
        make_document(name="mine.pdf")
        make_document(name="theirs.pdf", owner_id="user-bob")

        response = api_client.get(URL, **alice_headers)

        assert [f["name"] for f in response.json()["files"]] == ["mine.pdf"]

    def test_detail(self, api_client, alice_headers, document):
        response = api_client.get(f"{URL}{document.id}/", **alice_headers)
        assert response.json()["file"]["id"] == str(document.id)

    def test_missing(self, api_client, alice_headers):
        assert api_client.get(f"{URL}{uuid.uuid4()}/", **alice_headers).status_code == 404

    def test_forbidden(self, api_client, bob_headers, document):
        assert api_client.get(f"{URL}{document.id}/", **bob_headers).status_code == 403


class TestRenameAndDelete:
    def test_rename(self, api_client, alice_headers, document):
        response = api_client.patch(f"{URL}{document.id}/", data=json.dumps({"name": "  درس أول.pdf "}),
                                    content_type="application/json", **alice_headers)

        assert response.status_code == 200
        document.refresh_from_db()
        assert document.name == "درس أول.pdf"

    def test_rename_requires_name(self, api_client, alice_headers, document):
        response = api_client.patch(f"{URL}{document.id}/", data=json.dumps({"name": ""}),
                                    content_type="application/json", **alice_headers)
        assert response.status_code == 400

    def test_other_user_cannot_rename(self, api_client, bob_headers, document):
        response = api_client.patch(f"{URL}{document.id}/", data=json.dumps({"name": "x"}),
                                    content_type="application/json", **bob_headers)

        assert response.status_code == 403
        document.refresh_from_db()
        assert document.name == "lesson.pdf"

    def test_delete_cascades_to_artifacts(self, api_client, alice_headers, document):
        StudyMaterialGateway.save_quiz(document, "اختبار", "easy", [
            ParsedQuestion("سؤال", ["أ", "ب"], "أ"),
        ])

        response = api_client.delete(f"{URL}{document.id}/", **alice_headers)

        assert response.status_code == 200
        assert not Document.objects.exists()
        assert not Quiz.objects.exists()

    def test_delete_removes_stored_file(self, api_client, alice_headers):
        file_id = _upload(api_client, alice_headers).json()["file"]["id"]
        document = Document.objects.get(pk=file_id)
        storage, name = document.file.storage, document.file.name

        api_client.delete(f"{URL}{file_id}/", **alice_headers)

        assert not storage.exists(name)
