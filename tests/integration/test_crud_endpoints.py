"""Integration tests for the quiz, flashcard and summary endpoints."""
import json
import uuid

import pytest

from quiz.models import Flashcard, Quiz, QuizQuestion, Summary
from quiz.parsers import ParsedFlashcard, ParsedQuestion
from quiz.services import StudyMaterialGateway

pytestmark = pytest.mark.django_db


def _questions(count=2):
    return [
        ParsedQuestion(text=f"سؤال {n}", choices=["أ", "ب", "ج", "د"], correct_answer="ب")
        for n in range(1, count + 1)
    ]


@pytest.fixture
def quiz(document):
    quiz_id = StudyMaterialGateway.save_quiz(document, "اختبار متوسط", "medium", _questions())
    return Quiz.objects.get(pk=quiz_id)


@pytest.fixture
def flashcards(document):
    return StudyMaterialGateway.save_flashcards(document, [
        ParsedFlashcard("س1", "ج1"),
        ParsedFlashcard("س2", "ج2"),
    ])


@pytest.fixture
def summary(document):
    return StudyMaterialGateway.save_summary(document, "ملخص الدرس")


def _put(client, url, body, headers):
    return client.put(url, data=json.dumps(body), content_type="application/json", **headers)


class TestQuizEndpoints:
    def test_list_is_paginated_and_scoped(self, api_client, alice_headers, document, make_document):
        for _ in range(3):
            StudyMaterialGateway.save_quiz(document, "اختبار", "easy", _questions(1))
        StudyMaterialGateway.save_quiz(make_document(owner_id="user-bob"), "اختبار بوب", "hard", _questions(1))

        response = api_client.get("/api/quizzes/?page=2&limit=2", **alice_headers)

        assert response.status_code == 200
        data = response.json()
        assert data["pagination"] == {"total": 3, "page": 2, "limit": 2}
        assert len(data["quizzes"]) == 1

    def test_bad_pagination(self, api_client, alice_headers):
        assert api_client.get("/api/quizzes/?page=0", **alice_headers).status_code == 400
        assert api_client.get("/api/quizzes/?limit=abc", **alice_headers).status_code == 400

    def test_detail_includes_ordered_questions(self, api_client, alice_headers, quiz):
        response = api_client.get(f"/api/quizzes/{quiz.id}/", **alice_headers)

        assert response.status_code == 200
        data = response.json()["quiz"]
        assert [q["text"] for q in data["questions"]] == ["سؤال 1", "سؤال 2"]
        assert data["questions"][0]["correctAnswer"] == "ب"

    def test_update_title_and_questions(self, api_client, alice_headers, quiz):
        body = {
            "title": "اختبار معدل",
            "difficulty": "hard",
            "questions": [{"text": "جديد", "choices": ["نعم", "لا"], "correctAnswer": "نعم"}],
        }

        response = _put(api_client, f"/api/quizzes/{quiz.id}/", body, alice_headers)

        assert response.status_code == 200
        quiz.refresh_from_db()
        assert quiz.title == "اختبار معدل"
        assert quiz.difficulty == "hard"
        assert [q.text for q in quiz.questions.all()] == ["جديد"]

    def test_update_rejects_answer_outside_choices(self, api_client, alice_headers, quiz):
        body = {"questions": [{"text": "جديد", "choices": ["نعم", "لا"], "correctAnswer": "ربما"}]}

        response = _put(api_client, f"/api/quizzes/{quiz.id}/", body, alice_headers)

        assert response.status_code == 400
        assert QuizQuestion.objects.filter(quiz=quiz).count() == 2

    def test_update_rejects_unknown_difficulty(self, api_client, alice_headers, quiz):
        response = _put(api_client, f"/api/quizzes/{quiz.id}/", {"difficulty": "extreme"}, alice_headers)
        assert response.status_code == 400

    def test_delete_cascades_to_questions(self, api_client, alice_headers, quiz):
        response = api_client.delete(f"/api/quizzes/{quiz.id}/", **alice_headers)

        assert response.status_code == 200
        assert not Quiz.objects.exists()
        assert not QuizQuestion.objects.exists()

    def test_other_users_quiz_is_forbidden(self, api_client, bob_headers, quiz):
        assert api_client.get(f"/api/quizzes/{quiz.id}/", **bob_headers).status_code == 403
        assert _put(api_client, f"/api/quizzes/{quiz.id}/", {"title": "x"}, bob_headers).status_code == 403
        assert api_client.delete(f"/api/quizzes/{quiz.id}/", **bob_headers).status_code == 403
        assert Quiz.objects.filter(pk=quiz.id, title="اختبار متوسط").exists()

    def test_missing_quiz(self, api_client, alice_headers):
        assert api_client.get(f"/api/quizzes/{uuid.uuid4()}/", **alice_headers).status_code == 404

    def test_requires_token(self, api_client, quiz):
        assert api_client.get("/api/quizzes/").status_code == 401


class TestFlashcardEndpoints:
    def test_list_filtered_by_file(self, api_client, alice_headers, document, flashcards, make_document):
        other = make_document(name="other.pdf")
        StudyMaterialGateway.save_flashcards(other, [ParsedFlashcard("س3", "ج3")])

        response = api_client.get(f"/api/flashcards/?fileId={document.id}", **alice_headers)

        assert response.status_code == 200
        data = response.json()
        assert [f["question"] for f in data["flashcards"]] == ["س1", "س2"]
        assert data["pagination"]["total"] == 2

    def test_list_for_someone_elses_file(self, api_client, bob_headers, document, flashcards):
        response = api_client.get(f"/api/flashcards/?fileId={document.id}", **bob_headers)
        assert response.status_code == 403

    def test_update(self, api_client, alice_headers, flashcards):
        card = flashcards[0]

        response = _put(api_client, f"/api/flashcards/{card.id}/", {"answer": "إجابة جديدة"}, alice_headers)

        assert response.status_code == 200
        card.refresh_from_db()
        assert card.answer == "إجابة جديدة"
        assert card.question == "س1"

    def test_update_rejects_blank_question(self, api_client, alice_headers, flashcards):
        response = _put(api_client, f"/api/flashcards/{flashcards[0].id}/", {"question": " "}, alice_headers)
        assert response.status_code == 400

    def test_delete(self, api_client, alice_headers, flashcards):
        response = api_client.delete(f"/api/flashcards/{flashcards[0].id}/", **alice_headers)

        assert response.status_code == 200
        assert Flashcard.objects.count() == 1

    def test_other_user_cannot_delete(self, api_client, bob_headers, flashcards):
        response = api_client.delete(f"/api/flashcards/{flashcards[0].id}/", **bob_headers)

        assert response.status_code == 403
        assert Flashcard.objects.count() == 2


class TestSummaryEndpoints:
    def test_list_and_get(self, api_client, alice_headers, document, summary):
        listed = api_client.get(f"/api/summaries/?fileId={document.id}", **alice_headers)
        detail = api_client.get(f"/api/summaries/{summary.id}/", **alice_headers)

        assert [s["content"] for s in listed.json()["summaries"]] == ["ملخص الدرس"]
        assert detail.json()["summary"]["fileId"] == str(document.id)

    def test_delete(self, api_client, alice_headers, summary):
        assert api_client.delete(f"/api/summaries/{summary.id}/", **alice_headers).status_code == 200
        assert not Summary.objects.exists()

    def test_other_user(self, api_client, bob_headers, summary):
        assert api_client.get(f"/api/summaries/{summary.id}/", **bob_headers).status_code == 403
        assert api_client.get("/api/summaries/", **bob_headers).json() == {"summaries": []}
