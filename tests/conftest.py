"""
Pytest Configuration and Fixtures.

This file configures pytest and provides shared fixtures for all tests.
Upstream services (auth provider, LLM API, document fetch/OCR) are always
replaced with fakes; nothing here touches the network.
"""
import pytest
import sys
from pathlib import Path
from unittest.mock import Mock

# Add project root to path
PROJECT_ROOT = Path(__file__).parent.parent
sys.path.insert(0, str(PROJECT_ROOT))

from core.ai_client import AIClient  # noqa: E402
from core.exceptions import AuthError  # noqa: E402
from materials.extraction import TextExtractor  # noqa: E402

ALICE = "user-alice"
BOB = "user-bob"
TOKENS = {
    "token-alice": ALICE,
    "token-bob": BOB,
}

ARABIC_TEXT = (
    "الذكاء الاصطناعي هو فرع من علوم الحاسوب يهتم بإنشاء أنظمة قادرة على "
    "التعلم والاستنتاج واتخاذ القرارات."
)


def pytest_configure(config):
    """Configure pytest markers."""
    config.addinivalue_line("markers", "unit: Unit tests")
    config.addinivalue_line("markers", "integration: Integration tests (require database)")


def pytest_collection_modifyitems(config, items):
    """Automatically mark tests based on their location."""
    for item in items:
        if "unit" in str(item.fspath):
            item.add_marker(pytest.mark.unit)
        elif "integration" in str(item.fspath):
            item.add_marker(pytest.mark.integration)


class FakeAuthClient:
    """Stands in for the auth provider: a fixed token -> user id table."""

    def __init__(self):
        self.calls = []

    def get_user_id(self, token):
        self.calls.append(token)
        if token not in TOKENS:
            raise AuthError("Invalid or expired token")
        return TOKENS[token]


@pytest.fixture
def auth_provider(monkeypatch):
    fake = FakeAuthClient()
    monkeypatch.setattr("core.auth.get_auth_client", lambda: fake)
    return fake


@pytest.fixture
def alice_headers():
    return {"HTTP_AUTHORIZATION": "Bearer token-alice"}


@pytest.fixture
def bob_headers():
    return {"HTTP_AUTHORIZATION": "Bearer token-bob"}


@pytest.fixture
def api_client(client, auth_provider):
    """Django test client with the fake auth provider installed."""
    return client


@pytest.fixture
def make_document(db):
    from materials.models import Document

    def _make(owner_id=ALICE, name="lesson.pdf", mime_type="application/pdf", **kwargs):
        return Document.objects.create(owner_id=owner_id, name=name, mime_type=mime_type,
                                       size=kwargs.pop("size", 2048), **kwargs)

    return _make


@pytest.fixture
def document(make_document):
    return make_document()


@pytest.fixture
def fake_ai_client():
    client = Mock(spec=AIClient)
    client.generate.return_value = ""
    client.chat.return_value = ""
    return client


@pytest.fixture
def fake_extractor():
    return Mock(spec=TextExtractor)


@pytest.fixture
def pipeline(monkeypatch, fake_ai_client, fake_extractor):
    """The real pipeline and gateway, wired to fake upstream clients."""
    from quiz.pipeline import GenerationPipeline
    from quiz.services import StudyMaterialGateway

    instance = GenerationPipeline(
        extractor=fake_extractor,
        ai_client=fake_ai_client,
        gateway=StudyMaterialGateway(),
        require_arabic=True,
        allowed_fetch_hosts=["files.test"],
    )
    monkeypatch.setattr("quiz.views.get_pipeline", lambda: instance)
    return instance
