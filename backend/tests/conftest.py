"""Shared fixtures: a real app over a temporary SQLite database, fake RAG clients."""

from unittest.mock import AsyncMock, MagicMock

import pytest
from fastapi.testclient import TestClient

from campus_qa.core.config import Settings
from campus_qa.core.context import ServiceContext
from campus_qa.main import create_app
from campus_qa.services.mail import OTPSender
from campus_qa.services.rag.pipeline import RAGPipeline
from campus_qa.services.rag.retriever import RetrievedDocument


class RecordingOTPSender(OTPSender):
    """Keeps every code it is asked to deliver."""

    def __init__(self):
        self.sent: list[tuple[str, str, str]] = []
        self.succeed = True

    async def send_code(self, email: str, code: str, purpose: str) -> bool:
        self.sent.append((email, code, purpose))
        return self.succeed

    def last_code(self, email: str) -> str:
        return [code for to, code, _ in self.sent if to == email][-1]


def make_settings(tmp_path, **overrides) -> Settings:
    values = {
        "database_url": f"sqlite+aiosqlite:///{tmp_path / 'test.db'}",
        "create_tables": True,
        "openai_api_key": "test-openai-key",
        "chroma_api_key": "test-chroma-key",
        "environment": "development",
        "otp_delivery": "log",
        "otp_expire_minutes": 5,
    }
    values.update(overrides)
    return Settings(_env_file=None, **values)


@pytest.fixture
def settings(tmp_path):
    return make_settings(tmp_path)


@pytest.fixture
def documents():
    return [
        RetrievedDocument(text="Học phí học kỳ 1 là 12 triệu đồng."),
        RetrievedDocument(text="Hạn nộp học phí là ngày 15/9."),
    ]


@pytest.fixture
def retriever(documents):
    retriever = MagicMock()
    retriever.retrieve = AsyncMock(return_value=documents)
    return retriever


@pytest.fixture
def generator():
    generator = MagicMock()
    generator.provider_name = "fake"
    generator.generate = AsyncMock(return_value="Học phí là 12 triệu đồng.")
    return generator


@pytest.fixture
def otp_sender():
    return RecordingOTPSender()


@pytest.fixture
def services(settings, retriever, generator, otp_sender):
    return ServiceContext.from_settings(
        settings,
        otp_sender=otp_sender,
        rag_pipeline=RAGPipeline(retriever=retriever, generator=generator),
    )


@pytest.fixture
def client(settings, services):
    app = create_app(settings, services)
    with TestClient(app) as client:
        yield client


@pytest.fixture
def run_db(client, services):
    """Run `fn(session)` on the app's event loop and return its result."""

    def run(fn):
        async def runner():
            async with services.session_factory() as session:
                return await fn(session)

        return client.portal.call(runner)

    return run


@pytest.fixture
def register_user(client, otp_sender):
    """Create a verified account through the public OTP flow."""

    def register(email: str = "sv@example.edu.vn", password: str = "matkhau123"):
        response = client.post("/api/send-otp", json={"email": email, "type": "register"})
        assert response.status_code == 200
        response = client.post(
            "/api/register",
            json={"email": email, "password": password, "otp": otp_sender.last_code(email)},
        )
        assert response.status_code == 200
        return email, password

    return register
