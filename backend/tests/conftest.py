"""
Tessa Backend — Test Configuration (conftest.py)
==================================================

Fixture Hierarchy (all function-scoped):
    ├── db_engine:        in-memory aiosqlite engine with every table created
    ├── session_factory:  async_sessionmaker bound to db_engine
    ├── db_session:       one AsyncSession for service-level tests
    ├── user / other_user: persisted FREE users
    ├── audio_dir:        private staging directory for audio temp files
    ├── fake_gemini:      hand-written GeminiClient stand-in (no network)
    ├── fake_transcriber / fake_generator: pipeline stage fakes
    └── test_client:      httpx AsyncClient wired to the app with the test
                          database and a fake-backed audio agent
"""

import os
import tempfile

# Settings are read at import time: configure the environment first
os.environ["DATABASE_URL"] = "sqlite+aiosqlite:///:memory:"
os.environ["GEMINI_API_KEY"] = "test-key-not-real"
os.environ["JWT_SECRET"] = "test-jwt-secret"
os.environ["RETRY_MAX_ATTEMPTS"] = "1"
os.environ["RATE_LIMIT_REQUESTS"] = "10000"
os.environ["AUDIO_TEMP_DIR"] = tempfile.mkdtemp(prefix="tessa_test_audio_")
os.environ["LOG_LEVEL"] = "WARNING"

import asyncio
from pathlib import Path
from typing import List, Optional

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient
from sqlalchemy import event
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.pool import StaticPool

import tessa.models  # noqa: F401
from tessa.database import Base, get_db_session
from tessa.exceptions import TranscriptionFailedError
from tessa.models.user import PlanType, User
from tessa.schemas.audio import AudioAnalysisResult
from tessa.security import hash_password
from tessa.services.audio_agent import AudioAnalysisAgent, get_audio_agent
from tessa.services.llm_base import AnalysisGenerator, TranscriptionService

TEST_PASSWORD = "Secret123"


# ══════════════════════════════════════════════════════════════════════════
# Database
# ══════════════════════════════════════════════════════════════════════════

@pytest_asyncio.fixture
async def db_engine():
    engine = create_async_engine(
        "sqlite+aiosqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )

    # SQLite only enforces ON DELETE CASCADE with this pragma
    @event.listens_for(engine.sync_engine, "connect")
    def _enable_foreign_keys(dbapi_connection, connection_record):
        cursor = dbapi_connection.cursor()
        cursor.execute("PRAGMA foreign_keys=ON")
        cursor.close()

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield engine
    await engine.dispose()


@pytest.fixture
def session_factory(db_engine):
    return async_sessionmaker(db_engine, class_=AsyncSession, expire_on_commit=False)


@pytest_asyncio.fixture
async def db_session(session_factory):
    async with session_factory() as session:
        yield session


async def _create_user(session: AsyncSession, email: str, plan: PlanType = PlanType.FREE) -> User:
    user = User(email=email, password_hash=hash_password(TEST_PASSWORD), plan=plan)
    session.add(user)
    await session.flush()
    return user


@pytest_asyncio.fixture
async def user(db_session):
    return await _create_user(db_session, "alice@example.com")


@pytest_asyncio.fixture
async def other_user(db_session):
    return await _create_user(db_session, "bob@example.com")


# ══════════════════════════════════════════════════════════════════════════
# Audio pipeline fakes
# ══════════════════════════════════════════════════════════════════════════

@pytest.fixture
def audio_dir(tmp_path) -> Path:
    path = tmp_path / "audio"
    path.mkdir()
    return path


@pytest.fixture
def sample_audio_bytes() -> bytes:
    # Not playable audio; the fakes never decode it
    return b"\x00\x00\x00\x20ftypM4A \x00\x00\x00\x00" + b"\x01" * 64


class FakeUploadedFile:
    def __init__(self, name: str, path: str, mime_type: str, content: bytes):
        self.name = name
        self.path = path
        self.mime_type = mime_type
        self.content = content


class FakeGeminiClient:
    """
    Records every call; answers generate() from `responses` in order.

    When `echo_upload` is set, generate() returns the decoded bytes of the
    uploaded file it was given, which ties each transcript to its own upload.
    """

    def __init__(self, responses: Optional[List[str]] = None, echo_upload: bool = False):
        self.responses = list(responses or [])
        self.echo_upload = echo_upload
        self.upload_error: Optional[Exception] = None
        self.generate_error: Optional[Exception] = None
        self.uploads: List[FakeUploadedFile] = []
        self.deleted: List[str] = []
        self.generate_calls: List[dict] = []
        self.staged_existed_during_upload: List[bool] = []

    async def upload_file(self, path: str, mime_type: str) -> FakeUploadedFile:
        self.staged_existed_during_upload.append(Path(path).exists())
        if self.upload_error:
            raise self.upload_error
        content = Path(path).read_bytes()
        # Yield so concurrent transcriptions interleave
        await asyncio.sleep(0)
        handle = FakeUploadedFile(f"files/{len(self.uploads)}", path, mime_type, content)
        self.uploads.append(handle)
        return handle

    async def delete_file(self, handle) -> None:
        self.deleted.append(handle.name)

    async def generate(self, model_name, contents, *, system_instruction=None, generation_config=None) -> str:
        self.generate_calls.append(
            {
                "model_name": model_name,
                "contents": list(contents),
                "system_instruction": system_instruction,
                "generation_config": generation_config,
            }
        )
        await asyncio.sleep(0)
        if self.generate_error:
            raise self.generate_error
        if self.echo_upload:
            handle = next(c for c in contents if isinstance(c, FakeUploadedFile))
            return handle.content.decode("utf-8")
        return self.responses.pop(0) if self.responses else ""


@pytest.fixture
def fake_gemini() -> FakeGeminiClient:
    return FakeGeminiClient()


class FakeTranscriber(TranscriptionService):
    def __init__(self, transcript: str = "Hola, esta es una nota de voz.", error: Optional[Exception] = None):
        self.transcript = transcript
        self.error = error
        self.calls: List[tuple] = []

    async def transcribe(self, audio: bytes, filename: str) -> str:
        self.calls.append((audio, filename))
        if self.error:
            raise self.error
        return self.transcript


class FakeGenerator(AnalysisGenerator):
    def __init__(self, result: Optional[AudioAnalysisResult] = None, error: Optional[Exception] = None):
        self.result = result or AudioAnalysisResult(
            title="Nota de voz",
            keywords=["nota", "voz", "prueba", "audio", "resumen"],
            transcript="the model's own copy of the transcript",
            summary="Una nota breve. Sirve de prueba. Tiene tres frases.",
        )
        self.error = error
        self.calls: List[tuple] = []

    async def analyze(self, transcript: str, filename: str) -> AudioAnalysisResult:
        self.calls.append((transcript, filename))
        if self.error:
            raise self.error
        return self.result


@pytest.fixture
def fake_transcriber() -> FakeTranscriber:
    return FakeTranscriber()


@pytest.fixture
def fake_generator() -> FakeGenerator:
    return FakeGenerator()


@pytest.fixture
def failing_transcriber() -> FakeTranscriber:
    return FakeTranscriber(error=TranscriptionFailedError(cause="service unavailable"))


# ══════════════════════════════════════════════════════════════════════════
# API client
# ══════════════════════════════════════════════════════════════════════════

@pytest_asyncio.fixture
async def test_client(session_factory, fake_transcriber, fake_generator):
    """
    AsyncClient talking to the app in-process.

    Requests get their own session from the test engine, committed on
    success and rolled back on error, like get_db_session.
    """
    from tessa.main import app

    async def override_get_db_session():
        async with session_factory() as session:
            try:
                yield session
                await session.commit()
            except Exception:
                await session.rollback()
                raise

    agent = AudioAnalysisAgent(transcriber=fake_transcriber, generator=fake_generator)
    app.dependency_overrides[get_db_session] = override_get_db_session
    app.dependency_overrides[get_audio_agent] = lambda: agent

    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as client:
        yield client

    app.dependency_overrides.clear()


@pytest.fixture
def register_user(test_client):
    """Registers an account through the API; returns its Authorization headers."""

    async def _register(email: str, password: str = TEST_PASSWORD) -> dict:
        response = await test_client.post(
            "/api/auth/register", json={"email": email, "password": password}
        )
        assert response.status_code == 201, response.text
        return {"Authorization": f"Bearer {response.json()['token']}"}

    return _register
