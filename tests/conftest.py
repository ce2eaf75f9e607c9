import os
import shutil
from pathlib import Path

import pytest
from fastapi.testclient import TestClient

os.environ["DATABASE_URL"] = "sqlite:///./test.db"
os.environ["AUTO_CREATE_TABLES"] = "true"
os.environ["OPENAI_API_KEY"] = "test-key"
os.environ["MEDIA_DIR"] = "test-media"
os.environ["CELERY_TASK_ALWAYS_EAGER"] = "true"
os.environ["CHECKPOINT_RETRY_DELAY_SECONDS"] = "0"

import app.models  # noqa: F401,E402
from app.db.base import Base  # noqa: E402
from app.db.session import SessionLocal, engine  # noqa: E402
from app.main import create_app  # noqa: E402
from app.models.garment import Garment  # noqa: E402
from app.services.generation.gateway import GenerationError, GenerationResult, get_generation_gateway  # noqa: E402


class FakeGateway:
    """Records every call; fails for reference images listed in ``failures``."""

    def __init__(self) -> None:
        self.calls: list[tuple[str, list[str]]] = []
        self.failures: dict[str, str] = {}
        self.on_generate = None
        self.llm_calls: list[tuple[str, list[str]]] = []
        self.llm_reply: dict = {}
        self.llm_error: str | None = None

    def generate(self, prompt: str, reference_images: list[str]) -> GenerationResult:
        self.calls.append((prompt, list(reference_images)))
        if self.on_generate is not None:
            self.on_generate(prompt, reference_images)
        for url in reference_images:
            if url in self.failures:
                raise GenerationError(self.failures[url])
        return GenerationResult(url=f"https://cdn.example.com/generated/{len(self.calls)}.png")

    def invoke_llm(self, prompt: str, reference_images: list[str], response_schema):
        self.llm_calls.append((prompt, list(reference_images)))
        if self.llm_error is not None:
            raise GenerationError(self.llm_error)
        return response_schema.model_validate(self.llm_reply)

    @property
    def called_images(self) -> list[str]:
        return [images[0] for _, images in self.calls]


@pytest.fixture()
def gateway():
    return FakeGateway()


@pytest.fixture(autouse=True)
def mock_gateway(monkeypatch, gateway):
    monkeypatch.setattr("app.services.batch.runner.get_generation_gateway", lambda: gateway)


@pytest.fixture(autouse=True)
def reset_db():
    Base.metadata.drop_all(bind=engine)
    Base.metadata.create_all(bind=engine)
    yield
    Base.metadata.drop_all(bind=engine)
    engine.dispose()
    path = Path("test.db")
    if path.exists():
        path.unlink()
    shutil.rmtree("test-media", ignore_errors=True)


@pytest.fixture()
def db():
    session = SessionLocal()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture()
def make_garment(db):
    def _make(garment_id: str, name: str | None = None) -> Garment:
        garment = Garment(id=garment_id, name=name or garment_id, image_url=f"https://img.example.com/{garment_id}.jpg")
        db.add(garment)
        db.commit()
        return garment

    return _make


@pytest.fixture()
def client(gateway):
    app = create_app()
    app.dependency_overrides[get_generation_gateway] = lambda: gateway
    with TestClient(app) as test_client:
        yield test_client
