from types import SimpleNamespace

import pytest
from fastapi.testclient import TestClient

from app import app
from planty import pipeline
from planty.settings import get_settings

ALL_LABELS_TEXT = """Name: Monstera
Scientific Name: Monstera deliciosa
Family: Araceae
Description: A climbing evergreen with large split leaves.
Native to: Mexico, Panama
Sunlight needs: Bright indirect light
Watering needs: Water when the top soil is dry
Soil type: Well-draining peat mix
"""


class FakeModels:
    def __init__(self, text=None, exc=None):
        self.text = text
        self.exc = exc
        self.calls = []

    async def generate_content(self, **kwargs):
        self.calls.append(kwargs)
        if self.exc is not None:
            raise self.exc
        return SimpleNamespace(text=self.text)


class FakeGemini:
    def __init__(self, text=None, exc=None):
        self.aio = SimpleNamespace(models=FakeModels(text=text, exc=exc))

    @property
    def calls(self):
        return self.aio.models.calls


@pytest.fixture(autouse=True)
def isolated_settings(monkeypatch, tmp_path):
    monkeypatch.setenv("PROMPTS_DIR", str(tmp_path / "prompts"))
    real_get_client = pipeline.get_client
    get_settings.cache_clear()
    real_get_client.cache_clear()
    yield
    get_settings.cache_clear()
    real_get_client.cache_clear()


@pytest.fixture
def fake_gemini(monkeypatch):
    def install(text=ALL_LABELS_TEXT, exc=None):
        fake = FakeGemini(text=text, exc=exc)
        monkeypatch.setattr(pipeline, "get_client", lambda: fake)
        return fake

    return install


@pytest.fixture
def client():
    with TestClient(app) as c:
        yield c
