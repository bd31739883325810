# tests/conftest.py
from __future__ import annotations

from typing import Any, Dict, List, Optional, Tuple

import pytest
from fastapi.testclient import TestClient

from app.main import create_app
from app.models import ServiceOutcome
from app.services.router_service import RouterService
from app.services.search_service import SearchService
from config import RouterSettings


class FakeOllama:
    """Stands in for OllamaService: records calls and answers with a fixed text."""

    def __init__(self, reply: str = "Sure, here you go.", ok: bool = True):
        self.reply = reply
        self.ok = ok
        self.calls: List[Tuple[str, str, Optional[str]]] = []

    async def generate(self, model: str, prompt: str, system: Optional[str] = None) -> ServiceOutcome:
        self.calls.append((model, prompt, system))
        if self.ok:
            return ServiceOutcome.success(self.reply)
        return ServiceOutcome.failure(f"Error calling Ollama: {self.reply}")


class EchoOllama(FakeOllama):
    """Answers with the prompt it received, so tests can see what reached the model."""

    async def generate(self, model: str, prompt: str, system: Optional[str] = None) -> ServiceOutcome:
        self.calls.append((model, prompt, system))
        return ServiceOutcome.success(f"[{model}] {prompt}")


class FakeTavily:
    """Tavily-compatible client: returns a canned payload or raises."""

    def __init__(self, payload: Any = None, error: Optional[Exception] = None):
        self.payload = payload if payload is not None else {"results": []}
        self.error = error
        self.calls: List[Dict[str, Any]] = []

    def search(self, **kwargs):
        self.calls.append(kwargs)
        if self.error:
            raise self.error
        return self.payload


@pytest.fixture
def settings() -> RouterSettings:
    return RouterSettings(
        front_model="front:test",
        back_model="back:test",
        ollama_base_url="http://ollama.test",
        tavily_api_key="",
        router_model_id="router-escalate",
    )


@pytest.fixture
def fake_ollama() -> FakeOllama:
    return FakeOllama()


@pytest.fixture
def make_client(settings):
    """Build a TestClient around a RouterService wired with the given fakes."""
    clients = []

    def _make(ollama=None, tavily=None, app_settings: Optional[RouterSettings] = None) -> TestClient:
        s = app_settings or settings
        service = RouterService(
            s,
            search_service=SearchService(s, client=tavily),
            ollama_service=ollama or FakeOllama(),
        )
        client = TestClient(create_app(s, service))
        client.__enter__()
        clients.append(client)
        return client

    yield _make

    for client in clients:
        client.__exit__(None, None, None)
