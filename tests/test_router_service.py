import asyncio

from app.models import Route
from app.services.router_service import RouterService
from app.services.search_service import SEARCH_UNAVAILABLE, SearchService
from config import RouterSettings

from tests.conftest import EchoOllama, FakeOllama, FakeTavily


def _router(settings, ollama, tavily=None):
    return RouterService(settings, search_service=SearchService(settings, client=tavily), ollama_service=ollama)


def test_front_route_uses_front_model(settings):
    ollama = FakeOllama("A fun fact.")
    reply = asyncio.run(_router(settings, ollama).handle("purple elephant"))

    assert reply.route == Route.FRONT
    assert reply.model == "front:test"
    assert reply.text == "A fun fact."
    assert not reply.degraded
    assert ollama.calls == [("front:test", "purple elephant", None)]


def test_back_route_uses_back_model(settings):
    ollama = FakeOllama("Here is the analysis.")
    reply = asyncio.run(_router(settings, ollama).handle("please analyze this dataset"))

    assert reply.route == Route.BACK
    assert ollama.calls[0][0] == "back:test"


def test_search_route_augments_prompt_for_back_model(settings):
    tavily = FakeTavily(payload={"results": [{"url": "https://news.example", "content": "Big story."}]})
    ollama = FakeOllama("Summary of the news.")
    reply = asyncio.run(_router(settings, ollama, tavily).handle("latest news"))

    model, prompt, _ = ollama.calls[0]
    assert reply.route == Route.SEARCH
    assert model == "back:test"
    assert prompt == (
        "Based on the following information:\n\n"
        "Source: https://news.example\nBig story.\n\n"
        "Please answer: latest news"
    )
    assert not reply.degraded


def test_search_unavailable_still_reaches_back_model(settings):
    ollama = EchoOllama()
    reply = asyncio.run(_router(settings, ollama).handle("what happened today"))

    assert reply.route == Route.SEARCH
    assert reply.degraded
    assert ollama.calls[0][0] == "back:test"
    assert SEARCH_UNAVAILABLE in ollama.calls[0][1]
    assert SEARCH_UNAVAILABLE in reply.text


def test_generation_failure_is_degraded_text(settings):
    ollama = FakeOllama("connection refused", ok=False)
    reply = asyncio.run(_router(settings, ollama).handle("hello"))

    assert reply.degraded
    assert reply.text == "Error calling Ollama: connection refused"


def test_anti_echo_applied_to_model_output(settings):
    ollama = FakeOllama("Hello, how can I help?")
    reply = asyncio.run(_router(settings, ollama).handle("Hello"))
    assert reply.text == ", how can I help?"


def test_output_without_echo_is_unchanged(settings):
    ollama = FakeOllama("  Nice to meet you.  ")
    reply = asyncio.run(_router(settings, ollama).handle("purple elephant"))
    assert reply.text == "  Nice to meet you.  "


def test_configured_system_prompt_used_as_fallback():
    s = RouterSettings(system_prompt="You are terse.")
    ollama = FakeOllama()
    router = _router(s, ollama)

    asyncio.run(router.handle("purple elephant"))
    asyncio.run(router.handle("purple elephant", system="Answer in French."))

    assert ollama.calls[0][2] == "You are terse."
    assert ollama.calls[1][2] == "Answer in French."
