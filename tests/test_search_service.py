import asyncio

from app.services.search_service import (
    NO_RESULTS,
    SEARCH_UNAVAILABLE,
    SearchService,
    build_search_prompt,
)
from config import RouterSettings

from tests.conftest import FakeTavily


def _run(service, query="latest news"):
    return asyncio.run(service.search(query))


def test_no_api_key_returns_unavailable_sentinel(settings):
    service = SearchService(settings)
    outcome = _run(service)
    assert not service.available
    assert not outcome.ok
    assert outcome.text == SEARCH_UNAVAILABLE


def test_results_formatted_in_provider_order(settings):
    tavily = FakeTavily(payload={"results": [
        {"url": "https://a.example", "content": "first"},
        {"url": "https://b.example", "content": "second"},
    ]})
    outcome = _run(SearchService(settings, client=tavily))
    assert outcome.ok
    assert outcome.text == "Source: https://a.example\nfirst\n\nSource: https://b.example\nsecond"


def test_at_most_three_results_used(settings):
    results = [{"url": f"https://{i}.example", "content": str(i)} for i in range(5)]
    outcome = _run(SearchService(settings, client=FakeTavily(payload={"results": results})))
    assert outcome.text.count("Source:") == 3
    assert "https://3.example" not in outcome.text


def test_search_call_parameters(settings):
    tavily = FakeTavily(payload={"results": [{"url": "u", "content": "c"}]})
    _run(SearchService(settings, client=tavily), "today in history")
    assert tavily.calls == [{
        "query": "today in history",
        "search_depth": "basic",
        "max_results": 3,
        "timeout": settings.search_timeout,
    }]


def test_zero_results_sentinel(settings):
    outcome = _run(SearchService(settings, client=FakeTavily(payload={"results": []})))
    assert outcome.ok
    assert outcome.text == NO_RESULTS


def test_provider_error_is_absorbed(settings):
    tavily = FakeTavily(error=RuntimeError("quota exceeded"))
    outcome = _run(SearchService(settings, client=tavily))
    assert not outcome.ok
    assert outcome.text == "Web search failed: quota exceeded"
    assert outcome.error == "quota exceeded"


def test_malformed_payload_is_absorbed(settings):
    outcome = _run(SearchService(settings, client=FakeTavily(payload={"results": "nope"})))
    assert not outcome.ok
    assert outcome.text.startswith("Web search failed:")


def test_missing_fields_get_placeholders(settings):
    outcome = _run(SearchService(settings, client=FakeTavily(payload={"results": [{}]})))
    assert outcome.text == "Source: N/A\nNo content"


def test_max_results_setting_respected():
    s = RouterSettings(search_max_results=1)
    results = [{"url": "a", "content": "1"}, {"url": "b", "content": "2"}]
    tavily = FakeTavily(payload={"results": results})
    outcome = _run(SearchService(s, client=tavily))
    assert outcome.text == "Source: a\n1"
    assert tavily.calls[0]["max_results"] == 1


def test_build_search_prompt():
    prompt = build_search_prompt("Source: u\nc", "what is new?")
    assert prompt == "Based on the following information:\n\nSource: u\nc\n\nPlease answer: what is new?"
