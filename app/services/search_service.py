"""
SEARCH SERVICE MODULE
=====================

Runs a Tavily web search for search-routed prompts and turns the results into
a text block that is prepended to the prompt before it goes to the back model.

FLOW:
  1. search(query): call Tavily (basic depth, at most 3 results), format the
     results as "Source: <url>\\n<content>" blocks separated by a blank line.
  2. build_search_prompt(results, question): wrap the block and the user's
     question into the prompt sent to the back model.

Search never breaks a request. Every path returns a ServiceOutcome:
  - no TAVILY_API_KEY   -> failure, "Web search not available - no API key configured"
  - Tavily raised / bad payload -> failure, "Web search failed: <reason>"
  - zero results        -> success, "No search results found"
The back model is called with whatever text comes back.

No retries: one failed search gives one degraded answer. Results are never cached.
"""

import asyncio
import logging
from typing import Any, List, NamedTuple, Optional

from tavily import TavilyClient

from app.models import ServiceOutcome
from config import RouterSettings

logger = logging.getLogger("ROUTER")

SEARCH_UNAVAILABLE = "Web search not available - no API key configured"
NO_RESULTS = "No search results found"
SEARCH_FAILED = "Web search failed: {reason}"

SEARCH_PROMPT_TEMPLATE = "Based on the following information:\n\n{results}\n\nPlease answer: {question}"


class SearchHit(NamedTuple):
    url: str
    content: str


def build_search_prompt(results: str, question: str) -> str:
    return SEARCH_PROMPT_TEMPLATE.format(results=results, question=question)


def format_hits(hits: List[SearchHit]) -> str:
    return "\n\n".join(f"Source: {hit.url}\n{hit.content}" for hit in hits)


def _parse_hits(response: Any, limit: int) -> List[SearchHit]:
    """
    Pull (url, content) pairs out of a Tavily response, keeping provider order.
    Raises ValueError if the payload is not the expected shape.
    """
    if not isinstance(response, dict):
        raise ValueError(f"unexpected search response type {type(response).__name__}")
    results = response.get("results", [])
    if not isinstance(results, list):
        raise ValueError("search response 'results' is not a list")

    hits = []
    for result in results[:limit]:
        if not isinstance(result, dict):
            raise ValueError("search result entry is not an object")
        hits.append(SearchHit(
            url=str(result.get("url") or "N/A"),
            content=str(result.get("content") or "No content"),
        ))
    return hits


# ==============================================================================
# SEARCH SERVICE CLASS
# ==============================================================================

class SearchService:
    """
    Tavily-backed web search. If no API key is configured the client is never
    created and every search returns the "unavailable" sentinel.
    """

    def __init__(self, settings: RouterSettings, client: Optional[Any] = None):
        """client: optional object with a Tavily-compatible search(); used by tests."""
        self.max_results = settings.search_max_results
        self.timeout = settings.search_timeout
        if client is not None:
            self.tavily_client = client
        elif settings.tavily_api_key:
            self.tavily_client = TavilyClient(api_key=settings.tavily_api_key)
            logger.info("Tavily search client initialized successfully")
        else:
            self.tavily_client = None
            logger.warning("TAVILY_API_KEY not set. Web search will be unavailable.")

    @property
    def available(self) -> bool:
        return self.tavily_client is not None

    def _search_sync(self, query: str) -> Any:
        return self.tavily_client.search(
            query=query,
            search_depth="basic",
            max_results=self.max_results,
            timeout=self.timeout,
        )

    async def search(self, query: str) -> ServiceOutcome:
        """Search the web for query. Never raises; see the module docstring for outcomes."""
        if not self.tavily_client:
            logger.warning("Search requested but Tavily client not initialized.")
            return ServiceOutcome.failure(SEARCH_UNAVAILABLE)

        try:
            # TavilyClient is blocking; keep the event loop free for other requests.
            response = await asyncio.to_thread(self._search_sync, query)
            hits = _parse_hits(response, self.max_results)
        except Exception as e:
            logger.error("Web search failed: %s", e)
            return ServiceOutcome.failure(SEARCH_FAILED.format(reason=e), error=str(e))

        if not hits:
            logger.warning("No search results found for query: %s", query)
            return ServiceOutcome.success(NO_RESULTS)

        logger.info("Web search completed for query: %s (%d results)", query, len(hits))
        return ServiceOutcome.success(format_hits(hits))
