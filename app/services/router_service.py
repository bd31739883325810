"""
ROUTER SERVICE MODULE
=====================

Runs one chat request through the routing pipeline. The API layer (app.main)
validates the request and calls handle(); this module knows nothing about HTTP.

PIPELINE:
  1. classify the latest user prompt -> FRONT / BACK / SEARCH
  2. SEARCH only: web search, then prepend the results to the prompt
  3. generate on the front model (FRONT) or the back model (BACK, SEARCH)
  4. anti-echo: drop a verbatim repeat of the user prompt from the answer

Search and generation failures come back as ServiceOutcome failures. Their
sentinel text is used in place of real output and the reply is marked degraded;
nothing here raises for an upstream problem.
"""

import logging
from typing import Optional

from app.models import Route, RoutedReply, ServiceOutcome
from app.services.classifier import RequestClassifier
from app.services.ollama_service import OllamaService
from app.services.search_service import SearchService, build_search_prompt
from app.utils.text import strip_echo
from config import RouterSettings

logger = logging.getLogger("ROUTER")


class RouterService:
    """Classifier + search + Ollama, wired together from one RouterSettings."""

    def __init__(
        self,
        settings: RouterSettings,
        classifier: Optional[RequestClassifier] = None,
        search_service: Optional[SearchService] = None,
        ollama_service: Optional[OllamaService] = None,
    ):
        self.settings = settings
        self.classifier = classifier or RequestClassifier()
        self.search_service = search_service or SearchService(settings)
        self.ollama_service = ollama_service or OllamaService(settings)

    def model_for(self, route: Route) -> str:
        return self.settings.front_model if route == Route.FRONT else self.settings.back_model

    async def handle(self, prompt: str, system: Optional[str] = None) -> RoutedReply:
        """
        Route one prompt and return the post-processed answer.

        prompt must be non-empty; the API layer rejects blank prompts before this point.
        system falls back to the configured ROUTER_SYSTEM_PROMPT when not given.
        """
        route = self.classifier.classify(prompt)
        model = self.model_for(route)
        system = system or self.settings.system_prompt or None
        degraded = False

        upstream_prompt = prompt
        if route == Route.SEARCH:
            logger.info("SEARCHING... Performing web search")
            search = await self.search_service.search(prompt)
            degraded = not search.ok
            upstream_prompt = build_search_prompt(search.text, prompt)

        logger.info("Dispatching %s route to model %s", route.value.upper(), model)
        outcome: ServiceOutcome = await self.ollama_service.generate(model, upstream_prompt, system)
        if not outcome.ok:
            degraded = True

        text = strip_echo(outcome.text, prompt)
        return RoutedReply(route=route, model=model, prompt=prompt, text=text, degraded=degraded)
