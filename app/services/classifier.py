"""
REQUEST CLASSIFIER MODULE
=========================

Decides which route a prompt takes: front model, back model, or web search
followed by the back model.

HOW IT WORKS:
  PATTERN_GROUPS is an ordered table of (route, patterns). Each pattern is a
  regular expression searched (case-insensitive) inside the lowercased prompt.
  Groups are checked in table order and the first group with any match wins:

    1. SEARCH  - "latest", "news", "find", ...
    2. BACK    - "research", "analyze", "compare", ...
    3. FRONT   - "hello", "what is", "simple", ...

  No match at all means FRONT. Because SEARCH comes first, a prompt such as
  "find the latest research on X" is searched even though "research" is a
  BACK keyword.

The classifier is a pure function of the prompt text: no history, no randomness.
Empty prompts are rejected by the API layer before they get here.
"""

import logging
import re
from typing import Iterable, List, Optional, Sequence, Tuple

from app.models import Route

logger = logging.getLogger("ROUTER")

# ==============================================================================
# PATTERN TABLE
# ==============================================================================

SEARCH_PATTERNS = (
    r"latest", r"news", r"current", r"recent", r"today",
    r"search", r"find", r"look up", r"information about",
)

COMPLEX_PATTERNS = (
    r"research", r"analyze", r"compare", r"evaluate", r"critique",
    r"complex", r"detailed", r"comprehensive", r"thorough", r"deep",
)

EASY_PATTERNS = (
    r"hello", r"hi", r"how are you", r"what is", r"explain simply",
    r"basic", r"simple", r"easy", r"quick", r"fast",
)

# Order matters: first group with a hit wins.
PATTERN_GROUPS: Tuple[Tuple[Route, Sequence[str]], ...] = (
    (Route.SEARCH, SEARCH_PATTERNS),
    (Route.BACK, COMPLEX_PATTERNS),
    (Route.FRONT, EASY_PATTERNS),
)

DEFAULT_ROUTE = Route.FRONT


class RequestClassifier:
    """Matches prompts against an ordered (route, patterns) table."""

    def __init__(
        self,
        groups: Iterable[Tuple[Route, Sequence[str]]] = PATTERN_GROUPS,
        default: Route = DEFAULT_ROUTE,
    ):
        self.default = default
        self._groups: List[Tuple[Route, List[re.Pattern]]] = [
            (route, [re.compile(p, re.IGNORECASE) for p in patterns])
            for route, patterns in groups
        ]

    def match(self, prompt: str) -> Tuple[Route, Optional[str]]:
        """Return (route, winning pattern). The pattern is None when the default was used."""
        prompt_lower = prompt.lower()
        for route, patterns in self._groups:
            for pattern in patterns:
                if pattern.search(prompt_lower):
                    return route, pattern.pattern
        return self.default, None

    def classify(self, prompt: str) -> Route:
        route, pattern = self.match(prompt)
        if pattern is None:
            logger.info("Route %s (default, no pattern matched)", route.value.upper())
        else:
            logger.info("Route %s (pattern: %r)", route.value.upper(), pattern)
        return route


_default_classifier = RequestClassifier()


def match_route(prompt: str) -> Tuple[Route, Optional[str]]:
    return _default_classifier.match(prompt)


def classify(prompt: str) -> Route:
    """Classify a prompt with the default pattern table."""
    return _default_classifier.classify(prompt)
