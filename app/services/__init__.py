"""
SERVICES PACKAGE
=================

Business logic lives here. The API layer (app.main) calls these services;
they don't handle HTTP.

MODULES:
    classifier      - Keyword/regex routing table: SEARCH, then BACK, then FRONT.
    search_service  - Tavily web search for search-routed prompts.
    ollama_service  - Non-streaming POST /api/generate to the inference server.
    formatter       - OpenAI chat.completion objects and SSE frames.
    router_service  - The pipeline: classify, search, generate, anti-echo.
"""
