"""
ROUTER APPLICATION PACKAGE
==========================

Main Python package for the Router-Escalate service:

  from app.main import app, create_app
  from app.models import ChatCompletionRequest, Route
  from app.services.router_service import RouterService

FILE STRUCTURE:
  app/
    __init__.py   - This file; marks 'app' as a package.
    main.py       - FastAPI app factory and the HTTP endpoints (/v1/models,
                    /v1/chat/completions, /health).
    models.py     - Pydantic models for the OpenAI-shaped API and internal results.
    services/     - Classifier, Tavily search, Ollama client, formatter, router pipeline.
    utils/        - Text helpers (anti-echo).
"""
