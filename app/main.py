"""
ROUTER MAIN API
===============

This module defines the FastAPI application and all HTTP endpoints. The router
speaks the OpenAI chat API so any OpenAI-compatible client (e.g. Open WebUI)
can use it. Clients address one virtual model; the router decides per request
whether the front model, the back model, or web search + back model answers.

ENDPOINTS:
  GET  /                     - Returns service name and list of endpoints.
  GET  /health               - Always {"status": "healthy"} while the process is up.
                               No upstream checks.
  GET  /v1/models            - Exactly one model: the router's virtual model id.
  POST /v1/chat/completions  - Route the latest user message and answer, either as
                               one JSON object or as an SSE stream (stream=true).

ERRORS:
  400 - no messages, no user message, or a blank user message.
  422 - body does not match the schema (FastAPI validation).
  500 - anything unexpected; detail carries the exception message.
  Upstream failures (Ollama down, search failing) are NOT errors here: the reply
  is a normal 200 whose text describes the failure.

STARTUP:
  The lifespan function builds RouterSettings (unless one was passed to
  create_app) and the RouterService, and stores both on app.state.
"""

import asyncio
import logging
from contextlib import asynccontextmanager
from typing import Any, Awaitable, Optional

import uvicorn
from fastapi import FastAPI, HTTPException, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import Response, StreamingResponse

from app.models import ChatCompletionRequest, HealthResponse, ModelCard, ModelList
from app.services.formatter import build_completion, stream_frames
from app.services.router_service import RouterService
from config import (
    LOG_LEVEL,
    ROUTER_HOST,
    ROUTER_PORT,
    ROUTER_RELOAD,
    SERVICE_NAME,
    RouterSettings,
    load_settings,
)


# -----------------------------------------------------------------------------
# LOGGING
# -----------------------------------------------------------------------------
logging.basicConfig(
    level=getattr(logging, LOG_LEVEL, logging.INFO),
    format='%(asctime)s | %(levelname)-8s | %(name)-20s | %(message)s',
    datefmt='%Y-%m-%d %H:%M:%S'
)
logger = logging.getLogger("ROUTER")

# Fixed creation time advertised for the virtual model.
MODEL_CREATED = 1677610602
MODEL_OWNER = "router"

# How often a pending request checks whether its client went away.
DISCONNECT_POLL_SECONDS = 0.5

# Non-standard status (nginx convention) logged when the client hangs up mid-request.
CLIENT_CLOSED_REQUEST = 499


class ClientDisconnected(Exception):
    """The caller closed the connection before the upstream call finished."""


async def _wait_for_disconnect(request: Request) -> None:
    while not await request.is_disconnected():
        await asyncio.sleep(DISCONNECT_POLL_SECONDS)


async def run_unless_disconnected(request: Request, work: Awaitable[Any]) -> Any:
    """
    Await work, but cancel it if the client disconnects first.
    Raises ClientDisconnected in that case.
    """
    task = asyncio.ensure_future(work)
    watcher = asyncio.ensure_future(_wait_for_disconnect(request))
    try:
        done, _ = await asyncio.wait({task, watcher}, return_when=asyncio.FIRST_COMPLETED)
        if task in done:
            return task.result()
        if watcher.exception() is not None:
            # Could not tell whether the client is still there; finish the work.
            return await task
        raise ClientDisconnected()
    finally:
        watcher.cancel()
        if not task.done():
            task.cancel()


def _log_service_status(settings: RouterSettings, router_service: RouterService) -> None:
    logger.info("=" * 60)
    logger.info("Service Status:")
    logger.info("    - Front model:  %s", settings.front_model)
    logger.info("    - Back model:   %s", settings.back_model)
    logger.info("    - Vision model: %s", settings.vision_model or "Not configured")
    logger.info("    - Inference:    %s", settings.ollama_base_url)
    logger.info("    - Web search:   %s", "Ready" if router_service.search_service.available else "Disabled (no TAVILY_API_KEY)")
    logger.info("    - Advertised:   %s", settings.router_model_id)
    logger.info("=" * 60)


# -------------------------------------------------------------------------
# APP FACTORY
# -------------------------------------------------------------------------

def create_app(
    settings: Optional[RouterSettings] = None,
    router_service: Optional[RouterService] = None,
) -> FastAPI:
    """
    Build the FastAPI app. Both arguments are optional; when omitted they are
    built at startup from the environment (config.load_settings()).
    """

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        logger.info("Router-Escalate - Starting Up...")
        try:
            app.state.settings = settings or (router_service.settings if router_service else load_settings())
            app.state.router_service = router_service or RouterService(app.state.settings)
        except Exception as e:
            logger.error(f"Fatal error during startup: {e}", exc_info=True)
            raise
        _log_service_status(app.state.settings, app.state.router_service)
        logger.info("Router-Escalate is online and ready!")

        yield

        logger.info("Shutting down Router-Escalate.")

    app = FastAPI(
        title="Router-Escalate API",
        description="Keyword-based routing between a fast and a heavy local model, with optional web search",
        version="1.0.0",
        lifespan=lifespan,
    )

    # Web UIs on other ports call this API directly.
    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    # =========================================================================
    # API ENDPOINTS
    # =========================================================================

    @app.get("/")
    async def root():
        """Return the service name and a short description of each endpoint (for discovery)."""
        return {
            "message": "Router-Escalate API",
            "endpoints": {
                "/v1/models": "The router's single virtual model",
                "/v1/chat/completions": "OpenAI-compatible chat with automatic model routing",
                "/health": "Liveness check"
            }
        }

    @app.get("/health", response_model=HealthResponse)
    async def health():
        """Liveness only. Never calls Ollama or Tavily, so it cannot fail on an upstream outage."""
        return HealthResponse(status="healthy", service=SERVICE_NAME)

    @app.get("/v1/models", response_model=ModelList)
    async def list_models(request: Request):
        """Advertise exactly one model: the router itself. Front/back selection stays hidden."""
        return ModelList(data=[
            ModelCard(
                id=request.app.state.settings.router_model_id,
                created=MODEL_CREATED,
                owned_by=MODEL_OWNER,
            )
        ])

    @app.post("/v1/chat/completions")
    async def chat_completions(body: ChatCompletionRequest, request: Request):
        """
        Route the most recent user message and return the answer.

        HOW IT WORKS:
        1. Validate: at least one message, at least one user message, non-blank prompt.
        2. RouterService classifies the prompt and calls the chosen model
           (after a web search for search-routed prompts).
        3. The answer is returned as a chat.completion object, or as two SSE
           frames (full delta, then [DONE]) when stream=true.

        REQUEST BODY:
        {
            "messages": [{"role": "user", "content": "What is the latest AI news?"}],
            "stream": false
        }
        """
        if not body.messages:
            raise HTTPException(status_code=400, detail="No messages provided")

        user_message = body.latest_user_message()
        if user_message is None:
            raise HTTPException(status_code=400, detail="No user message found")

        prompt = user_message.text
        if not prompt.strip():
            raise HTTPException(status_code=400, detail="User message is empty")

        system_message = body.latest_system_message()
        system = system_message.text if system_message else None

        router_service: RouterService = request.app.state.router_service
        model_name = request.app.state.settings.router_model_id

        try:
            reply = await run_unless_disconnected(request, router_service.handle(prompt, system))
        except ClientDisconnected:
            logger.warning("Client disconnected before the answer was ready; upstream call cancelled")
            return Response(status_code=CLIENT_CLOSED_REQUEST)
        except Exception as e:
            logger.error(f"Error in chat completions: {e}", exc_info=True)
            raise HTTPException(status_code=500, detail=str(e))

        if reply.degraded:
            logger.warning("Answering with degraded output (route=%s, model=%s)", reply.route.value, reply.model)

        if body.stream:
            return StreamingResponse(stream_frames(reply.text, model_name), media_type="text/event-stream")
        return build_completion(reply.text, prompt, model_name)

    return app


# -------------------------------------------------------------------------
# FASTAPI APP
# -------------------------------------------------------------------------
# Settings are read from the environment at startup (lifespan), not at import.
app = create_app()


# -------------------------------------------------------------------------
# STANDALONE RUN (python -m app.main)
# -------------------------------------------------------------------------
def run():
    """Start the uvicorn server (same as run.py); used if someone does python -m app.main"""
    uvicorn.run(
        "app.main:app",
        host=ROUTER_HOST,
        port=ROUTER_PORT,
        reload=ROUTER_RELOAD,
        log_level=LOG_LEVEL.lower()
    )

if __name__ == "__main__":
    run()
