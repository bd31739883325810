"""
RUN SCRIPT - Start the router server
====================================

PURPOSE:
  Single entry point to start the router. Open WebUI (or any OpenAI client)
  is then pointed at http://<host>:<ROUTER_PORT>/v1.

WHAT IT DOES:
  - Imports the FastAPI app from app.main.
  - Runs it with uvicorn on ROUTER_HOST:ROUTER_PORT (default 0.0.0.0:1338).
  - ROUTER_RELOAD=1 restarts the server when Python files change (development only).

USAGE:
  python run.py

  Health check: http://localhost:1338/health
  API docs:     http://localhost:1338/docs

NOTE:
  Settings come from the environment or .env: FRONT_MODEL, BACK_MODEL,
  OLLAMA_BASE_URL, and optionally TAVILY_API_KEY for web search.
"""

import uvicorn

from config import LOG_LEVEL, ROUTER_HOST, ROUTER_PORT, ROUTER_RELOAD

# ------------------------------------------------------------------------------
# ENTRY POINT
# ------------------------------------------------------------------------------
if __name__ == "__main__":
    uvicorn.run(
        "app.main:app",
        host=ROUTER_HOST,
        port=ROUTER_PORT,
        reload=ROUTER_RELOAD,
        log_level=LOG_LEVEL.lower()
    )
