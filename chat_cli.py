"""
ROUTER CHAT CLIENT - Smoke test and interactive chat
====================================================

PURPOSE:
Command-line client for a running router. On start it checks /health and
/v1/models (the same probes the installer's health checks run), then lets you
chat through /v1/chat/completions.

The router keeps no conversation state, so this client keeps the message
history itself and sends the whole list on every request.

USAGE:
    python chat_cli.py [base_url]

    Default base_url is http://localhost:<ROUTER_PORT>. Start the server first: python run.py

COMMANDS:
    /health  - Call GET /health
    /models  - Call GET /v1/models
    /clear   - Forget the conversation so far
    /quit or /exit - Exit
"""

import sys

import requests

try:
    from config import ROUTER_PORT, GENERATE_TIMEOUT
except ImportError:
    ROUTER_PORT, GENERATE_TIMEOUT = 1338, 300.0


# -----------------------------------------------------------------------------
# CONFIGURATION
# -----------------------------------------------------------------------------
BASE_URL = f"http://localhost:{ROUTER_PORT}"
# Client-side history; the router itself is stateless.
HISTORY = []


# -----------------------------------------------------------------------------
# API CALLS
# -----------------------------------------------------------------------------

def check_health(base_url):
    """Return (ok, text) for GET /health."""
    try:
        response = requests.get(f"{base_url}/health", timeout=10)
        data = response.json()
        ok = response.status_code == 200 and data.get("status") == "healthy"
        return ok, f"{data.get('service', '?')}: {data.get('status', response.status_code)}"
    except requests.exceptions.ConnectionError:
        return False, "Cannot connect to router. Start it with: python run.py"
    except (requests.exceptions.RequestException, ValueError) as e:
        return False, f"Health check failed: {e}"


def list_models(base_url):
    """Return the advertised model ids, or [] if the call fails."""
    try:
        response = requests.get(f"{base_url}/v1/models", timeout=10)
        response.raise_for_status()
        return [m.get("id") for m in response.json().get("data", [])]
    except (requests.exceptions.RequestException, ValueError):
        return []


def send_message(base_url, model, message):
    """
    Append message to the history, send the full history, and append the reply.

    Returns the assistant's text, or an error message (the failed turn is
    removed from the history so it is not resent).
    """
    HISTORY.append({"role": "user", "content": message})
    try:
        response = requests.post(
            f"{base_url}/v1/chat/completions",
            json={"model": model, "messages": HISTORY, "stream": False},
            # Back-model answers can take minutes.
            timeout=GENERATE_TIMEOUT + 30,
        )
        if response.status_code == 200:
            content = response.json()["choices"][0]["message"]["content"]
            HISTORY.append({"role": "assistant", "content": content})
            return content

        HISTORY.pop()
        try:
            detail = response.json().get("detail")
            if isinstance(detail, str):
                return f"Error: {detail}"
        except ValueError:
            pass
        return f"Error: {response.status_code} - {response.text}"

    except requests.exceptions.ConnectionError:
        HISTORY.pop()
        return "Cannot connect to router. Start it with: python run.py"
    except requests.exceptions.Timeout:
        HISTORY.pop()
        return "Request timed out."
    except (requests.exceptions.RequestException, ValueError, KeyError, IndexError) as e:
        HISTORY.pop()
        return f"Error: {e}"


# -----------------------------------------------------------------------------
# MAIN LOOP
# -----------------------------------------------------------------------------

def main(base_url=BASE_URL):
    print("\n" + "=" * 60)
    print("Router-Escalate - chat client")
    print("=" * 60)

    ok, status = check_health(base_url)
    print(f"Health: {status}")
    if not ok:
        return 1

    models = list_models(base_url)
    model = models[0] if models else "router-escalate"
    print(f"Model:  {model}")
    print("Commands: /health /models /clear /quit")
    print("=" * 60 + "\n")

    while True:
        try:
            user_input = input("\nYou: ").strip()
        except (KeyboardInterrupt, EOFError):
            print("\nGoodbye!")
            return 0

        if not user_input:
            continue
        if user_input in ("/quit", "/exit"):
            print("\nGoodbye!")
            return 0
        if user_input == "/health":
            print(check_health(base_url)[1])
            continue
        if user_input == "/models":
            print(", ".join(list_models(base_url)) or "No models returned")
            continue
        if user_input == "/clear":
            HISTORY.clear()
            print("Conversation cleared.")
            continue
        if user_input.startswith("/"):
            print(f"Unknown command: {user_input}")
            continue

        print("Router: ", end="", flush=True)
        print(send_message(base_url, model, user_input))


if __name__ == "__main__":
    sys.exit(main(sys.argv[1] if len(sys.argv) > 1 else BASE_URL))
