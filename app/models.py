"""
DATA MODELS MODULE
==================

This file defines the Pydantic models used for API requests, responses, and
the internal results passed between services. FastAPI uses these to validate
incoming JSON and to serialize responses.

MODELS:
  ChatMessage            - One message in the request (role + content).
  ChatCompletionRequest  - Body of POST /v1/chat/completions.
  ChatCompletionResponse - Non-streaming reply (one Choice + Usage).
  ChatCompletionChunk    - One streamed frame (one ChunkChoice with a delta).
  ModelCard / ModelList  - Body of GET /v1/models.
  ServiceOutcome         - Success text or failure reason from search / Ollama.
  RoutedReply            - What the router service hands back to the API layer.
"""

from enum import Enum
from pydantic import BaseModel, ConfigDict, Field
from typing import Any, Dict, List, Literal, Optional, Union

# ==============================================================================
# ROUTES
# ==============================================================================

class Route(str, Enum):
    """Which model path a prompt follows. Search always ends on the back model."""
    FRONT = "front"
    BACK = "back"
    SEARCH = "search"


# ==============================================================================
# REQUEST MODELS
# ==============================================================================

class ChatMessage(BaseModel):
    """
    A single chat message. Frozen: nothing in the pipeline edits a received message.

    content may be a plain string or a list of OpenAI content parts
    (e.g. [{"type": "text", "text": "..."}, {"type": "image_url", ...}]);
    only the text parts are used for routing.
    """
    model_config = ConfigDict(frozen=True)

    role: Literal["system", "user", "assistant"]
    content: Union[str, List[Dict[str, Any]], None] = ""

    @property
    def text(self) -> str:
        if self.content is None:
            return ""
        if isinstance(self.content, str):
            return self.content
        parts = [
            str(part.get("text") or "")
            for part in self.content
            if part.get("type") == "text"
        ]
        return "\n".join(p for p in parts if p)


class ChatCompletionRequest(BaseModel):
    """
    Request body for POST /v1/chat/completions.

    Only messages and stream are used. model, temperature and any other OpenAI
    fields are accepted and ignored: the router picks the real model itself.
    """
    messages: List[ChatMessage] = Field(default_factory=list)
    stream: bool = False
    model: Optional[str] = None

    def latest_user_message(self) -> Optional[ChatMessage]:
        """Scan from the end; the most recent user message is the one that gets routed."""
        for message in reversed(self.messages):
            if message.role == "user":
                return message
        return None

    def latest_system_message(self) -> Optional[ChatMessage]:
        for message in reversed(self.messages):
            if message.role == "system":
                return message
        return None


# ==============================================================================
# RESPONSE MODELS
# ==============================================================================

class AssistantMessage(BaseModel):
    role: Literal["assistant"] = "assistant"
    content: str


class Choice(BaseModel):
    index: int = 0
    message: AssistantMessage
    finish_reason: str = "stop"


class Usage(BaseModel):
    """Character counts, not tokenizer counts. Clients only get an approximation."""
    prompt_tokens: int
    completion_tokens: int
    total_tokens: int


class ChatCompletionResponse(BaseModel):
    id: str
    object: Literal["chat.completion"] = "chat.completion"
    created: int
    model: str
    choices: List[Choice]
    usage: Usage


class Delta(BaseModel):
    role: Optional[Literal["assistant"]] = None
    content: Optional[str] = None


class ChunkChoice(BaseModel):
    index: int = 0
    delta: Delta
    finish_reason: Optional[str] = None


class ChatCompletionChunk(BaseModel):
    id: str
    object: Literal["chat.completion.chunk"] = "chat.completion.chunk"
    created: int
    model: str
    choices: List[ChunkChoice]


class ModelCard(BaseModel):
    id: str
    object: Literal["model"] = "model"
    created: int
    owned_by: str


class ModelList(BaseModel):
    object: Literal["list"] = "list"
    data: List[ModelCard]


class HealthResponse(BaseModel):
    status: str
    service: str


# ==============================================================================
# INTERNAL PIPELINE MODELS
# ==============================================================================

class ServiceOutcome(BaseModel):
    """
    Result of a search or generation call.

    ok=True: text is the real output.
    ok=False: text is the human-readable sentinel to use in its place and
    error holds the underlying reason (for logs).
    """
    ok: bool
    text: str
    error: Optional[str] = None

    @classmethod
    def success(cls, text: str) -> "ServiceOutcome":
        return cls(ok=True, text=text)

    @classmethod
    def failure(cls, text: str, error: Optional[str] = None) -> "ServiceOutcome":
        return cls(ok=False, text=text, error=error or text)


class RoutedReply(BaseModel):
    """
    Internal result of one routed request.

    - route / model: where the prompt went.
    - prompt: the original user prompt (before any search augmentation).
    - text: assistant text after anti-echo.
    - degraded: True if search or generation failed and a sentinel was used.
    """
    route: Route
    model: str
    prompt: str
    text: str
    degraded: bool = False
