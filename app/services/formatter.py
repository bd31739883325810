"""
RESPONSE FORMATTER MODULE
=========================

Wraps routed text in OpenAI chat-completion shapes.

  build_completion() - one JSON object with a single choice, finish_reason "stop".
  stream_frames()    - the whole text as a single SSE delta frame, then "data: [DONE]".

Streaming is framing only: the Ollama call is not streamed, so the full answer
exists before the first frame is sent.

Usage counts are character lengths of the prompt and the answer. They are an
approximation for clients that insist on a usage block, not tokenizer output.
"""

import time
import uuid
from typing import Iterator

from app.models import (
    AssistantMessage,
    ChatCompletionChunk,
    ChatCompletionResponse,
    Choice,
    ChunkChoice,
    Delta,
    Usage,
)

STREAM_DONE = "data: [DONE]\n\n"


def _completion_id() -> str:
    return f"chatcmpl-{uuid.uuid4().hex}"


def char_usage(prompt: str, completion: str) -> Usage:
    prompt_tokens = len(prompt)
    completion_tokens = len(completion)
    return Usage(
        prompt_tokens=prompt_tokens,
        completion_tokens=completion_tokens,
        total_tokens=prompt_tokens + completion_tokens,
    )


def build_completion(text: str, prompt: str, model_name: str) -> ChatCompletionResponse:
    return ChatCompletionResponse(
        id=_completion_id(),
        created=int(time.time()),
        model=model_name,
        choices=[Choice(message=AssistantMessage(content=text))],
        usage=char_usage(prompt, text),
    )


def build_chunk(text: str, model_name: str) -> ChatCompletionChunk:
    return ChatCompletionChunk(
        id=_completion_id(),
        created=int(time.time()),
        model=model_name,
        choices=[ChunkChoice(delta=Delta(role="assistant", content=text))],
    )


def sse_frame(chunk: ChatCompletionChunk) -> str:
    return f"data: {chunk.model_dump_json(exclude_none=True)}\n\n"


def stream_frames(text: str, model_name: str) -> Iterator[str]:
    """Yield exactly two frames: the full text as one delta, then the [DONE] sentinel."""
    yield sse_frame(build_chunk(text, model_name))
    yield STREAM_DONE
