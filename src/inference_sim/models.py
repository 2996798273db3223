"""API models for the mock inference endpoint."""

import time
import uuid
from typing import Any, Optional

from pydantic import BaseModel, Field

from .simulator.failures import FailureDescriptor


class CompletionError(BaseModel):
    """The `error` object of an OpenAI-style error response."""

    message: str
    type: str
    code: str
    param: Optional[str] = None


class ErrorResponse(BaseModel):
    error: CompletionError

    @classmethod
    def from_failure(cls, failure: FailureDescriptor) -> "ErrorResponse":
        return cls(
            error=CompletionError(
                message=failure.message,
                type=failure.error_type,
                code=failure.error_code,
                param=failure.param,
            )
        )


class ChatMessage(BaseModel):
    role: str
    content: Any = ""


class ChatCompletionRequest(BaseModel):
    """Subset of the chat completions request the simulator reads."""

    model: Optional[str] = None
    messages: list[ChatMessage] = Field(default_factory=list)


class TextCompletionRequest(BaseModel):
    model: Optional[str] = None
    prompt: Any = ""


def _completion_id(prefix: str) -> str:
    return f"{prefix}-{uuid.uuid4().hex[:24]}"


def echo_chat_completion(model: str, messages: list[ChatMessage]) -> dict[str, Any]:
    """Echo the last user message back as the assistant reply."""
    last_user = next((m for m in reversed(messages) if m.role == "user"), None)
    content = last_user.content if last_user is not None else ""
    if not isinstance(content, str):
        content = str(content)
    return {
        "id": _completion_id("chatcmpl"),
        "object": "chat.completion",
        "created": int(time.time()),
        "model": model,
        "choices": [
            {
                "index": 0,
                "message": {"role": "assistant", "content": content},
                "finish_reason": "stop",
            }
        ],
    }


def echo_text_completion(model: str, prompt: Any) -> dict[str, Any]:
    if isinstance(prompt, list):
        prompt = prompt[0] if prompt else ""
    return {
        "id": _completion_id("cmpl"),
        "object": "text_completion",
        "created": int(time.time()),
        "model": model,
        "choices": [{"index": 0, "text": str(prompt), "finish_reason": "stop"}],
    }


class HealthResponse(BaseModel):
    """Health check response."""

    status: str
    service: str = "inference-sim"
