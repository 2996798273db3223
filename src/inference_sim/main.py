import logging
from contextlib import asynccontextmanager
from typing import Optional

from dotenv import load_dotenv
from fastapi import FastAPI
from fastapi.responses import JSONResponse

from .config import get_settings
from .models import (
    ChatCompletionRequest,
    ErrorResponse,
    HealthResponse,
    TextCompletionRequest,
    echo_chat_completion,
    echo_text_completion,
)
from .simulator import FailureSelector, InjectionConfig, init_random

load_dotenv()

logger = logging.getLogger(__name__)

settings = get_settings()
selector = FailureSelector()


@asynccontextmanager
async def lifespan(_: FastAPI):
    init_random(settings.seed)
    logger.info(
        "Failure injection rate %d%% (types: %s)",
        settings.failure_injection_rate,
        ", ".join(settings.failure_types) or "all",
    )
    yield


app = FastAPI(
    title="inference-sim",
    description="Mock OpenAI-compatible inference endpoint with failure injection",
    version="0.1.0",
    lifespan=lifespan,
)


def _injection_config(request_model: Optional[str]) -> InjectionConfig:
    config = settings.injection_config()
    if not config.model_name and request_model:
        config = config.model_copy(update={"model_name": request_model})
    return config


def _maybe_fail(config: InjectionConfig) -> JSONResponse | None:
    """Return an error response if this request drew an injected failure."""
    if not selector.should_inject(config):
        return None
    failure = selector.select_failure(config)
    logger.debug("Injecting %s (%d)", failure.error_code, failure.status_code)
    return JSONResponse(
        status_code=failure.status_code,
        content=ErrorResponse.from_failure(failure).model_dump(),
    )


@app.get("/health", response_model=HealthResponse)
def health():
    return HealthResponse(status="ok")


@app.post("/v1/chat/completions")
def chat_completions(request: ChatCompletionRequest):
    config = _injection_config(request.model)
    failure = _maybe_fail(config)
    if failure is not None:
        return failure
    return echo_chat_completion(config.model_name, request.messages)


@app.post("/v1/completions")
def completions(request: TextCompletionRequest):
    config = _injection_config(request.model)
    failure = _maybe_fail(config)
    if failure is not None:
        return failure
    return echo_text_completion(config.model_name, request.prompt)
