"""Failure injection: the error catalog and the logic that picks from it."""

from __future__ import annotations

import logging
import random
from enum import Enum
from types import MappingProxyType
from typing import Mapping, Optional, Protocol

from pydantic import BaseModel, ConfigDict

from .randomness import get_random

logger = logging.getLogger(__name__)


class FailureKind(str, Enum):
    """Every simulated API error the endpoint knows how to produce."""

    RATE_LIMIT = "rate_limit"
    INVALID_API_KEY = "invalid_api_key"
    CONTEXT_LENGTH = "context_length"
    SERVER_ERROR = "server_error"
    INVALID_REQUEST = "invalid_request"
    MODEL_NOT_FOUND = "model_not_found"


class UnknownFailureKindError(ValueError):
    """Raised when a name does not match any FailureKind."""

    def __init__(self, name: str):
        self.name = name
        super().__init__(
            f"unknown failure type '{name}', expected one of: "
            + ", ".join(kind.value for kind in FailureKind)
        )


def parse_failure_kind(name: str | FailureKind) -> FailureKind:
    try:
        return FailureKind(name)
    except ValueError:
        raise UnknownFailureKindError(str(name)) from None


class FailureDescriptor(BaseModel):
    """One error response: status, type, code, message and optional param."""

    model_config = ConfigDict(frozen=True)

    status_code: int
    error_type: str
    error_code: str
    message: str
    param: Optional[str] = None


class InjectionConfig(BaseModel):
    """Immutable per-call snapshot of the injection settings."""

    model_config = ConfigDict(frozen=True)

    injection_rate: int = 0
    # Kept verbatim; unknown names are resolved at selection time
    allowed_kinds: tuple[str, ...] = ()
    model_name: str = ""


_RATE_LIMIT_MESSAGE = (
    "Rate limit reached for {model} in organization org-xxx on requests "
    "per min (RPM): Limit 3, Used 3, Requested 1."
)
_MODEL_NOT_FOUND_MESSAGE = "The model '{model}-nonexistent' does not exist"


class _FailureTemplate(BaseModel):
    model_config = ConfigDict(frozen=True)

    descriptor: FailureDescriptor
    # str.format template taking `model`; None means the message is fixed
    model_message: Optional[str] = None


_TEMPLATES: Mapping[FailureKind, _FailureTemplate] = MappingProxyType(
    {
        FailureKind.RATE_LIMIT: _FailureTemplate(
            descriptor=FailureDescriptor(
                status_code=429,
                error_type="rate_limit_exceeded",
                error_code="rate_limit_exceeded",
                message=_RATE_LIMIT_MESSAGE.format(model="model"),
            ),
            model_message=_RATE_LIMIT_MESSAGE,
        ),
        FailureKind.INVALID_API_KEY: _FailureTemplate(
            descriptor=FailureDescriptor(
                status_code=401,
                error_type="invalid_request_error",
                error_code="invalid_api_key",
                message="Incorrect API key provided",
            ),
        ),
        FailureKind.CONTEXT_LENGTH: _FailureTemplate(
            descriptor=FailureDescriptor(
                status_code=400,
                error_type="invalid_request_error",
                error_code="context_length_exceeded",
                message=(
                    "This model's maximum context length is 4096 tokens. "
                    "However, your messages resulted in 4500 tokens."
                ),
                param="messages",
            ),
        ),
        FailureKind.SERVER_ERROR: _FailureTemplate(
            descriptor=FailureDescriptor(
                status_code=503,
                error_type="server_error",
                error_code="server_error",
                message="The server is overloaded or not ready yet.",
            ),
        ),
        FailureKind.INVALID_REQUEST: _FailureTemplate(
            descriptor=FailureDescriptor(
                status_code=400,
                error_type="invalid_request_error",
                error_code="invalid_request_error",
                message="Invalid request: missing required parameter 'model'.",
                param="model",
            ),
        ),
        FailureKind.MODEL_NOT_FOUND: _FailureTemplate(
            descriptor=FailureDescriptor(
                status_code=404,
                error_type="invalid_request_error",
                error_code="model_not_found",
                message=_MODEL_NOT_FOUND_MESSAGE.format(model="gpt"),
                param="model",
            ),
            model_message=_MODEL_NOT_FOUND_MESSAGE,
        ),
    }
)


class FailureCatalog:
    """Read-only lookup from FailureKind to its descriptor template."""

    def __init__(self, templates: Mapping[FailureKind, _FailureTemplate] = _TEMPLATES):
        missing = set(FailureKind) - set(templates)
        if missing:
            raise ValueError(f"catalog is missing kinds: {sorted(k.value for k in missing)}")
        self._templates = templates

    def kinds(self) -> list[FailureKind]:
        return list(self._templates)

    def lookup(self, kind: str | FailureKind) -> FailureDescriptor:
        """Return the template descriptor. Raises UnknownFailureKindError."""
        return self._templates[parse_failure_kind(kind)].descriptor

    def render(self, kind: FailureKind, model_name: str = "") -> FailureDescriptor:
        """Build a fresh descriptor for one response, substituting the model name."""
        template = self._templates[kind]
        if template.model_message is not None and model_name:
            return template.descriptor.model_copy(
                update={"message": template.model_message.format(model=model_name)}
            )
        return template.descriptor.model_copy()


class RandomSource(Protocol):
    def randint(self, a: int, b: int) -> int: ...


class FailureSelector:
    """Decides whether to inject a failure and which one to return."""

    def __init__(
        self,
        catalog: FailureCatalog | None = None,
        rng: RandomSource | random.Random | None = None,
    ):
        self.catalog = catalog or FailureCatalog()
        self.rng = rng if rng is not None else get_random()

    def should_inject(self, config: InjectionConfig) -> bool:
        rate = config.injection_rate
        if rate <= 0:
            return False
        return self.rng.randint(1, 100) <= min(rate, 100)

    def select_failure(self, config: InjectionConfig) -> FailureDescriptor:
        candidates = list(config.allowed_kinds) or [kind.value for kind in self.catalog.kinds()]
        if not candidates:
            return self.catalog.render(FailureKind.SERVER_ERROR)

        picked = candidates[self.rng.randint(0, len(candidates) - 1)]
        try:
            kind = parse_failure_kind(picked)
        except UnknownFailureKindError:
            logger.warning("Unknown failure type %r configured, falling back to server_error", picked)
            kind = FailureKind.SERVER_ERROR

        return self.catalog.render(kind, config.model_name)


_default_selector = FailureSelector()


def should_inject(config: InjectionConfig, rng: RandomSource | None = None) -> bool:
    """Return True if this request should be answered with an injected failure."""
    if rng is None:
        return _default_selector.should_inject(config)
    return FailureSelector(rng=rng).should_inject(config)


def select_failure(config: InjectionConfig, rng: RandomSource | None = None) -> FailureDescriptor:
    """Pick a failure from the allowed kinds (all kinds if none are configured)."""
    if rng is None:
        return _default_selector.select_failure(config)
    return FailureSelector(rng=rng).select_failure(config)
