"""Simulated API failures for the mock inference endpoint."""

from .failures import (
    FailureCatalog,
    FailureDescriptor,
    FailureKind,
    FailureSelector,
    InjectionConfig,
    UnknownFailureKindError,
    parse_failure_kind,
    select_failure,
    should_inject,
)
from .randomness import SharedRandom, get_random, init_random

__all__ = [
    "FailureCatalog",
    "FailureDescriptor",
    "FailureKind",
    "FailureSelector",
    "InjectionConfig",
    "SharedRandom",
    "UnknownFailureKindError",
    "get_random",
    "init_random",
    "parse_failure_kind",
    "select_failure",
    "should_inject",
]
