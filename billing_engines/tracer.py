"""
billing_engines.tracer -- BILLING_ENGINE_TRACE records for engine calls.

``@traced_engine`` wraps a pure engine entry point and, after each call,
logs one record naming the engine, its version, how long the call took and
a fingerprint of the inputs.  Two calls with equal inputs (2000 and
2000.00 count as equal) carry the same fingerprint, so a document's totals
can be matched to the computation that produced them.

The decorator only reads arguments and logs; the wrapped function's result
and exceptions pass through untouched.  A call that raises is not traced.

Usage:
    @traced_engine("document_totals", "1.0", fingerprint_fields=("items", "currency"))
    def compute_document_totals(items, currency="FRW"):
        ...
"""

from __future__ import annotations

import dataclasses
import functools
import hashlib
import inspect
import logging
import time
from collections.abc import Callable
from decimal import Decimal
from enum import Enum
from typing import Any

# Plain stdlib logger so engines stay free of kernel logging setup
_logger = logging.getLogger("billing_kernel.engines.tracer")

_FINGERPRINT_LENGTH = 16


def _canonicalize(value: Any) -> str:
    """Stable text form of an engine input; unknown types fall back to str()."""
    if value is None:
        return "null"
    if isinstance(value, Enum):
        return str(value.value)
    if isinstance(value, Decimal):
        return str(value.normalize()) if value else "0"
    if isinstance(value, (int, str)):
        return str(value)
    if dataclasses.is_dataclass(value) and not isinstance(value, type):
        inner = ",".join(
            f"{f.name}:{_canonicalize(getattr(value, f.name))}"
            for f in dataclasses.fields(value)
        )
        return f"({inner})"
    if isinstance(value, dict):
        inner = ",".join(
            f"{k}:{_canonicalize(v)}" for k, v in sorted(value.items(), key=lambda kv: str(kv[0]))
        )
        return f"{{{inner}}}"
    if isinstance(value, (list, tuple)):
        return "[" + ",".join(_canonicalize(v) for v in value) + "]"
    return str(value)


def compute_input_fingerprint(
    fingerprint_fields: tuple[str, ...],
    arguments: dict[str, Any],
) -> str:
    """SHA-256 prefix over the named arguments; absent ones count as null."""
    canonical = "|".join(
        f"{name}={_canonicalize(arguments.get(name))}" for name in fingerprint_fields
    )
    return hashlib.sha256(canonical.encode("utf-8")).hexdigest()[:_FINGERPRINT_LENGTH]


def traced_engine(
    engine_name: str,
    engine_version: str,
    fingerprint_fields: tuple[str, ...] = (),
) -> Callable:
    """
    Args:
        engine_name: e.g. "document_totals".
        engine_version: bumped whenever the engine's arithmetic changes.
        fingerprint_fields: parameter names hashed into input_fingerprint,
            matched whether passed positionally or by keyword.
    """

    def decorator(func: Callable) -> Callable:
        signature = inspect.signature(func)

        @functools.wraps(func)
        def wrapper(*args: Any, **kwargs: Any) -> Any:
            fingerprint = ""
            if fingerprint_fields:
                bound = signature.bind_partial(*args, **kwargs)
                fingerprint = compute_input_fingerprint(fingerprint_fields, bound.arguments)

            started = time.monotonic()
            result = func(*args, **kwargs)
            _logger.info("BILLING_ENGINE_TRACE", extra={
                "trace_type": "BILLING_ENGINE_TRACE",
                "engine_name": engine_name,
                "engine_version": engine_version,
                "input_fingerprint": fingerprint,
                "duration_ms": round((time.monotonic() - started) * 1000, 2),
                "function": func.__qualname__,
            })
            return result

        return wrapper

    return decorator
