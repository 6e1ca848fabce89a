"""
billing_config - single public entrypoint for billing configuration.

Responsibility:
    Provides the way to obtain configuration at runtime through
    ``get_active_config()``.  Services receive the returned
    ``BillingConfig`` from their caller; they never read files or
    environment variables themselves.

Architecture position:
    Configuration.  Sits above ``billing_kernel`` and ``billing_engines``
    and below ``billing_modules`` / ``billing_services``.  The kernel MUST
    NEVER import from ``billing_config``.

Failure modes:
    - ``FileNotFoundError`` -- BILLING_CONFIG_PATH names a missing file.
    - ``ConfigError`` -- the file fails validation.
"""

from __future__ import annotations

import logging
import os
import threading
from pathlib import Path

from billing_config.loader import load_config
from billing_config.schema import BillingConfig, PaymentTermDef, TaxCodeDef

_logger = logging.getLogger("billing_kernel.config")

CONFIG_PATH_ENV = "BILLING_CONFIG_PATH"

DEFAULT_CONFIG_PATH = Path(__file__).parent / "defaults" / "billing.yaml"

_active: BillingConfig | None = None
_lock = threading.Lock()


def get_active_config() -> BillingConfig:
    """
    Return the active configuration, loading it on first use.

    Source: the file named by ``BILLING_CONFIG_PATH`` when set, otherwise
    the packaged defaults.  The result is cached until
    ``reset_active_config()``.
    """
    global _active
    with _lock:
        if _active is None:
            override = os.environ.get(CONFIG_PATH_ENV)
            path = Path(override) if override else DEFAULT_CONFIG_PATH
            _active = load_config(path)
            _logger.info(
                "BILLING_CONFIG_TRACE",
                extra={
                    "trace_type": "BILLING_CONFIG_TRACE",
                    "config_id": _active.config_id,
                    "config_version": _active.version,
                    "checksum": _active.checksum,
                    "from_env": override is not None,
                },
            )
        return _active


def reset_active_config() -> None:
    """Drop the cached configuration. FOR TESTING ONLY."""
    global _active
    with _lock:
        _active = None


__all__ = [
    "BillingConfig",
    "CONFIG_PATH_ENV",
    "DEFAULT_CONFIG_PATH",
    "PaymentTermDef",
    "TaxCodeDef",
    "get_active_config",
    "load_config",
    "reset_active_config",
]
