r"""Core configuration and validation shared by the client, the
resource helpers and the execution wrapper."""

from __future__ import annotations

__all__ = [
    "DEFAULT_RETRY_POLICY",
    "DEFAULT_TIMEOUT",
    "ClientOptions",
    "RetryPolicy",
    "resolve_retry_policy",
    "validate_path",
    "validate_resource_id",
    "validate_retry_params",
    "validate_subpath",
    "validate_timeout",
]

from aresult.core.config import (
    DEFAULT_RETRY_POLICY,
    DEFAULT_TIMEOUT,
    ClientOptions,
    RetryPolicy,
    resolve_retry_policy,
)
from aresult.core.validation import (
    validate_path,
    validate_resource_id,
    validate_retry_params,
    validate_subpath,
    validate_timeout,
)
