r"""Helpers used by the client: cancellable sleep, multipart forms,
``Content-Disposition`` parsing and structured logging."""

from __future__ import annotations

__all__ = [
    "MultipartForm",
    "StructuredFormatter",
    "build_upload_form",
    "extract_filename",
    "log_structured",
    "sleep_ms",
]

from aresult.utils.content_disposition import extract_filename
from aresult.utils.multipart import MultipartForm, build_upload_form
from aresult.utils.sleep import sleep_ms
from aresult.utils.structured_logging import StructuredFormatter, log_structured
