r"""Filename extraction from ``Content-Disposition`` headers."""

from __future__ import annotations

__all__ = ["extract_filename"]

import re
from urllib.parse import unquote

# RFC 5987 extended form, e.g. filename*=UTF-8''r%C3%A9sum%C3%A9.pdf
_EXTENDED_FILENAME = re.compile(r"filename\*\s*=\s*([^']*)'[^']*'([^;\n]+)", re.IGNORECASE)
_FILENAME = re.compile(r"filename\s*=\s*(([\"']).*?\2|[^;\n]*)", re.IGNORECASE)


def extract_filename(content_disposition: str | None) -> str | None:
    """Extract the filename advertised by a ``Content-Disposition`` header.

    Args:
        content_disposition: The header value, or ``None``.

    Returns:
        The filename, or ``None`` if the header is missing or has no
        usable ``filename`` parameter.

    Example:
        ```pycon
        >>> from aresult.utils.content_disposition import extract_filename
        >>> extract_filename('attachment; filename="report.pdf"')
        'report.pdf'
        >>> extract_filename("attachment; filename=data.csv")
        'data.csv'
        >>> extract_filename("attachment; filename*=UTF-8''r%C3%A9sum%C3%A9.pdf")
        'résumé.pdf'
        >>> extract_filename("inline") is None
        True

        ```
    """
    if not content_disposition:
        return None
    match = _EXTENDED_FILENAME.search(content_disposition)
    if match:
        charset = match.group(1) or "utf-8"
        try:
            filename = unquote(match.group(2).strip(), encoding=charset, errors="strict")
        except (LookupError, UnicodeDecodeError):
            # Unknown or mismatched charset, use the plain parameter instead
            filename = None
        if filename:
            return filename
    match = _FILENAME.search(content_disposition)
    if match is None:
        return None
    filename = match.group(1).strip().strip("\"'")
    return filename or None
