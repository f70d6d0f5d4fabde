r"""Multipart form building for uploads.

``MultipartForm`` plays the role of a pre-built multipart form. It can be
filled by hand or derived from the upload payloads accepted by
``ApiClient.upload``: binary content is wrapped as a single file part,
and a plain mapping becomes one text part per non-None value.
"""

from __future__ import annotations

__all__ = ["MULTIPART_CONTENT_TYPE", "MultipartForm", "build_upload_form", "multipart_content_type"]

import io
import secrets
from collections.abc import Mapping
from typing import Any

from aresult.exceptions import InvalidArgumentError

MULTIPART_CONTENT_TYPE = "multipart/form-data"

_BINARY_TYPES = (bytes, bytearray, memoryview)


class MultipartForm:
    """Ordered list of multipart parts.

    Every part is stored in the ``files`` format understood by httpx:
    ``(name, (filename, content, content_type))``. Text fields use a
    ``None`` filename so they are encoded as plain form fields.

    Example:
        ```pycon
        >>> from aresult.utils.multipart import MultipartForm
        >>> form = MultipartForm()
        >>> form.append("title", "Quarterly report")
        >>> form.append_file("file", b"%PDF-1.7", filename="report.pdf")
        >>> form.names()
        ['title', 'file']

        ```
    """

    def __init__(self) -> None:
        self._parts: list[tuple[str, tuple[str | None, Any, str | None]]] = []

    def __len__(self) -> int:
        return len(self._parts)

    def __repr__(self) -> str:
        return f"{self.__class__.__qualname__}(names={self.names()})"

    def append(self, name: str, value: Any) -> None:
        """Append a text field; the value is stringified."""
        self._parts.append((name, (None, str(value).encode("utf-8"), None)))

    def append_file(
        self,
        name: str,
        content: Any,
        filename: str | None = None,
        content_type: str | None = None,
    ) -> None:
        """Append a file part.

        Args:
            name: The form field name.
            content: Bytes or a binary file object.
            filename: The filename advertised for the part. Defaults to
                the ``name`` attribute of file objects, or to ``"blob"``.
            content_type: The part's content type. httpx guesses it from
                the filename when omitted.
        """
        if isinstance(content, (bytearray, memoryview)):
            content = bytes(content)
        if filename is None:
            filename = _guess_filename(content)
        self._parts.append((name, (filename, content, content_type)))

    def names(self) -> list[str]:
        return [name for name, _ in self._parts]

    def to_files(self) -> list[tuple[str, tuple[str | None, Any, str | None]]]:
        """Return the parts in the format of the httpx ``files`` argument."""
        return list(self._parts)

    @classmethod
    def from_mapping(cls, data: Mapping[str, Any]) -> MultipartForm:
        """Build a form with one text field per non-None mapping value.

        Example:
            ```pycon
            >>> from aresult.utils.multipart import MultipartForm
            >>> MultipartForm.from_mapping({"a": 1, "b": None, "c": "x"}).names()
            ['a', 'c']

            ```
        """
        form = cls()
        for key, value in data.items():
            if value is not None:
                form.append(str(key), value)
        return form


def build_upload_form(data: Any, field_name: str = "file") -> MultipartForm:
    """Convert an upload payload into a ``MultipartForm``.

    Args:
        data: A ``MultipartForm`` (used as is), binary content
            (``bytes``, ``bytearray``, ``memoryview``, a binary file
            object, or a ``(filename, content[, content_type])`` tuple)
            wrapped under ``field_name``, or a mapping whose non-None
            values become text fields.
        field_name: The field name used for binary content.

    Returns:
        The multipart form.

    Raises:
        InvalidArgumentError: If ``data`` has another shape.
    """
    if isinstance(data, MultipartForm):
        return data
    if isinstance(data, _BINARY_TYPES) or _is_binary_file(data):
        form = MultipartForm()
        form.append_file(field_name, data)
        return form
    if isinstance(data, tuple) and len(data) in (2, 3) and isinstance(data[0], str):
        form = MultipartForm()
        form.append_file(field_name, data[1], filename=data[0], content_type=_at(data, 2))
        return form
    if isinstance(data, Mapping):
        return MultipartForm.from_mapping(data)
    msg = (
        "Invalid upload data type. Expected MultipartForm, bytes, a binary file, "
        f"or a mapping, got {type(data).__qualname__}"
    )
    raise InvalidArgumentError(msg)


def multipart_content_type() -> str:
    """Return a multipart content type with a fresh boundary.

    httpx reuses the boundary of an explicit multipart ``Content-Type``
    header when encoding the body.
    """
    return f"{MULTIPART_CONTENT_TYPE}; boundary={secrets.token_hex(16)}"


def _is_binary_file(data: Any) -> bool:
    return isinstance(data, io.IOBase) and not isinstance(data, io.TextIOBase)


def _guess_filename(content: Any) -> str:
    name = getattr(content, "name", None)
    if isinstance(name, str) and name:
        return name.replace("\\", "/").rsplit("/", 1)[-1]
    return "blob"


def _at(values: tuple[Any, ...], index: int) -> Any:
    return values[index] if len(values) > index else None
