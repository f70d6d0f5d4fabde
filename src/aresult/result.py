r"""Result types returned by every aresult request.

A request never raises for runtime conditions. It resolves to either a
``Success`` carrying the decoded payload, or a ``Failure`` carrying an
``ErrorInfo`` describing what went wrong. Both variants expose a
``status`` discriminant so callers can branch on a single boolean.

Example:
    ```pycon
    >>> from aresult.result import ErrorInfo, Failure, Success
    >>> ok = Success(data={"id": 1})
    >>> ok.status
    True
    >>> ok.to_dict()
    {'status': True, 'data': {'id': 1}}
    >>> ko = Failure(data=ErrorInfo(message="Not Found", status_code=404))
    >>> ko.status
    False
    >>> ko.to_dict()
    {'status': False, 'data': {'message': 'Not Found', 'statusCode': 404}}

    ```
"""

from __future__ import annotations

__all__ = ["DownloadedFile", "ErrorInfo", "Failure", "Result", "Success"]

from collections.abc import Mapping
from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Any, ClassVar, Generic, Literal, TypeVar, Union

T = TypeVar("T")


@dataclass(frozen=True)
class ErrorInfo:
    """Description of a failed request.

    Args:
        message: Non-empty description of the failure.
        status_code: The HTTP status code, if a response was received.
        code: The transport-level failure code, if any
            (e.g. ``"ECONNABORTED"`` or ``"ERR_CANCELED"``).
        extra: Additional fields taken from a structured error body.

    Raises:
        ValueError: If ``message`` is empty.
    """

    message: str
    status_code: int | None = None
    code: str | None = None
    extra: Mapping[str, Any] = field(default_factory=dict)

    def __post_init__(self) -> None:
        if not isinstance(self.message, str) or not self.message:
            msg = f"message must be a non-empty string, got {self.message!r}"
            raise ValueError(msg)
        object.__setattr__(self, "extra", MappingProxyType(dict(self.extra)))

    def __getitem__(self, key: str) -> Any:
        return self.to_dict()[key]

    def get(self, key: str, default: Any = None) -> Any:
        return self.to_dict().get(key, default)

    def to_dict(self) -> dict[str, Any]:
        """Return the error as a mapping using the wire field names.

        Returns:
            The extra fields, with ``message``, ``statusCode`` and
            ``code`` layered on top. Absent optional fields are omitted.

        Example:
            ```pycon
            >>> from aresult.result import ErrorInfo
            >>> ErrorInfo(message="boom", code="ERR_NETWORK", extra={"trace": "abc"}).to_dict()
            {'trace': 'abc', 'message': 'boom', 'code': 'ERR_NETWORK'}

            ```
        """
        data = dict(self.extra)
        data["message"] = self.message
        if self.status_code is not None:
            data["statusCode"] = self.status_code
        if self.code is not None:
            data["code"] = self.code
        return data


@dataclass(frozen=True)
class Success(Generic[T]):
    """Successful result of a request."""

    status: ClassVar[Literal[True]] = True
    data: T

    def to_dict(self) -> dict[str, Any]:
        return {"status": True, "data": self.data}


@dataclass(frozen=True)
class Failure:
    """Failed result of a request.

    ``data`` is an ``ErrorInfo`` built by the normalizer, except when the
    server already answered with a canonical ``{"status": false, "data": ...}``
    body, in which case the server's ``data`` is kept unchanged.
    """

    status: ClassVar[Literal[False]] = False
    data: ErrorInfo | Any

    @property
    def message(self) -> str | None:
        if isinstance(self.data, ErrorInfo):
            return self.data.message
        if isinstance(self.data, Mapping):
            return self.data.get("message")
        return None

    def to_dict(self) -> dict[str, Any]:
        data = self.data.to_dict() if isinstance(self.data, ErrorInfo) else self.data
        return {"status": False, "data": data}


Result = Union[Success[T], Failure]


@dataclass(frozen=True)
class DownloadedFile:
    """Payload of a successful download.

    Args:
        blob: The raw response body.
        filename: The filename advertised by the ``Content-Disposition``
            header, or ``None`` if none could be extracted.
    """

    blob: bytes
    filename: str | None = None
