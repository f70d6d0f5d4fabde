r"""CRUD helpers derived from a resource base path.

``Resource`` turns a base path such as ``"/users"`` into list, get,
create, update, patch, remove and custom action calls on an
``ApiClient``. It holds no state besides the base path and the client.
"""

from __future__ import annotations

__all__ = ["Resource", "resource"]

from typing import TYPE_CHECKING, Any

from aresult.client import ApiClient
from aresult.core.validation import validate_path, validate_resource_id, validate_subpath

if TYPE_CHECKING:
    from collections.abc import Coroutine, Mapping

    from aresult.result import Result

# Sentinel distinguishing "no payload" from an explicit ``None`` payload
_UNSET: Any = object()


class Resource:
    r"""Path-templated CRUD operations on top of an ``ApiClient``.

    Every operation forwards its keyword arguments (``headers``,
    ``signal``, ``timeout``, ``retry``...) to the client method.

    Args:
        base_path: The resource collection path. Must be a non-empty
            string.
        client: The client used to send requests.

    Raises:
        InvalidArgumentError: If ``base_path`` is empty.

    Example:
        ```pycon
        >>> import asyncio
        >>> from aresult import ApiClient, Resource
        >>> async def main():  # doctest: +SKIP
        ...     async with ApiClient(base_url="https://api.example.com") as client:
        ...         users = Resource("/users", client)
        ...         page = await users.list({"page": 2})
        ...         user = await users.get(42)
        ...         await users.action("42/activate", {"notify": True})
        ...
        >>> asyncio.run(main())  # doctest: +SKIP

        ```
    """

    def __init__(self, base_path: str, client: ApiClient) -> None:
        validate_path(base_path)
        self._base_path = base_path.rstrip("/") or base_path
        self._client = client

    def __repr__(self) -> str:
        return f"{self.__class__.__qualname__}(base_path={self._base_path!r})"

    @property
    def base_path(self) -> str:
        return self._base_path

    @property
    def client(self) -> ApiClient:
        return self._client

    def list(
        self, query: Mapping[str, Any] | None = None, **kwargs: Any
    ) -> Coroutine[Any, Any, Result[Any]]:
        """List the collection.

        ``query`` is merged over any ``params`` keyword argument.
        """
        params = {**(kwargs.pop("params", None) or {}), **(query or {})}
        return self._client.get_many(self._base_path, params=params, **kwargs)

    def get(self, resource_id: str | int, **kwargs: Any) -> Coroutine[Any, Any, Result[Any]]:
        """Fetch one item.

        Raises:
            InvalidArgumentError: If ``resource_id`` is ``None`` or ``""``.
        """
        validate_resource_id(resource_id)
        return self._client.get_one(self._item_path(resource_id), **kwargs)

    def create(self, payload: Any, **kwargs: Any) -> Coroutine[Any, Any, Result[Any]]:
        """Create an item with a POST on the collection."""
        return self._client.post(self._base_path, payload, **kwargs)

    def update(
        self, resource_id: str | int, payload: Any, **kwargs: Any
    ) -> Coroutine[Any, Any, Result[Any]]:
        """Replace an item with a PUT."""
        validate_resource_id(resource_id)
        return self._client.put(self._item_path(resource_id), payload, **kwargs)

    def patch(
        self, resource_id: str | int, payload: Any, **kwargs: Any
    ) -> Coroutine[Any, Any, Result[Any]]:
        """Partially update an item with a PATCH."""
        validate_resource_id(resource_id)
        return self._client.patch(self._item_path(resource_id), payload, **kwargs)

    def remove(self, resource_id: str | int, **kwargs: Any) -> Coroutine[Any, Any, Result[Any]]:
        """Delete an item."""
        validate_resource_id(resource_id)
        return self._client.remove(self._item_path(resource_id), **kwargs)

    def action(
        self, subpath: str, payload: Any = _UNSET, **kwargs: Any
    ) -> Coroutine[Any, Any, Result[Any]]:
        """Call a custom endpoint below the collection.

        Args:
            subpath: The path below the base path (e.g. ``"42/activate"``).
            payload: If given (even ``None``), the action is sent as a
                POST with this body; otherwise it is a GET.
            **kwargs: Forwarded to the client method.

        Raises:
            InvalidArgumentError: If ``subpath`` is not a non-empty string.
        """
        validate_subpath(subpath)
        path = f"{self._base_path}/{subpath.lstrip('/')}"
        if payload is _UNSET:
            return self._client.get_one(path, **kwargs)
        return self._client.post(path, payload, **kwargs)

    def _item_path(self, resource_id: str | int) -> str:
        return f"{self._base_path}/{resource_id}"


def resource(base_path: str, client: ApiClient | None = None, **client_options: Any) -> Resource:
    r"""Create a ``Resource``, building a dedicated client if needed.

    Args:
        base_path: The resource collection path.
        client: An existing client. If ``None``, a new ``ApiClient`` is
            created from ``client_options``.
        **client_options: Keyword arguments for ``ApiClient``.

    Returns:
        The resource helper.

    Example:
        ```pycon
        >>> from aresult import resource
        >>> users = resource("/users", base_url="https://api.example.com")
        >>> users
        Resource(base_path='/users')

        ```
    """
    validate_path(base_path)
    if client is None:
        client = ApiClient(**client_options)
    return Resource(base_path, client)
