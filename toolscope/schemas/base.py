"""Pydantic base schema utilities for toolscope models."""

from __future__ import annotations

from typing import Any, NoReturn

from pydantic import BaseModel, ConfigDict


class BaseSchema(BaseModel):
    """
    Base Pydantic model for all domain schemas.

    Configures common Pydantic behaviors:
    - ``populate_by_name=True``: Allow initialization by alias or field name.
    - ``extra="forbid"``: Prevent unknown fields from slipping into the model, ensuring strict validation.
    """
    model_config = ConfigDict(
        populate_by_name=True,
        extra="forbid",
    )


class FrozenSchema(BaseSchema):
    """
    Immutable variant of ``BaseSchema`` used for stored records.

    Store snapshots hand out the very objects that were inserted, so records
    must not change after ``Put``. Collections on these models are tuples and
    mapping fields are passed through :func:`freeze`.
    ``arbitrary_types_allowed`` lets records carry opaque handler objects.
    """
    model_config = ConfigDict(
        populate_by_name=True,
        extra="forbid",
        frozen=True,
        arbitrary_types_allowed=True,
    )


def _read_only(self: Any, *args: Any, **kwargs: Any) -> NoReturn:
    raise TypeError(f"'{type(self).__name__}' object is read-only")


class FrozenDict(dict):
    """A ``dict`` that rejects mutation. Serializes like a plain dict."""

    __setitem__ = __delitem__ = _read_only
    clear = pop = popitem = setdefault = update = _read_only
    __ior__ = _read_only

    def __copy__(self) -> "FrozenDict":
        return self

    def __deepcopy__(self, memo: dict) -> "FrozenDict":
        return self

    def __reduce__(self):
        return (type(self), (dict(self),))


class FrozenList(list):
    """A ``list`` that rejects mutation. Compares equal to plain lists."""

    __setitem__ = __delitem__ = __iadd__ = __imul__ = _read_only
    append = extend = insert = pop = remove = clear = sort = reverse = _read_only

    def __copy__(self) -> "FrozenList":
        return self

    def __deepcopy__(self, memo: dict) -> "FrozenList":
        return self

    def __reduce__(self):
        return (type(self), (list(self),))


def freeze(value: Any) -> Any:
    """
    Return a read-only copy of a JSON-like value.

    Dicts and lists are rebuilt recursively as ``FrozenDict`` / ``FrozenList``,
    so the result shares no mutable container with ``value``. Other values are
    returned as is.
    """
    if isinstance(value, dict):
        return FrozenDict((k, freeze(v)) for k, v in value.items())
    if isinstance(value, list):
        return FrozenList(freeze(v) for v in value)
    if isinstance(value, tuple):
        return tuple(freeze(v) for v in value)
    return value
