r"""Uniform access to request data bags.

A data bag is one of exactly two variants: a plain mapping (``dict``)
holding one value per key, or a ``FormData`` multipart parameter set that
may hold several values per key. The functions in this module read,
write, copy and list the keys of either variant, so callers never have to
inspect the type themselves. Any other type raises ``TypeError``.

Example:
    ```pycon
    >>> from webrequest.utils.data import FormData, get_value, set_value
    >>> form = FormData([("tag", "a"), ("tag", "b")])
    >>> get_value("tag", form)
    'a'
    >>> get_value("tag", form, single=False)
    ['a', 'b']
    >>> get_value("tag", {"tag": "c"})
    'c'
    >>> set_value("page", 2)
    {'page': 2}

    ```
"""

from __future__ import annotations

__all__ = [
    "FormData",
    "RequestData",
    "clone",
    "find_form_data_array_entry_keys",
    "get_keys",
    "get_value",
    "set_value",
]

from collections.abc import Mapping, MutableMapping
from functools import singledispatch
from typing import TYPE_CHECKING, Any, TypeAlias

from webrequest.utils.text import to_text

if TYPE_CHECKING:
    from collections.abc import Iterable, Iterator


class FormData:
    r"""Ordered multipart form parameter set.

    Entries are ``(name, value)`` pairs kept in insertion order. A name may
    occur several times. Values are ``str``, ``bytes``, numbers, booleans,
    or any file specification httpx accepts for multipart uploads (a binary
    file object or a ``(filename, file[, content_type])`` tuple).

    Args:
        entries: Optional initial ``(name, value)`` pairs.

    Example:
        ```pycon
        >>> from webrequest.utils.data import FormData
        >>> form = FormData()
        >>> form.append("tags[0]", "a")
        >>> form.append("tags[1]", "b")
        >>> list(form.keys())
        ['tags[0]', 'tags[1]']
        >>> form.get("tags[1]")
        'b'

        ```
    """

    def __init__(self, entries: Iterable[tuple[str, Any]] | None = None) -> None:
        self._entries: list[tuple[str, Any]] = []
        for name, value in entries or ():
            self.append(name, value)

    def append(self, name: str, value: Any) -> None:
        """Add a value under ``name`` after any existing ones."""
        self._entries.append((name, value))

    def set(self, name: str, value: Any) -> None:
        """Replace all values of ``name`` with ``value``.

        The new value takes the position of the first existing entry, or is
        appended when ``name`` is absent.
        """
        for index, (key, _) in enumerate(self._entries):
            if key == name:
                self._entries[index] = (name, value)
                self._entries[index + 1 :] = [
                    entry for entry in self._entries[index + 1 :] if entry[0] != name
                ]
                return
        self._entries.append((name, value))

    def get(self, name: str) -> Any:
        """Return the first value of ``name``, or ``None``."""
        for key, value in self._entries:
            if key == name:
                return value
        return None

    def get_all(self, name: str) -> list[Any]:
        """Return all values of ``name`` in insertion order."""
        return [value for key, value in self._entries if key == name]

    def delete(self, name: str) -> None:
        """Remove all values of ``name``."""
        self._entries = [entry for entry in self._entries if entry[0] != name]

    def keys(self) -> Iterator[str]:
        """Iterate over the distinct names in first-seen order."""
        return iter(dict.fromkeys(key for key, _ in self._entries))

    def items(self) -> list[tuple[str, Any]]:
        """Return a copy of the ``(name, value)`` entries."""
        return list(self._entries)

    def copy(self) -> FormData:
        return FormData(self._entries)

    def to_multipart(self) -> list[tuple[str, Any]]:
        """Convert the entries into httpx ``files`` entries.

        Plain ``str`` and ``bytes`` values become file-less form fields, so
        the request is always encoded as ``multipart/form-data`` and the
        entry order is preserved. Numbers and booleans are sent as their
        text (see ``to_text``).
        """
        return [(name, _to_multipart_value(value)) for name, value in self._entries]

    def __contains__(self, name: object) -> bool:
        return any(key == name for key, _ in self._entries)

    def __iter__(self) -> Iterator[tuple[str, Any]]:
        return iter(list(self._entries))

    def __len__(self) -> int:
        return len(self._entries)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, FormData):
            return NotImplemented
        return self._entries == other._entries

    def __repr__(self) -> str:
        return f"{self.__class__.__qualname__}({self._entries!r})"


RequestData: TypeAlias = "dict[str, Any] | FormData"


def _to_multipart_value(value: Any) -> Any:
    if isinstance(value, (int, float)):
        value = to_text(value)
    if isinstance(value, (str, bytes)):
        return (None, value)
    return value


def get_value(name: str, data: RequestData | None, single: bool = True) -> Any:
    """Look up the value of ``name`` in a data bag.

    Args:
        name: The key to look up.
        data: The data bag. ``None`` is treated as empty.
        single: Only meaningful for ``FormData``. If ``True`` the first value
            is returned; otherwise a key holding several values returns the
            list of them, and a key holding one value returns that value.

    Returns:
        The value, the list of values, or ``None`` when the key is absent.

    Raises:
        TypeError: If ``data`` is neither a mapping nor ``FormData``.
    """
    if data is None:
        return None
    return _get_value(data, name, single)


@singledispatch
def _get_value(data: Any, name: str, single: bool) -> Any:
    msg = f"Unsupported data type: {type(data).__name__}"
    raise TypeError(msg)


@_get_value.register
def _(data: Mapping, name: str, single: bool) -> Any:
    return data.get(name)


@_get_value.register
def _(data: FormData, name: str, single: bool) -> Any:
    values = data.get_all(name)
    if not values:
        return None
    if single or len(values) == 1:
        return values[0]
    return values


def set_value(
    name: str, value: Any, data: RequestData | None = None, overwrite: bool = False
) -> RequestData:
    """Store ``value`` under ``name`` in a data bag.

    Args:
        name: The key to store the value under.
        value: The value to store.
        data: The data bag to modify. If ``None``, a new ``dict`` is created.
        overwrite: Only meaningful for ``FormData``. If ``True`` existing
            values of ``name`` are replaced, otherwise the value is appended.

    Returns:
        The modified data bag.

    Raises:
        TypeError: If ``data`` is neither a mapping nor ``FormData``.
    """
    if data is None:
        data = {}
    return _set_value(data, name, value, overwrite)


@singledispatch
def _set_value(data: Any, name: str, value: Any, overwrite: bool) -> RequestData:
    msg = f"Unsupported data type: {type(data).__name__}"
    raise TypeError(msg)


@_set_value.register
def _(data: MutableMapping, name: str, value: Any, overwrite: bool) -> RequestData:
    data[name] = value
    return data


@_set_value.register
def _(data: FormData, name: str, value: Any, overwrite: bool) -> RequestData:
    if overwrite:
        data.set(name, value)
    else:
        data.append(name, value)
    return data


@singledispatch
def clone(data: Any) -> RequestData | None:
    """Return a shallow copy of a data bag, or ``None`` for ``None``.

    Raises:
        TypeError: If ``data`` is neither a mapping nor ``FormData``.
    """
    if data is None:
        return None
    msg = f"Unsupported data type: {type(data).__name__}"
    raise TypeError(msg)


@clone.register
def _(data: Mapping) -> RequestData:
    return dict(data)


@clone.register
def _(data: FormData) -> RequestData:
    return data.copy()


@singledispatch
def get_keys(data: Any) -> list[str]:
    """Return the distinct keys present in a data bag, in order.

    Raises:
        TypeError: If ``data`` is neither a mapping nor ``FormData``.
    """
    if data is None:
        return []
    msg = f"Unsupported data type: {type(data).__name__}"
    raise TypeError(msg)


@get_keys.register
def _(data: Mapping) -> list[str]:
    return list(data.keys())


@get_keys.register
def _(data: FormData) -> list[str]:
    return list(data.keys())


def find_form_data_array_entry_keys(name: str, keys: Iterable[str]) -> list[str]:
    """Find the indexed entries of an array-typed form field.

    A key belongs to the array ``name`` when it starts with ``name[``, so
    ``tags`` matches ``tags[0]``, ``tags[1]`` or ``tags[]`` but neither
    ``tags`` itself nor ``tagsExtra``.

    Example:
        ```pycon
        >>> from webrequest.utils.data import find_form_data_array_entry_keys
        >>> find_form_data_array_entry_keys("tags", ["tags[0]", "title", "tags[1]"])
        ['tags[0]', 'tags[1]']

        ```
    """
    prefix = f"{name}["
    return [key for key in keys if key.startswith(prefix)]
