"""Typed access to decoded JSON request and response trees.

A :class:`Record` wraps one JSON object. Each ``find_*`` accessor returns
``None`` for a missing key and raises :class:`ValueShapeError` when the key
is present with the wrong type. Nothing is coerced except the two widenings
the daemon relies on: integers are accepted as reals, and ``0``/``1`` are
accepted as booleans (older daemons send them).
"""

from __future__ import annotations

from typing import Any, Iterator, Mapping

from trctl.utils.exceptions import ValueShapeError


class Record(Mapping[str, Any]):
    """Read-only view over a decoded JSON object."""

    __slots__ = ("_data",)

    def __init__(self, data: Mapping[str, Any] | None = None) -> None:
        self._data: Mapping[str, Any] = data if data is not None else {}

    def __getitem__(self, key: str) -> Any:
        return self._data[key]

    def __iter__(self) -> Iterator[str]:
        return iter(self._data)

    def __len__(self) -> int:
        return len(self._data)

    def __repr__(self) -> str:
        return f"Record({dict(self._data)!r})"

    def find_int(self, key: str) -> int | None:
        value = self._data.get(key)
        if value is None:
            return None
        if isinstance(value, bool) or not isinstance(value, int):
            raise ValueShapeError(key, "int", value)
        return value

    def find_real(self, key: str) -> float | None:
        value = self._data.get(key)
        if value is None:
            return None
        if isinstance(value, bool) or not isinstance(value, (int, float)):
            raise ValueShapeError(key, "real", value)
        return float(value)

    def find_str(self, key: str) -> str | None:
        value = self._data.get(key)
        if value is None:
            return None
        if not isinstance(value, str):
            raise ValueShapeError(key, "str", value)
        return value

    def find_bool(self, key: str) -> bool | None:
        value = self._data.get(key)
        if value is None:
            return None
        if isinstance(value, bool):
            return value
        if isinstance(value, int) and value in (0, 1):
            return bool(value)
        raise ValueShapeError(key, "bool", value)

    def find_list(self, key: str) -> list[Any] | None:
        value = self._data.get(key)
        if value is None:
            return None
        if not isinstance(value, list):
            raise ValueShapeError(key, "list", value)
        return value

    def find_dict(self, key: str) -> Record | None:
        value = self._data.get(key)
        if value is None:
            return None
        if not isinstance(value, dict):
            raise ValueShapeError(key, "dict", value)
        return Record(value)

    def find_records(self, key: str) -> list[Record] | None:
        """A list whose every element is an object."""
        items = self.find_list(key)
        if items is None:
            return None
        records = []
        for index, item in enumerate(items):
            if not isinstance(item, dict):
                raise ValueShapeError(f"{key}[{index}]", "dict", item)
            records.append(Record(item))
        return records

    def has_all(self, *keys: str) -> bool:
        """True when every key is present and not null."""
        return all(self._data.get(k) is not None for k in keys)
