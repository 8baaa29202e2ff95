"""Merge two keyed record lists with a caller-supplied conflict resolver."""
from __future__ import annotations

from collections.abc import Mapping
from typing import Any, Callable, Optional, Sequence, TypeVar, Union

T = TypeVar("T")

KeySpec = Union[str, Callable[[Any], Any]]
ConflictFn = Callable[[T, Optional[T]], T]


class DuplicateKeyError(ValueError):
    """Raised when one side of a merge holds two records with the same key."""

    def __init__(self, side: str, key: Any):
        self.side = side
        self.key = key
        super().__init__(f"Duplicate key {key!r} in {side} records")


def _key_getter(key: KeySpec) -> Callable[[Any], Any]:
    if callable(key):
        return key

    def get(record: Any) -> Any:
        if isinstance(record, Mapping):
            return record.get(key)
        return getattr(record, key, None)

    return get


def _check_unique(records: Sequence[Any], get_key: Callable[[Any], Any], side: str) -> None:
    seen: set[Any] = set()
    for record in records:
        value = get_key(record)
        if value in seen:
            raise DuplicateKeyError(side, value)
        seen.add(value)


def keep_a(a: T, b: Optional[T]) -> T:
    return a


def keep_b(a: T, b: Optional[T]) -> T:
    return a if b is None else b


def resolve(key: KeySpec, conflict_fn: ConflictFn, list_a: Sequence[T], list_b: Sequence[T]) -> list[T]:
    """Merge ``list_a`` and ``list_b`` on ``key``.

    Every record of ``list_a`` is passed to ``conflict_fn`` together with the
    ``list_b`` record sharing its key, or ``None`` when there is none. Matched
    ``list_b`` records are consumed; the rest are appended unchanged. The
    result is sorted by the string form of the key, so resolving an already
    resolved list is a no-op.

    ``key`` may be a field name (looked up as a mapping key or attribute) or a
    callable returning the key of a record.
    """
    get_key = _key_getter(key)
    _check_unique(list_a, get_key, "left")
    _check_unique(list_b, get_key, "right")

    remaining: dict[Any, T] = {get_key(record): record for record in list_b}
    resolved: list[T] = []
    for from_a in list_a:
        from_b = remaining.pop(get_key(from_a), None)
        resolved.append(conflict_fn(from_a, from_b))

    merged = resolved + list(remaining.values())
    return sorted(merged, key=lambda record: str(get_key(record)))
