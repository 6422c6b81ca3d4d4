"""
Set-difference primitives over snapshot entities

Results keep the order of the first sequence; nothing is reordered or
deduplicated beyond what the match predicate decides.
"""

from collections.abc import Callable, Iterable
from typing import Protocol, TypeVar


class _Named(Protocol):
    @property
    def name(self) -> str: ...


T = TypeVar("T")
N = TypeVar("N", bound=_Named)


def same_name(first: _Named, second: _Named) -> bool:
    return first.name == second.name


def set_difference(
    items: Iterable[T], others: Iterable[T], matches: Callable[[T, T], bool]
) -> list[T]:
    """Items with no match in *others*"""
    candidates = list(others)
    return [item for item in items if not any(matches(item, other) for other in candidates)]


def difference_by_name(items: Iterable[N], others: Iterable[N]) -> list[N]:
    """Tables, columns, sequences or types present in *items* but not (by name) in *others*"""
    return set_difference(items, others, same_name)
