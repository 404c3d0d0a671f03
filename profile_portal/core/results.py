"""
Outcome types for remote reads.

Services return one of these instead of raising, and views branch on the
concrete type.
"""

from dataclasses import dataclass
from typing import Any, Generic, TypeVar, Union

T = TypeVar("T")


@dataclass(frozen=True)
class Loaded(Generic[T]):
    value: T


@dataclass(frozen=True)
class Missing:
    """The query succeeded but matched no row."""


@dataclass(frozen=True)
class LoadFailed:
    reason: str
    error: Any = None


LoadResult = Union[Loaded[T], Missing, LoadFailed]
