"""A hash set that can be subclassed.

`Set` keeps its elements as the keys of a ``dict``, so membership tests,
insertion and removal are O(1) on average and iteration follows insertion
order. Every insertion, including the ones performed by the constructor,
`Set.concat`, union, symmetric difference and the copy methods, goes through
`Set.add`, and every removal goes through `Set.delete`. Subclasses can
therefore override those two methods to keep extra bookkeeping in sync.

Examples
--------
>>> s = Set([1, 2])
>>> s.add(2).concat([6, 8])
Set{1, 2, 6, 8}
>>> Set([1, 2]).is_subset(s)
True
"""

import copy
import logging
import operator
from collections.abc import Iterable, Iterator, MutableSet, Sized
from functools import singledispatch
from itertools import chain, islice
from typing import Any, TypeVar

import numpy as np

from openset.configdefaults import config
from openset.element_types import (
    ElementType,
    ElementTypeError,
    check_compatible,
    normalize_element_type,
    type_name,
    widen,
)


__all__ = ["Set", "SetIterator", "to_set"]


_logger = logging.getLogger("openset.set")

T = TypeVar("T")
U = TypeVar("U")


@singledispatch
def _elements(source: Any) -> tuple[Iterable, int | None]:
    """Return the elements of `source` and their number, if known up front."""
    if isinstance(source, Sized):
        return source, len(source)
    return source, None


@_elements.register(np.ndarray)
def _(source: np.ndarray) -> tuple[Iterable, int | None]:
    # numpy scalars hash like Python scalars, but would render as
    # ``np.int64(1)``; store plain Python values instead.
    if source.ndim == 0:
        raise TypeError("Cannot build a Set from a 0-d array")
    _logger.debug(f"Converting array of shape {source.shape} to Python values")
    return source.tolist(), source.shape[0]


class SetIterator(Iterator[T]):
    """Iterator over the elements of a `Set`, in insertion order.

    Changing the set while it is being iterated does not raise. Iteration
    resumes at the same position in the set's current contents, so elements
    may be skipped or seen twice.
    """

    def __init__(self, storage: dict[T, None]):
        self._storage = storage
        self.rewind()

    def rewind(self) -> "SetIterator[T]":
        """Restart iteration from the first element."""
        self._position = 0
        self._keys: Iterator[T] = iter(self._storage)
        return self

    def __iter__(self) -> "SetIterator[T]":
        return self

    def __next__(self) -> T:
        try:
            value = next(self._keys)
        except RuntimeError:
            # The dict changed size or keys during iteration.
            self._keys = islice(iter(self._storage), self._position, None)
            value = next(self._keys)
        self._position += 1
        return value


def _check_set_operand(other, operation: str) -> None:
    if not isinstance(other, Set):
        raise TypeError(
            f"{operation} requires a Set operand, got {type(other).__name__}"
        )


class Set(MutableSet[T]):
    """An unordered collection of unique, hashable elements.

    Parameters
    ----------
    source
        Optional iterable whose elements populate the set. Duplicates collapse.
        When `source` has a length it is used as the capacity hint.
    capacity
        Non-negative hint of how many elements the set is expected to hold.
    element_type
        A type, or iterable of types, every element must be an instance of.
        ``None`` (the default) accepts any hashable element.

    Notes
    -----
    Elements must not change their hash while they are stored.

    Intersection and difference between two sets check that their declared
    element types are related, following ``config.on_type_mismatch``. A set
    without an `element_type` is never checked: it is compatible with any
    other set.

    Two sets are equal when they hold the same elements, regardless of order,
    `element_type` or any state added by subclasses. Equal sets hash equally,
    so sets can be used as dict keys; do not mutate a set while it is used
    as a key.
    """

    _storage: dict[T, None]
    element_type: ElementType
    capacity_hint: int

    def __init__(
        self,
        source: Iterable[T] | None = None,
        *,
        capacity: int | None = None,
        element_type=None,
    ) -> None:
        if capacity is None:
            capacity = 0
        else:
            capacity = operator.index(capacity)
            if capacity < 0:
                raise ValueError(f"Negative set capacity: {capacity}")

        self._storage = {}
        self.element_type = normalize_element_type(element_type)
        self.capacity_hint = capacity

        if source is not None:
            elements, size = _elements(source)
            if size is not None:
                self.capacity_hint = max(capacity, size)
            self.concat(elements)

    def _spawn(
        self,
        capacity: int | None = None,
        element_type: ElementType = None,
        elements: Iterable = (),
    ) -> "Set":
        # `elements` come from existing sets and are added unchecked; the
        # declared type only applies to later insertions.
        result = type(self)(capacity=capacity, element_type=None)
        result.concat(elements)
        result.element_type = element_type
        return result

    # Mutation

    def add(self, value: T) -> "Set[T]":
        """Add `value` to the set and return the set.

        Adding an element that is already present does nothing.

        Raises
        ------
        ElementTypeError
            If the set declares an `element_type` that `value` is not an
            instance of, and ``config.check_element_types`` is set.
        """
        if (
            self.element_type is not None
            and not isinstance(value, self.element_type)
            and config.check_element_types
        ):
            raise ElementTypeError(
                f"Cannot add {value!r} of type {type(value).__qualname__} to a "
                f"{type(self).__name__} of {type_name(self.element_type)}"
            )
        self._storage[value] = None
        return self

    def __lshift__(self, value: T) -> "Set[T]":
        return self.add(value)

    def concat(self, items: Iterable[T]) -> "Set[T]":
        """Add every element of `items`, in order, and return the set."""
        for value in items:
            self.add(value)
        return self

    def update(self, items: Iterable[T]) -> "Set[T]":
        return self.concat(items)

    def delete(self, value) -> "Set[T]":
        """Remove `value` if present and return the set."""
        self._storage.pop(value, None)
        return self

    def discard(self, value) -> None:
        self.delete(value)

    def clear(self) -> "Set[T]":
        self._storage.clear()
        return self

    def subtract(self, items: Iterable) -> "Set[T]":
        """Remove every element of `items` from the set and return the set."""
        if items is self:
            items = list(items)
        for value in items:
            self.delete(value)
        return self

    # Queries

    def __contains__(self, value) -> bool:
        return value in self._storage

    def includes(self, value) -> bool:
        return value in self._storage

    def __len__(self) -> int:
        return len(self._storage)

    @property
    def size(self) -> int:
        return len(self._storage)

    def is_empty(self) -> bool:
        return not self._storage

    def each(self) -> SetIterator[T]:
        """Return a new iterator over the elements, in insertion order."""
        return SetIterator(self._storage)

    def __iter__(self) -> SetIterator[T]:
        return SetIterator(self._storage)

    def to_list(self) -> list[T]:
        return list(self._storage)

    def intersects(self, other: "Set") -> bool:
        """Whether the two sets have at least one element in common."""
        _check_set_operand(other, "intersects")
        if len(self) < len(other):
            return any(value in other._storage for value in self._storage)
        return any(value in self._storage for value in other._storage)

    def is_subset(self, other: "Set") -> bool:
        _check_set_operand(other, "is_subset")
        if len(other) < len(self):
            return False
        return all(value in other._storage for value in self._storage)

    def is_proper_subset(self, other: "Set") -> bool:
        _check_set_operand(other, "is_proper_subset")
        if len(other) <= len(self):
            return False
        return all(value in other._storage for value in self._storage)

    def is_superset(self, other: "Set") -> bool:
        _check_set_operand(other, "is_superset")
        return other.is_subset(self)

    def is_proper_superset(self, other: "Set") -> bool:
        _check_set_operand(other, "is_proper_superset")
        return other.is_proper_subset(self)

    def __le__(self, other):
        if not isinstance(other, Set):
            return NotImplemented
        return self.is_subset(other)

    def __lt__(self, other):
        if not isinstance(other, Set):
            return NotImplemented
        return self.is_proper_subset(other)

    def __ge__(self, other):
        if not isinstance(other, Set):
            return NotImplemented
        return self.is_superset(other)

    def __gt__(self, other):
        if not isinstance(other, Set):
            return NotImplemented
        return self.is_proper_superset(other)

    # Set algebra

    def __and__(self, other: "Set[T]") -> "Set[T]":
        """Intersection: the elements present in both sets."""
        if not isinstance(other, Set):
            return NotImplemented
        check_compatible(self.element_type, other.element_type, "Intersection")

        smallest, largest = self, other
        if len(largest) < len(smallest):
            smallest, largest = largest, smallest

        return self._spawn(
            element_type=self.element_type,
            elements=(v for v in smallest._storage if v in largest._storage),
        )

    def __or__(self, other: "Set[U]") -> "Set[T | U]":
        """Union: every element of this set, then every element of `other`."""
        if not isinstance(other, Set):
            return NotImplemented
        return self._spawn(
            capacity=max(len(self), len(other)),
            element_type=widen(self.element_type, other.element_type),
            elements=chain(self._storage, other._storage),
        )

    def __sub__(self, other: "Set | Iterable") -> "Set[T]":
        """Difference: the elements of this set that are not in `other`.

        `other` may be a `Set` or any iterable; with an iterable, this is
        ``self.dup().subtract(other)``.
        """
        if isinstance(other, Set):
            check_compatible(self.element_type, other.element_type, "Difference")
            return self._spawn(
                element_type=self.element_type,
                elements=(v for v in self._storage if v not in other._storage),
            )
        if isinstance(other, Iterable):
            return self.dup().subtract(other)
        return NotImplemented

    def __xor__(self, other: "Set[U] | Iterable[U]") -> "Set[T | U]":
        """Symmetric difference.

        With a `Set` operand the result holds the elements of this set that
        are not in `other`, followed by the elements of `other` that are not
        in this set.

        With any other iterable, each item of `other` toggles its membership
        in a copy of this set: it is removed if currently present and added
        otherwise. An item that appears twice in `other` is toggled twice, so
        ``Set([1]) ^ [2, 2]`` is ``Set{1}``.
        """
        if isinstance(other, Set):
            return self._spawn(
                element_type=widen(self.element_type, other.element_type),
                elements=chain(
                    (v for v in self._storage if v not in other._storage),
                    (v for v in other._storage if v not in self._storage),
                ),
            )
        if isinstance(other, Iterable):
            # An arbitrary iterable declares no element type, so neither
            # does the result.
            result = self._spawn(capacity=len(self), elements=self._storage)
            for value in other:
                if value in result:
                    result.delete(value)
                else:
                    result.add(value)
            return result
        return NotImplemented

    def __isub__(self, other: Iterable) -> "Set[T]":
        if not isinstance(other, Iterable):
            return NotImplemented
        return self.subtract(other)

    def __ixor__(self, other: Iterable[T]) -> "Set[T]":
        # Toggle each item in place, like ``self ^ other``.
        if not isinstance(other, Iterable):
            return NotImplemented
        if other is self:
            other = list(other)
        for value in other:
            if value in self._storage:
                self.delete(value)
            else:
                self.add(value)
        return self

    def _reflected_unsupported(self, other):
        return NotImplemented

    __rand__ = __ror__ = __rsub__ = __rxor__ = _reflected_unsupported

    # Copying

    def dup(self) -> "Set[T]":
        """Return a new set holding the same element objects."""
        return self._spawn(
            capacity=len(self),
            element_type=self.element_type,
            elements=self._storage,
        )

    def clone(self, memo: dict | None = None) -> "Set[T]":
        """Return a new set holding a deep copy of every element."""
        result = self._spawn(capacity=len(self))
        if memo is not None:
            memo[id(self)] = result
        for value in self._storage:
            result.add(copy.deepcopy(value, memo))
        result.element_type = self.element_type
        return result

    def __copy__(self) -> "Set[T]":
        return self.dup()

    def __deepcopy__(self, memo) -> "Set[T]":
        return self.clone(memo)

    # Equality, hashing and printing

    def __eq__(self, other) -> bool:
        if not isinstance(other, Set):
            return NotImplemented
        return self is other or self._storage.keys() == other._storage.keys()

    def __hash__(self) -> int:
        return hash(frozenset(self._storage))

    def __repr__(self) -> str:
        return f"{type(self).__name__}{{{', '.join(map(repr, self._storage))}}}"

    def _repr_pretty_(self, p, cycle: bool) -> None:
        name = type(self).__name__
        if cycle:
            p.text(f"{name}{{...}}")
            return
        with p.group(len(name) + 1, f"{name}{{", "}"):
            for idx, value in enumerate(self._storage):
                if idx:
                    p.text(",")
                    p.breakable()
                p.pretty(value)


def to_set(source: Iterable[T], element_type=None) -> Set[T]:
    """Build a `Set` from the unique elements of `source`."""
    return Set(source, element_type=element_type)
