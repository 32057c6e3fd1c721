"""A `Set` of words that keeps length statistics up to date."""

from collections.abc import Iterable

from openset.set import Set


class WordSet(Set[str]):
    """A set of strings tracking the total length of the words it holds.

    `total_length` is maintained by the `add`, `delete` and `clear`
    overrides, so it stays correct however words get in or out: the
    constructor, `concat`, ``<<``, the set operators and the copy methods all
    go through those methods.

    Examples
    --------
    >>> words = WordSet(["apple", "fig"])
    >>> words << "kiwi"
    WordSet{'apple', 'fig', 'kiwi'}
    >>> words.total_length
    12
    """

    total_length: int

    def __init__(
        self,
        source: Iterable[str] | None = None,
        *,
        capacity: int | None = None,
        element_type=str,
    ) -> None:
        self.total_length = 0
        super().__init__(source, capacity=capacity, element_type=element_type)

    @staticmethod
    def _word_length(value) -> int:
        # Sets widened by a union may hold non-strings; they count as empty.
        return len(value) if isinstance(value, str) else 0

    def add(self, value: str) -> "WordSet":
        if value not in self:
            super().add(value)
            self.total_length += self._word_length(value)
        return self

    def delete(self, value) -> "WordSet":
        if value in self:
            super().delete(value)
            self.total_length -= self._word_length(value)
        return self

    def clear(self) -> "WordSet":
        super().clear()
        self.total_length = 0
        return self

    @property
    def average_length(self) -> float:
        if self.is_empty():
            return 0.0
        return self.total_length / len(self)

    def longest(self) -> str | None:
        """Return the longest word, the earliest inserted one on ties."""
        if self.is_empty():
            return None
        return max(self, key=self._word_length)
