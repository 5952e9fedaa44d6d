"""
SelectionSet - Sentences tagged by the reader for focused chunk practice.

The set is bound to one passage at a time. Ids that do not belong to the
bound passage are never admitted, so nothing leaks over from a previous
passage.
"""

from typing import Iterable, Iterator, Sequence

from chunkreader.schemas import Sentence


class SelectionSet:
    """Mutable set of sentence ids for the current passage."""

    def __init__(self, sentence_ids: Iterable[int] = ()):
        self._valid_ids: frozenset[int] = frozenset(sentence_ids)
        self._selected: set[int] = set()

    def bind(self, sentence_ids: Iterable[int]):
        """Scope the set to a new passage's sentence ids and clear it."""
        self._valid_ids = frozenset(sentence_ids)
        self.clear()

    def toggle(self, sentence_id: int) -> bool:
        """
        Add the id if absent, remove it if present.

        Returns True if membership changed. Unknown ids are ignored.
        """
        if sentence_id not in self._valid_ids:
            return False

        if sentence_id in self._selected:
            self._selected.remove(sentence_id)
        else:
            self._selected.add(sentence_id)
        return True

    def clear(self):
        self._selected.clear()

    def is_selected(self, sentence_id: int) -> bool:
        return sentence_id in self._selected

    @property
    def ids(self) -> frozenset[int]:
        return frozenset(self._selected)

    def filter(self, sentences: Sequence[Sentence]) -> list[Sentence]:
        """Selected sentences, in the order given (passage order)."""
        return [s for s in sentences if s.sentence_id in self._selected]

    def __contains__(self, sentence_id: object) -> bool:
        return sentence_id in self._selected

    def __iter__(self) -> Iterator[int]:
        return iter(sorted(self._selected))

    def __len__(self) -> int:
        return len(self._selected)

    def __bool__(self) -> bool:
        return bool(self._selected)

    def __repr__(self) -> str:
        return f"SelectionSet({sorted(self._selected)!r})"
