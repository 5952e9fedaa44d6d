"""
Reading progress engine - Chunk-by-chunk cursor over the active sentences.

Provides:
- Pure cursor transitions (advance, retreat, reveal, restart, acknowledge end)
- Intent dispatch for the view shell
- ReadingEngine: stateful wrapper owning mode, active sentences and cursor
- Active sentence resolution from passage, mode and selection

Transitions never raise. Requests that make no sense in the current state
return the cursor unchanged.
"""

import logging
from enum import Enum
from typing import Optional, Sequence

from chunkreader.schemas import (
    Chunk,
    Passage,
    ReaderMode,
    ReadingCursor,
    Sentence,
)

from .selection import SelectionSet


logger = logging.getLogger(__name__)

INITIAL_CURSOR = ReadingCursor()


class Intent(str, Enum):
    """User intents forwarded by the view shell."""
    ADVANCE = "advance"
    RETREAT = "retreat"
    REVEAL = "reveal"
    RESTART = "restart"
    ACKNOWLEDGE_END = "acknowledge_end"


# -----------------------------------------------------------------------------
# Active Sentences
# -----------------------------------------------------------------------------

def resolve_active_sentences(
    passage: Passage,
    mode: ReaderMode,
    selection: SelectionSet,
) -> list[Sentence]:
    """
    Derive the sentence list the cursor walks over.

    Full mode reads everything. Chunk mode reads only the selected sentences
    in passage order, and falls back to the whole passage when nothing is
    selected.
    """
    if mode == ReaderMode.FULL:
        return list(passage.sentences)

    if not selection:
        logger.warning(
            f"Chunk mode entered with empty selection on '{passage.id}', reading all sentences"
        )
        return list(passage.sentences)

    return selection.filter(passage.sentences)


# -----------------------------------------------------------------------------
# Pure Transitions
# -----------------------------------------------------------------------------

def initial_cursor() -> ReadingCursor:
    """Cursor at the first sentence with nothing revealed."""
    return INITIAL_CURSOR


def is_in_bounds(cursor: ReadingCursor, sentences: Sequence[Sentence]) -> bool:
    """Check the cursor addresses a real sentence and chunk slot."""
    if not sentences or cursor.sentence_position >= len(sentences):
        return False
    return cursor.chunk_position <= sentences[cursor.sentence_position].last_chunk_index


def can_advance(cursor: ReadingCursor, sentences: Sequence[Sentence]) -> bool:
    # Advancing past the end is itself a transition (into reached_end).
    return bool(sentences)


def can_retreat(cursor: ReadingCursor, sentences: Sequence[Sentence]) -> bool:
    if not sentences:
        return False
    if cursor.chunk_position > 0:
        return True
    return cursor.chunk_position == 0 and cursor.sentence_position > 0


def advance(cursor: ReadingCursor, sentences: Sequence[Sentence]) -> ReadingCursor:
    """
    Reveal the next chunk.

    Order of checks:
    1. Nothing revealed yet: reveal chunk 0
    2. More chunks in this sentence: next chunk
    3. Last chunk of the last sentence: flag reached_end, stay put
    4. Otherwise: first chunk of the next sentence
    """
    if not sentences:
        return cursor

    sentence = sentences[cursor.sentence_position]

    if cursor.chunk_position < 0:
        return cursor.model_copy(update={
            "chunk_position": 0,
            "translation_revealed_at": None,
        })

    if cursor.chunk_position < sentence.last_chunk_index:
        return cursor.model_copy(update={
            "chunk_position": cursor.chunk_position + 1,
            "translation_revealed_at": None,
        })

    if cursor.sentence_position >= len(sentences) - 1:
        return cursor.model_copy(update={"reached_end": True})

    return ReadingCursor(
        sentence_position=cursor.sentence_position + 1,
        chunk_position=0,
    )


def retreat(cursor: ReadingCursor, sentences: Sequence[Sentence]) -> ReadingCursor:
    """
    Step back one chunk, crossing into the previous sentence's last chunk.

    reached_end does not block retreating; moving off the final chunk clears it.
    """
    if not can_retreat(cursor, sentences):
        return cursor

    if cursor.chunk_position > 0:
        return ReadingCursor(
            sentence_position=cursor.sentence_position,
            chunk_position=cursor.chunk_position - 1,
        )

    previous = cursor.sentence_position - 1
    return ReadingCursor(
        sentence_position=previous,
        chunk_position=sentences[previous].last_chunk_index,
    )


def reveal_translation(cursor: ReadingCursor, mode: ReaderMode) -> ReadingCursor:
    """Show the translation of the active chunk. Chunk mode only."""
    if mode != ReaderMode.CHUNK or cursor.chunk_position < 0:
        return cursor
    if cursor.translation_revealed_at == cursor.chunk_position:
        return cursor
    return cursor.model_copy(update={"translation_revealed_at": cursor.chunk_position})


def restart(cursor: ReadingCursor) -> ReadingCursor:
    """Go back to the beginning after end of content."""
    return initial_cursor()


def acknowledge_end(cursor: ReadingCursor) -> ReadingCursor:
    """Dismiss the end-of-content signal without moving."""
    if not cursor.reached_end:
        return cursor
    return cursor.model_copy(update={"reached_end": False})


def change_active_sentences(
    cursor: ReadingCursor,
    sentences: Sequence[Sentence],
) -> ReadingCursor:
    """
    Carry a cursor over to a new active sentence list.

    Keeps the position when it still addresses a real sentence and chunk of the
    new list, otherwise starts over. reached_end never carries over.
    """
    if not is_in_bounds(cursor, sentences):
        return initial_cursor()
    return acknowledge_end(cursor)


def apply_intent(
    cursor: ReadingCursor,
    intent: Intent,
    sentences: Sequence[Sentence],
    mode: ReaderMode = ReaderMode.CHUNK,
) -> ReadingCursor:
    """Dispatch a view intent to its transition."""
    if intent == Intent.ADVANCE:
        return advance(cursor, sentences)
    if intent == Intent.RETREAT:
        return retreat(cursor, sentences)
    if intent == Intent.REVEAL:
        return reveal_translation(cursor, mode)
    if intent == Intent.RESTART:
        return restart(cursor)
    if intent == Intent.ACKNOWLEDGE_END:
        return acknowledge_end(cursor)
    return cursor


# -----------------------------------------------------------------------------
# Engine
# -----------------------------------------------------------------------------

class ReadingEngine:
    """
    Stateful reading cursor for one (passage, mode, active list) combination.

    The view shell reads state through the query methods and forwards intents
    through the transition methods. Every transition replaces the cursor with
    a new frozen value.
    """

    def __init__(self, sentences: Sequence[Sentence] = (), mode: ReaderMode = ReaderMode.CHUNK):
        """
        Initialize engine.

        Args:
            sentences: Active sentence list, already filtered by selection
            mode: Reader mode; translation reveal only works in chunk mode
        """
        self.mode = mode
        self._sentences: list[Sentence] = []
        self.cursor = initial_cursor()
        self.initialize(sentences)

    @property
    def active_sentences(self) -> list[Sentence]:
        return list(self._sentences)

    @property
    def is_empty(self) -> bool:
        return not self._sentences

    # -------------------------------------------------------------------------
    # Transitions
    # -------------------------------------------------------------------------

    def initialize(self, sentences: Sequence[Sentence]):
        """Start over on a new active sentence list."""
        self._sentences = list(sentences)
        self.cursor = initial_cursor()

    def advance(self) -> ReadingCursor:
        self.cursor = advance(self.cursor, self._sentences)
        if self.cursor.reached_end:
            logger.debug("End of active sentences reached")
        return self.cursor

    def retreat(self) -> ReadingCursor:
        self.cursor = retreat(self.cursor, self._sentences)
        return self.cursor

    def reveal_translation(self) -> ReadingCursor:
        self.cursor = reveal_translation(self.cursor, self.mode)
        return self.cursor

    def restart(self) -> ReadingCursor:
        self.cursor = restart(self.cursor)
        return self.cursor

    def acknowledge_end(self) -> ReadingCursor:
        self.cursor = acknowledge_end(self.cursor)
        return self.cursor

    def change_active_sentences(self, sentences: Sequence[Sentence]) -> ReadingCursor:
        """Swap the active list, keeping the position only if still valid."""
        self._sentences = list(sentences)
        self.cursor = change_active_sentences(self.cursor, self._sentences)
        return self.cursor

    def dispatch(self, intent: Intent) -> ReadingCursor:
        self.cursor = apply_intent(self.cursor, intent, self._sentences, self.mode)
        return self.cursor

    # -------------------------------------------------------------------------
    # Queries
    # -------------------------------------------------------------------------

    @property
    def can_advance(self) -> bool:
        return can_advance(self.cursor, self._sentences)

    @property
    def can_retreat(self) -> bool:
        return can_retreat(self.cursor, self._sentences)

    @property
    def reached_end(self) -> bool:
        return self.cursor.reached_end

    def current_sentence(self) -> Optional[Sentence]:
        if not self._sentences:
            return None
        return self._sentences[self.cursor.sentence_position]

    def current_chunk(self) -> Optional[Chunk]:
        """Most recently revealed chunk, or None before the first reveal."""
        sentence = self.current_sentence()
        if sentence is None or self.cursor.chunk_position < 0:
            return None
        return sentence.chunks[self.cursor.chunk_position]

    def visible_chunks(self) -> list[Chunk]:
        """Chunks of the current sentence revealed so far."""
        sentence = self.current_sentence()
        if sentence is None or self.cursor.chunk_position < 0:
            return []
        return sentence.chunks[: self.cursor.chunk_position + 1]

    def is_translation_visible_for(self, chunk_index: int) -> bool:
        return (
            self.cursor.translation_revealed_at is not None
            and self.cursor.translation_revealed_at == chunk_index
        )

    def is_translation_visible_for_current_chunk(self) -> bool:
        return self.cursor.chunk_position >= 0 and self.is_translation_visible_for(
            self.cursor.chunk_position
        )

    def progress_position(self) -> tuple[int, int]:
        """
        Get sentence position as (current, total).

        Returns (0, 0) when there is nothing to read.
        """
        if not self._sentences:
            return (0, 0)
        return (self.cursor.sentence_position + 1, len(self._sentences))

    def progress_label(self) -> str:
        current, total = self.progress_position()
        return f"Sentence {current} of {total}"
