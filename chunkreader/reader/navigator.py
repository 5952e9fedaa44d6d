"""
ReadingSession - Passage loading, sentence selection and mode transitions.

Provides:
- Passage index access with error capture
- Generation-tracked passage loads (stale results are dropped)
- Full/chunk mode switching with cursor reset rules
- Sentence tagging in full mode
- End-of-content actions (restart, acknowledge and switch)
"""

import logging
import threading
from concurrent.futures import Executor, Future
from typing import Optional

from chunkreader.schemas import IndexEntry, Passage, ReaderMode, ReadingCursor
from chunkreader.utils.settings import ReaderSettings

from .loader import PassageRepository, PassageSourceError
from .progress import ReadingEngine, resolve_active_sentences
from .selection import SelectionSet


logger = logging.getLogger(__name__)


class ReadingSession:
    """
    State for one reader: passage, selection, mode and reading engine.

    The engine is None until a passage has loaded successfully. While it is
    None every reading operation is a no-op.
    """

    def __init__(self, repository: PassageRepository, settings: Optional[ReaderSettings] = None):
        """
        Initialize session.

        Args:
            repository: Passage source
            settings: Reader settings (default: ReaderSettings())
        """
        self.repository = repository
        self.settings = settings or ReaderSettings()
        self.selection = SelectionSet()

        self.passage_id: Optional[str] = None
        self.passage: Optional[Passage] = None
        self.mode: Optional[ReaderMode] = None
        self.engine: Optional[ReadingEngine] = None

        self.index_error: Optional[str] = None
        self.load_error: Optional[str] = None
        self.loading = False

        self._generation = 0
        self._load_lock = threading.Lock()

    # -------------------------------------------------------------------------
    # Passage Index
    # -------------------------------------------------------------------------

    def list_passages(self) -> list[IndexEntry]:
        """Get index entries, recording any failure in index_error."""
        try:
            entries = self.repository.list_passages()
        except PassageSourceError as e:
            logger.error(f"Failed to load passage index: {e}")
            self.index_error = str(e) or "Failed to load passages"
            return []
        self.index_error = None
        return entries

    def select_passage(self, passage_id: str):
        """
        Choose a passage: selection is cleared and no mode is active.

        Choosing a passage whose last load failed clears the error so the
        next load retries it.
        """
        with self._load_lock:
            if passage_id != self.passage_id:
                # Any load still in flight belongs to the previous choice
                self._generation += 1
                self.loading = False
                self.load_error = None
                self.passage = None
                self.engine = None
                self.selection.bind(())
            else:
                self.selection.clear()
                if self.passage is None:
                    self.load_error = None
            self.passage_id = passage_id
            self.mode = None

    # -------------------------------------------------------------------------
    # Loading
    # -------------------------------------------------------------------------

    @property
    def generation(self) -> int:
        return self._generation

    @property
    def is_initialized(self) -> bool:
        return self.engine is not None

    def begin_load(self, passage_id: str) -> int:
        """Start a load and return its generation. Older loads become stale."""
        with self._load_lock:
            self._generation += 1
            self.passage_id = passage_id
            self.loading = True
            self.load_error = None
            generation = self._generation
        logger.info(f"Loading passage '{passage_id}' (generation {generation})")
        return generation

    def finish_load(self, generation: int, passage: Passage) -> bool:
        """
        Apply a completed load.

        Returns False (and changes nothing) if a newer load has started since.
        The generation check and the state writes share one lock.
        """
        sentence_ids = passage.sentence_ids
        with self._load_lock:
            if generation != self._generation:
                logger.info(f"Dropping stale load of '{passage.id}' (generation {generation})")
                return False

            if self.passage is None or self.passage.id != passage.id:
                self.selection.bind(sentence_ids)
            self.passage = passage
            self.loading = False
            self.load_error = None
            self._reset_engine(self.mode or ReaderMode.FULL)
            return True

    def fail_load(self, generation: int, error: Exception) -> bool:
        """
        Record a failed load. The session stays uninitialized.

        Returns False if a newer load has started since.
        """
        with self._load_lock:
            if generation != self._generation:
                logger.info(f"Dropping stale load failure (generation {generation}): {error}")
                return False

            logger.error(f"Failed to load passage '{self.passage_id}': {error}")
            self.passage = None
            self.engine = None
            self.loading = False
            self.load_error = str(error) or "Failed to load data"
            return True

    def load_passage(self, passage_id: str) -> bool:
        """Load a passage synchronously. Returns True on success."""
        generation = self.begin_load(passage_id)
        try:
            passage = self.repository.get_passage(passage_id)
        except PassageSourceError as e:
            self.fail_load(generation, e)
            return False
        return self.finish_load(generation, passage)

    def load_passage_async(self, passage_id: str, executor: Executor) -> Future:
        """
        Fetch a passage on an executor.

        The returned future resolves to True if this load was applied, False
        if it failed or was superseded by a newer load.
        """
        generation = self.begin_load(passage_id)
        result: Future = Future()

        def on_done(fetch: Future):
            error = fetch.exception()
            if error is not None:
                self.fail_load(generation, error)
                if isinstance(error, PassageSourceError):
                    result.set_result(False)
                else:
                    result.set_exception(error)
                return
            result.set_result(self.finish_load(generation, fetch.result()))

        executor.submit(self.repository.get_passage, passage_id).add_done_callback(on_done)
        return result

    # -------------------------------------------------------------------------
    # Mode Transitions
    # -------------------------------------------------------------------------

    def can_enter_chunk_mode(self) -> bool:
        """Chunk mode needs a loaded passage and, by default, a selection."""
        if self.passage is None:
            return False
        if not self.settings.require_selection_for_chunk_mode:
            return True
        return bool(self.selection)

    def leave_mode(self):
        """Back to mode selection. Passage and selection are kept."""
        self.mode = None

    def enter_mode(self, mode: ReaderMode) -> bool:
        """
        Switch reader mode.

        Entering chunk mode always starts a fresh walkthrough of the current
        selection. Leaving chunk mode keeps the selection.

        Returns False if the transition is not permitted.
        """
        if self.passage is None:
            return False
        if mode == ReaderMode.CHUNK and not self.can_enter_chunk_mode():
            logger.info("Chunk mode requires at least one tagged sentence")
            return False

        self.mode = mode
        self._reset_engine(mode)
        return True

    def _reset_engine(self, mode: ReaderMode):
        sentences = resolve_active_sentences(self.passage, mode, self.selection)
        if self.engine is None:
            self.engine = ReadingEngine(sentences, mode)
        else:
            self.engine.mode = mode
            self.engine.initialize(sentences)

    @property
    def active_sentences(self):
        if self.engine is None:
            return []
        return self.engine.active_sentences

    # -------------------------------------------------------------------------
    # Selection
    # -------------------------------------------------------------------------

    def toggle_sentence(self, sentence_id: int) -> bool:
        """Tag or untag a sentence. Only allowed in full mode."""
        if self.passage is None or self.mode != ReaderMode.FULL:
            return False
        return self.selection.toggle(sentence_id)

    def clear_selection(self):
        self.selection.clear()

    # -------------------------------------------------------------------------
    # Reading
    # -------------------------------------------------------------------------

    def advance(self) -> Optional[ReadingCursor]:
        return self.engine.advance() if self.engine else None

    def retreat(self) -> Optional[ReadingCursor]:
        return self.engine.retreat() if self.engine else None

    def reveal_translation(self) -> Optional[ReadingCursor]:
        return self.engine.reveal_translation() if self.engine else None

    def restart(self) -> Optional[ReadingCursor]:
        """End-of-content action: read the active sentences again."""
        return self.engine.restart() if self.engine else None

    def acknowledge_end(self, switch_to: Optional[ReaderMode] = None) -> bool:
        """
        End-of-content action: dismiss the prompt, optionally changing mode.

        Returns False if uninitialized or the mode switch was refused.
        """
        if self.engine is None:
            return False
        self.engine.acknowledge_end()
        if switch_to is not None and switch_to != self.mode:
            return self.enter_mode(switch_to)
        return True
