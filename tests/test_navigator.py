"""
ReadingSession tests: loading, mode transitions and selection gating.
"""

from concurrent.futures import ThreadPoolExecutor

import pytest

from chunkreader.reader import (
    LoadError,
    ParseError,
    PassageRepository,
    ReadingSession,
    initial_cursor,
)
from chunkreader.schemas import Chunk, IndexEntry, Passage, ReaderMode, Sentence
from chunkreader.utils import ReaderSettings


def make_passage(passage_id: str, sentence_ids, n_chunks: int = 2) -> Passage:
    return Passage(
        id=passage_id,
        title=f"Passage {passage_id}",
        sentences=[
            Sentence(
                sentence_id=sid,
                chunks=[Chunk(source_text=f"{passage_id}-{sid}-{i}") for i in range(n_chunks)],
            )
            for sid in sentence_ids
        ],
    )


class MemoryRepository(PassageRepository):
    """In-memory passage source."""

    def __init__(self, passages, index_error=None):
        super().__init__(".")
        self.passages = {p.id: p for p in passages}
        self.index_error = index_error

    def list_passages(self):
        if self.index_error:
            raise LoadError(self.index_error)
        return [IndexEntry(id=p.id, title=p.title) for p in self.passages.values()]

    def get_passage(self, passage_id):
        if passage_id == "broken":
            raise ParseError("Passage 'broken' has no content")
        if passage_id not in self.passages:
            raise LoadError(f"Passage not found: {passage_id}")
        return self.passages[passage_id]


@pytest.fixture
def repository():
    return MemoryRepository([
        make_passage("a", [1, 3, 5, 7, 9]),
        make_passage("b", [10, 20]),
    ])


@pytest.fixture
def session(repository):
    return ReadingSession(repository)


@pytest.fixture
def loaded(session):
    session.select_passage("a")
    assert session.load_passage("a")
    return session


class TestPassageIndex:
    """Test index listing and error capture."""

    def test_list_passages(self, session):
        entries = session.list_passages()
        assert [e.id for e in entries] == ["a", "b"]
        assert session.index_error is None

    def test_list_passages_error_captured(self):
        session = ReadingSession(MemoryRepository([], index_error="index.json missing"))
        assert session.list_passages() == []
        assert session.index_error == "index.json missing"


class TestLoading:
    """Test passage loading and load generations."""

    def test_uninitialized_before_load(self, session):
        assert not session.is_initialized
        assert session.advance() is None
        assert session.retreat() is None
        assert session.reveal_translation() is None
        assert session.restart() is None
        assert not session.acknowledge_end()

    def test_load_success(self, loaded):
        assert loaded.is_initialized
        assert loaded.passage.id == "a"
        assert loaded.engine.cursor == initial_cursor()
        assert loaded.load_error is None
        assert not loaded.loading

    def test_load_not_found(self, session):
        assert not session.load_passage("missing")
        assert not session.is_initialized
        assert session.load_error == "Passage not found: missing"
        assert session.advance() is None

    def test_load_parse_error(self, session):
        assert not session.load_passage("broken")
        assert "no content" in session.load_error

    def test_failed_reload_leaves_uninitialized(self, loaded):
        assert not loaded.load_passage("missing")
        assert loaded.engine is None
        assert loaded.passage is None

    def test_stale_load_dropped(self, session, repository):
        first = session.begin_load("a")
        second = session.begin_load("b")
        assert not session.finish_load(first, repository.passages["a"])
        assert session.passage is None
        assert session.finish_load(second, repository.passages["b"])
        assert session.passage.id == "b"

    def test_stale_failure_dropped(self, session, repository):
        first = session.begin_load("a")
        second = session.begin_load("b")
        assert session.finish_load(second, repository.passages["b"])
        assert not session.fail_load(first, LoadError("timeout"))
        assert session.load_error is None
        assert session.is_initialized

    def test_select_other_passage_invalidates_inflight_load(self, session, repository):
        pending = session.begin_load("a")
        session.select_passage("b")
        assert not session.finish_load(pending, repository.passages["a"])
        assert session.passage is None

    def test_reselecting_failed_passage_retries(self, session, repository):
        restored = make_passage("c", [1])
        session.select_passage("c")
        assert not session.load_passage("c")
        assert session.load_error == "Passage not found: c"

        repository.passages["c"] = restored
        session.select_passage("c")
        assert session.load_error is None
        assert session.passage is None
        assert session.load_passage("c")
        assert session.passage.id == "c"

    def test_reselecting_loaded_passage_keeps_it(self, loaded):
        loaded.select_passage("a")
        assert loaded.passage.id == "a"
        assert loaded.load_error is None

    def test_load_begun_during_finish_wins(self, session, repository):
        class InterruptedPassage(Passage):
            @property
            def sentence_ids(self):
                session.begin_load("b")
                return super().sentence_ids

        source = repository.passages["a"]
        stale = InterruptedPassage(id="a", title=source.title, sentences=source.sentences)
        first = session.begin_load("a")
        assert not session.finish_load(first, stale)
        assert session.passage is None
        assert session.loading
        assert session.passage_id == "b"

    def test_concurrent_loads_apply_latest(self, session, repository):
        generations = [session.begin_load(pid) for pid in ("a", "b", "a", "b")]
        with ThreadPoolExecutor(max_workers=4) as executor:
            results = list(executor.map(
                lambda g: session.finish_load(g, repository.passages["b" if g % 2 == 0 else "a"]),
                generations,
            ))
        assert results == [False, False, False, True]
        assert session.passage.id == "b"

    def test_load_passage_async(self, session):
        session.select_passage("b")
        with ThreadPoolExecutor(max_workers=1) as executor:
            future = session.load_passage_async("b", executor)
            assert future.result(timeout=5) is True
        assert session.passage.id == "b"
        assert session.is_initialized

    def test_load_passage_async_failure(self, session):
        with ThreadPoolExecutor(max_workers=1) as executor:
            future = session.load_passage_async("missing", executor)
            assert future.result(timeout=5) is False
        assert session.load_error == "Passage not found: missing"


class TestModeTransitions:
    """Test chunk/full switching rules."""

    def test_chunk_mode_requires_selection(self, loaded):
        assert not loaded.can_enter_chunk_mode()
        assert not loaded.enter_mode(ReaderMode.CHUNK)
        assert loaded.mode is None

    def test_unfiltered_chunk_walkthrough_when_allowed(self, repository):
        session = ReadingSession(
            repository, ReaderSettings(require_selection_for_chunk_mode=False)
        )
        session.select_passage("a")
        session.load_passage("a")
        assert session.enter_mode(ReaderMode.CHUNK)
        assert [s.sentence_id for s in session.active_sentences] == [1, 3, 5, 7, 9]

    def test_enter_mode_before_load_refused(self, session):
        assert not session.enter_mode(ReaderMode.FULL)

    def test_selection_filters_chunk_list(self, loaded):
        assert loaded.enter_mode(ReaderMode.FULL)
        loaded.toggle_sentence(7)
        loaded.toggle_sentence(3)
        assert loaded.enter_mode(ReaderMode.CHUNK)
        assert [s.sentence_id for s in loaded.active_sentences] == [3, 7]

    def test_chunk_entry_always_reinitializes(self, loaded):
        loaded.enter_mode(ReaderMode.FULL)
        loaded.toggle_sentence(1)
        loaded.toggle_sentence(3)
        loaded.enter_mode(ReaderMode.CHUNK)
        for _ in range(3):
            loaded.advance()
        assert loaded.engine.cursor.sentence_position == 1

        loaded.enter_mode(ReaderMode.FULL)
        loaded.enter_mode(ReaderMode.CHUNK)
        assert loaded.engine.cursor == initial_cursor()

    def test_leaving_chunk_mode_keeps_selection(self, loaded):
        loaded.enter_mode(ReaderMode.FULL)
        loaded.toggle_sentence(5)
        loaded.enter_mode(ReaderMode.CHUNK)
        assert loaded.enter_mode(ReaderMode.FULL)
        assert loaded.selection.ids == frozenset({5})
        assert len(loaded.active_sentences) == 5

    def test_leave_mode_keeps_passage_and_selection(self, loaded):
        loaded.enter_mode(ReaderMode.FULL)
        loaded.toggle_sentence(9)
        loaded.leave_mode()
        assert loaded.mode is None
        assert loaded.load_passage("a")
        assert loaded.selection.ids == frozenset({9})
        assert loaded.can_enter_chunk_mode()


class TestSelection:
    """Test sentence tagging through the session."""

    def test_toggle_only_in_full_mode(self, loaded):
        assert not loaded.toggle_sentence(3)
        loaded.enter_mode(ReaderMode.FULL)
        assert loaded.toggle_sentence(3)
        loaded.enter_mode(ReaderMode.CHUNK)
        assert not loaded.toggle_sentence(5)
        assert loaded.selection.ids == frozenset({3})

    def test_toggle_unknown_sentence_ignored(self, loaded):
        loaded.enter_mode(ReaderMode.FULL)
        assert not loaded.toggle_sentence(4)
        assert not loaded.selection.is_selected(4)

    def test_new_passage_clears_selection(self, loaded):
        loaded.enter_mode(ReaderMode.FULL)
        loaded.toggle_sentence(3)
        loaded.select_passage("b")
        loaded.load_passage("b")
        assert not loaded.selection
        loaded.enter_mode(ReaderMode.FULL)
        assert not loaded.toggle_sentence(3)
        assert loaded.toggle_sentence(20)

    def test_clear_selection(self, loaded):
        loaded.enter_mode(ReaderMode.FULL)
        loaded.toggle_sentence(3)
        loaded.clear_selection()
        assert not loaded.can_enter_chunk_mode()


class TestEndOfContent:
    """Test the two end-of-content actions."""

    def reach_end(self, session):
        session.enter_mode(ReaderMode.FULL)
        session.toggle_sentence(9)
        session.enter_mode(ReaderMode.CHUNK)
        for _ in range(3):
            session.advance()
        assert session.engine.reached_end

    def test_restart(self, loaded):
        self.reach_end(loaded)
        loaded.restart()
        assert loaded.engine.cursor == initial_cursor()
        assert loaded.mode == ReaderMode.CHUNK

    def test_acknowledge_and_switch_to_full(self, loaded):
        self.reach_end(loaded)
        assert loaded.acknowledge_end(switch_to=ReaderMode.FULL)
        assert loaded.mode == ReaderMode.FULL
        assert not loaded.engine.reached_end
        assert loaded.selection.ids == frozenset({9})

    def test_acknowledge_without_switch(self, loaded):
        self.reach_end(loaded)
        assert loaded.acknowledge_end()
        assert not loaded.engine.reached_end
        assert loaded.engine.cursor.chunk_position == 1
