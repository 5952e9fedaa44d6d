"""
ChunkReader Reader - Runtime components for loading and reading passages.

This module provides:
- PassageRepository: Load passages from JSON or CSV sources
- ReadingEngine: Chunk-by-chunk reading cursor
- SelectionSet: Sentences tagged for focused practice
- ReadingSession: Loading, mode transitions and selection gating
"""

from .loader import (
    PassageSourceError,
    LoadError,
    ParseError,
    PassageRepository,
    JsonPassageRepository,
    CsvPassageRepository,
    build_passage_from_rows,
    create_repository,
)

from .progress import (
    Intent,
    ReadingEngine,
    resolve_active_sentences,
    initial_cursor,
    advance,
    retreat,
    reveal_translation,
    restart,
    acknowledge_end,
    change_active_sentences,
    apply_intent,
    can_advance,
    can_retreat,
)

from .selection import SelectionSet

from .navigator import ReadingSession

__all__ = [
    # Loader
    "PassageSourceError",
    "LoadError",
    "ParseError",
    "PassageRepository",
    "JsonPassageRepository",
    "CsvPassageRepository",
    "build_passage_from_rows",
    "create_repository",
    # Progress
    "Intent",
    "ReadingEngine",
    "resolve_active_sentences",
    "initial_cursor",
    "advance",
    "retreat",
    "reveal_translation",
    "restart",
    "acknowledge_end",
    "change_active_sentences",
    "apply_intent",
    "can_advance",
    "can_retreat",
    # Selection
    "SelectionSet",
    # Navigator
    "ReadingSession",
]
