"""
ChunkReader Schemas - Pydantic models for the passage reader.

This module exports all schema classes for:
- Passage: chunks, sentences, passages, index entries
- Progress: reader mode and reading cursor
"""

# Passage schemas
from .passage import (
    Chunk,
    Sentence,
    Passage,
    IndexEntry,
)

# Progress schemas
from .progress import (
    ReaderMode,
    ReadingCursor,
)

__all__ = [
    # Passage
    'Chunk',
    'Sentence',
    'Passage',
    'IndexEntry',
    # Progress
    'ReaderMode',
    'ReadingCursor',
]
