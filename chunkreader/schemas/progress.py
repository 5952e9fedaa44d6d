"""
Reading progress schemas for ChunkReader.

Defines Pydantic models for the in-session reading state:
- Reader mode (chunk walkthrough or full passage)
- Reading cursor
"""

from enum import Enum
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field


class ReaderMode(str, Enum):
    CHUNK = "chunk"
    FULL = "full"


class ReadingCursor(BaseModel):
    """
    Position of the reader within the active sentence list.

    chunk_position is -1 before the first chunk of the session is revealed.
    translation_revealed_at, when set, always equals chunk_position.
    """
    model_config = ConfigDict(frozen=True)

    sentence_position: int = Field(default=0, ge=0)
    chunk_position: int = Field(default=-1, ge=-1)
    translation_revealed_at: Optional[int] = None
    reached_end: bool = False
