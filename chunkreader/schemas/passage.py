"""
Passage schemas for ChunkReader.

Defines Pydantic models for reading content:
- Chunk: paired source/translation text, the smallest revealable unit
- Sentence: ordered chunks with a stable identifier
- Passage: titled collection of sentences in canonical reading order
- IndexEntry: summary record for passage selection
"""

import re
from typing import Optional

from pydantic import (
    AliasChoices,
    BaseModel,
    ConfigDict,
    Field,
    field_validator,
)


_WHITESPACE = re.compile(r"\s+")


class Chunk(BaseModel):
    """One revealable unit of a sentence. Sources may call the fields en/ko."""
    model_config = ConfigDict(frozen=True, populate_by_name=True)

    source_text: str = Field(validation_alias=AliasChoices("source_text", "en"))
    translated_text: str = Field(
        default="",
        validation_alias=AliasChoices("translated_text", "ko"),
    )


class Sentence(BaseModel):
    """Ordered, non-empty group of chunks."""
    model_config = ConfigDict(frozen=True)

    sentence_id: int
    chunks: list[Chunk] = Field(..., min_length=1)

    @property
    def last_chunk_index(self) -> int:
        return len(self.chunks) - 1

    @property
    def plain_text(self) -> str:
        """Source text of all chunks joined into one line."""
        parts = [c.source_text.strip() for c in self.chunks]
        joined = " ".join(p for p in parts if p)
        return _WHITESPACE.sub(" ", joined).strip()


class Passage(BaseModel):
    """
    Titled passage.

    Sentences are always stored ascending by sentence_id, whatever order the
    source declared them in.
    """
    model_config = ConfigDict(frozen=True, populate_by_name=True)

    id: str = Field(validation_alias=AliasChoices("id", "passage_id"))
    title: str
    sentences: list[Sentence] = Field(..., min_length=1)

    @field_validator("sentences")
    @classmethod
    def sentences_sorted_unique(cls, v: list[Sentence]) -> list[Sentence]:
        ordered = sorted(v, key=lambda s: s.sentence_id)
        ids = [s.sentence_id for s in ordered]
        if len(set(ids)) != len(ids):
            raise ValueError("sentence_id values must be unique within a passage")
        return ordered

    @property
    def sentence_ids(self) -> list[int]:
        return [s.sentence_id for s in self.sentences]

    def get_sentence(self, sentence_id: int) -> Optional[Sentence]:
        """Look up a sentence by its identifier."""
        for sentence in self.sentences:
            if sentence.sentence_id == sentence_id:
                return sentence
        return None


class IndexEntry(BaseModel):
    """Lightweight passage info for the passage list."""
    model_config = ConfigDict(frozen=True)

    id: str
    title: str
