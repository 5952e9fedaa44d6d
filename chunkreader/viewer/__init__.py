"""
ChunkReader Viewer - Rendering components for the reader screens.

This module provides:
- Theme palettes and reader CSS
- Chunk and sentence frame rendering
- Full passage rendering with tagged sentences
"""

from .reader import (
    THEMES,
    THEME_LABELS,
    get_reader_css,
    render_chunk,
    render_sentence_frame,
    render_engine_frame,
    render_full_passage,
    render_progress_header,
    render_passage_card,
    render_end_prompt,
)

__all__ = [
    "THEMES",
    "THEME_LABELS",
    "get_reader_css",
    "render_chunk",
    "render_sentence_frame",
    "render_engine_frame",
    "render_full_passage",
    "render_progress_header",
    "render_passage_card",
    "render_end_prompt",
]
