"""
Reader renderer - Generate HTML for passage reading screens.

Features:
- Theme palettes (background, text, button and card colours)
- Sentence frame with progressively revealed chunks
- Per-chunk translation overlay
- Full passage view with tagged-sentence highlighting
- End-of-content prompt
"""

import html
from typing import Iterable, Optional

from chunkreader.reader import ReadingEngine
from chunkreader.schemas import Chunk, IndexEntry, Passage, Sentence


# Theme key to palette mapping
THEMES = {
    "white": {"bg": "#f7f8fa", "text": "#111", "btn_bg": "#ffffff", "btn_text": "#111",
              "btn_border": "rgba(0,0,0,0.15)", "card_bg": "#ffffff", "card_border": "rgba(0,0,0,0.12)"},
    "black": {"bg": "#0f1115", "text": "#f5f7fb", "btn_bg": "#1a1d24", "btn_text": "#f5f7fb",
              "btn_border": "rgba(255,255,255,0.25)", "card_bg": "#1a1d24", "card_border": "rgba(255,255,255,0.2)"},
    "pink": {"bg": "#ffe6f1", "text": "#351220", "btn_bg": "#ffd6e8", "btn_text": "#30101f",
             "btn_border": "rgba(0,0,0,0.12)", "card_bg": "#ffeaf5", "card_border": "rgba(0,0,0,0.1)"},
    "sky": {"bg": "#e5f4ff", "text": "#153041", "btn_bg": "#d6edff", "btn_text": "#112535",
            "btn_border": "rgba(0,0,0,0.12)", "card_bg": "#e9f5ff", "card_border": "rgba(0,0,0,0.1)"},
    "green": {"bg": "#e9f7ef", "text": "#123022", "btn_bg": "#d9f0e3", "btn_text": "#123022",
              "btn_border": "rgba(0,0,0,0.12)", "card_bg": "#e9f7ef", "card_border": "rgba(0,0,0,0.1)"},
}

THEME_LABELS = {
    "white": "White",
    "black": "Black",
    "pink": "Pink",
    "sky": "Sky",
    "green": "Green",
}


def get_reader_css(theme: str = "white") -> str:
    """Get CSS styles for the reader in the given theme (unknown keys fall back to white)."""
    palette = THEMES.get(theme, THEMES["white"])
    return f"""
    <style>
    .stApp {{
        background-color: {palette['bg']};
        color: {palette['text']};
    }}
    .reader-header {{
        margin-bottom: 12px;
    }}
    .reader-title {{
        font-size: 1.2em;
        font-weight: 700;
    }}
    .reader-sub {{
        font-size: 0.85em;
        opacity: 0.7;
        margin-top: 4px;
    }}
    .sentence-frame {{
        background: {palette['card_bg']};
        border: 1px solid {palette['card_border']};
        border-radius: 16px;
        padding: 20px;
        min-height: 160px;
        margin: 0 auto 12px;
    }}
    .chunk-list {{
        display: flex;
        flex-direction: column;
        gap: 10px;
    }}
    .chunk-block {{
        display: flex;
        flex-direction: column;
        gap: 6px;
    }}
    .chunk-source {{
        font-size: 1.25em;
        font-weight: 600;
        line-height: 1.4;
    }}
    .chunk-translation {{
        font-size: 1em;
        opacity: 0.8;
        padding: 6px 10px;
        border-radius: 8px;
        background: rgba(100, 100, 100, 0.08);
    }}
    .frame-placeholder {{
        opacity: 0.6;
        font-size: 0.95em;
    }}
    .full-passage {{
        background: {palette['card_bg']};
        border: 1px solid {palette['card_border']};
        border-radius: 16px;
        padding: 20px;
        line-height: 1.9;
        font-size: 1.1em;
    }}
    .sentence-inline {{
        border-radius: 4px;
        padding: 1px 2px;
    }}
    .sentence-selected {{
        background: #fff7c2;
        color: #111;
    }}
    .passage-card {{
        background: {palette['card_bg']};
        border: 1px solid {palette['card_border']};
        border-radius: 12px;
        padding: 12px 14px;
    }}
    .passage-card-title {{
        font-weight: 700;
    }}
    .passage-card-meta {{
        font-size: 0.85em;
        opacity: 0.65;
        margin-top: 4px;
    }}
    .end-prompt {{
        background: {palette['card_bg']};
        border: 1px solid {palette['card_border']};
        border-radius: 12px;
        padding: 16px;
        margin: 12px 0;
    }}
    .end-prompt-title {{
        font-size: 1.1em;
        font-weight: 700;
        margin-bottom: 8px;
    }}
    .stButton > button {{
        background: {palette['btn_bg']};
        color: {palette['btn_text']};
        border: 1px solid {palette['btn_border']};
    }}
    </style>
    """


def render_chunk(chunk: Chunk, show_translation: bool = False) -> str:
    """Render one revealed chunk, with its translation if shown."""
    parts = ['<div class="chunk-block">']
    parts.append(f'<div class="chunk-source">{html.escape(chunk.source_text)}</div>')
    if show_translation:
        parts.append(f'<div class="chunk-translation">{html.escape(chunk.translated_text)}</div>')
    parts.append('</div>')
    return ''.join(parts)


def render_sentence_frame(
    sentence: Optional[Sentence],
    chunk_position: int,
    translation_revealed_at: Optional[int] = None,
) -> str:
    """
    Render the sentence frame for chunk mode.

    Args:
        sentence: Current sentence (None renders an empty frame)
        chunk_position: Last revealed chunk index, -1 if none
        translation_revealed_at: Chunk index whose translation is shown

    Returns:
        HTML string with chunks 0..chunk_position
    """
    if sentence is None or chunk_position < 0:
        return (
            '<div class="sentence-frame">'
            '<div class="frame-placeholder">Tap Next to reveal the first chunk.</div>'
            '</div>'
        )

    visible = sentence.chunks[: chunk_position + 1]
    items = [
        render_chunk(chunk, show_translation=(translation_revealed_at == i))
        for i, chunk in enumerate(visible)
    ]
    return f'<div class="sentence-frame"><div class="chunk-list">{"".join(items)}</div></div>'


def render_engine_frame(engine: ReadingEngine) -> str:
    """Render the sentence frame straight from engine state."""
    cursor = engine.cursor
    return render_sentence_frame(
        engine.current_sentence(),
        cursor.chunk_position,
        cursor.translation_revealed_at,
    )


def render_full_passage(passage: Passage, selected_ids: Iterable[int] = ()) -> str:
    """Render the whole passage as running text, highlighting tagged sentences."""
    selected = set(selected_ids)
    spans = []
    for idx, sentence in enumerate(passage.sentences):
        css = "sentence-inline sentence-selected" if sentence.sentence_id in selected else "sentence-inline"
        spans.append(
            f'<span class="{css}" data-sentence-id="{sentence.sentence_id}" '
            f'aria-label="Sentence {idx + 1}">{html.escape(sentence.plain_text)}</span>'
        )
    return f'<div class="full-passage">{" ".join(spans)}</div>'


def render_progress_header(title: str, subtitle: str = "") -> str:
    """Render the reader header (title plus progress or mode line)."""
    sub = f'<div class="reader-sub">{html.escape(subtitle)}</div>' if subtitle else ''
    return (
        f'<div class="reader-header"><div class="reader-title">{html.escape(title)}</div>'
        f'{sub}</div>'
    )


def render_passage_card(entry: IndexEntry) -> str:
    return (
        f'<div class="passage-card"><div class="passage-card-title">{html.escape(entry.title)}</div>'
        f'<div class="passage-card-meta">ID: {html.escape(entry.id)}</div></div>'
    )


def render_end_prompt(total_sentences: int) -> str:
    """Render the end-of-content message shown after the last chunk."""
    noun = "sentence" if total_sentences == 1 else "sentences"
    return (
        '<div class="end-prompt">'
        '<div class="end-prompt-title">End of passage</div>'
        f'<div>You have read all {total_sentences} {noun}. '
        'Start again from the beginning, or switch to the full view.</div>'
        '</div>'
    )
