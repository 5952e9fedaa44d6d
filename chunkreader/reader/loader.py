"""
PassageRepository - Load passage index and passage content from disk.

Provides read-only access to:
- The passage index (id, title)
- Passages as sentences of (source, translation) chunk pairs

Two source formats are supported:
- JSON: index.json plus one <id>.json per passage
- CSV: index.csv plus one <id>.csv per passage, one row per chunk
"""

import json
import logging
import math
from pathlib import Path
from typing import Any, Iterable, Mapping, Optional

import pandas as pd
from pydantic import ValidationError

from chunkreader.schemas import Chunk, IndexEntry, Passage, Sentence
from chunkreader.utils.settings import ReaderSettings


logger = logging.getLogger(__name__)

INDEX_JSON = "index.json"
INDEX_CSV = "index.csv"

SOURCE_COLUMNS = ("en", "source_text")
TRANSLATION_COLUMNS = ("ko", "translated_text")


class PassageSourceError(Exception):
    """Base class for passage source failures."""


class LoadError(PassageSourceError):
    """Source unreachable or record not found."""


class ParseError(PassageSourceError):
    """Source content malformed or empty."""


# -----------------------------------------------------------------------------
# Row Grouping
# -----------------------------------------------------------------------------

def _coerce_int(value: Any, field: str) -> int:
    """Coerce a raw identifier to int, rejecting non-integral values."""
    if isinstance(value, bool):
        raise ParseError(f"Invalid {field}: {value!r}")
    if isinstance(value, float):
        if math.isnan(value) or not value.is_integer():
            raise ParseError(f"Invalid {field}: {value!r}")
        return int(value)
    try:
        return int(str(value).strip())
    except (TypeError, ValueError) as e:
        raise ParseError(f"Invalid {field}: {value!r}") from e


def _pick(row: Mapping[str, Any], names: tuple[str, ...], required: bool = True) -> str:
    for name in names:
        if name in row and row[name] is not None:
            value = row[name]
            if isinstance(value, float) and math.isnan(value):
                return ""
            return str(value)
    if required:
        raise ParseError(f"Missing required field: {' or '.join(names)}")
    return ""


def build_passage_from_rows(
    passage_id: str,
    title: str,
    rows: Iterable[Mapping[str, Any]],
) -> Passage:
    """
    Build a passage from flat chunk rows.

    Each row needs sentence_id, source text (en/source_text) and optionally
    chunk_index and translation (ko/translated_text). Rows are sorted by
    (sentence_id, chunk_index) before grouping, so out-of-order rows and ties
    are tolerated. Without chunk_index, file order decides.

    Raises:
        ParseError: If there are no rows or a row is malformed
    """
    keyed = []
    for position, row in enumerate(rows):
        if "sentence_id" not in row:
            raise ParseError(f"Missing required field: sentence_id (row {position})")
        sentence_id = _coerce_int(row["sentence_id"], "sentence_id")
        raw_index = row.get("chunk_index")
        if raw_index is None or (isinstance(raw_index, str) and not raw_index.strip()):
            chunk_index = position
        else:
            chunk_index = _coerce_int(raw_index, "chunk_index")
        chunk = Chunk(
            source_text=_pick(row, SOURCE_COLUMNS),
            translated_text=_pick(row, TRANSLATION_COLUMNS, required=False),
        )
        keyed.append((sentence_id, chunk_index, position, chunk))

    if not keyed:
        raise ParseError(f"Passage '{passage_id}' has no content")

    keyed.sort(key=lambda item: (item[0], item[1], item[2]))

    grouped: dict[int, list[Chunk]] = {}
    for sentence_id, _, _, chunk in keyed:
        grouped.setdefault(sentence_id, []).append(chunk)

    try:
        return Passage(
            id=passage_id,
            title=title,
            sentences=[
                Sentence(sentence_id=sid, chunks=chunks)
                for sid, chunks in grouped.items()
            ],
        )
    except ValidationError as e:
        raise ParseError(f"Invalid passage '{passage_id}': {e}") from e


# -----------------------------------------------------------------------------
# Repositories
# -----------------------------------------------------------------------------

class PassageRepository:
    """
    Base passage repository rooted at a directory.

    Subclasses implement the format-specific readers.
    """

    def __init__(self, passages_dir: str | Path):
        """
        Initialize repository.

        Args:
            passages_dir: Directory holding the index and passage files
        """
        self.passages_dir = Path(passages_dir)

    def list_passages(self) -> list[IndexEntry]:
        raise NotImplementedError

    def get_passage(self, passage_id: str) -> Passage:
        raise NotImplementedError

    def _ensure_dir(self):
        if not self.passages_dir.is_dir():
            raise LoadError(f"Passage directory not found: {self.passages_dir}")

    def _passage_path(self, passage_id: str, suffix: str) -> Path:
        """Resolve a passage file, refusing ids that escape the directory."""
        if not passage_id or Path(passage_id).name != passage_id or passage_id.startswith("."):
            raise LoadError(f"Invalid passage id: {passage_id!r}")
        path = self.passages_dir / f"{passage_id}{suffix}"
        if not path.exists():
            raise LoadError(f"Passage not found: {passage_id}")
        return path

    def get_index_entry(self, passage_id: str) -> Optional[IndexEntry]:
        for entry in self.list_passages():
            if entry.id == passage_id:
                return entry
        return None


class JsonPassageRepository(PassageRepository):
    """Passages stored as index.json plus <id>.json files."""

    def _read_json(self, path: Path) -> Any:
        try:
            with open(path, "r", encoding="utf-8") as f:
                text = f.read()
        except OSError as e:
            raise LoadError(f"Failed to read {path}: {e}") from e
        if not text.strip():
            raise ParseError(f"{path.name} has no content")
        try:
            return json.loads(text)
        except json.JSONDecodeError as e:
            raise ParseError(f"Malformed JSON in {path.name}: {e}") from e

    def list_passages(self) -> list[IndexEntry]:
        """Get all index entries in file order."""
        self._ensure_dir()
        path = self.passages_dir / INDEX_JSON
        if not path.exists():
            raise LoadError(f"Passage index not found: {path}")

        data = self._read_json(path)
        if not isinstance(data, list):
            raise ParseError(f"{INDEX_JSON} must contain a list of passages")
        try:
            return [IndexEntry(**row) for row in data]
        except (TypeError, ValidationError) as e:
            raise ParseError(f"Invalid entry in {INDEX_JSON}: {e}") from e

    def get_passage(self, passage_id: str) -> Passage:
        """Load one passage by id."""
        self._ensure_dir()
        path = self._passage_path(passage_id, ".json")
        data = self._read_json(path)
        if not isinstance(data, dict):
            raise ParseError(f"{path.name} must contain a passage object")
        if not data.get("sentences"):
            raise ParseError(f"Passage '{passage_id}' has no content")
        try:
            passage = Passage.model_validate(data)
        except ValidationError as e:
            raise ParseError(f"Invalid passage '{passage_id}': {e}") from e

        logger.info(f"Loaded passage '{passage.id}' ({len(passage.sentences)} sentences)")
        return passage


class CsvPassageRepository(PassageRepository):
    """Passages stored as index.csv plus one <id>.csv of chunk rows each."""

    def _read_csv(self, path: Path) -> pd.DataFrame:
        try:
            df = pd.read_csv(path, dtype=str, keep_default_na=False)
        except pd.errors.EmptyDataError as e:
            raise ParseError(f"{path.name} has no content") from e
        except pd.errors.ParserError as e:
            raise ParseError(f"Malformed CSV in {path.name}: {e}") from e
        except OSError as e:
            raise LoadError(f"Failed to read {path}: {e}") from e
        df.columns = [c.strip() for c in df.columns]
        if df.empty:
            raise ParseError(f"{path.name} has no content")
        return df

    def list_passages(self) -> list[IndexEntry]:
        """Get all index entries in file order."""
        self._ensure_dir()
        path = self.passages_dir / INDEX_CSV
        if not path.exists():
            raise LoadError(f"Passage index not found: {path}")

        df = self._read_csv(path)
        missing = {"id", "title"} - set(df.columns)
        if missing:
            raise ParseError(f"{INDEX_CSV} missing columns: {', '.join(sorted(missing))}")
        return [
            IndexEntry(id=row["id"].strip(), title=row["title"].strip())
            for row in df[["id", "title"]].to_dict("records")
        ]

    def get_passage(self, passage_id: str) -> Passage:
        """Load one passage by id, sorting chunk rows before grouping."""
        self._ensure_dir()
        path = self._passage_path(passage_id, ".csv")
        df = self._read_csv(path)

        if "sentence_id" not in df.columns:
            raise ParseError(f"{path.name} missing column: sentence_id")
        if not any(c in df.columns for c in SOURCE_COLUMNS):
            raise ParseError(f"{path.name} missing column: {' or '.join(SOURCE_COLUMNS)}")

        try:
            df["sentence_id"] = pd.to_numeric(df["sentence_id"].str.strip(), errors="raise")
            if "chunk_index" in df.columns:
                df["chunk_index"] = pd.to_numeric(df["chunk_index"].str.strip(), errors="raise")
            else:
                df["chunk_index"] = range(len(df))
        except ValueError as e:
            raise ParseError(f"Non-numeric identifier in {path.name}: {e}") from e

        df = df.sort_values(["sentence_id", "chunk_index"], kind="stable")

        title = self._resolve_title(passage_id, df)
        passage = build_passage_from_rows(passage_id, title, df.to_dict("records"))

        logger.info(f"Loaded passage '{passage.id}' ({len(passage.sentences)} sentences)")
        return passage

    def _resolve_title(self, passage_id: str, df: pd.DataFrame) -> str:
        """Title column first, then the index, then the id itself."""
        if "title" in df.columns:
            titles = [t.strip() for t in df["title"] if t and t.strip()]
            if titles:
                return titles[0]
        try:
            entry = self.get_index_entry(passage_id)
        except PassageSourceError:
            entry = None
        return entry.title if entry else passage_id


def create_repository(settings: ReaderSettings) -> PassageRepository:
    """Build the repository matching the configured source format."""
    if settings.source_format == "csv":
        return CsvPassageRepository(settings.passages_dir)
    return JsonPassageRepository(settings.passages_dir)
