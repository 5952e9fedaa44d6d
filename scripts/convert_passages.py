#!/usr/bin/env python3
"""
convert_passages.py - Convert CSV passage sources into JSON passage files.

Reads index.csv and one <id>.csv per passage (columns: sentence_id,
chunk_index, en, ko), groups chunk rows into sentences, and writes the JSON
layout the reader app serves: index.json plus one <id>.json per passage.

Usage:
  python scripts/convert_passages.py --input data/csv --output data/passages
"""

import argparse
import json
import logging
import sys
from pathlib import Path

PROJECT_ROOT = Path(__file__).parent.parent
sys.path.insert(0, str(PROJECT_ROOT))

from chunkreader.reader import CsvPassageRepository, PassageSourceError
from chunkreader.schemas import Passage

logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s - %(levelname)s - %(message)s"
)
logger = logging.getLogger(__name__)


def passage_to_record(passage: Passage) -> dict:
    """Serialize a passage in the en/ko JSON layout."""
    return {
        "passage_id": passage.id,
        "title": passage.title,
        "sentences": [
            {
                "sentence_id": sentence.sentence_id,
                "chunks": [
                    {"en": chunk.source_text, "ko": chunk.translated_text}
                    for chunk in sentence.chunks
                ],
            }
            for sentence in passage.sentences
        ],
    }


def convert_passages(input_dir: Path, output_dir: Path) -> dict:
    """
    Convert every passage listed in the CSV index.

    Passages that fail to load are skipped and reported. The written
    index.json only lists converted passages.

    Returns:
        Dict with converted ids and failures (id -> message)

    Raises:
        PassageSourceError: If the CSV index itself cannot be loaded
    """
    repository = CsvPassageRepository(input_dir)
    entries = repository.list_passages()
    output_dir.mkdir(parents=True, exist_ok=True)

    converted = []
    failures = {}
    index = []

    for entry in entries:
        try:
            passage = repository.get_passage(entry.id)
        except PassageSourceError as e:
            logger.warning(f"Skipping '{entry.id}': {e}")
            failures[entry.id] = str(e)
            continue

        out_path = output_dir / f"{passage.id}.json"
        with open(out_path, "w", encoding="utf-8") as f:
            json.dump(passage_to_record(passage), f, indent=2, ensure_ascii=False)

        converted.append(passage.id)
        index.append({"id": passage.id, "title": entry.title or passage.title})
        logger.info(f"  Wrote {out_path.name} ({len(passage.sentences)} sentences)")

    with open(output_dir / "index.json", "w", encoding="utf-8") as f:
        json.dump(index, f, indent=2, ensure_ascii=False)

    return {"converted": converted, "failures": failures}


def main():
    parser = argparse.ArgumentParser(
        description="Convert CSV passage sources into JSON passage files",
        formatter_class=argparse.RawDescriptionHelpFormatter
    )
    parser.add_argument(
        "--input",
        type=Path,
        default=PROJECT_ROOT / "data" / "csv",
        help="Directory with index.csv and <id>.csv files"
    )
    parser.add_argument(
        "--output",
        type=Path,
        default=PROJECT_ROOT / "data" / "passages",
        help="Output directory for index.json and <id>.json files"
    )

    args = parser.parse_args()

    logger.info(f"Converting passages from {args.input}...")
    try:
        result = convert_passages(args.input, args.output)
    except PassageSourceError as e:
        logger.error(f"Cannot read passage index: {e}")
        sys.exit(1)

    logger.info("=" * 50)
    logger.info(f"Converted: {len(result['converted'])}")
    if result["failures"]:
        logger.warning(f"Failed: {len(result['failures'])}")
        for passage_id, message in result["failures"].items():
            logger.warning(f"  - {passage_id}: {message}")


if __name__ == "__main__":
    main()
