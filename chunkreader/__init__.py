"""ChunkReader - Chunk-by-chunk passage reader for language learners."""

__version__ = "0.1.0"
