"""Bit-level readers and writers, buffered streams, an arena and hash tables for demo data."""

__version__ = "0.1.0"
__all__ = [
    "arena",
    "bitstream",
    "bitwriter",
    "coords",
    "filereader",
    "hashtable",
    "memory_stream",
]