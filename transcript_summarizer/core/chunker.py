"""
Module for splitting transcripts into overlapping chunks.

The splitter works from the coarsest separator to the finest one (paragraphs,
lines, sentences, words, characters). Separators stay attached to the end of
the unit they close, so the units always concatenate back into the source
text. Units are packed greedily into chunks, and every chunk after the first
starts with the trailing ``chunk_overlap`` characters of its predecessor.
"""

import re
from typing import Iterable, List

from transcript_summarizer.models.schemas import Document, validate_chunk_parameters
from transcript_summarizer.utils.logger import logging


# Coarsest to finest. The character level is handled by hard splitting.
DEFAULT_SEPARATORS = [
    r"\n\n+",
    r"\n",
    r"[.!?]+[\"')\]]*\s+",
    r"\s+",
]


def _split_keeping_separator(text: str, pattern: str) -> List[str]:
    """Cut ``text`` after every match of ``pattern``."""
    pieces = []
    start = 0
    for match in re.finditer(pattern, text):
        if match.end() == start:
            continue
        pieces.append(text[start:match.end()])
        start = match.end()
    if start < len(text):
        pieces.append(text[start:])
    return pieces


class RecursiveTextChunker:
    """Splits text into bounded, overlapping chunks."""

    def __init__(self, chunk_size: int = 500, chunk_overlap: int = 10, separators: List[str] = None):
        """
        Initialize the chunker.

        Args:
            chunk_size: Maximum number of characters in a chunk
            chunk_overlap: Number of trailing characters of a chunk repeated
                at the start of the next one

        Raises:
            InvalidConfiguration: If the parameters do not satisfy
                0 <= chunk_overlap < chunk_size
        """
        validate_chunk_parameters(chunk_size, chunk_overlap)
        self.chunk_size = chunk_size
        self.chunk_overlap = chunk_overlap
        self.separators = list(DEFAULT_SEPARATORS if separators is None else separators)

    @property
    def unit_limit(self) -> int:
        """Largest unit that still fits next to a carried-over overlap."""
        return self.chunk_size - self.chunk_overlap

    def _atomic_units(self, text: str, level: int = 0) -> List[str]:
        if len(text) <= self.unit_limit:
            return [text]
        if level >= len(self.separators):
            step = self.unit_limit
            return [text[i:i + step] for i in range(0, len(text), step)]

        units = []
        for piece in _split_keeping_separator(text, self.separators[level]):
            if len(piece) <= self.unit_limit:
                units.append(piece)
            else:
                units.extend(self._atomic_units(piece, level + 1))
        return units

    def split_text(self, text: str) -> List[str]:
        """
        Split text into chunks.

        Args:
            text: Text to split

        Returns:
            Chunks in source order, each at most ``chunk_size`` characters
        """
        chunks = []
        buffer = ""
        for unit in self._atomic_units(text):
            if buffer and len(buffer) + len(unit) > self.chunk_size:
                chunks.append(buffer)
                buffer = buffer[len(buffer) - self.chunk_overlap:] if self.chunk_overlap else ""
            buffer += unit
        if buffer:
            chunks.append(buffer)
        return chunks

    def split_documents(self, documents: Iterable[Document]) -> List[Document]:
        """
        Split documents into chunk documents.

        Each chunk copies its parent's metadata and adds its position in the
        returned sequence and its character offset in the parent text.
        """
        chunked = []
        for document in documents:
            offset = 0
            for i, chunk in enumerate(self.split_text(document.text)):
                start_index = offset if i == 0 else offset - self.chunk_overlap
                offset = start_index + len(chunk)
                metadata = dict(document.metadata)
                metadata["chunk_index"] = len(chunked)
                metadata["start_index"] = start_index
                chunked.append(Document(text=chunk, metadata=metadata))

        logging.debug(
            f"Split {len(chunked)} chunks (chunk_size={self.chunk_size}, "
            f"chunk_overlap={self.chunk_overlap})"
        )
        return chunked


def split_document(document: Document, chunk_size: int, chunk_overlap: int) -> List[Document]:
    """Split a single document into overlapping chunk documents."""
    return RecursiveTextChunker(chunk_size, chunk_overlap).split_documents([document])
