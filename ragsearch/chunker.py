"""Chunker module for RagSearch - splits documents into retrieval-sized chunks.

Splitting cascades from paragraphs to sentences to a character-budget hard
split. Consecutive paragraph and sentence chunks share an overlap tail taken
from the end of the previous chunk.
"""

import math
import re
import time
import uuid
from typing import Callable, List, Optional

from loguru import logger

from core.exceptions import ValidationError
from core.models import Chunk, Document
from core.observability import MetricsHook, NullMetrics, timed
from core.types import CHARS_PER_TOKEN, ChunkId, ChunkIndex, TokenCount

PARAGRAPH_PATTERN = re.compile(r"\n\n+")
SENTENCE_PATTERN = re.compile(r"(?<=[.!?])\s+")

PARAGRAPH_SEPARATOR = "\n\n"
SENTENCE_SEPARATOR = " "


def estimate_tokens(text: Optional[str]) -> int:
    """Heuristic token count: one token per four characters, rounded up."""
    if not text:
        return 0
    return math.ceil(len(text) / CHARS_PER_TOKEN)


def normalize_content(text: str) -> str:
    """Convert line endings to ``\\n`` and strip surrounding whitespace."""
    return text.replace("\r\n", "\n").replace("\r", "\n").strip()


def _tail(text: str, length: int) -> str:
    if length <= 0:
        return ""
    return text[len(text) - length:] if len(text) > length else text


class Chunker:
    """Splits documents into ordered, overlapping chunks.

    Instances hold only immutable configuration and can be shared between
    threads.
    """

    def __init__(
        self,
        chunk_size: int = 400,
        chunk_overlap: int = 100,
        metrics: Optional[MetricsHook] = None,
    ):
        """Initialize the chunker.

        Args:
            chunk_size: Maximum estimated tokens per chunk
            chunk_overlap: Tokens repeated from the end of the previous chunk
            metrics: Optional metrics hook

        Raises:
            ValidationError: If the size/overlap combination is invalid
        """
        if chunk_size is None or chunk_size <= 0:
            raise ValidationError("chunk_size", chunk_size, f"Chunk size must be greater than 0, got: {chunk_size}")
        if chunk_overlap is None or chunk_overlap < 0:
            raise ValidationError("chunk_overlap", chunk_overlap, f"Chunk overlap must be >= 0, got: {chunk_overlap}")
        if chunk_overlap >= chunk_size:
            raise ValidationError(
                "chunk_overlap",
                chunk_overlap,
                f"Chunk overlap ({chunk_overlap}) must be less than chunk size ({chunk_size})",
            )

        self._chunk_size = chunk_size
        self._chunk_overlap = chunk_overlap
        self._metrics = metrics or NullMetrics()

        logger.info(f"Initialized chunker: chunk_size={chunk_size} tokens, chunk_overlap={chunk_overlap} tokens")

    @property
    def chunk_size(self) -> int:
        return self._chunk_size

    @property
    def chunk_overlap(self) -> int:
        return self._chunk_overlap

    def chunk(self, document: Document) -> List[Chunk]:
        """Split a persisted document into chunks.

        Args:
            document: Document with id, tenant_id and non-blank content

        Returns:
            Chunks with dense indices starting at 0 and no embeddings

        Raises:
            ValidationError: If the document is missing or incomplete
        """
        self._validate_document(document)

        start_time = time.perf_counter()
        with timed(self._metrics, "chunker.chunk"):
            content = normalize_content(document.content)
            chunks: List[Chunk] = []
            self._pack(
                document,
                PARAGRAPH_PATTERN.split(content),
                PARAGRAPH_SEPARATOR,
                chunks,
                self._split_by_sentences,
            )

        elapsed_ms = (time.perf_counter() - start_time) * 1000
        avg_tokens = sum(c.token_count for c in chunks) / len(chunks) if chunks else 0
        logger.info(
            f"Document '{document.title}' (id={document.id}) split into {len(chunks)} chunks "
            f"in {elapsed_ms:.1f}ms, content_length={len(content)} chars, avg_chunk_tokens={avg_tokens:.1f}"
        )
        self._metrics.increment("chunker.documents")
        self._metrics.increment("chunker.chunks", len(chunks))
        return chunks

    def _validate_document(self, document: Optional[Document]) -> None:
        if document is None:
            raise ValidationError("document", None, "Document cannot be null")
        if document.id is None:
            raise ValidationError(
                "document.id", None, "Document ID cannot be null, document must be persisted before chunking"
            )
        if document.tenant_id is None:
            raise ValidationError("document.tenant_id", None, "Document tenant ID cannot be null")
        if document.content is None or not document.content.strip():
            raise ValidationError("document.content", document.content, "Document content cannot be null or blank")

    def _pack(
        self,
        document: Document,
        units: List[str],
        separator: str,
        chunks: List[Chunk],
        split_oversized: Callable[[Document, str, List[Chunk]], None],
    ) -> None:
        """Greedily pack units into chunks of at most ``chunk_size`` tokens.

        Units that are too large on their own go to ``split_oversized`` after
        the pending buffer is flushed without an overlap seed.
        """
        buffer = ""
        buffer_tokens = 0

        for raw_unit in units:
            unit = raw_unit.strip()
            if not unit:
                continue

            unit_tokens = estimate_tokens(unit)

            if unit_tokens > self._chunk_size:
                if buffer_tokens > 0:
                    self._emit(document, chunks, buffer, buffer_tokens)
                    buffer, buffer_tokens = "", 0
                split_oversized(document, unit, chunks)
                continue

            if buffer_tokens + unit_tokens > self._chunk_size and buffer_tokens > 0:
                self._emit(document, chunks, buffer, buffer_tokens)
                buffer = self._overlap_seed(buffer, unit_tokens)
                buffer_tokens = estimate_tokens(buffer)

            if buffer:
                buffer += separator
            buffer += unit
            buffer_tokens += unit_tokens

        if buffer_tokens > 0:
            self._emit(document, chunks, buffer, buffer_tokens)

    def _split_by_sentences(self, document: Document, paragraph: str, chunks: List[Chunk]) -> None:
        self._pack(
            document,
            SENTENCE_PATTERN.split(paragraph),
            SENTENCE_SEPARATOR,
            chunks,
            self._hard_split,
        )

    def _hard_split(self, document: Document, text: str, chunks: List[Chunk]) -> None:
        """Cut text into character-budget segments, breaking at spaces where possible."""
        target_chars = int(self._chunk_size * CHARS_PER_TOKEN)
        length = len(text)
        position = 0
        produced = 0

        while position < length:
            end = min(position + target_chars, length)

            if end < length:
                last_space = text.rfind(" ", 0, end + 1)
                if last_space > position:
                    end = last_space

            segment = text[position:end].strip()
            if segment:
                self._emit(document, chunks, segment, estimate_tokens(segment))
                produced += 1

            position = end
            if position < length and text[position] == " ":
                position += 1

        self._metrics.increment("chunker.hard_splits")
        logger.warning(f"Hard-split oversized sentence into {produced} chunks for document {document.id}")

    def extract_overlap_text(self, text: str) -> str:
        """Tail of ``text`` to repeat at the start of the next chunk.

        The tail is ``chunk_overlap * 4`` characters. If a ``". "`` boundary
        appears in its first half, the tail starts after that boundary.
        """
        target_chars = int(self._chunk_overlap * CHARS_PER_TOKEN)

        if len(text) <= target_chars:
            return text

        tail = _tail(text, target_chars)
        boundary = tail.find(". ")
        if 0 < boundary < len(tail) // 2:
            return tail[boundary + 2:]
        return tail

    def _overlap_seed(self, text: str, next_unit_tokens: int) -> str:
        # The seed must leave room for the unit that follows it.
        seed = self.extract_overlap_text(text)
        if estimate_tokens(seed) + next_unit_tokens > self._chunk_size:
            budget_chars = int((self._chunk_size - next_unit_tokens) * CHARS_PER_TOKEN)
            seed = _tail(seed, budget_chars)
        return seed

    def _emit(self, document: Document, chunks: List[Chunk], text: str, token_count: int) -> None:
        chunks.append(
            Chunk(
                id=ChunkId(uuid.uuid4()),
                document_id=document.id,
                tenant_id=document.tenant_id,
                chunk_index=ChunkIndex(len(chunks)),
                content=text.strip(),
                token_count=TokenCount(token_count),
            )
        )
