"""RagSearch Chunk Domain Model - A retrieval-sized unit of a document.

This module contains the Chunk domain model. A chunk is produced once by the
chunker, receives its embedding before storage and is never edited in place:
attaching an embedding or metadata yields a new instance.
"""

import math
from dataclasses import dataclass, field, replace
from datetime import datetime, timezone
from typing import Any, Dict, Optional, Sequence, Tuple, Union
from uuid import UUID

from ..codec import parse_vector_literal, to_vector_literal
from ..exceptions import ModelError, ValidationError
from ..types import ChunkId, ChunkIndex, DocumentId, TenantId, TokenCount


def _utc_now() -> datetime:
    return datetime.now(timezone.utc)


@dataclass(frozen=True)
class Chunk:
    """Domain model representing one chunk of a document.
    
    Attributes:
        document_id: Parent document
        tenant_id: Owning tenant, copied from the document
        chunk_index: Zero-based position among the document's chunks
        content: Whitespace-normalized text, never blank
        token_count: Heuristic token estimate
        id: Unique chunk identifier
        embedding: Vector attached before storage (None right after chunking)
        metadata: Opaque key-value map
        created_at: Creation time, UTC
    """
    
    document_id: DocumentId
    tenant_id: TenantId
    chunk_index: ChunkIndex
    content: str
    token_count: TokenCount
    id: Optional[ChunkId] = None
    embedding: Optional[Tuple[float, ...]] = None
    metadata: Dict[str, Any] = field(default_factory=dict)
    created_at: datetime = field(default_factory=_utc_now)
    
    def __post_init__(self):
        """Normalize defaults and validate chunk after initialization."""
        if self.metadata is None:
            object.__setattr__(self, "metadata", {})
        if self.created_at is None:
            object.__setattr__(self, "created_at", _utc_now())
        if self.embedding is not None and not isinstance(self.embedding, tuple):
            object.__setattr__(self, "embedding", _as_vector(self.embedding))
        self._validate()
    
    def _validate(self) -> None:
        """Validate chunk model attributes."""
        if self.document_id is None:
            raise ValidationError("document_id", self.document_id, "Document ID cannot be null")
        
        if self.tenant_id is None:
            raise ValidationError("tenant_id", self.tenant_id, "Tenant ID cannot be null")
        
        if self.chunk_index is None or self.chunk_index < 0:
            raise ValidationError("chunk_index", self.chunk_index, "Chunk index must be >= 0")
        
        if not self.content or not self.content.strip():
            raise ValidationError("content", self.content, "Content cannot be blank")
        
        if self.token_count is None or self.token_count < 0:
            raise ValidationError("token_count", self.token_count, "Token count must be >= 0")
    
    @property
    def has_embedding(self) -> bool:
        """Whether a vector has been attached."""
        return self.embedding is not None
    
    @property
    def char_count(self) -> int:
        """Number of characters in the content."""
        return len(self.content)
    
    def with_embedding(self, embedding: Optional[Sequence[float]]) -> "Chunk":
        """Create a new Chunk with the given embedding attached."""
        return replace(self, embedding=_as_vector(embedding) if embedding is not None else None)
    
    def with_metadata(self, metadata: Dict[str, Any]) -> "Chunk":
        """Create a new Chunk with its metadata replaced."""
        return replace(self, metadata=dict(metadata or {}))
    
    def with_id(self, chunk_id: ChunkId) -> "Chunk":
        """Create a new Chunk with the specified ID."""
        return replace(self, id=chunk_id)
    
    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Chunk":
        """Create a Chunk model from a dictionary.
        
        Identifiers may be given as strings; ``created_at`` may be an ISO string.
        
        Raises:
            ValidationError: If a required field is missing or invalid
            ModelError: If the dictionary cannot be converted
        """
        for required in ("document_id", "tenant_id", "chunk_index", "content", "token_count"):
            if data.get(required) is None:
                raise ValidationError(required, None, f"{required} is required")
        
        try:
            chunk_id = data.get("id")
            if chunk_id is not None:
                chunk_id = ChunkId(_as_uuid(chunk_id))
            
            created_at = data.get("created_at")
            if isinstance(created_at, str):
                created_at = datetime.fromisoformat(created_at)
            
            return cls(
                id=chunk_id,
                document_id=DocumentId(_as_uuid(data["document_id"])),
                tenant_id=TenantId(_as_uuid(data["tenant_id"])),
                chunk_index=ChunkIndex(int(data["chunk_index"])),
                content=data["content"],
                token_count=TokenCount(int(data["token_count"])),
                embedding=data.get("embedding"),
                metadata=data.get("metadata") or {},
                created_at=created_at,
            )
        except (ValueError, TypeError) as e:
            raise ModelError("Chunk", "from_dict", f"Invalid data format: {e}")
    
    def to_dict(self) -> Dict[str, Any]:
        """Convert Chunk model to a dictionary.
        
        Identifiers become strings and the embedding its bracketed literal form.
        """
        result: Dict[str, Any] = {
            "document_id": str(self.document_id),
            "tenant_id": str(self.tenant_id),
            "chunk_index": self.chunk_index,
            "content": self.content,
            "token_count": self.token_count,
            "metadata": dict(self.metadata),
            "created_at": self.created_at.isoformat(),
        }
        if self.id is not None:
            result["id"] = str(self.id)
        if self.embedding is not None:
            result["embedding"] = to_vector_literal(self.embedding)
        return result
    
    def __repr__(self) -> str:
        dims = len(self.embedding) if self.embedding is not None else None
        return (
            f"Chunk(id={self.id}, document_id={self.document_id}, "
            f"index={self.chunk_index}, tokens={self.token_count}, dims={dims})"
        )


def _as_uuid(value: Any) -> UUID:
    return value if isinstance(value, UUID) else UUID(str(value))


def _as_vector(values: Union[Sequence[float], str]) -> Tuple[float, ...]:
    if isinstance(values, str):
        return tuple(parse_vector_literal(values))
    try:
        vector = tuple(float(v) for v in values)
    except (TypeError, ValueError) as e:
        raise ValidationError("embedding", values, f"Embedding values must be numeric: {e}")
    return vector


def is_finite_vector(values: Sequence[float]) -> bool:
    """Whether every component of the vector is a finite number."""
    return all(math.isfinite(v) for v in values)
