"""RagSearch test package."""

# Test utilities shared by the test modules
import uuid
from typing import Any, Dict, List, Optional, Sequence

from core.models import Chunk, Document

TEST_DIMENSION = 4


def make_document(content: Optional[str], title: str = "test document", **overrides: Any) -> Document:
    """Create a persisted document with fresh identifiers."""
    fields: Dict[str, Any] = {
        "id": uuid.uuid4(),
        "tenant_id": uuid.uuid4(),
        "content": content,
        "title": title,
    }
    fields.update(overrides)
    return Document(**fields)


def make_chunk(
    document_id: uuid.UUID,
    tenant_id: uuid.UUID,
    chunk_index: int,
    content: str = "chunk content",
    embedding: Optional[Sequence[float]] = (1.0, 0.0, 0.0, 0.0),
    metadata: Optional[Dict[str, Any]] = None,
) -> Chunk:
    """Create an embedded chunk ready for storage."""
    return Chunk(
        id=uuid.uuid4(),
        document_id=document_id,
        tenant_id=tenant_id,
        chunk_index=chunk_index,
        content=content,
        token_count=len(content) // 4 + 1,
        embedding=embedding,
        metadata=metadata or {},
    )


class FakeEmbeddingProvider:
    """Deterministic keyword embedder: one axis each for cats, dogs and birds."""

    KEYWORDS = ("cats", "dogs", "birds")

    def __init__(self, drop_last: bool = False):
        self.drop_last = drop_last
        self.calls: List[List[str]] = []

    @property
    def name(self) -> str:
        return "fake"

    @property
    def model(self) -> str:
        return "keyword-axes"

    @property
    def dims(self) -> int:
        return TEST_DIMENSION

    @property
    def batch_size(self) -> int:
        return 2

    def vector_for(self, text: str) -> List[float]:
        lowered = text.lower()
        return [1.0 if word in lowered else 0.0 for word in self.KEYWORDS] + [0.125]

    async def embed(self, texts: List[str]) -> List[List[float]]:
        self.calls.append(list(texts))
        vectors = [self.vector_for(text) for text in texts]
        return vectors[:-1] if self.drop_last else vectors

    async def embed_single(self, text: str) -> List[float]:
        return (await self.embed([text]))[0]

    async def embed_batch(self, texts: List[str], batch_size: Optional[int] = None) -> List[List[float]]:
        size = batch_size or self.batch_size
        vectors: List[List[float]] = []
        for i in range(0, len(texts), size):
            vectors.extend(await self.embed(texts[i:i + size]))
        return vectors

    async def health_check(self) -> Dict[str, Any]:
        return {"provider": self.name, "errors": []}
