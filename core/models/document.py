"""RagSearch Document Model - The externally owned source of chunks.

Documents are created and persisted outside the core. The chunker only reads
``id``, ``tenant_id`` and ``content``; the remaining fields are carried for
logging and for callers that round-trip documents through dictionaries.
"""

from dataclasses import dataclass, field
from typing import Any, Dict, Optional
from uuid import UUID

from ..exceptions import ModelError
from ..types import DocumentId, TenantId


@dataclass(frozen=True)
class Document:
    """A text document owned by a tenant.

    Attributes:
        id: Persisted document identifier (None until the owner stores it)
        tenant_id: Owning tenant
        content: Raw text to be chunked
        title: Optional human-readable title
        source_url: Optional origin of the text
        metadata: Opaque key-value map, defaults to empty
    """

    id: Optional[DocumentId]
    tenant_id: Optional[TenantId]
    content: Optional[str]
    title: Optional[str] = None
    source_url: Optional[str] = None
    metadata: Dict[str, Any] = field(default_factory=dict)

    def __post_init__(self):
        """Normalize optional fields after initialization."""
        if self.metadata is None:
            object.__setattr__(self, "metadata", {})

    @property
    def is_persisted(self) -> bool:
        """Whether the document has been assigned an identifier."""
        return self.id is not None

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Document":
        """Create a Document from a dictionary.

        String identifiers are parsed into UUIDs.
        """
        try:
            doc_id = data.get("id")
            if doc_id is not None and not isinstance(doc_id, UUID):
                doc_id = UUID(str(doc_id))

            tenant_id = data.get("tenant_id")
            if tenant_id is not None and not isinstance(tenant_id, UUID):
                tenant_id = UUID(str(tenant_id))

            return cls(
                id=DocumentId(doc_id) if doc_id is not None else None,
                tenant_id=TenantId(tenant_id) if tenant_id is not None else None,
                content=data.get("content"),
                title=data.get("title"),
                source_url=data.get("source_url"),
                metadata=data.get("metadata") or {},
            )
        except (ValueError, TypeError) as e:
            raise ModelError("Document", "from_dict", f"Invalid data format: {e}")

    def to_dict(self) -> Dict[str, Any]:
        """Convert the document to a dictionary with string identifiers."""
        result: Dict[str, Any] = {
            "content": self.content,
            "metadata": dict(self.metadata),
        }
        if self.id is not None:
            result["id"] = str(self.id)
        if self.tenant_id is not None:
            result["tenant_id"] = str(self.tenant_id)
        if self.title is not None:
            result["title"] = self.title
        if self.source_url is not None:
            result["source_url"] = self.source_url
        return result

    def __repr__(self) -> str:
        length = len(self.content) if self.content else 0
        return f"Document(id={self.id}, tenant_id={self.tenant_id}, title={self.title!r}, chars={length})"
