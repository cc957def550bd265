"""RagSearch Core Types - Common type definitions and aliases.

This module contains the type aliases used throughout the RagSearch system.
Identifiers are UUIDs; the aliases exist to keep signatures readable.
"""

from typing import List, NewType
from uuid import UUID


# Identifier aliases
ChunkId = NewType("ChunkId", UUID)          # Chunk primary key
DocumentId = NewType("DocumentId", UUID)    # Parent document identifier
TenantId = NewType("TenantId", UUID)        # Owning tenant

# Numeric type aliases
ChunkIndex = NewType("ChunkIndex", int)     # Zero-based position within a document
TokenCount = NewType("TokenCount", int)     # Heuristic token estimate
Score = NewType("Score", float)             # Similarity in [0, 1]

# Complex types
EmbeddingVector = List[float]              # Vector embedding representation

# Shared constants
CHARS_PER_TOKEN = 4.0
DEFAULT_DIMENSION = 768
MAX_TOP_K = 100
