"""RagSearch Core Models Package - Domain model definitions.

The models are immutable dataclasses that validate themselves on construction.
Defaults for timestamps and metadata maps are applied during that step.
"""

from .chunk import Chunk
from .document import Document
from .similarity import SimilarityResult

__all__ = [
    "Document",
    "Chunk",
    "SimilarityResult",
]
