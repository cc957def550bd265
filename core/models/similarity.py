"""RagSearch SimilarityResult Model - A ranked search hit."""

from dataclasses import dataclass
from typing import Any, Dict

from ..exceptions import ValidationError
from ..types import Score
from .chunk import Chunk


@dataclass(frozen=True)
class SimilarityResult:
    """A chunk paired with its similarity to the query, in [0, 1]."""

    chunk: Chunk
    score: Score

    def __post_init__(self):
        if self.chunk is None:
            raise ValidationError("chunk", self.chunk, "Chunk cannot be null")
        if self.score is None or not 0.0 <= self.score <= 1.0:
            raise ValidationError("score", self.score, "Score must be between 0 and 1")

    def to_dict(self) -> Dict[str, Any]:
        result = self.chunk.to_dict()
        result.pop("embedding", None)
        result["score"] = self.score
        return result
