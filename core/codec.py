"""Wire and storage encodings for embeddings and chunk metadata.

Embeddings travel as bracketed float lists (``[0.013,-0.221,...]``) and
metadata as JSON objects. Decoding metadata never fails: a corrupt record
decodes to an empty map so that one bad row cannot break a search response.
"""

import json
import math
from typing import Any, Dict, List, Optional, Sequence

from loguru import logger

from .exceptions import ValidationError


def to_vector_literal(vector: Sequence[float]) -> str:
    """Serialize an embedding as ``[a,b,c]``."""
    return "[" + ",".join(repr(float(v)) for v in vector) + "]"


def parse_vector_literal(literal: str) -> List[float]:
    """Parse a ``[a,b,c]`` literal back into floats.

    Raises:
        ValidationError: If the literal is not a bracketed list of numbers
    """
    text = (literal or "").strip()
    if not (text.startswith("[") and text.endswith("]")):
        raise ValidationError("embedding", literal, "Vector literal must be enclosed in brackets")

    body = text[1:-1].strip()
    if not body:
        return []

    try:
        values = [float(part) for part in body.split(",")]
    except ValueError as e:
        raise ValidationError("embedding", literal, f"Invalid vector component: {e}")

    if not all(math.isfinite(v) for v in values):
        raise ValidationError("embedding", literal, "Vector components must be finite")
    return values


def encode_metadata(metadata: Optional[Dict[str, Any]]) -> str:
    """Encode chunk metadata as a JSON object string, ``{}`` when empty.

    Raises:
        ValidationError: If the metadata cannot be represented as JSON
    """
    if not metadata:
        return "{}"
    try:
        return json.dumps(metadata, sort_keys=True, allow_nan=False)
    except (TypeError, ValueError) as e:
        raise ValidationError("metadata", metadata, f"Metadata is not JSON-serializable: {e}")


def decode_metadata(raw: Optional[str], record_id: Any = None) -> Dict[str, Any]:
    """Decode stored metadata, falling back to an empty map on bad input."""
    if raw is None or raw == "":
        return {}
    try:
        value = json.loads(raw)
    except (TypeError, ValueError) as e:
        logger.warning(f"Failed to decode metadata for chunk {record_id}: {e}")
        return {}
    if not isinstance(value, dict):
        logger.warning(f"Ignoring non-object metadata for chunk {record_id}: {type(value).__name__}")
        return {}
    return value
