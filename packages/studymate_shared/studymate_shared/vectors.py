"""Decoding of stored embeddings into the canonical vector shape."""
from __future__ import annotations

import json
import math
from numbers import Real
from typing import Any

from .errors import MalformedEmbedding
from .schemas import Vector


def decode_embedding(raw: Any) -> Vector:
    """Return ``raw`` as a flat list of finite floats.

    Rows may carry the embedding as serialized JSON text (``"[0.1, 0.2]"``)
    or as a native sequence, depending on the column type and driver.
    """

    if isinstance(raw, (bytes, bytearray)):
        try:
            raw = raw.decode("utf-8")
        except UnicodeDecodeError as exc:
            raise MalformedEmbedding("Embedding bytes are not valid UTF-8") from exc

    if isinstance(raw, str):
        try:
            values = json.loads(raw)
        except json.JSONDecodeError as exc:
            raise MalformedEmbedding("Invalid JSON format in embedding field") from exc
    elif hasattr(raw, "tolist"):
        values = raw.tolist()
    elif isinstance(raw, (list, tuple)):
        values = list(raw)
    else:
        raise MalformedEmbedding(f"Unexpected type for embedding: {type(raw).__name__}")

    if not isinstance(values, list) or not values:
        raise MalformedEmbedding("Embedding must be a non-empty flat list of numbers")

    vector: Vector = []
    for value in values:
        # bool is a Real subclass
        if isinstance(value, bool) or not isinstance(value, Real):
            raise MalformedEmbedding("Embedding contains a non-numeric entry")
        try:
            number = float(value)
        except (OverflowError, ValueError) as exc:
            raise MalformedEmbedding("Embedding contains an out-of-range entry") from exc
        if not math.isfinite(number):
            raise MalformedEmbedding("Embedding contains a non-finite entry")
        vector.append(number)
    return vector


def encode_embedding(vector: Vector) -> str:
    """Serialize a vector for a text column."""

    return json.dumps([float(value) for value in vector])
