"""Cosine similarity between embedding vectors."""
from __future__ import annotations

from typing import Sequence

import numpy as np

from studymate_shared.errors import DegenerateVector, DimensionMismatch, MalformedEmbedding


def similarity(a: Sequence[float], b: Sequence[float]) -> float:
    """Return the cosine of the angle between ``a`` and ``b``.

    Raises instead of returning 0 or NaN so that callers can tell a zero
    vector apart from an orthogonal one.
    """

    if len(a) != len(b):
        raise DimensionMismatch(f"Cannot compare vectors of length {len(a)} and {len(b)}")

    left = np.asarray(a, dtype=float)
    right = np.asarray(b, dtype=float)
    if not (np.all(np.isfinite(left)) and np.all(np.isfinite(right))):
        raise MalformedEmbedding("Vector contains a non-finite component")

    left_scale = np.max(np.abs(left), initial=0.0)
    right_scale = np.max(np.abs(right), initial=0.0)
    if left_scale == 0 or right_scale == 0:
        raise DegenerateVector("Cannot compute similarity against a zero vector")

    # Cosine is scale invariant; unit max-abs components keep the products in range.
    left = left / left_scale
    right = right / right_scale
    score = float(np.dot(left, right) / (np.linalg.norm(left) * np.linalg.norm(right)))
    if not np.isfinite(score):
        raise MalformedEmbedding("Similarity is not a finite number")
    return max(-1.0, min(1.0, score))
