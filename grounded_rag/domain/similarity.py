"""Pure similarity and vector validation functions.

Vectors coming from different providers may differ in length, so cosine
zero-pads the shorter one instead of refusing the comparison.
"""

import math
from collections.abc import Iterable
from numbers import Real
from typing import Any

from .types import Score, Vector


def coerce_vector(raw: Any) -> Vector | None:
    """Validate a provider result and convert it to an immutable float vector.

    Accepts lists, tuples and array-likes exposing ``tolist()``.

    Returns:
        Tuple of floats, or None if the input is not a non-empty, flat
        sequence of finite real numbers (ragged/nested shapes, strings,
        NaN/inf and booleans are all rejected).
    """
    if raw is None or isinstance(raw, (str, bytes)):
        return None
    if hasattr(raw, "tolist"):
        raw = raw.tolist()
    if not isinstance(raw, Iterable):
        return None
    out: list[float] = []
    for x in raw:
        if isinstance(x, bool) or not isinstance(x, Real):
            return None
        f = float(x)
        if not math.isfinite(f):
            return None
        out.append(f)
    return tuple(out) if out else None


def cosine(u: Any, v: Any) -> Score:
    """Length-tolerant cosine similarity.

    Args:
        u: First vector
        v: Second vector

    Returns:
        Score in [-1, 1]. 0.0 when either vector is all-zero or malformed.
    """
    a = coerce_vector(u)
    b = coerce_vector(v)
    if a is None or b is None:
        return 0.0
    # zip stops at the shorter vector: the padded zeros add nothing to the dot product
    dot = sum(x * y for x, y in zip(a, b))
    na = math.sqrt(sum(x * x for x in a))
    nb = math.sqrt(sum(y * y for y in b))
    if na == 0.0 or nb == 0.0:
        return 0.0
    return max(-1.0, min(1.0, dot / (na * nb)))


def l2_normalize(values: list[float]) -> list[float]:
    norm = math.sqrt(sum(x * x for x in values))
    if norm == 0.0:
        return values
    return [x / norm for x in values]
