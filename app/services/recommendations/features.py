"""
Feature extraction and similarity math

Items and users are projected into the same fixed-length space:
    [0]   item type code
    [1]   log-scaled price
    [2]   rating scaled to [0, 1]
    [3:]  one slot per CATEGORY_TAGS entry
Users only populate the category slots, from their preference scores.
"""
import math
from typing import Dict, Iterable, Sequence

import numpy as np

from app.services.recommendations.models import CatalogItem, UserProfile
from app.services.utils.constants import (
    ITEM_TYPE_CODES,
    CATEGORY_TAGS,
    CATEGORY_OFFSET,
    FEATURE_VECTOR_LENGTH,
    EARTH_RADIUS_METERS,
)

_TAG_INDEX = {tag: CATEGORY_OFFSET + i for i, tag in enumerate(CATEGORY_TAGS)}


def extract_item_features(item: CatalogItem) -> np.ndarray:
    """
    Build the feature vector of a catalog item

    Args:
        item: Catalog item

    Returns:
        Vector of length FEATURE_VECTOR_LENGTH
    """
    vector = np.zeros(FEATURE_VECTOR_LENGTH)

    vector[0] = ITEM_TYPE_CODES.get(item.type, 0)
    if item.price is not None:
        vector[1] = math.log1p(max(item.price.amount, 0.0)) / 10.0
    if item.rating is not None:
        vector[2] = min(max(item.rating, 0.0), 5.0) / 5.0

    for tag in item.features:
        index = _TAG_INDEX.get(tag)
        if index is not None:
            vector[index] = 1.0

    return vector


def extract_user_vector(profile: UserProfile) -> np.ndarray:
    """
    Build the user vector aligned with extract_item_features

    Each preference "<type>:<value>" writes its score into the slot of the
    tag equal to <value>; the maximum wins when several preferences map to
    the same slot.
    """
    vector = np.zeros(FEATURE_VECTOR_LENGTH)

    for key, score in profile.preferences.items():
        _, _, value = key.partition(":")
        index = _TAG_INDEX.get(value)
        if index is not None:
            vector[index] = max(vector[index], score)

    return vector


def cosine_similarity(a: Sequence[float], b: Sequence[float]) -> float:
    """
    Cosine similarity of two vectors

    Returns 0.0 for vectors of different length or with zero magnitude.
    """
    a = np.asarray(a, dtype=float)
    b = np.asarray(b, dtype=float)
    if a.shape != b.shape or a.size == 0:
        return 0.0

    magnitude = np.linalg.norm(a) * np.linalg.norm(b)
    if magnitude == 0:
        return 0.0

    similarity = float(np.dot(a, b) / magnitude)
    return max(-1.0, min(1.0, similarity))


def haversine_distance(lat1: float, lng1: float, lat2: float, lng2: float) -> float:
    """Great-circle distance in meters"""
    phi1, phi2 = math.radians(lat1), math.radians(lat2)
    d_phi = math.radians(lat2 - lat1)
    d_lambda = math.radians(lng2 - lng1)

    a = math.sin(d_phi / 2) ** 2 + math.cos(phi1) * math.cos(phi2) * math.sin(d_lambda / 2) ** 2
    c = 2 * math.atan2(math.sqrt(a), math.sqrt(1 - a))
    return EARTH_RADIUS_METERS * c


def jaccard_similarity(a: Iterable[str], b: Iterable[str]) -> float:
    """Intersection over union of two tag sets (0.0 when both are empty)"""
    set_a, set_b = set(a), set(b)
    union = set_a | set_b
    if not union:
        return 0.0
    return len(set_a & set_b) / len(union)


def min_max_normalize(scores: Dict[str, float]) -> Dict[str, float]:
    """
    Rescale signed scores into [0, 1] over their actual range

    When every score is equal there is no spread to rescale: positive
    totals map to 1.0, zero or negative totals to 0.0.

    Args:
        scores: Mapping of item id to raw (possibly negative) score

    Returns:
        Mapping of item id to normalized score
    """
    if not scores:
        return {}

    keys = list(scores.keys())
    values = np.fromiter((scores[k] for k in keys), dtype=float, count=len(keys))
    low, high = values.min(), values.max()

    if high == low:
        flat = 1.0 if high > 0 else 0.0
        return {k: flat for k in keys}

    normalized = (values - low) / (high - low)
    return {k: float(v) for k, v in zip(keys, np.clip(normalized, 0.0, 1.0))}
