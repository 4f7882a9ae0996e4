"""
Scoring strategies
"""
from .content_based import ContentBasedScorer
from .collaborative import CollaborativeScorer
from .trending import TrendingScorer

__all__ = [
    "ContentBasedScorer",
    "CollaborativeScorer",
    "TrendingScorer"
]
