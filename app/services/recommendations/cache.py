"""
In-process profile cache for the recommendation engine
"""
import time
from typing import Optional, Dict, Any, Callable
from collections import OrderedDict
from dataclasses import dataclass

from app.services.recommendations.models import UserProfile


@dataclass
class CacheEntry:
    """Cache entry with metadata"""
    profile: UserProfile
    stored_at: float
    ttl: float
    hits: int = 0

    def is_expired(self, now: float) -> bool:
        return now - self.stored_at > self.ttl


class ProfileCache:
    """
    LRU cache of built user profiles with TTL

    One instance is shared by the engines of a process so repeated calls
    for the same user skip the preference/interaction/cluster fetches.
    Entries may be evicted at any time; the engine rebuilds on a miss.
    """

    def __init__(
        self,
        max_size: int = 1000,
        ttl: float = 300,
        clock: Callable[[], float] = time.monotonic
    ):
        """
        Initialize cache

        Args:
            max_size: Maximum number of profiles kept
            ttl: Time-to-live in seconds
            clock: Monotonic time source (injectable for tests)
        """
        self.max_size = max_size
        self.ttl = ttl
        self._clock = clock
        self._entries: "OrderedDict[str, CacheEntry]" = OrderedDict()
        self._stats = {
            "hits": 0,
            "misses": 0,
            "evictions": 0,
            "expirations": 0
        }

    def get(self, user_id: str) -> Optional[UserProfile]:
        """
        Get a cached profile

        Returns:
            Profile or None if not cached or expired
        """
        entry = self._entries.get(user_id)
        if entry is None:
            self._stats["misses"] += 1
            return None

        if entry.is_expired(self._clock()):
            self._stats["expirations"] += 1
            self._stats["misses"] += 1
            del self._entries[user_id]
            return None

        self._entries.move_to_end(user_id)
        entry.hits += 1
        self._stats["hits"] += 1
        return entry.profile

    def set(self, profile: UserProfile) -> None:
        """Store a profile under its user id"""
        if self.max_size <= 0:
            return

        key = profile.user_id
        if key not in self._entries and len(self._entries) >= self.max_size:
            self._entries.popitem(last=False)
            self._stats["evictions"] += 1

        self._entries[key] = CacheEntry(profile=profile, stored_at=self._clock(), ttl=self.ttl)
        self._entries.move_to_end(key)

    def invalidate(self, user_id: str) -> bool:
        """
        Drop a user's profile (e.g. after they interacted with something)

        Returns:
            True if an entry was removed
        """
        return self._entries.pop(user_id, None) is not None

    def clear(self) -> None:
        """Clear all cache entries"""
        self._stats["evictions"] += len(self._entries)
        self._entries.clear()

    def cleanup_expired(self) -> int:
        """
        Remove all expired entries

        Returns:
            Number of entries removed
        """
        now = self._clock()
        expired = [key for key, entry in self._entries.items() if entry.is_expired(now)]
        for key in expired:
            del self._entries[key]

        self._stats["expirations"] += len(expired)
        return len(expired)

    def __len__(self) -> int:
        return len(self._entries)

    def __contains__(self, user_id: str) -> bool:
        return user_id in self._entries

    def get_stats(self) -> Dict[str, Any]:
        """Get cache statistics"""
        total_requests = self._stats["hits"] + self._stats["misses"]
        hit_rate = self._stats["hits"] / total_requests if total_requests > 0 else 0

        return {
            "size": len(self._entries),
            "max_size": self.max_size,
            "ttl": self.ttl,
            "hits": self._stats["hits"],
            "misses": self._stats["misses"],
            "hit_rate": round(hit_rate, 4),
            "evictions": self._stats["evictions"],
            "expirations": self._stats["expirations"],
        }
