"""Thread-safe hash map and hash set with per-bucket locking."""

from __future__ import annotations

import threading
from typing import Generic, Hashable, Iterator, TypeVar

K = TypeVar("K", bound=Hashable)
V = TypeVar("V")

DEFAULT_BUCKET_COUNT = 1024


class _Bucket(Generic[K, V]):
    __slots__ = ("lock", "entries")

    def __init__(self) -> None:
        self.lock = threading.Lock()
        self.entries: dict[K, V] = {}


class ConcurrentHashMap(Generic[K, V]):
    """A map safe for concurrent use; existing keys are never overwritten."""

    def __init__(self, bucket_count: int = DEFAULT_BUCKET_COUNT) -> None:
        if bucket_count <= 0:
            raise ValueError("bucket_count must be positive")
        self._buckets: list[_Bucket[K, V]] = [_Bucket() for _ in range(bucket_count)]
        self._size = 0
        self._size_lock = threading.Lock()

    def _bucket(self, key: K) -> _Bucket[K, V]:
        return self._buckets[hash(key) % len(self._buckets)]

    def _adjust_size(self, delta: int) -> None:
        with self._size_lock:
            self._size += delta

    def insert(self, key: K, value: V) -> bool:
        """Insert ``key`` if absent. Return True if inserted, False if it already existed."""
        bucket = self._bucket(key)
        with bucket.lock:
            if key in bucket.entries:
                return False
            bucket.entries[key] = value
        self._adjust_size(1)
        return True

    def insert_or_get(self, key: K, value: V) -> tuple[V, bool]:
        """Insert ``key`` if absent; return the stored value and whether this call inserted it."""
        bucket = self._bucket(key)
        with bucket.lock:
            if key in bucket.entries:
                return bucket.entries[key], False
            bucket.entries[key] = value
        self._adjust_size(1)
        return value, True

    def find(self, key: K) -> V | None:
        """Return the value stored for ``key``, or None if absent."""
        bucket = self._bucket(key)
        with bucket.lock:
            return bucket.entries.get(key)

    def __contains__(self, key: object) -> bool:
        bucket = self._bucket(key)  # type: ignore[arg-type]
        with bucket.lock:
            return key in bucket.entries

    def erase(self, key: K) -> bool:
        """Remove ``key``. Return True if it was present."""
        bucket = self._bucket(key)
        with bucket.lock:
            if key not in bucket.entries:
                return False
            del bucket.entries[key]
        self._adjust_size(-1)
        return True

    def __len__(self) -> int:
        with self._size_lock:
            return self._size

    def clear(self) -> None:
        """Remove every entry."""
        for bucket in self._buckets:
            with bucket.lock:
                removed = len(bucket.entries)
                bucket.entries.clear()
            self._adjust_size(-removed)

    def items(self) -> Iterator[tuple[K, V]]:
        """Yield key-value pairs, bucket by bucket."""
        for bucket in self._buckets:
            with bucket.lock:
                snapshot = list(bucket.entries.items())
            yield from snapshot

    def to_list(self) -> list[tuple[K, V]]:
        """All key-value pairs as a list."""
        return list(self.items())


class ConcurrentHashSet(Generic[K]):
    """A set safe for concurrent use."""

    def __init__(self, bucket_count: int = DEFAULT_BUCKET_COUNT) -> None:
        self._map: ConcurrentHashMap[K, bool] = ConcurrentHashMap(bucket_count)

    def insert(self, key: K) -> bool:
        """Add ``key``. Return True if it was not already present."""
        return self._map.insert(key, True)

    def __contains__(self, key: object) -> bool:
        return key in self._map

    def erase(self, key: K) -> bool:
        """Remove ``key``. Return True if it was present."""
        return self._map.erase(key)

    def __len__(self) -> int:
        return len(self._map)

    def __iter__(self) -> Iterator[K]:
        return (key for key, _ in self._map.items())

    def clear(self) -> None:
        """Remove every key."""
        self._map.clear()

    def to_list(self) -> list[K]:
        """All keys as a list."""
        return list(self)