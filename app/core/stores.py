import threading
from typing import Callable, Dict, Generic, Hashable, List, Optional, Tuple, TypeVar

K = TypeVar("K", bound=Hashable)
V = TypeVar("V")


class _Shard(Generic[K, V]):
    __slots__ = ("lock", "data")

    def __init__(self):
        self.lock = threading.Lock()
        self.data: Dict[K, V] = {}


class ShardedStore(Generic[K, V]):
    """Thread-safe keyed store split into independently locked shards.

    Operations on keys that land in different shards never wait on each
    other. Iteration helpers return snapshots.
    """

    def __init__(self, shard_count: int = 16):
        if shard_count < 1:
            raise ValueError("shard_count must be at least 1")
        self._shards: List[_Shard[K, V]] = [_Shard() for _ in range(shard_count)]

    def _shard_for(self, key: K) -> _Shard[K, V]:
        return self._shards[hash(key) % len(self._shards)]

    def get(self, key: K, default: Optional[V] = None) -> Optional[V]:
        shard = self._shard_for(key)
        with shard.lock:
            return shard.data.get(key, default)

    def put(self, key: K, value: V) -> None:
        shard = self._shard_for(key)
        with shard.lock:
            shard.data[key] = value

    def remove(self, key: K) -> Optional[V]:
        """Remove ``key`` and return the value it held, if any"""
        shard = self._shard_for(key)
        with shard.lock:
            return shard.data.pop(key, None)

    def remove_if(self, key: K, expected: V) -> bool:
        """Remove ``key`` only while it still maps to ``expected``"""
        shard = self._shard_for(key)
        with shard.lock:
            if shard.data.get(key) is expected:
                del shard.data[key]
                return True
            return False

    def get_or_create(self, key: K, factory: Callable[[], V]) -> V:
        """Return the value for ``key``, creating it under the shard lock.

        ``factory`` runs while the shard is locked and must be cheap.
        """
        shard = self._shard_for(key)
        with shard.lock:
            value = shard.data.get(key)
            if value is None:
                value = factory()
                shard.data[key] = value
            return value

    def __contains__(self, key: K) -> bool:
        shard = self._shard_for(key)
        with shard.lock:
            return key in shard.data

    def __len__(self) -> int:
        total = 0
        for shard in self._shards:
            with shard.lock:
                total += len(shard.data)
        return total

    def items(self) -> List[Tuple[K, V]]:
        snapshot: List[Tuple[K, V]] = []
        for shard in self._shards:
            with shard.lock:
                snapshot.extend(shard.data.items())
        return snapshot

    def clear(self) -> None:
        for shard in self._shards:
            with shard.lock:
                shard.data.clear()
