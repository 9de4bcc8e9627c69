from ringwatch.core.models.ring import Node

_FNV64_OFFSET = 0xcbf29ce484222325
_FNV64_PRIME = 0x100000001b3
_MASK64 = (1 << 64) - 1
_JUMP_MULTIPLIER = 2862933555777941757


def fnv1a_64(data: bytes) -> int:
    h = _FNV64_OFFSET
    for byte in data:
        h ^= byte
        h = (h * _FNV64_PRIME) & _MASK64
    return h


def jump_hash(key: int, buckets: int) -> int:
    """
    Jump consistent hash (Lamping & Veach).

    Maps a 64-bit key to a bucket in [0, buckets). When the number of buckets
    grows from n to n+1, only 1/(n+1) of the keys move, all of them to the
    new bucket.
    """
    if buckets <= 0:
        raise ValueError("buckets must be positive")

    b, j = -1, 0
    while j < buckets:
        b = j
        key = (key * _JUMP_MULTIPLIER + 1) & _MASK64
        j = int((b + 1) * ((1 << 31) / ((key >> 33) + 1)))
    return b


class JumpHashRing:
    """
    Ring using jump consistent hashing over FNV-1a 64 key hashes.

    Buckets are the nodes' positions in insertion order, which is why every
    daemon must be configured with the same node order. A key is stored on
    `replicas` distinct nodes: the bucket picked by the jump hash and the
    ones following it.
    """

    def __init__(self, replicas: int = 1) -> None:
        self._replicas = max(replicas, 1)
        self._nodes: list[Node] = []

    @property
    def replicas(self) -> int:
        return self._replicas

    @property
    def nodes(self) -> list[Node]:
        return list(self._nodes)

    def add_node(self, node: Node) -> None:
        self._nodes.append(node)

    def get_node(self, key: str) -> Node:
        if not self._nodes:
            raise LookupError("Cannot look up a key on an empty ring")
        bucket = jump_hash(fnv1a_64(key.encode("utf-8")), len(self._nodes))
        return self._nodes[bucket]

    def get_nodes(self, key: str) -> list[Node]:
        """Return the replica set of a key, primary first."""
        first = self._nodes.index(self.get_node(key))
        count = min(self._replicas, len(self._nodes))
        return [self._nodes[(first + i) % len(self._nodes)] for i in range(count)]

    def __len__(self) -> int:
        return len(self._nodes)
