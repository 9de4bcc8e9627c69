import bisect
import hashlib

from ringwatch.core.models.ring import Node


class CarbonHashRing:
    """
    Consistent hashing ring compatible with graphite's carbon-relay.

    Every node is placed on a 16-bit ring at a fixed number of positions,
    each derived from the MD5 digest of the node key and a position index.
    A key belongs to the first position at or after its own, wrapping
    around at the end of the ring.

    The ring has no notion of replicas: the number of positions per node is
    fixed, so the replica count declared by a daemon is ignored.
    """
    POSITIONS_PER_NODE = 100

    def __init__(self) -> None:
        self._nodes: list[Node] = []
        self._ring: list[tuple[int, Node]] = []

    @property
    def nodes(self) -> list[Node]:
        return list(self._nodes)

    def add_node(self, node: Node) -> None:
        """
        Place a node on the ring at all of its positions.

        Positions colliding with existing ones are kept side by side; the
        node key breaks the tie deterministically.

        Complexity: O(p log n) for p positions per node
        """
        self._nodes.append(node)
        key = self.node_key(node)
        for i in range(self.POSITIONS_PER_NODE):
            position = self.compute_position(f"{key}:{i}")
            bisect.insort(self._ring, (position, node), key=self._sort_key)

    def get_node(self, key: str) -> Node:
        """
        Return the node owning the given key.

        Complexity: O(log n)
        """
        if not self._ring:
            raise LookupError("Cannot look up a key on an empty ring")

        position = self.compute_position(key)
        idx = bisect.bisect_left(self._ring, position, key=lambda entry: entry[0])
        return self._ring[idx % len(self._ring)][1]  # wrap-around

    @staticmethod
    def node_key(node: Node) -> str:
        # carbon keys nodes by the repr of a (server, instance) tuple
        instance = f"'{node.instance}'" if node.instance else "None"
        return f"('{node.name}', {instance})"

    @staticmethod
    def compute_position(key: str) -> int:
        digest = hashlib.md5(key.encode("utf-8")).hexdigest()
        return int(digest[:4], 16)

    @staticmethod
    def _sort_key(entry: tuple[int, Node]) -> tuple[int, str, str]:
        position, node = entry
        return position, node.name, node.instance

    def __len__(self) -> int:
        return len(self._nodes)
