from typing import Protocol

from ringwatch.core.models.ring import Node


class HashRing(Protocol):
    """
    Capabilities the topology cache needs from a consistent hashing ring.

    Rings are populated once, node by node, in the order the seed daemon
    reported them. Insertion order matters for order sensitive algorithms.
    """

    @property
    def nodes(self) -> list[Node]:
        """Nodes in insertion order."""

    def add_node(self, node: Node) -> None:
        """Add a node to the ring."""

    def get_node(self, key: str) -> Node:
        """Return the node owning the given key."""

    def __len__(self) -> int:
        ...
