from typing import Protocol

from ringwatch.core.models.ring import RingSnapshot


class TopologyProber(Protocol):
    """
    Asks a single daemon for its view of the cluster ring.

    Transport, encoding and retry policy belong to the implementation.
    Implementations must raise ProbeError on any failure, never return a
    partial snapshot.
    """

    async def probe(self, host_port: str) -> RingSnapshot:
        ...
