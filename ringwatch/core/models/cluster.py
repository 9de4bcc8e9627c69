from dataclasses import dataclass

from ringwatch.core.errors import PeerUnreachable
from ringwatch.core.models.health import HealthReport
from ringwatch.core.models.ring import RingSnapshot
from ringwatch.core.ports.hashring import HashRing


@dataclass(frozen=True)
class PeerResult:
    """
    Outcome of probing one peer daemon during discovery.

    A failed probe is kept as an explicit absent snapshot together with the
    reason, so that the consistency check can report it instead of reading
    fields off missing data.
    """
    server: str
    address: str
    snapshot: RingSnapshot | None = None
    error: PeerUnreachable | None = None


@dataclass(frozen=True)
class ClusterConfig:
    """
    The validated topology of the cluster, as discovered from a seed daemon.

    A ClusterConfig is only ever built whole, at the end of a successful
    discovery, and is never mutated afterwards: the ring and the health
    verdict always describe the same discovery run.
    """
    port: str
    """Port every daemon of the cluster listens on."""

    servers: tuple[str, ...]
    """
    Hostnames of the ring nodes in seed order, instance suffix stripped.
    There is exactly one entry per node added to the hash ring.
    """

    hash_ring: HashRing
    """Populated ring built with the algorithm the seed declared."""

    healthy: bool
    """True when every peer agreed with the seed on algorithm and node order."""

    seed: str = ""
    algorithm: str = ""
    replicas: int = 0
    report: HealthReport = HealthReport()

    def host_ports(self) -> list[str]:
        """
        Return the distinct ``server:port`` addresses of the cluster, in
        ring order.
        """
        return list(dict.fromkeys(f"{server}:{self.port}" for server in self.servers))
