import asyncio
import logging
from collections.abc import Callable

from ringwatch.core.errors import ProbeError, PeerUnreachable
from ringwatch.core.helpers.addr import parse_node, split_host_port, join_host_port
from ringwatch.core.models.cluster import ClusterConfig, PeerResult
from ringwatch.core.models.ring import RingSnapshot
from ringwatch.core.ports.hashring import HashRing
from ringwatch.core.ports.prober import TopologyProber
from ringwatch.core.service.health import ConsistencyChecker
from ringwatch.core.space.factory import build_ring


class TopologyCache:
    """
    Discovers the cluster topology once and keeps it for the process lifetime.

    Discovery starts from a seed daemon. Its ring description is the
    reference: it names the hashing algorithm and the ordered node list from
    which the local ring is rebuilt. Every other daemon of the fleet is then
    probed concurrently and its description compared with the seed's.

    The result is published only when discovery completes. Failures while
    talking to the seed, or an algorithm nobody knows how to build, abort
    discovery and leave the cache as it was, so a later call can try again.
    Unreachable peers do not abort discovery; they make the published
    configuration unhealthy.

    Publication is a single assignment performed under a lock which also
    covers the "already cached?" check, so concurrent first-time callers
    trigger a single discovery and all observe the same configuration.
    Once published, the configuration is never refreshed.
    """

    def __init__(
        self,
        prober: TopologyProber,
        probe_timeout: float = 5.0,
        probe_concurrency: int = 8,
        ring_factory: Callable[[str, int], HashRing] = build_ring,
        checker: ConsistencyChecker | None = None,
    ) -> None:
        self._prober = prober
        self._probe_timeout = probe_timeout
        self._probe_concurrency = max(probe_concurrency, 1)
        self._ring_factory = ring_factory
        self._checker = checker or ConsistencyChecker()

        self._config: ClusterConfig | None = None
        self._lock = asyncio.Lock()
        self._logger = logging.getLogger("core.service.topology")

    @property
    def config(self) -> ClusterConfig | None:
        return self._config

    def host_ports(self) -> list[str]:
        """Addresses of every daemon, empty while nothing is discovered."""
        if self._config is None:
            return []
        return self._config.host_ports()

    def is_healthy(self) -> bool:
        return self._config is not None and self._config.healthy

    async def get_cluster_config(self, seed: str) -> ClusterConfig:
        """
        Return the cached cluster configuration, discovering it from the
        given seed daemon (``host:port``) on first use.

        Raises AddressFormatError, ProbeError or UnknownAlgorithm when
        discovery fails; nothing is cached in that case.
        """
        if self._config is not None:
            return self._config

        async with self._lock:
            if self._config is None:
                self._config = await self._discover(seed)
            return self._config

    async def _discover(self, seed: str) -> ClusterConfig:
        server, port = split_host_port(seed)

        try:
            reference = await self._probe(seed)
        except ProbeError as ex:
            self._logger.error(f"Abort: Cannot communicate with seed daemon: {ex}")
            raise

        ring = self._ring_factory(reference.algorithm, reference.replicas)

        servers: list[str] = []
        for token in reference.nodes:
            node = parse_node(token)
            servers.append(node.name)
            ring.add_node(node)

        self._logger.info(
            f"Seed {seed} reports a {reference.algorithm} ring "
            f"of {len(servers)} nodes"
        )

        peers = [s for s in dict.fromkeys(servers) if s != server]
        results = await self._probe_peers(peers, port)

        report = self._checker.check(reference, results, expected_peers=len(peers))
        if report.healthy:
            self._logger.info(f"Cluster healthy: {len(results)} peers agree with {seed}")

        return ClusterConfig(
            port=port,
            servers=tuple(servers),
            hash_ring=ring,
            healthy=report.healthy,
            seed=seed,
            algorithm=reference.algorithm,
            replicas=reference.replicas,
            report=report,
        )

    async def _probe_peers(self, servers: list[str], port: str) -> list[PeerResult]:
        semaphore = asyncio.Semaphore(self._probe_concurrency)

        async def probe_peer(server: str) -> PeerResult:
            address = join_host_port(server, port)
            async with semaphore:
                try:
                    snapshot = await self._probe(address)
                except ProbeError as ex:
                    error = PeerUnreachable(address, ex.reason)
                    self._logger.warning(f"Cluster unhealthy: {error}")
                    return PeerResult(server=server, address=address, error=error)

            return PeerResult(server=server, address=address, snapshot=snapshot)

        tasks = [asyncio.create_task(probe_peer(s)) for s in servers]
        try:
            # gather keeps the seed's node order whatever the completion order
            return list(await asyncio.gather(*tasks))
        except BaseException:
            for task in tasks:
                if not task.done():
                    task.cancel()
            raise

    async def _probe(self, address: str) -> RingSnapshot:
        try:
            return await asyncio.wait_for(
                self._prober.probe(address),
                timeout=self._probe_timeout,
            )
        except asyncio.TimeoutError as ex:
            raise ProbeError(address, f"no answer within {self._probe_timeout}s") from ex
