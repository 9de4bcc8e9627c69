import logging
from collections.abc import Sequence

from ringwatch.core.models.cluster import PeerResult
from ringwatch.core.models.health import HealthReport, Inconsistency, MismatchKind
from ringwatch.core.models.ring import RingSnapshot


class ConsistencyChecker:
    """
    Decides whether a fleet of daemons agrees on the shape of the ring.

    The seed daemon's snapshot is the reference. Every peer must report the
    same algorithm and exactly the same node tokens in exactly the same
    order: ring algorithms are order sensitive, so agreeing on membership
    alone is not enough. Node order is normally driven by configuration
    management, and a difference means a daemon was configured by hand or
    missed a rollout.

    Replica counts are not compared: not every algorithm exposes a
    comparable replica concept.

    The check stops at the first inconsistency found, peers being visited
    in probe order, and reports which peer and which mismatch caused it.
    """

    def __init__(self, reference_name: str = "seed") -> None:
        self._reference_name = reference_name
        self._logger = logging.getLogger("core.service.health")

    def check(
        self,
        reference: RingSnapshot,
        peers: Sequence[PeerResult],
        expected_peers: int,
    ) -> HealthReport:
        if len(peers) != expected_peers:
            return self._unhealthy(
                self._reference_name,
                MismatchKind.peer_count,
                f"expected {expected_peers} peers besides the seed, "
                f"examined {len(peers)}",
            )

        for peer in peers:
            if peer.snapshot is None:
                reason = peer.error.reason if peer.error else "unknown error"
                return self._unhealthy(
                    peer.address,
                    MismatchKind.unreachable,
                    f"no ring reported: {reason}",
                )

            mismatch = self._compare(reference, peer.snapshot)
            if mismatch is not None:
                kind, detail = mismatch
                name = peer.snapshot.name
                if name and name != peer.server:
                    detail = f"{detail} (daemon calls itself {name!r})"
                return self._unhealthy(peer.address, kind, detail)

        self._logger.debug(f"{len(peers)} peers agree with {self._reference_name}")
        return HealthReport()

    def is_healthy(
        self,
        reference: RingSnapshot,
        peers: Sequence[PeerResult],
        expected_peers: int,
    ) -> bool:
        return self.check(reference, peers, expected_peers).healthy

    def _compare(
        self,
        reference: RingSnapshot,
        snapshot: RingSnapshot,
    ) -> tuple[MismatchKind, str] | None:
        if snapshot.algorithm != reference.algorithm:
            return (
                MismatchKind.algorithm,
                f"algorithm {snapshot.algorithm!r} differs from "
                f"{reference.algorithm!r} on {self._reference_name}",
            )

        if len(snapshot.nodes) != len(reference.nodes):
            return (
                MismatchKind.node_count,
                f"{len(snapshot.nodes)} nodes reported, "
                f"{len(reference.nodes)} on {self._reference_name}",
            )

        for idx, (ours, theirs) in enumerate(zip(reference.nodes, snapshot.nodes)):
            if ours != theirs:
                return (
                    MismatchKind.node_order,
                    f"node #{idx} is {theirs!r}, "
                    f"{ours!r} on {self._reference_name}",
                )

        return None

    def _unhealthy(self, peer: str, kind: MismatchKind, detail: str) -> HealthReport:
        self._logger.warning(f"Cluster unhealthy: {peer}: {kind} mismatch, {detail}")
        return HealthReport(
            inconsistencies=(Inconsistency(peer=peer, kind=kind, detail=detail),)
        )
