from dataclasses import dataclass, field, asdict
from enum import StrEnum
from typing import Any


class MismatchKind(StrEnum):
    """
    Why a peer's view of the ring was found inconsistent with the seed's.
    """
    peer_count = "peer_count"
    unreachable = "unreachable"
    algorithm = "algorithm"
    node_count = "node_count"
    node_order = "node_order"


@dataclass(frozen=True)
class Inconsistency:
    peer: str
    """Address of the offending peer, or the seed for fleet-wide findings."""

    kind: MismatchKind

    detail: str
    """Human readable description, meant for operators."""

    def to_dict(self) -> dict[str, Any]:
        return asdict(self)


@dataclass(frozen=True)
class HealthReport:
    """
    Verdict of one consistency check over a fleet of ring snapshots.

    A report is healthy only when it holds no inconsistency.
    """
    inconsistencies: tuple[Inconsistency, ...] = field(default_factory=tuple)

    @property
    def healthy(self) -> bool:
        return not self.inconsistencies

    def to_dict(self) -> dict[str, Any]:
        return {
            "healthy": self.healthy,
            "inconsistencies": [i.to_dict() for i in self.inconsistencies],
        }
