from dataclasses import dataclass, asdict
from typing import Any, Self


@dataclass(frozen=True)
class Node:
    """
    One physical daemon instance taking part in a hash ring.

    Two instances running on the same host are distinct ring members,
    which is why the instance label takes part in equality and hashing.
    """
    name: str
    """Hostname of the daemon, unique within a cluster."""

    instance: str = ""
    """Optional sub-instance label, empty when the token carried none."""

    def __str__(self) -> str:
        if self.instance:
            return f"{self.name}:{self.instance}"
        return self.name


@dataclass(frozen=True)
class RingSnapshot:
    """
    One daemon's self-reported view of the cluster ring.

    A snapshot is produced fresh by every probe and never mutated. The node
    tokens are kept raw (``name`` or ``name:instance``) and in the order the
    daemon reported them: ring algorithms are order sensitive, so two
    daemons agreeing on membership but not on order do not agree.
    """
    algorithm: str
    """Tag of the consistent hashing algorithm, e.g. "carbon"."""

    replicas: int
    """Algorithm specific replica count. Some algorithms ignore it."""

    nodes: tuple[str, ...]
    """Ordered raw node tokens."""

    name: str = ""
    """Hostname the daemon reports for itself, empty if it did not say."""

    def to_dict(self) -> dict[str, Any]:
        data = asdict(self)
        data["nodes"] = list(self.nodes)
        return data

    @classmethod
    def from_dict(cls, data: dict) -> Self:
        if not isinstance(data, dict):
            raise TypeError(f"Expected a mapping, got {type(data).__name__}")

        for key in ("algorithm", "nodes"):
            if key not in data:
                raise KeyError(f"Missing '{key}' key")

        algorithm = data["algorithm"]
        nodes = data["nodes"]
        replicas = data.get("replicas", 0)

        if not isinstance(algorithm, str):
            raise TypeError("'algorithm' must be a string")
        if not isinstance(nodes, (list, tuple)) or not all(isinstance(n, str) for n in nodes):
            raise TypeError("'nodes' must be a list of strings")
        if isinstance(replicas, bool) or not isinstance(replicas, int):
            raise TypeError("'replicas' must be an integer")

        return cls(
            algorithm=algorithm,
            replicas=replicas,
            nodes=tuple(nodes),
            name=data.get("name") or "",
        )
