import logging
from collections.abc import Callable

from ringwatch.core.errors import UnknownAlgorithm
from ringwatch.core.ports.hashring import HashRing
from ringwatch.core.space.carbon import CarbonHashRing
from ringwatch.core.space.jump import JumpHashRing

RingBuilder = Callable[[int], HashRing]
"""
Builds an empty ring given the replica count a daemon declared.
"""

_ALGORITHMS: dict[str, RingBuilder] = {
    "carbon": lambda replicas: CarbonHashRing(),
    "jump_fnv1a": lambda replicas: JumpHashRing(replicas),
}

_logger = logging.getLogger("core.space.factory")


def register_algorithm(name: str, builder: RingBuilder) -> None:
    """
    Make a ring implementation available under the given algorithm tag.

    Registering an existing tag replaces its builder.
    """
    _ALGORITHMS[name] = builder


def known_algorithms() -> list[str]:
    return sorted(_ALGORITHMS)


def build_ring(algorithm: str, replicas: int) -> HashRing:
    """
    Construct an empty hash ring for the given algorithm tag.

    Raises UnknownAlgorithm when no ring is registered under that tag.
    """
    builder = _ALGORITHMS.get(algorithm)
    if builder is None:
        _logger.error(f"Unknown consistent hash algorithm: {algorithm}")
        raise UnknownAlgorithm(algorithm)
    return builder(replicas)
