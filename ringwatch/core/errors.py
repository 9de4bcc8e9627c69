class RingwatchError(Exception):
    """Base class for every failure raised while discovering a cluster."""


class ProbeError(RingwatchError):
    """
    A daemon could not be asked for its ring, or its answer was unusable.

    Raised for the seed daemon, where it aborts discovery.
    """

    def __init__(self, address: str, reason: str) -> None:
        super().__init__(f"Cannot probe {address}: {reason}")
        self.address = address
        self.reason = reason


class PeerUnreachable(ProbeError):
    """
    A peer daemon did not answer during the fan-out phase.

    Never raised to callers of the topology cache: it is recorded against
    the peer and turns the health verdict to unhealthy.
    """


class UnknownAlgorithm(RingwatchError):
    def __init__(self, algorithm: str) -> None:
        super().__init__(f"Unknown consistent hash algorithm: {algorithm!r}")
        self.algorithm = algorithm


class AddressFormatError(RingwatchError, ValueError):
    def __init__(self, address: str, reason: str) -> None:
        super().__init__(f"Invalid host:port representation {address!r}: {reason}")
        self.address = address
