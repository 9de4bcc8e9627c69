from ringwatch.core.errors import AddressFormatError
from ringwatch.core.models.ring import Node


def parse_node(token: str) -> Node:
    """
    Parse a ring node token of the form ``name`` or ``name:instance``.

    The token is split on its first colon only. A token without a colon
    yields an empty instance.
    """
    name, _, instance = token.partition(":")
    return Node(name=name, instance=instance)


def split_host_port(address: str) -> tuple[str, str]:
    """
    Split a ``host:port`` daemon address into its host and port.

    IPv6 hosts must be bracketed (``[::1]:4242``); the brackets are
    stripped from the returned host. The port is returned as a string since
    it is only ever used to build other addresses.
    """
    if address.startswith("["):
        end = address.find("]")
        if end < 0:
            raise AddressFormatError(address, "missing ']' in address")
        host, rest = address[1:end], address[end + 1:]
        if not rest.startswith(":"):
            raise AddressFormatError(address, "missing port in address")
        port = rest[1:]
    else:
        host, sep, port = address.rpartition(":")
        if not sep:
            raise AddressFormatError(address, "missing port in address")
        if ":" in host:
            raise AddressFormatError(address, "too many colons in address")

    if not host:
        raise AddressFormatError(address, "missing host in address")
    if not port.isdigit() or not 0 < int(port) < 65536:
        raise AddressFormatError(address, f"invalid port {port!r}")

    return host, port


def join_host_port(host: str, port: str | int) -> str:
    if ":" in host:
        return f"[{host}]:{port}"
    return f"{host}:{port}"
