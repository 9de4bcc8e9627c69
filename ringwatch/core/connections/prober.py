import asyncio
import logging
import ssl
import struct
from typing import Callable

from ringwatch.core.errors import ProbeError, AddressFormatError
from ringwatch.core.helpers.addr import split_host_port
from ringwatch.core.models.message import Message
from ringwatch.core.models.ring import RingSnapshot
from ringwatch.core.ports.prober import TopologyProber
from ringwatch.core.ports.serializer import Serializer
from ringwatch.core.throttling.backoff import ExponentialBackoff


class MessageProber(TopologyProber):
    """
    Asks a storage daemon for its ring over a short-lived TCP connection.

    Each probe opens a connection (TLS when an SSL context is given), sends
    a single `ring/describe` request and reads a single reply. Frames use a
    4-byte big-endian length prefix followed by the serialized payload.

    A daemon answers with an "ok" message whose data carries the ring
    description (algorithm, replicas, ordered node tokens). Anything else
    is reported as a ProbeError.

    Connection failures and timeouts are retried up to `max_retries`
    attempts in total, spaced by an exponential backoff. A reply that was
    received but is unusable is not retried: asking again would yield the
    same answer.
    """
    REQUEST_TYPE = "ring/describe"

    def __init__(
        self,
        serializer: Serializer,
        ssl_context: ssl.SSLContext | None = None,
        timeout: float = 5.0,
        max_retries: int = 1,
        max_message_size: int = 1 * 1024 * 1024,
        backoff_factory: Callable[[], ExponentialBackoff] = lambda: ExponentialBackoff(),
    ) -> None:
        self._serializer = serializer
        self._ssl_context = ssl_context
        self._timeout = timeout
        self._max_retries = max(max_retries, 1)
        self._max_message_size = max_message_size
        self._backoff_factory = backoff_factory

        self._logger = logging.getLogger("core.connections.prober")

    async def probe(self, host_port: str) -> RingSnapshot:
        try:
            host, port = split_host_port(host_port)
        except AddressFormatError as ex:
            raise ProbeError(host_port, str(ex)) from ex

        backoff = self._backoff_factory()
        attempt = 0
        while True:
            attempt += 1
            try:
                payload = await asyncio.wait_for(
                    self._request(host_port, host, int(port)),
                    timeout=self._timeout,
                )
                break
            except (OSError, asyncio.TimeoutError, asyncio.IncompleteReadError) as ex:
                reason = self._describe(ex)
                if attempt >= self._max_retries:
                    raise ProbeError(host_port, reason) from ex

                delay = backoff.next_delay()
                self._logger.warning(
                    f"Probe {attempt}/{self._max_retries} of {host_port} failed: "
                    f"{reason}. Retrying in {delay:.1f}s"
                )
                await asyncio.sleep(delay)

        snapshot = self._decode(host_port, payload)
        self._logger.debug(
            f"{host_port} reports {snapshot.algorithm} ring "
            f"with {len(snapshot.nodes)} nodes"
        )
        return snapshot

    async def _request(self, host_port: str, host: str, port: int) -> bytes:
        reader, writer = await asyncio.open_connection(
            host=host,
            port=port,
            ssl=self._ssl_context,
        )
        try:
            request = Message(type=self.REQUEST_TYPE, data={})
            payload = self._serializer.serialize(request.to_dict())
            writer.write(struct.pack("!I", len(payload)) + payload)
            await writer.drain()

            header = await reader.readexactly(4)
            length = struct.unpack("!I", header)[0]
            if length > self._max_message_size:
                raise ProbeError(
                    host_port,
                    f"reply of {length} bytes exceeds {self._max_message_size} bytes",
                )
            return await reader.readexactly(length)
        finally:
            writer.close()
            try:
                await writer.wait_closed()
            except OSError:
                pass

    def _decode(self, host_port: str, payload: bytes) -> RingSnapshot:
        try:
            message = Message(**self._serializer.deserialize(payload))
        except Exception as ex:
            raise ProbeError(host_port, f"malformed reply: {ex}") from ex

        if message.type != "ok":
            detail = message.data.get("message", message.data) if isinstance(message.data, dict) else message.data
            raise ProbeError(host_port, f"daemon answered {message.type!r}: {detail}")

        try:
            return RingSnapshot.from_dict(message.data)
        except (KeyError, TypeError) as ex:
            raise ProbeError(host_port, f"invalid ring description: {ex}") from ex

    @staticmethod
    def _describe(ex: BaseException) -> str:
        if isinstance(ex, asyncio.TimeoutError):
            return "timed out"
        if isinstance(ex, asyncio.IncompleteReadError):
            return "connection closed by peer"
        return str(ex) or type(ex).__name__
