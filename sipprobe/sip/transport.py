"""SIP transport layer.

UDP client endpoint for the REGISTER probe: one socket bound to an ephemeral
port, datagrams handed to the caller through a queue.
"""

import asyncio
import logging
import socket
from typing import Optional

from sipprobe.exceptions import RegisterTimeout, TransportError

log = logging.getLogger(__name__)

FALLBACK_LOCAL_IP = "127.0.0.1"


def detect_local_ip(remote_ip: str, remote_port: int = 5060) -> str:
    """Find the local IPv4 address used to reach a remote host.

    Connecting a UDP socket only selects a route, nothing is sent.

    Args:
        remote_ip: Resolved target address
        remote_port: Target port

    Returns:
        Local address, or 127.0.0.1 if no route could be determined
    """
    sock = socket.socket(socket.AF_INET, socket.SOCK_DGRAM)
    try:
        sock.connect((remote_ip, remote_port))
        local_ip = sock.getsockname()[0]
    except OSError as e:
        log.debug(f"Local address detection failed for {remote_ip}: {e}")
        return FALLBACK_LOCAL_IP
    finally:
        sock.close()

    if not local_ip or local_ip == "0.0.0.0":
        return FALLBACK_LOCAL_IP
    return local_ip


class UDPClientProtocol(asyncio.DatagramProtocol):
    """UDP client protocol for SIP.

    Received datagrams and socket errors are queued in arrival order.
    """

    def __init__(self, queue: asyncio.Queue):
        """Initialize protocol.

        Args:
            queue: Receives (data, addr) tuples or exceptions
        """
        self._queue = queue
        self._transport: Optional[asyncio.DatagramTransport] = None

    def connection_made(self, transport: asyncio.DatagramTransport) -> None:
        """Called when the socket is bound."""
        self._transport = transport
        sockname = transport.get_extra_info("sockname")
        log.debug(f"UDP socket bound to {sockname}")

    def datagram_received(self, data: bytes, addr: tuple) -> None:
        """Queue incoming UDP datagram.

        Args:
            data: Raw SIP message
            addr: Source address (host, port)
        """
        log.debug(f"UDP datagram ({len(data)} bytes) from {addr[0]}:{addr[1]}")
        self._queue.put_nowait((data, addr))

    def error_received(self, exc: Exception) -> None:
        """Queue socket error (e.g. ICMP port unreachable)."""
        log.debug(f"UDP socket error: {exc}")
        self._queue.put_nowait(exc)

    def connection_lost(self, exc: Optional[Exception]) -> None:
        """Called when the socket is closed."""
        if exc is not None:
            self._queue.put_nowait(exc)


class UDPTransport:
    """Single UDP socket talking to one SIP server.

    Usage:
        transport = UDPTransport()
        await transport.open("pbx.example.com", 5060)
        transport.send(request.to_bytes())
        data = await transport.receive(timeout=5.0)
        transport.close()
    """

    def __init__(self, local_ip: Optional[str] = None):
        """Initialize transport.

        Args:
            local_ip: Address to advertise in Via/Contact (auto-detected if None)
        """
        self._local_ip = local_ip
        self._local_port = 0
        self._remote: Optional[tuple] = None
        self._transport: Optional[asyncio.DatagramTransport] = None
        self._queue: Optional[asyncio.Queue] = None

    @property
    def local_ip(self) -> str:
        return self._local_ip or FALLBACK_LOCAL_IP

    @property
    def local_port(self) -> int:
        return self._local_port

    @property
    def remote(self) -> Optional[tuple]:
        """Resolved (ip, port) of the server."""
        return self._remote

    async def open(self, host: str, port: int) -> None:
        """Resolve the server and bind a socket to an ephemeral port.

        Raises:
            TransportError: If resolution or binding fails
        """
        loop = asyncio.get_running_loop()

        try:
            infos = await loop.getaddrinfo(
                host, port, family=socket.AF_INET, type=socket.SOCK_DGRAM
            )
        except OSError as e:
            raise TransportError(f"Cannot resolve {host}: {e}") from e
        if not infos:
            raise TransportError(f"Cannot resolve {host}")

        self._remote = infos[0][4][:2]
        self._queue = asyncio.Queue()

        try:
            self._transport, _ = await loop.create_datagram_endpoint(
                lambda: UDPClientProtocol(self._queue),
                local_addr=("0.0.0.0", 0),
                family=socket.AF_INET,
            )
        except OSError as e:
            raise TransportError(f"Cannot bind UDP socket: {e}") from e

        self._local_port = self._transport.get_extra_info("sockname")[1]
        if not self._local_ip:
            self._local_ip = detect_local_ip(*self._remote)

        log.info(
            f"UDP transport {self.local_ip}:{self.local_port} -> "
            f"{self._remote[0]}:{self._remote[1]}"
        )

    def send(self, data: bytes) -> None:
        """Send one datagram to the server.

        Raises:
            TransportError: If the socket is closed or the send fails
        """
        if self._transport is None or self._transport.is_closing():
            raise TransportError("UDP transport is not open")

        try:
            self._transport.sendto(data, self._remote)
        except OSError as e:
            raise TransportError(f"Failed to send: {e}") from e

    async def receive(self, timeout: float) -> bytes:
        """Wait for the next datagram.

        Args:
            timeout: Seconds to wait

        Returns:
            Raw datagram bytes

        Raises:
            RegisterTimeout: If nothing arrives in time
            TransportError: If the socket reports an error
        """
        if self._queue is None:
            raise TransportError("UDP transport is not open")

        try:
            item = await asyncio.wait_for(self._queue.get(), timeout)
        except asyncio.TimeoutError:
            raise RegisterTimeout(f"No response within {timeout:.1f}s") from None

        if isinstance(item, Exception):
            raise TransportError(f"Socket error: {item}") from item

        data, _addr = item
        return data

    def close(self) -> None:
        """Close the socket. Safe to call more than once."""
        if self._transport is not None and not self._transport.is_closing():
            self._transport.close()
            log.debug("UDP transport closed")
