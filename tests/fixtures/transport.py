"""Scripted stand-in for UDPTransport."""

from typing import Optional

from sipprobe.exceptions import RegisterTimeout


class FakeTransport:
    """Transport that answers each sent request from a script.

    Each script entry covers one send and is a list of datagrams queued
    after that send. A datagram is bytes, a callable taking the sent
    request bytes, or an exception raised from receive(). When the queue
    is empty receive() times out immediately.
    """

    def __init__(
        self,
        script: Optional[list] = None,
        open_error: Optional[Exception] = None,
        send_error: Optional[Exception] = None,
    ):
        self.script = list(script or [])
        self.open_error = open_error
        self.send_error = send_error
        self.sent: list[bytes] = []
        self.opened_with: Optional[tuple] = None
        self.closed = False
        self.timeouts: list[float] = []
        self._pending: list = []

    local_ip = "192.0.2.10"
    local_port = 40000

    async def open(self, host: str, port: int) -> None:
        if self.open_error:
            raise self.open_error
        self.opened_with = (host, port)

    def send(self, data: bytes) -> None:
        if self.send_error:
            raise self.send_error
        self.sent.append(data)

        replies = self.script.pop(0) if self.script else []
        for reply in replies:
            self._pending.append(reply(data) if callable(reply) else reply)

    async def receive(self, timeout: float) -> bytes:
        self.timeouts.append(timeout)
        if not self._pending:
            raise RegisterTimeout(f"No response within {timeout:.1f}s")

        item = self._pending.pop(0)
        if isinstance(item, Exception):
            raise item
        return item

    def close(self) -> None:
        self.closed = True

