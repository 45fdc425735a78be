"""
msgpack-RPC client for talking to a running Neovim.

Neovim exposes its API over msgpack-RPC on a Unix socket or TCP address.
Messages are msgpack arrays:

    request       [0, msgid, method, params]
    response      [1, msgid, error, result]
    notification  [2, method, params]

The client keeps one connection open, correlates responses with pending
requests by msgid, and enforces a per-request timeout. Several requests may
be in flight at once; responses can arrive in any order.

Reference: https://github.com/msgpack-rpc/msgpack-rpc/blob/master/spec.md

Example:
    >>> async with await MsgpackRPCClient.connect("/run/user/1000/nvim.123.0") as client:
    ...     mode = await client.request("nvim_get_mode")
    >>> mode
    {'mode': 'n', 'blocking': False}
"""

from __future__ import annotations

import asyncio
import contextlib
import logging
from dataclasses import dataclass
from typing import Any

import msgpack

from metacomposer.core.exceptions import MetaComposerError

logger = logging.getLogger(__name__)

REQUEST = 0
RESPONSE = 1
NOTIFICATION = 2

# Neovim ext type codes for remote object handles
EXT_TYPE_NAMES = {0: "Buffer", 1: "Window", 2: "Tabpage"}

_MAX_MSGID = 2**32
_READ_CHUNK = 64 * 1024


class RPCError(MetaComposerError):
    """Base exception for msgpack-RPC errors."""


class RPCConnectionError(RPCError):
    """Raised when the RPC peer cannot be reached or the connection drops."""

    def __init__(self, address: str, message: str) -> None:
        super().__init__(f"{message} ({address})", address=address)
        self.address = address


class RPCTimeoutError(RPCError):
    """Raised when a response does not arrive within the request timeout."""

    def __init__(self, method: str, timeout: float) -> None:
        super().__init__(f"{method} timed out after {timeout}s", method=method, timeout=timeout)
        self.method = method
        self.timeout = timeout


class RPCResponseError(RPCError):
    """
    Raised when the peer answers a request with an error.

    Neovim sends errors as [error_type, message]; other peers may send any
    value, which is kept in `error`.
    """

    def __init__(self, method: str, error: Any) -> None:
        if isinstance(error, (list, tuple)) and len(error) == 2:
            detail = str(error[1])
        else:
            detail = str(error)
        super().__init__(f"{method} failed: {detail}", method=method, error=error)
        self.method = method
        self.error = error


class RPCProtocolError(RPCError):
    """Raised when a message does not follow the msgpack-RPC framing."""


@dataclass(frozen=True)
class RemoteHandle:
    """
    A Neovim object handle (buffer, window or tabpage).

    Attributes:
        code: msgpack ext type code
        handle: Integer handle inside Neovim
    """

    code: int
    handle: int

    @property
    def kind(self) -> str:
        return EXT_TYPE_NAMES.get(self.code, f"Ext{self.code}")

    def to_msgpack(self) -> msgpack.ExtType:
        return msgpack.ExtType(self.code, msgpack.packb(self.handle))


def _ext_hook(code: int, data: bytes) -> RemoteHandle:
    return RemoteHandle(code, msgpack.unpackb(data))


def _default(obj: Any) -> Any:
    if isinstance(obj, RemoteHandle):
        return obj.to_msgpack()
    raise TypeError(f"Cannot serialize {type(obj).__name__} for msgpack-RPC")


def pack_message(message: list[Any]) -> bytes:
    """Encode one msgpack-RPC message."""
    return msgpack.packb(message, use_bin_type=True, default=_default)


def new_unpacker() -> msgpack.Unpacker:
    """Streaming decoder for incoming msgpack-RPC messages."""
    return msgpack.Unpacker(raw=False, ext_hook=_ext_hook, strict_map_key=False)


def parse_address(address: str) -> tuple[str, str, int | None]:
    """
    Classify an RPC address.

    Returns:
        ("tcp", host, port) for host:port addresses, otherwise
        ("unix", path, None)

    Example:
        >>> parse_address("127.0.0.1:6666")
        ('tcp', '127.0.0.1', 6666)
        >>> parse_address("/tmp/nvim.sock")
        ('unix', '/tmp/nvim.sock', None)
    """
    if not address.startswith(("/", ".", "~")):
        host, sep, port = address.rpartition(":")
        if sep and host and port.isdigit():
            return "tcp", host.strip("[]"), int(port)
    return "unix", address, None


class MsgpackRPCClient:
    """
    Single-connection msgpack-RPC client with request correlation.

    Use MsgpackRPCClient.connect() to open a connection; the constructor takes
    already-open asyncio streams and must be called from a running loop.
    """

    def __init__(
        self,
        reader: asyncio.StreamReader,
        writer: asyncio.StreamWriter,
        *,
        address: str = "<stream>",
        timeout: float = 5.0,
    ) -> None:
        self.address = address
        self.timeout = timeout
        self._reader = reader
        self._writer = writer
        self._unpacker = new_unpacker()
        self._next_msgid = 0
        self._pending: dict[int, tuple[str, asyncio.Future[Any]]] = {}
        self._closed = False
        self._reader_task = asyncio.get_running_loop().create_task(self._read_loop())

    @classmethod
    async def connect(cls, address: str, timeout: float = 5.0) -> MsgpackRPCClient:
        """
        Open a connection to address.

        Args:
            address: Unix socket path or host:port
            timeout: Seconds allowed for connecting and for each request

        Raises:
            RPCConnectionError: If the peer cannot be reached in time
        """
        kind, target, port = parse_address(address)
        logger.debug("Connecting to %s RPC peer at %s", kind, address)
        try:
            if kind == "tcp":
                opening = asyncio.open_connection(target, port)
            else:
                opening = asyncio.open_unix_connection(target)
            reader, writer = await asyncio.wait_for(opening, timeout=timeout)
        except asyncio.TimeoutError:
            raise RPCConnectionError(address, f"Timed out connecting after {timeout}s") from None
        except OSError as e:
            raise RPCConnectionError(address, f"Cannot connect: {e.strerror or e}") from e

        return cls(reader, writer, address=address, timeout=timeout)

    @property
    def closed(self) -> bool:
        return self._closed

    @property
    def pending_count(self) -> int:
        """Number of requests still waiting for a response."""
        return len(self._pending)

    def _allocate_msgid(self) -> int:
        msgid = self._next_msgid
        self._next_msgid = (self._next_msgid + 1) % _MAX_MSGID
        return msgid

    async def request(self, method: str, *params: Any, timeout: float | None = None) -> Any:
        """
        Call method on the peer and wait for its result.

        Args:
            method: Remote method name, e.g. "nvim_get_mode"
            *params: Positional parameters
            timeout: Override the client's default timeout

        Returns:
            The decoded result

        Raises:
            RPCConnectionError: If the connection is closed or drops
            RPCTimeoutError: If no response arrives in time
            RPCResponseError: If the peer reports an error
        """
        if self._closed:
            raise RPCConnectionError(self.address, "Connection is closed")

        wait = self.timeout if timeout is None else timeout
        msgid = self._allocate_msgid()
        future: asyncio.Future[Any] = asyncio.get_running_loop().create_future()
        self._pending[msgid] = (method, future)

        logger.debug("-> request %d %s %r", msgid, method, params)
        try:
            self._writer.write(pack_message([REQUEST, msgid, method, list(params)]))
            await self._writer.drain()
            return await asyncio.wait_for(future, timeout=wait)
        except asyncio.TimeoutError:
            raise RPCTimeoutError(method, wait) from None
        except (ConnectionError, OSError) as e:
            raise RPCConnectionError(self.address, f"Connection lost: {e}") from e
        finally:
            self._pending.pop(msgid, None)

    def notify(self, method: str, *params: Any) -> None:
        """Send a notification; no response is expected."""
        if self._closed:
            raise RPCConnectionError(self.address, "Connection is closed")
        self._writer.write(pack_message([NOTIFICATION, method, list(params)]))

    async def _read_loop(self) -> None:
        error: RPCError = RPCConnectionError(self.address, "Connection closed by peer")
        try:
            while True:
                data = await self._reader.read(_READ_CHUNK)
                if not data:
                    break
                self._unpacker.feed(data)
                for message in self._unpacker:
                    self._dispatch(message)
        except (ConnectionError, OSError) as e:
            error = RPCConnectionError(self.address, f"Connection lost: {e}")
        except (ValueError, msgpack.UnpackException) as e:
            logger.warning("Dropping RPC connection to %s: %s", self.address, e)
            error = RPCProtocolError(f"Malformed message from {self.address}: {e}")
        finally:
            self._fail_pending(error)

    def _dispatch(self, message: Any) -> None:
        if not isinstance(message, (list, tuple)) or not message:
            logger.warning("Ignoring malformed RPC message: %r", message)
            return

        kind = message[0]
        if kind == RESPONSE and len(message) == 4:
            _, msgid, error, result = message
            self._resolve(msgid, error, result)
        elif kind == NOTIFICATION and len(message) == 3:
            logger.debug("<- notification %s (ignored)", message[1])
        elif kind == REQUEST and len(message) == 4:
            # The peer may call us back; we expose no methods
            _, msgid, method, _params = message
            logger.debug("<- request %s from peer, replying with error", method)
            self._writer.write(
                pack_message([RESPONSE, msgid, f"Method not supported: {method}", None])
            )
        else:
            logger.warning("Ignoring unknown RPC message type: %r", message)

    def _resolve(self, msgid: Any, error: Any, result: Any) -> None:
        entry = self._pending.get(msgid)
        if entry is None:
            logger.debug("<- response for unknown msgid %r (ignored)", msgid)
            return

        method, future = entry
        if future.done():
            return
        if error is not None:
            logger.debug("<- error %r for %s", error, method)
            future.set_exception(RPCResponseError(method, error))
        else:
            logger.debug("<- response %r for %s", msgid, method)
            future.set_result(result)

    def _fail_pending(self, error: RPCError) -> None:
        for _method, future in self._pending.values():
            if not future.done():
                future.set_exception(error)
        self._closed = True

    async def close(self) -> None:
        """Stop reading, fail outstanding requests and close the stream."""
        if not self._reader_task.done():
            self._reader_task.cancel()
            with contextlib.suppress(asyncio.CancelledError):
                await self._reader_task
        self._fail_pending(RPCConnectionError(self.address, "Connection is closed"))

        self._writer.close()
        try:
            await self._writer.wait_closed()
        except (ConnectionError, OSError) as e:
            logger.debug("Error while closing RPC connection: %s", e)

    async def __aenter__(self) -> MsgpackRPCClient:
        return self

    async def __aexit__(self, *exc_info: object) -> None:
        await self.close()
