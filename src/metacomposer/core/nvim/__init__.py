"""
Neovim introspection over msgpack-RPC.
"""

from .rpc import (
    MsgpackRPCClient,
    RemoteHandle,
    RPCConnectionError,
    RPCError,
    RPCProtocolError,
    RPCResponseError,
    RPCTimeoutError,
    parse_address,
)
from .service import (
    collect_buffers,
    collect_info,
    find_sockets,
    get_buffers,
    get_info,
    resolve_address,
)

__all__ = [
    # Client
    "MsgpackRPCClient",
    "RemoteHandle",
    "parse_address",
    # Errors
    "RPCError",
    "RPCConnectionError",
    "RPCProtocolError",
    "RPCResponseError",
    "RPCTimeoutError",
    # Service
    "collect_buffers",
    "collect_info",
    "find_sockets",
    "get_buffers",
    "get_info",
    "resolve_address",
]
