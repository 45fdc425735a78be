"""
Neovim introspection.

Finds a running Neovim's RPC socket and gathers its version, mode, working
directory, current file and listed buffers.
"""

from __future__ import annotations

import asyncio
import logging
import os
import tempfile
from pathlib import Path
from typing import Any

import yaml

from metacomposer.core.config import NvimConfig
from metacomposer.core.exceptions import ExternalToolError
from metacomposer.core.nvim.rpc import MsgpackRPCClient

logger = logging.getLogger(__name__)


def default_search_dirs() -> list[Path]:
    """
    Directories where Neovim creates its default server sockets.

    Neovim 0.9+ uses $XDG_RUNTIME_DIR/nvim.<pid>.0; older versions and
    systems without XDG_RUNTIME_DIR use a nvim* directory under the temp dir.
    """
    dirs: list[Path] = []
    if runtime_dir := os.environ.get("XDG_RUNTIME_DIR"):
        dirs.append(Path(runtime_dir))
    dirs.append(Path(tempfile.gettempdir()))
    user = os.environ.get("USER")
    if user:
        dirs.append(Path(tempfile.gettempdir()) / f"nvim.{user}")
    return dirs


def find_sockets(search_dirs: list[Path] | None = None) -> list[Path]:
    """List candidate Neovim server sockets, sorted and de-duplicated."""
    if search_dirs is None:
        search_dirs = default_search_dirs()

    found: set[Path] = set()
    for directory in search_dirs:
        if not directory.is_dir():
            continue
        for pattern in ("nvim.*", "nvim*/0", "*/nvim.*"):
            for candidate in directory.glob(pattern):
                if candidate.is_socket():
                    found.add(candidate)
    return sorted(found)


def resolve_address(
    explicit: str | None,
    config: NvimConfig,
    search_dirs: list[Path] | None = None,
) -> str:
    """
    Pick the RPC address to connect to.

    Order: explicit --socket, then configuration ($NVIM, $NVIM_LISTEN_ADDRESS,
    config files), then the single discovered socket.

    Raises:
        ExternalToolError: If no socket is found, or several are and none
            was chosen explicitly
    """
    if explicit:
        return explicit
    if config.socket:
        return config.socket

    sockets = find_sockets(search_dirs)
    if len(sockets) == 1:
        logger.debug("Discovered Neovim socket %s", sockets[0])
        return str(sockets[0])
    if not sockets:
        raise ExternalToolError(
            "nvim",
            "No running Neovim found. Start Neovim or pass --socket "
            "(or set $NVIM / $NVIM_LISTEN_ADDRESS).",
        )
    listing = ", ".join(str(path) for path in sockets)
    raise ExternalToolError(
        "nvim",
        f"Several Neovim instances are running ({listing}); choose one with --socket.",
        sockets=[str(path) for path in sockets],
    )


def _format_version(api_info: Any) -> str | None:
    if not isinstance(api_info, (list, tuple)) or len(api_info) != 2:
        return None
    version = api_info[1].get("version") if isinstance(api_info[1], dict) else None
    if not isinstance(version, dict):
        return None
    text = f"v{version.get('major', 0)}.{version.get('minor', 0)}.{version.get('patch', 0)}"
    if version.get("prerelease"):
        text += "-dev"
    return text


def _summarize_buffer(info: dict[str, Any]) -> dict[str, Any]:
    return {
        "bufnr": info.get("bufnr"),
        "name": info.get("name") or "[No Name]",
        "changed": bool(info.get("changed")),
        "lines": info.get("linecount"),
    }


async def collect_buffers(client: MsgpackRPCClient) -> list[dict[str, Any]]:
    """Listed buffers as bufnr, name, changed flag and line count."""
    infos = await client.request("nvim_call_function", "getbufinfo", [{"buflisted": 1}])
    return [_summarize_buffer(info) for info in infos or [] if isinstance(info, dict)]


async def collect_info(client: MsgpackRPCClient) -> dict[str, Any]:
    """
    Gather editor state.

    All requests are sent before any response is awaited, so they share one
    round trip.
    """
    api_info, mode, cwd, current_file, buffers = await asyncio.gather(
        client.request("nvim_get_api_info"),
        client.request("nvim_get_mode"),
        client.request("nvim_call_function", "getcwd", []),
        client.request("nvim_call_function", "expand", ["%:p"]),
        collect_buffers(client),
    )

    info: dict[str, Any] = {
        "address": client.address,
        "version": _format_version(api_info),
        "mode": mode.get("mode") if isinstance(mode, dict) else None,
        "cwd": cwd,
    }
    if current_file:
        info["current_file"] = current_file
    info["buffers"] = buffers
    return info


async def _with_client(address: str, timeout: float, collect: Any) -> Any:
    async with await MsgpackRPCClient.connect(address, timeout=timeout) as client:
        return await collect(client)


def get_info(address: str, timeout: float = 5.0) -> str:
    """YAML description of the Neovim instance at address."""
    info = asyncio.run(_with_client(address, timeout, collect_info))
    return yaml.safe_dump(info, sort_keys=False, allow_unicode=True).strip()


def get_buffers(address: str, timeout: float = 5.0) -> str:
    """YAML list of the buffers open in the Neovim instance at address."""
    buffers = asyncio.run(_with_client(address, timeout, collect_buffers))
    return yaml.safe_dump(buffers, sort_keys=False, allow_unicode=True).strip()
