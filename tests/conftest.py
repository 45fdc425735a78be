"""
Pytest configuration and shared fixtures.

Provides an isolated environment (config caches, XDG dirs, working
directory), a sample OpenAPI document, stub resource modules, and a fake
Neovim msgpack-RPC server.
"""

import asyncio
import json
import shutil
import tempfile
import threading
from pathlib import Path
from typing import Any

import msgpack
import pytest
import typer

from metacomposer.core.config import clear_cache
from metacomposer.core.registry import CommandInfo, clear_metadata_cache

# ==============================================================================
# Environment Isolation
# ==============================================================================


@pytest.fixture(autouse=True)
def isolated_env(tmp_path, monkeypatch):
    """
    Keep every test away from the real user config and environment.

    - XDG_CONFIG_HOME points into tmp_path
    - NVIM / NVIM_LISTEN_ADDRESS / META_COMPOSER_* are unset
    - config and metadata caches are cleared before and after
    """
    monkeypatch.setenv("XDG_CONFIG_HOME", str(tmp_path / "xdg-config"))
    for var in (
        "NVIM",
        "NVIM_LISTEN_ADDRESS",
        "META_COMPOSER_DEBUG",
        "META_COMPOSER_HTTP_TIMEOUT",
        "META_COMPOSER_NVIM_TIMEOUT",
    ):
        monkeypatch.delenv(var, raising=False)
    clear_cache()
    clear_metadata_cache()
    yield
    clear_cache()
    clear_metadata_cache()


@pytest.fixture
def project_dir(tmp_path, monkeypatch):
    """Provide an empty project directory and chdir into it."""
    project = tmp_path / "project"
    project.mkdir()
    monkeypatch.chdir(project)
    return project


# ==============================================================================
# Sample Data Fixtures
# ==============================================================================


@pytest.fixture
def petstore_document() -> dict[str, Any]:
    """A small OpenAPI 3 document with three operations."""
    return {
        "openapi": "3.0.3",
        "info": {
            "title": "Petstore",
            "version": "1.2.0",
            "description": "A sample pet store",
        },
        "servers": [
            {"url": "https://petstore.example.com/v1", "description": "Production"},
        ],
        "paths": {
            "/pets": {
                "summary": "Pets collection",
                "parameters": [{"name": "trace", "in": "header"}],
                "get": {
                    "operationId": "listPets",
                    "summary": "List all pets",
                    "tags": ["pets"],
                    "parameters": [
                        {
                            "name": "limit",
                            "in": "query",
                            "required": False,
                            "description": "How many items to return",
                            "schema": {"type": "integer"},
                        },
                        {
                            "name": "status",
                            "in": "query",
                            "schema": {"type": "string", "enum": ["available", "sold"]},
                        },
                    ],
                    "responses": {
                        "200": {
                            "description": "A paged array of pets",
                            "content": {
                                "application/json": {
                                    "schema": {"type": "array", "items": {"type": "object"}}
                                }
                            },
                        }
                    },
                },
                "post": {
                    "operationId": "createPet",
                    "description": "Create a pet",
                    "requestBody": {
                        "description": "Pet to add",
                        "required": True,
                        "content": {
                            "application/json": {"schema": {"type": "object"}},
                        },
                    },
                    "responses": {"201": {"description": "Created"}},
                },
            },
            "/pets/{petId}": {
                "get": {
                    "operationId": "showPetById",
                    "parameters": [
                        {"name": "petId", "in": "path", "required": True},
                    ],
                    "responses": {"200": {"description": "Expected response"}},
                },
            },
        },
    }


@pytest.fixture
def petstore_file(tmp_path, petstore_document) -> Path:
    """The petstore document written to a JSON file."""
    path = tmp_path / "petstore.json"
    path.write_text(json.dumps(petstore_document))
    return path


# ==============================================================================
# Stub Resource Modules
# ==============================================================================


class StubResource:
    """
    Minimal resource module for dispatch tests.

    Registers a `get` command that echoes `payload`, or raises `error`
    when one is given.
    """

    def __init__(
        self,
        name: str,
        payload: str = "ok",
        error: Exception | None = None,
        instructions: str | None = None,
    ) -> None:
        self.name = name
        self.payload = payload
        self.error = error
        self.instructions = instructions
        self.registered = False

    def command_info(self) -> list[CommandInfo]:
        return [CommandInfo("get", "Get the payload", ("key",))]

    def fetch(self, key: str) -> str:
        if self.error is not None:
            raise self.error
        return f"{self.payload}:{key}"

    def register_commands(self, app: typer.Typer) -> None:
        from metacomposer.cli.errors import run_handler

        self.registered = True
        sub = typer.Typer(name=self.name, help=f"{self.name} stub")

        @sub.command(name="get")
        def get(key: str) -> None:
            run_handler(self.name, "get", self.fetch, key)

        app.add_typer(sub, name=self.name)


@pytest.fixture
def stub_resource():
    """Factory for StubResource instances."""
    return StubResource


# ==============================================================================
# Fake Neovim RPC Server
# ==============================================================================


class RemoteFailure:
    """Handler result that makes FakeNvim answer with an RPC error."""

    def __init__(self, error):
        self.error = error


class FakeNvim:
    """
    msgpack-RPC server on 127.0.0.1 standing in for Neovim.

    Runs its own event loop in a background thread so it can serve both
    async client tests and the synchronous service functions (which call
    asyncio.run themselves).

    `handlers` maps a method name to either a value, a callable taking the
    request params, a RemoteFailure, or one of the NO_REPLY / DROP / GARBAGE
    markers. `delays` maps a method name to seconds to wait before replying.
    """

    NO_REPLY = object()
    DROP = object()
    GARBAGE = object()

    def __init__(self, handlers=None, delays=None, greeting=None):
        self.handlers = dict(handlers or {})
        self.delays = dict(delays or {})
        self.greeting = list(greeting or [])
        self.requests = []
        self.notifications = []
        self.replies = []
        self._replied = threading.Condition()
        self.address = None
        self._server = None
        self._loop = asyncio.new_event_loop()
        self._thread = threading.Thread(target=self._loop.run_forever, daemon=True)

    def start(self):
        self._thread.start()
        asyncio.run_coroutine_threadsafe(self._start(), self._loop).result(timeout=5)
        return self

    def stop(self):
        asyncio.run_coroutine_threadsafe(self._shutdown(), self._loop).result(timeout=5)
        self._loop.call_soon_threadsafe(self._loop.stop)
        self._thread.join(timeout=5)
        self._loop.close()

    def wait_for_replies(self, count, timeout=2.0):
        """Block until the client has sent `count` responses, then return them."""
        with self._replied:
            self._replied.wait_for(lambda: len(self.replies) >= count, timeout)
        return list(self.replies)

    async def _start(self):
        self._server = await asyncio.start_server(self._handle, "127.0.0.1", 0)
        host, port = self._server.sockets[0].getsockname()[:2]
        self.address = f"{host}:{port}"

    async def _shutdown(self):
        self._server.close()
        current = asyncio.current_task()
        for task in asyncio.all_tasks():
            if task is not current:
                task.cancel()
        await asyncio.sleep(0)

    async def _handle(self, reader, writer):
        unpacker = msgpack.Unpacker(raw=False, strict_map_key=False)
        try:
            for message in self.greeting:
                writer.write(msgpack.packb(message, use_bin_type=True))
            while True:
                data = await reader.read(65536)
                if not data:
                    break
                unpacker.feed(data)
                for message in unpacker:
                    if not await self._on_message(message, writer):
                        return
        finally:
            writer.close()

    async def _on_message(self, message, writer):
        kind = message[0]
        if kind == 2:
            self.notifications.append((message[1], message[2]))
            return True
        if kind == 1:
            with self._replied:
                self.replies.append(message)
                self._replied.notify_all()
            return True

        _, msgid, method, params = message
        self.requests.append((method, params))
        handler = self.handlers.get(method)
        if handler is self.NO_REPLY:
            return True
        if handler is self.DROP:
            return False
        if handler is self.GARBAGE:
            writer.write(b"\xc1")
            return True

        if handler is None:
            error, result = [0, f"Invalid method: {method}"], None
        else:
            value = handler(*params) if callable(handler) else handler
            if isinstance(value, RemoteFailure):
                error, result = value.error, None
            else:
                error, result = None, value

        reply = msgpack.packb([1, msgid, error, result], use_bin_type=True)
        delay = self.delays.get(method)
        if delay:
            asyncio.get_running_loop().create_task(self._reply_later(writer, reply, delay))
        else:
            writer.write(reply)
        return True

    @staticmethod
    async def _reply_later(writer, reply, delay):
        await asyncio.sleep(delay)
        writer.write(reply)


@pytest.fixture
def fake_nvim():
    """Factory starting FakeNvim servers; all are stopped after the test."""
    servers = []

    def start(handlers=None, delays=None, greeting=None):
        server = FakeNvim(handlers, delays, greeting).start()
        servers.append(server)
        return server

    start.fail = RemoteFailure
    start.NO_REPLY = FakeNvim.NO_REPLY
    start.DROP = FakeNvim.DROP
    start.GARBAGE = FakeNvim.GARBAGE

    yield start
    for server in servers:
        server.stop()


@pytest.fixture
def nvim_state():
    """Handlers describing an editor with two listed buffers."""

    def call_function(name, args):
        return {
            "getcwd": "/home/dev/project",
            "expand": "/home/dev/project/main.py",
            "getbufinfo": [
                {"bufnr": 1, "name": "/home/dev/project/main.py", "changed": 0, "linecount": 42},
                {"bufnr": 2, "name": "", "changed": 1, "linecount": 1},
            ],
        }[name]

    return {
        "nvim_get_api_info": [
            1,
            {"version": {"major": 0, "minor": 10, "patch": 2, "prerelease": False}},
        ],
        "nvim_get_mode": {"mode": "n", "blocking": False},
        "nvim_call_function": call_function,
    }


@pytest.fixture
def socket_dir():
    """
    Short temporary directory for Unix sockets.

    tmp_path can exceed the ~100 byte limit on socket paths.
    """
    path = Path(tempfile.mkdtemp(prefix="mc-", dir="/tmp"))
    yield path
    shutil.rmtree(path, ignore_errors=True)
