"""A multi-port WebSocket server that keeps per-client message queues."""

from __future__ import annotations

import asyncio
import collections
import http
import itertools
import logging
import mimetypes
from dataclasses import dataclass, field
from pathlib import Path
from typing import Callable
from urllib.parse import unquote, urlsplit

from websockets.asyncio.server import Server, ServerConnection, serve
from websockets.datastructures import Headers
from websockets.exceptions import ConnectionClosed
from websockets.http11 import Request, Response

_log = logging.getLogger(__name__)

SUBPROTOCOL = "mz-ws"
RECEIVE_BUFFER_SIZE = 10 * 1024 * 1024
FIRST_CLIENT_ID = 1000

ClientCallback = Callable[[int, str], None]
MessageCallback = Callable[[str], None]
NotifyCallback = Callable[[], None]


@dataclass
class _Client:
    connection: ServerConnection
    path: str
    port: int
    outbox: asyncio.Queue = field(default_factory=asyncio.Queue)


class WebSocketServer:
    """Listens on several ports and tracks every connected client by a unique id.

    Messages from clients are queued per client and can be polled with
    :meth:`get_messages_from`; subscribers can also be told about them as they
    arrive. Plain HTTP requests are answered with files from
    ``http_mount_origin`` when one is given.
    """

    def __init__(
        self,
        ports,
        http_mount_origin: str | Path | None = None,
        default_filename: str = "",
        host: str | None = "localhost",
    ) -> None:
        self.ports = list(dict.fromkeys(ports))
        if not self.ports:
            raise ValueError("No ports specified for WebSocketServer")
        self.host = host
        self._mount_origin = Path(http_mount_origin) if http_mount_origin else None
        self._default_filename = default_filename
        self._servers: list[Server] = []
        self._loop: asyncio.AbstractEventLoop | None = None
        self._ids = itertools.count(FIRST_CLIENT_ID)
        self._clients: dict[int, _Client] = {}
        self._received: dict[int, collections.deque[str]] = collections.defaultdict(collections.deque)
        self._connected_callbacks: dict[int, list[ClientCallback]] = collections.defaultdict(list)
        self._disconnected_callbacks: dict[int, list[ClientCallback]] = collections.defaultdict(list)
        self._message_subscribers: dict[int, list[MessageCallback]] = collections.defaultdict(list)
        self._disconnect_subscribers: dict[int, list[NotifyCallback]] = collections.defaultdict(list)
        self._destroyed_callback: NotifyCallback | None = None

    @property
    def running(self) -> bool:
        """True while the server is listening."""
        return bool(self._servers)

    async def start(self) -> None:
        """Start listening on every configured port."""
        if self._servers:
            raise RuntimeError("server already started")
        self._loop = asyncio.get_running_loop()
        try:
            for port in self.ports:
                server = await serve(
                    self._make_handler(port),
                    self.host,
                    port,
                    process_request=self._process_request,
                    select_subprotocol=self._select_subprotocol,
                    max_size=RECEIVE_BUFFER_SIZE,
                )
                self._servers.append(server)
        except BaseException:
            await self._shutdown_servers()
            raise

    async def close(self) -> None:
        """Stop listening, drop every client and report the shutdown."""
        await self._shutdown_servers()
        if self._destroyed_callback is not None:
            self._destroyed_callback()

    async def __aenter__(self) -> WebSocketServer:
        await self.start()
        return self

    async def __aexit__(self, *exc_info) -> None:
        await self.close()

    def send_message_to(self, client_id: int, data: str) -> None:
        """Queue ``data`` for the client; unknown clients are ignored."""
        client = self._clients.get(client_id)
        if client is None or self._loop is None:
            return
        self._loop.call_soon_threadsafe(client.outbox.put_nowait, data)

    def get_messages_from(self, client_id: int) -> str | None:
        """Pop the oldest message received from the client, or None if there is none."""
        queue = self._received.get(client_id)
        if not queue:
            return None
        return queue.popleft()

    def get_client_infos(self) -> list[tuple[int, str]]:
        """Return (client id, requested path) for every connected client."""
        return [(client_id, client.path) for client_id, client in self._clients.items()]

    def set_client_connected_callback(self, port: int, callback: ClientCallback) -> None:
        """Call ``callback(client_id, path)`` when a client connects on ``port``."""
        self._connected_callbacks[port].append(callback)

    def set_client_disconnected_callback(self, port: int, callback: ClientCallback) -> None:
        """Call ``callback(client_id, path)`` when a client on ``port`` disconnects."""
        self._disconnected_callbacks[port].append(callback)

    def set_notify_on_client_message(self, client_id: int, callback: MessageCallback) -> None:
        """Call ``callback(message)`` for every message from the client."""
        self._message_subscribers[client_id].append(callback)

    def set_notify_on_client_disconnected(self, client_id: int, callback: NotifyCallback) -> None:
        """Call ``callback()`` once the client disconnects."""
        self._disconnect_subscribers[client_id].append(callback)

    def set_server_created_callback(self, callback: NotifyCallback) -> None:
        """Call ``callback()`` right away if the server is already listening."""
        if self.running:
            callback()

    def set_server_destroyed_callback(self, callback: NotifyCallback) -> None:
        """Call ``callback()`` when the server is closed."""
        self._destroyed_callback = callback

    async def _shutdown_servers(self) -> None:
        servers, self._servers = self._servers, []
        for server in servers:
            server.close()
        for server in servers:
            await server.wait_closed()

    def _make_handler(self, port: int):
        async def handler(connection: ServerConnection) -> None:
            await self._handle(port, connection)

        return handler

    async def _handle(self, port: int, connection: ServerConnection) -> None:
        client_id = next(self._ids)
        path = connection.request.path if connection.request is not None else ""
        client = _Client(connection, path, port)
        self._clients[client_id] = client
        for callback in list(self._connected_callbacks.get(port, ())):
            callback(client_id, path)
        sender = asyncio.create_task(self._send_loop(client))
        try:
            async for message in connection:
                self._process_received(client_id, message)
        except ConnectionClosed:
            pass
        finally:
            sender.cancel()
            try:
                await sender
            except asyncio.CancelledError:
                pass
            self._client_disconnected(client_id)

    @staticmethod
    async def _send_loop(client: _Client) -> None:
        while True:
            message = await client.outbox.get()
            try:
                await client.connection.send(message)
            except ConnectionClosed:
                return

    def _process_received(self, client_id: int, message: str | bytes) -> None:
        if not message:
            return
        if isinstance(message, bytes):
            message = message.decode("utf-8", errors="replace")
        _log.debug("Message received from id %d: %s", client_id, message)
        for callback in list(self._message_subscribers.get(client_id, ())):
            callback(message)
        self._received[client_id].append(message)

    def _client_disconnected(self, client_id: int) -> None:
        client = self._clients.get(client_id)
        if client is None:
            return
        for callback in list(self._disconnected_callbacks.get(client.port, ())):
            callback(client_id, client.path)
        for callback in list(self._disconnect_subscribers.get(client_id, ())):
            callback()
        del self._clients[client_id]
        self._disconnect_subscribers.pop(client_id, None)
        self._message_subscribers.pop(client_id, None)

    @staticmethod
    def _select_subprotocol(connection: ServerConnection, subprotocols) -> str | None:
        return SUBPROTOCOL if SUBPROTOCOL in subprotocols else None

    def _process_request(self, connection: ServerConnection, request: Request) -> Response | None:
        if self._mount_origin is None:
            return None
        if request.headers.get("Upgrade", "").lower() == "websocket":
            return None
        return self._serve_file(request.path)

    def _serve_file(self, request_path: str) -> Response:
        relative = unquote(urlsplit(request_path).path).lstrip("/") or self._default_filename
        root = self._mount_origin.resolve()
        target = (root / relative).resolve() if relative else root
        if not relative or root not in target.parents or not target.is_file():
            return self._response(http.HTTPStatus.NOT_FOUND, b"Not Found", "text/plain")
        content_type = mimetypes.guess_type(target.name)[0] or "application/octet-stream"
        return self._response(http.HTTPStatus.OK, target.read_bytes(), content_type)

    @staticmethod
    def _response(status: http.HTTPStatus, body: bytes, content_type: str) -> Response:
        headers = Headers()
        headers["Content-Type"] = content_type
        headers["Content-Length"] = str(len(body))
        headers["Connection"] = "close"
        return Response(status.value, status.phrase, headers, body)