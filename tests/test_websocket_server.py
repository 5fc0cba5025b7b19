import asyncio
import socket
import urllib.error
import urllib.request

import pytest
from websockets.asyncio.client import connect

from nosplug.websocket_server import FIRST_CLIENT_ID, SUBPROTOCOL, WebSocketServer


def _free_port() -> int:
    with socket.socket() as sock:
        sock.bind(("127.0.0.1", 0))
        return sock.getsockname()[1]


async def _wait_until(predicate, timeout=3.0):
    deadline = asyncio.get_running_loop().time() + timeout
    while not predicate():
        if asyncio.get_running_loop().time() > deadline:
            raise AssertionError("condition not reached in time")
        await asyncio.sleep(0.01)


def _url(port, path="/"):
    return f"ws://127.0.0.1:{port}{path}"


def test_no_ports_rejected():
    with pytest.raises(ValueError):
        WebSocketServer([])


@pytest.mark.asyncio
async def test_client_connect_reports_id_and_path():
    port = _free_port()
    connected = []
    server = WebSocketServer([port], host="127.0.0.1")
    server.set_client_connected_callback(port, lambda cid, path: connected.append((cid, path)))
    async with server:
        async with connect(_url(port, "/player")):
            await _wait_until(lambda: connected)
            assert connected == [(FIRST_CLIENT_ID, "/player")]
            assert server.get_client_infos() == [(FIRST_CLIENT_ID, "/player")]


@pytest.mark.asyncio
async def test_client_ids_are_unique_and_increasing():
    port = _free_port()
    async with WebSocketServer([port], host="127.0.0.1") as server:
        async with connect(_url(port, "/a")):
            await _wait_until(lambda: len(server.get_client_infos()) == 1)
        await _wait_until(lambda: not server.get_client_infos())
        async with connect(_url(port, "/b")):
            await _wait_until(lambda: len(server.get_client_infos()) == 1)
            assert server.get_client_infos() == [(FIRST_CLIENT_ID + 1, "/b")]


@pytest.mark.asyncio
async def test_received_messages_are_queued_and_notified():
    port = _free_port()
    notified = []
    server = WebSocketServer([port], host="127.0.0.1")
    server.set_client_connected_callback(
        port, lambda cid, path: server.set_notify_on_client_message(cid, notified.append)
    )
    async with server:
        async with connect(_url(port)) as ws:
            await ws.send("hello")
            await ws.send("world")
            await _wait_until(lambda: len(notified) == 2)
            assert notified == ["hello", "world"]
            assert server.get_messages_from(FIRST_CLIENT_ID) == "hello"
            assert server.get_messages_from(FIRST_CLIENT_ID) == "world"
            assert server.get_messages_from(FIRST_CLIENT_ID) is None


@pytest.mark.asyncio
async def test_send_message_reaches_client():
    port = _free_port()
    async with WebSocketServer([port], host="127.0.0.1") as server:
        async with connect(_url(port)) as ws:
            await _wait_until(lambda: server.get_client_infos())
            client_id = server.get_client_infos()[0][0]
            server.send_message_to(client_id, '{"type": "offer"}')
            assert await asyncio.wait_for(ws.recv(), 3) == '{"type": "offer"}'


@pytest.mark.asyncio
async def test_disconnect_runs_callbacks_and_forgets_client():
    port = _free_port()
    disconnected = []
    notified = []
    server = WebSocketServer([port], host="127.0.0.1")
    server.set_client_disconnected_callback(port, lambda cid, path: disconnected.append((cid, path)))
    server.set_client_connected_callback(
        port,
        lambda cid, path: server.set_notify_on_client_disconnected(cid, lambda: notified.append(cid)),
    )
    async with server:
        async with connect(_url(port, "/streamer")):
            await _wait_until(lambda: server.get_client_infos())
        await _wait_until(lambda: disconnected)
        assert disconnected == [(FIRST_CLIENT_ID, "/streamer")]
        assert notified == [FIRST_CLIENT_ID]
        assert server.get_client_infos() == []


@pytest.mark.asyncio
async def test_callbacks_are_scoped_to_port():
    first, second = _free_port(), _free_port()
    first_seen, second_seen = [], []
    server = WebSocketServer([first, second], host="127.0.0.1")
    server.set_client_connected_callback(first, lambda cid, path: first_seen.append(path))
    server.set_client_connected_callback(second, lambda cid, path: second_seen.append(path))
    async with server:
        async with connect(_url(second, "/only-second")):
            await _wait_until(lambda: second_seen)
        assert second_seen == ["/only-second"]
        assert first_seen == []


@pytest.mark.asyncio
async def test_subprotocol_is_negotiated():
    port = _free_port()
    async with WebSocketServer([port], host="127.0.0.1"):
        async with connect(_url(port), subprotocols=[SUBPROTOCOL]) as ws:
            assert ws.subprotocol == SUBPROTOCOL


@pytest.mark.asyncio
async def test_server_lifecycle_callbacks():
    port = _free_port()
    created, destroyed = [], []
    server = WebSocketServer([port], host="127.0.0.1")
    server.set_server_created_callback(lambda: created.append(True))
    assert created == []
    server.set_server_destroyed_callback(lambda: destroyed.append(True))
    await server.start()
    server.set_server_created_callback(lambda: created.append(True))
    assert created == [True]
    await server.close()
    assert destroyed == [True]
    assert server.running is False


@pytest.mark.asyncio
async def test_starting_twice_fails():
    port = _free_port()
    async with WebSocketServer([port], host="127.0.0.1") as server:
        with pytest.raises(RuntimeError):
            await server.start()


@pytest.mark.asyncio
async def test_http_requests_serve_mounted_files(tmp_path):
    (tmp_path / "index.html").write_text("<html>player</html>")
    port = _free_port()

    def fetch(path):
        with urllib.request.urlopen(f"http://127.0.0.1:{port}{path}", timeout=3) as resp:
            return resp.status, resp.read()

    async with WebSocketServer([port], tmp_path, "index.html", host="127.0.0.1"):
        status, body = await asyncio.to_thread(fetch, "/")
        assert status == 200
        assert body == b"<html>player</html>"
        with pytest.raises(urllib.error.HTTPError) as info:
            await asyncio.to_thread(fetch, "/missing.html")
        assert info.value.code == 404