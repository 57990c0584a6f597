# tests/test_network.py
"""
测试网络模块 (地址解析 / UDP 绑定 / 发送)，以及基于回环地址的端到端查询。
"""

import asyncio
import socket
import struct
from unittest.mock import patch

import pytest
import pytest_asyncio
from conftest import cstr

from a2s_core.core import connect
from a2s_core.exceptions import AddressResolutionError, NetworkError, TransportBindError
from a2s_core.network import NetworkClient, resolve_address
from a2s_core.protocols import constants

HEADER = constants.SIMPLE_HEADER
CHALLENGE = b"\x10\x20\x30\x40"


class FakeServerProtocol(asyncio.DatagramProtocol):
    """最小的 A2S 服务器：按请求类型返回固定响应。"""

    def __init__(self, info_payload: bytes):
        self.info_payload = info_payload
        self.received: list[bytes] = []
        self.transport = None

    def connection_made(self, transport):
        self.transport = transport

    def datagram_received(self, data, addr):
        self.received.append(data)
        command = data[4:5]
        if command == b"T":
            self.transport.sendto(HEADER + b"I" + self.info_payload, addr)
        elif command == b"\x55" and data[5:] == b"\xff\xff\xff\xff":
            self.transport.sendto(HEADER + b"A" + CHALLENGE, addr)
        elif command == b"\x55" and data[5:] == CHALLENGE:
            body = b"\x01\x00" + cstr("Alice") + struct.pack("<i", 7) + struct.pack("<f", 42.0)
            self.transport.sendto(HEADER + b"D" + body, addr)
        elif command == b"\x56" and data[5:] == CHALLENGE:
            body = struct.pack("<H", 1) + cstr("mp_timelimit") + cstr("30")
            self.transport.sendto(HEADER + b"E" + body, addr)


@pytest_asyncio.fixture
async def fake_server(info_payload):
    loop = asyncio.get_running_loop()
    transport, protocol = await loop.create_datagram_endpoint(
        lambda: FakeServerProtocol(info_payload),
        local_addr=("127.0.0.1", 0),
    )
    yield protocol, transport.get_extra_info("sockname")
    transport.close()


# --- resolve_address ---


@pytest.mark.asyncio
async def test_resolve_ip_literal():
    assert await resolve_address("127.0.0.1", 27015) == ("127.0.0.1", 27015)


@pytest.mark.asyncio
async def test_resolve_failure_raises():
    loop = asyncio.get_running_loop()
    with patch.object(
        loop, "getaddrinfo", side_effect=socket.gaierror("Name or service not known")
    ):
        with pytest.raises(AddressResolutionError):
            await resolve_address("no-such-host.invalid", 27015)


@pytest.mark.asyncio
async def test_resolve_empty_result_raises():
    loop = asyncio.get_running_loop()

    async def _empty(*args, **kwargs):
        return []

    with patch.object(loop, "getaddrinfo", side_effect=_empty):
        with pytest.raises(AddressResolutionError):
            await resolve_address("example.invalid", 27015)


# --- NetworkClient ---


def test_send_without_transport():
    client = NetworkClient()
    assert not client.is_open
    with pytest.raises(NetworkError):
        client.send(b"\xff\xff\xff\xffT", ("127.0.0.1", 27015))


@pytest.mark.asyncio
async def test_bind_conflict_raises():
    first = NetworkClient(bind_ip="127.0.0.1", local_port=0)
    await first.open(lambda data, addr: None)
    port = first.transport.get_extra_info("sockname")[1]

    second = NetworkClient(bind_ip="127.0.0.1", local_port=port)
    try:
        with pytest.raises(TransportBindError):
            await second.open(lambda data, addr: None)
    finally:
        first.close()
        second.close()

    assert not first.is_open


# --- 端到端 ---


@pytest.mark.asyncio
async def test_end_to_end_over_loopback(fake_server):
    server, (host, port) = fake_server

    conn = await connect(host, port, local_port=0, bind_ip="127.0.0.1")
    async with conn:
        info, players, rules = await asyncio.wait_for(
            asyncio.gather(conn.get_info(), conn.get_players(), conn.get_rules()),
            timeout=5,
        )

    assert info.name == "Test Server"
    assert [(p.name, p.score, p.duration) for p in players] == [("Alice", 7, 42.0)]
    assert rules == {"mp_timelimit": "30"}
    assert conn.challenge == CHALLENGE
    # 一个 Info、一个 Challenge、玩家与规则各一个
    assert len(server.received) == 4
    assert conn.closed
