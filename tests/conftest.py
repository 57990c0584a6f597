# tests/conftest.py
import struct
import sys
from pathlib import Path
from unittest.mock import MagicMock

import pytest

# 确保 src 目录在 sys.path 中
src_path = Path(__file__).resolve().parent.parent / "src"
if str(src_path) not in sys.path:
    sys.path.insert(0, str(src_path))

from a2s_core.core import QueryConnection
from a2s_core.network import NetworkClient

SERVER_ADDR = ("203.0.113.10", 27015)


def cstr(text: str) -> bytes:
    """UTF-8 编码并追加 0x00 结束符"""
    return text.encode("utf-8") + b"\x00"


@pytest.fixture
def info_payload() -> bytes:
    """
    [Fixture] 一个不含 EDF 的 A2S_INFO 负载 (已去除包头与类型字节)。
    """
    return (
        b"\x11"  # protocol 17
        + cstr("Test Server")
        + cstr("de_dust2")
        + cstr("csgo")
        + cstr("Counter-Strike: Global Offensive")
        + struct.pack("<h", 730)
        + bytes([5, 24, 1])  # players / max / bots
        + b"d"  # dedicated
        + b"l"  # linux
        + b"\x00"  # public
        + b"\x01"  # VAC secured
        + cstr("1.38.7.9")
    )


@pytest.fixture
def mock_transport():
    """
    [Fixture] 伪造的 DatagramTransport，记录所有 sendto 调用。
    """
    transport = MagicMock()
    transport.is_closing.return_value = False
    return transport


@pytest.fixture
def conn(mock_transport) -> QueryConnection:
    """
    [Fixture] 使用伪造 Transport 的连接，入站数据报通过 conn.datagram_received 注入。
    """
    net_client = NetworkClient()
    net_client.transport = mock_transport
    return QueryConnection(SERVER_ADDR, net_client)
