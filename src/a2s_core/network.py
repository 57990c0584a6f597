# src/a2s_core/network.py
"""
A2S 查询库 - 网络模块 (Network) [Asyncio Edition]

封装地址解析、UDP Endpoint 的创建、绑定、发送逻辑。
该模块屏蔽了底层 Socket 的复杂性，向 Core 层提供纯粹的 bytes 收发接口。
"""

import asyncio
import logging
import socket
from collections.abc import Callable
from typing import Optional, Tuple, cast

from .exceptions import AddressResolutionError, NetworkError, TransportBindError

logger = logging.getLogger(__name__)

DatagramHandler = Callable[[bytes, Tuple[str, int]], None]


class A2SUdpProtocol(asyncio.DatagramProtocol):
    """
    asyncio UDP 协议适配器。
    每收到一个数据报就同步回调一次 handler，不做缓冲。
    """

    def __init__(self, handler: DatagramHandler):
        self.handler = handler
        self.transport: Optional[asyncio.DatagramTransport] = None

    def connection_made(self, transport: asyncio.BaseTransport) -> None:
        self.transport = cast(asyncio.DatagramTransport, transport)
        logger.debug("UDP Transport 已建立")

    def datagram_received(self, data: bytes, addr: Tuple[str, int]) -> None:
        self.handler(data, addr)

    def error_received(self, exc: Exception) -> None:
        """处理 UDP 错误 (如 ICMP 端口不可达)，不影响等待中的请求"""
        logger.warning(f"UDP 错误: {exc}")

    def connection_lost(self, exc: Optional[Exception]) -> None:
        if exc:
            logger.warning(f"UDP 连接断开: {exc}")
        else:
            logger.debug("UDP 连接已正常关闭")
        self.transport = None


async def resolve_address(host: str, port: int) -> Tuple[str, int]:
    """将主机名解析为 IPv4 地址。已经是 IP 时原样返回。

    Raises:
        AddressResolutionError: DNS 查询失败或没有 IPv4 结果。
    """
    loop = asyncio.get_running_loop()
    try:
        infos = await loop.getaddrinfo(
            host, port, family=socket.AF_INET, type=socket.SOCK_DGRAM
        )
    except socket.gaierror as e:
        raise AddressResolutionError(f"无法解析地址 {host}: {e}") from e

    if not infos:
        raise AddressResolutionError(f"无法解析地址 {host}: 无 IPv4 结果")

    ip, resolved_port = infos[0][4][:2]
    logger.debug(f"地址解析: {host} -> {ip}")
    return ip, resolved_port


class NetworkClient:
    """
    封装 asyncio UDP 操作的客户端。
    """

    def __init__(self, bind_ip: str = "0.0.0.0", local_port: int = 0):
        self.bind_ip = bind_ip
        self.local_port = local_port
        self.protocol: Optional[A2SUdpProtocol] = None
        self.transport: Optional[asyncio.DatagramTransport] = None

    @property
    def is_open(self) -> bool:
        return self.transport is not None and not self.transport.is_closing()

    async def open(self, handler: DatagramHandler) -> None:
        """
        绑定本地 UDP Endpoint，之后每个入站数据报都会回调 handler。

        Raises:
            TransportBindError: 端口被占用或无权限。
        """
        loop = asyncio.get_running_loop()
        bind_addr = (self.bind_ip, self.local_port)

        try:
            transport, protocol = await loop.create_datagram_endpoint(
                lambda: A2SUdpProtocol(handler),
                local_addr=bind_addr,
                family=socket.AF_INET,
            )
        except OSError as e:
            raise TransportBindError(f"端口绑定失败 {bind_addr}: {e}") from e

        self.transport = cast(asyncio.DatagramTransport, transport)
        self.protocol = cast(A2SUdpProtocol, protocol)
        logger.debug(f"UDP 端口绑定成功: {self.transport.get_extra_info('sockname')}")

    def send(self, packet: bytes, target: Tuple[str, int]) -> None:
        """
        发送 UDP 数据包。sendto 是同步非阻塞的。

        Raises:
            NetworkError: Transport 未打开或已关闭。
        """
        if not self.is_open:
            raise NetworkError("Transport 已关闭")

        # 此时 transport 不可能是 None
        assert self.transport is not None

        try:
            self.transport.sendto(packet, target)
        except OSError as e:
            raise NetworkError(f"发送失败: {e}") from e
        logger.debug("send -> %s:%d %s", target[0], target[1], packet.hex())

    def close(self) -> None:
        """关闭 Transport"""
        if self.transport:
            self.transport.close()
            self.transport = None
            logger.debug("UDP Transport 已关闭")
