# File: src/a2s_core/core.py
"""
A2S 查询核心 (Query Core)

职责：
1. 资源组装：State + Network。
2. 请求发起：每类请求最多一个在途，重复调用复用同一个 Future。
3. 响应分发：入站数据报 -> 类型字节 -> 解析器 -> 对应的等待槽位。

核心层不包含超时与重试。没有响应的请求会一直处于等待状态，
需要超时的调用方请在外层使用 asyncio.wait_for。
"""

import asyncio
import logging
from collections.abc import Callable
from typing import Any

from .config import DEFAULT_LOCAL_PORT, QueryConfig
from .exceptions import A2SError, MalformedResponseError, NetworkError, UnknownResponseError
from .models import QueryPlayer, ServerInfo
from .network import NetworkClient, resolve_address
from .protocols import constants, packets, parsers
from .state import PendingSlot, QueryState, ResponseKind

logger = logging.getLogger(__name__)

# 每种响应类型对应的解析器，覆盖 ResponseKind 的全部成员
_PARSERS: dict[ResponseKind, Callable[[bytes], Any]] = {
    ResponseKind.INFO: parsers.parse_info,
    ResponseKind.CHALLENGE: parsers.parse_challenge,
    ResponseKind.PLAYERS: parsers.parse_players,
    ResponseKind.RULES: parsers.parse_rules,
}


class QueryConnection:
    """与单个服务器的 A2S 查询连接。

    通常通过 `connect()` 创建。所有 get_* 方法都不会阻塞，
    立即返回一个 Future，结果由入站数据报驱动完成。
    """

    def __init__(self, address: tuple[str, int], net_client: NetworkClient) -> None:
        """初始化连接。

        Args:
            address: 已解析的服务器 (ip, port)。
            net_client: 尚未打开或已打开的网络客户端。
        """
        self.address = address
        self.net_client = net_client
        self._state = QueryState()
        # 等待 Challenge 的后台任务，保留引用以免被回收
        self._tasks: set[asyncio.Task] = set()

    @classmethod
    async def from_config(cls, config: QueryConfig) -> "QueryConnection":
        """按配置对象建立连接。"""
        return await connect(
            config.host,
            config.port,
            local_port=config.local_port,
            bind_ip=config.bind_ip,
        )

    @property
    def state(self) -> QueryState:
        """当前会话状态 (Challenge 与等待槽位)，仅供读取。"""
        return self._state

    @property
    def challenge(self) -> bytes | None:
        return self._state.challenge

    @property
    def closed(self) -> bool:
        return not self.net_client.is_open

    # ------------------------------------------------------------------
    # 请求发起
    # ------------------------------------------------------------------

    def get_challenge(self) -> "asyncio.Future[bytes]":
        """获取 Challenge。

        已缓存时返回一个已完成的 Future；已有 Challenge 请求在途时返回同一个 Future；
        否则发送 Challenge 请求并返回新的 Future。
        """
        loop = asyncio.get_running_loop()
        if self._state.challenge is not None:
            done = loop.create_future()
            done.set_result(self._state.challenge)
            return done

        slot = self._state.slot(ResponseKind.CHALLENGE)
        future, created = slot.acquire(loop)
        if created:
            self._send_or_fail(slot, packets.build_challenge_request())
        return future

    def get_info(self) -> "asyncio.Future[ServerInfo]":
        """请求服务器信息 (A2S_INFO)。"""
        loop = asyncio.get_running_loop()
        slot = self._state.slot(ResponseKind.INFO)
        future, created = slot.acquire(loop)
        if created:
            self._send_or_fail(slot, packets.build_info_request())
        return future

    def get_players(self) -> "asyncio.Future[list[QueryPlayer]]":
        """请求在线玩家列表 (A2S_PLAYER)。"""
        return self._request_with_challenge(
            ResponseKind.PLAYERS, packets.build_players_request
        )

    def get_rules(self) -> "asyncio.Future[dict[str, str]]":
        """请求服务器规则 (A2S_RULES)。

        注意: 部分游戏 (如 CS:GO) 在未安装插件时从不响应此请求。
        """
        return self._request_with_challenge(
            ResponseKind.RULES, packets.build_rules_request
        )

    def _request_with_challenge(
        self, kind: ResponseKind, build: Callable[[bytes], bytes]
    ) -> asyncio.Future:
        """立即占用槽位，待 Challenge 可用后再发送真正的请求。"""
        loop = asyncio.get_running_loop()
        slot = self._state.slot(kind)
        future, created = slot.acquire(loop)
        if created:
            task = loop.create_task(
                self._send_after_challenge(slot, future, build),
                name=f"a2s-{kind.name.lower()}",
            )
            self._tasks.add(task)
            task.add_done_callback(self._tasks.discard)
        return future

    async def _send_after_challenge(
        self,
        slot: PendingSlot,
        future: asyncio.Future,
        build: Callable[[bytes], bytes],
    ) -> None:
        """等待 Challenge 后发送请求。只为创建本任务的那个 Future 发送一次。"""
        while True:
            try:
                challenge = await self.get_challenge()
                break
            except asyncio.CancelledError:
                task = asyncio.current_task()
                if task is not None and task.cancelling():
                    raise
                # 共享的 Challenge Future 被其他调用方取消 (如超时)，重新获取
                if future.done():
                    return
                logger.debug(f"{slot.kind.name} 等待的 Challenge 被取消，重新请求")
            except A2SError as e:
                if slot.future is future:
                    logger.warning(f"{slot.kind.name} 请求失败，无法获取 Challenge: {e}")
                    slot.fail(e)
                return

        if slot.future is not future or future.done():
            logger.debug(f"{slot.kind.name} 请求已被取消或被新请求取代，不再发送")
            return
        self._send_or_fail(slot, build(challenge))

    def _send_or_fail(self, slot: PendingSlot, packet: bytes) -> None:
        try:
            self.net_client.send(packet, self.address)
        except NetworkError as e:
            slot.fail(e)

    # ------------------------------------------------------------------
    # 响应分发
    # ------------------------------------------------------------------

    def datagram_received(self, data: bytes, addr: tuple[str, int] | None = None) -> None:
        """Transport 回调：每次处理恰好一个数据报。

        无法归属的解码错误只记录日志，不影响后续数据报的处理。
        """
        logger.debug("recv <- %s %s", addr, data.hex())
        try:
            self.dispatch(data)
        except MalformedResponseError as e:
            self._state.last_error = str(e)
            logger.warning(f"丢弃无法解码的响应 (来自 {addr}): {e}")

    def dispatch(self, data: bytes) -> ResponseKind:
        """校验包头、识别类型并将解析结果投递给对应槽位。

        Returns:
            ResponseKind: 该数据报的响应类型。

        Raises:
            UnknownResponseError: 包头缺失或类型未知，所有槽位保持不变。
            MalformedResponseError: 解析失败且没有对应的等待者可以接收该错误。
        """
        if len(data) < constants.PAYLOAD_OFFSET or not data.startswith(
            constants.SIMPLE_HEADER
        ):
            raise UnknownResponseError(f"缺少单包包头: {data[:8].hex()}")

        kind = ResponseKind.from_tag(data[constants.TAG_OFFSET])
        payload = data[constants.PAYLOAD_OFFSET :]
        slot = self._state.slot(kind)

        try:
            result = _PARSERS[kind](payload)
        except MalformedResponseError as e:
            e.kind = kind
            if not slot.fail(e):
                raise
            logger.warning(f"{kind.name} 响应解析失败: {e}")
            return kind

        if kind is ResponseKind.CHALLENGE:
            if self._state.challenge is None:
                self._state.challenge = result
                logger.debug("challenge: %s", result.hex())
            result = self._state.challenge

        if not slot.resolve(result):
            logger.warning(f"收到未请求的 {kind.name} 响应，已丢弃")
        return kind

    # ------------------------------------------------------------------
    # 生命周期
    # ------------------------------------------------------------------

    def close(self) -> None:
        """释放本地 Transport。

        不会完成或拒绝仍在等待的 Future。
        """
        pending = self._state.pending_kinds
        if pending:
            logger.debug(f"关闭连接时仍有未完成的请求: {[k.name for k in pending]}")
        self.net_client.close()
        logger.info(f"A2S 连接已关闭: {self.address[0]}:{self.address[1]}")

    async def __aenter__(self) -> "QueryConnection":
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> None:
        self.close()


async def connect(
    address: str,
    port: int,
    local_port: int = DEFAULT_LOCAL_PORT,
    bind_ip: str = "0.0.0.0",
) -> QueryConnection:
    """建立到远程服务器的查询连接。

    解析地址并绑定本地 UDP 端口。不保证远程服务器可达。

    Args:
        address: 服务器 IP 或主机名。
        port: 服务器查询端口。
        local_port: 本地 UDP 端口，0 表示由系统分配。
        bind_ip: 本地绑定地址。

    Raises:
        AddressResolutionError: 主机名解析失败。
        TransportBindError: 本地端口绑定失败。
    """
    target = await resolve_address(str(address), port)
    net_client = NetworkClient(bind_ip=bind_ip, local_port=local_port)
    conn = QueryConnection(target, net_client)
    await net_client.open(conn.datagram_received)
    logger.info(f"A2S 连接已就绪: {target[0]}:{target[1]}")
    return conn
