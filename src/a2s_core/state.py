# File: src/a2s_core/state.py
"""
A2S 查询库 - 状态模块

负责定义和存储单个连接的易变会话状态：Challenge 缓存与各类请求的等待槽位。
本模块不包含协议逻辑，仅作为数据容器供 Core 读写。
"""

import asyncio
from dataclasses import dataclass, field
from enum import IntEnum
from typing import Any, Generic, TypeVar

from .exceptions import UnknownResponseError

T = TypeVar("T")


class ResponseKind(IntEnum):
    """响应类型的封闭集合，值即为报文中的类型字节。"""

    INFO = 0x49  # 'I'
    CHALLENGE = 0x41  # 'A'
    PLAYERS = 0x44  # 'D'
    RULES = 0x45  # 'E'

    @classmethod
    def from_tag(cls, tag: int) -> "ResponseKind":
        """将类型字节映射为 ResponseKind。

        Raises:
            UnknownResponseError: 类型字节不在已知集合内。
        """
        try:
            return cls(tag)
        except ValueError:
            raise UnknownResponseError(f"未知的响应类型: 0x{tag:02x}") from None


class PendingSlot(Generic[T]):
    """某一类请求的单槽位等待者。

    状态流转: empty -> pending (发起请求) -> empty (结果投递的瞬间清空)。
    处于 pending 时再次请求会复用同一个 Future，而不会创建第二个。
    """

    def __init__(self, kind: ResponseKind) -> None:
        self.kind = kind
        self._future: asyncio.Future[T] | None = None

    @property
    def is_pending(self) -> bool:
        return self._future is not None and not self._future.done()

    @property
    def future(self) -> "asyncio.Future[T] | None":
        return self._future

    def acquire(self, loop: asyncio.AbstractEventLoop) -> tuple["asyncio.Future[T]", bool]:
        """获取当前等待中的 Future，必要时新建。

        已被调用方取消 (如 asyncio.wait_for 超时) 的 Future 视为空槽位。

        Returns:
            tuple: (future, created)。created 为 True 表示调用方需要发出请求。
        """
        if self.is_pending:
            return self._future, False
        self._future = loop.create_future()
        return self._future, True

    def resolve(self, value: T) -> bool:
        """投递结果并清空槽位。槽位为空时返回 False。"""
        future = self._take()
        if future is None:
            return False
        future.set_result(value)
        return True

    def fail(self, exc: BaseException) -> bool:
        """投递异常并清空槽位。槽位为空时返回 False。"""
        future = self._take()
        if future is None:
            return False
        future.set_exception(exc)
        return True

    def _take(self) -> "asyncio.Future[T] | None":
        """清空槽位，返回仍可投递的 Future。已取消的 Future 不再投递。"""
        future, self._future = self._future, None
        if future is None or future.done():
            return None
        return future

    def __repr__(self) -> str:
        status = "pending" if self.is_pending else "empty"
        return f"<PendingSlot {self.kind.name} {status}>"


def _empty_slots() -> dict[ResponseKind, PendingSlot[Any]]:
    return {kind: PendingSlot(kind) for kind in ResponseKind}


@dataclass
class QueryState:
    """存储单个 A2S 连接的易变状态。

    该对象由连接独占，不在连接之间共享。

    Attributes:
        challenge: 服务器下发的 Challenge，首次获取后不再改变。
        slots: 每种响应类型一个等待槽位。
        last_error: 最近一次无法归属的解码错误描述，用于诊断。
    """

    challenge: bytes | None = None
    slots: dict[ResponseKind, PendingSlot[Any]] = field(default_factory=_empty_slots)
    last_error: str = ""

    def slot(self, kind: ResponseKind) -> PendingSlot[Any]:
        return self.slots[kind]

    @property
    def pending_kinds(self) -> list[ResponseKind]:
        return [kind for kind, slot in self.slots.items() if slot.is_pending]
