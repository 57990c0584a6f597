# tests/test_state.py
"""
测试单槽位等待者 PendingSlot 与 ResponseKind 的映射。
"""

import asyncio

import pytest

from a2s_core.exceptions import TruncatedPacketError, UnknownResponseError
from a2s_core.state import PendingSlot, QueryState, ResponseKind


@pytest.mark.parametrize(
    "tag, kind",
    [
        (0x49, ResponseKind.INFO),
        (0x41, ResponseKind.CHALLENGE),
        (0x44, ResponseKind.PLAYERS),
        (0x45, ResponseKind.RULES),
    ],
)
def test_response_kind_from_tag(tag, kind):
    assert ResponseKind.from_tag(tag) is kind


def test_response_kind_unknown_tag():
    with pytest.raises(UnknownResponseError, match="0x6d"):
        ResponseKind.from_tag(0x6D)


@pytest.mark.asyncio
async def test_slot_lifecycle():
    """empty -> pending -> empty"""
    loop = asyncio.get_running_loop()
    slot = PendingSlot(ResponseKind.INFO)
    assert not slot.is_pending

    future, created = slot.acquire(loop)
    assert created is True
    assert slot.is_pending

    again, created = slot.acquire(loop)
    assert again is future
    assert created is False

    assert slot.resolve("done") is True
    assert not slot.is_pending
    assert await future == "done"

    # 空槽位上的投递会被拒绝
    assert slot.resolve("late") is False


@pytest.mark.asyncio
async def test_slot_fail():
    loop = asyncio.get_running_loop()
    slot = PendingSlot(ResponseKind.RULES)
    future, _ = slot.acquire(loop)

    assert slot.fail(TruncatedPacketError("short")) is True
    assert not slot.is_pending
    with pytest.raises(TruncatedPacketError):
        await future

    assert slot.fail(TruncatedPacketError("again")) is False


def test_state_owns_one_slot_per_kind():
    state = QueryState()
    assert set(state.slots) == set(ResponseKind)
    assert state.challenge is None
    assert state.pending_kinds == []
    # 不同连接的状态互不共享
    assert QueryState().slots[ResponseKind.INFO] is not state.slots[ResponseKind.INFO]


def test_every_kind_has_a_parser():
    from a2s_core.core import _PARSERS

    assert set(_PARSERS) == set(ResponseKind)


@pytest.mark.asyncio
async def test_slot_replaces_cancelled_future():
    """调用方超时取消后，下一次请求重新发起"""
    loop = asyncio.get_running_loop()
    slot = PendingSlot(ResponseKind.INFO)
    first, _ = slot.acquire(loop)

    with pytest.raises(asyncio.TimeoutError):
        await asyncio.wait_for(first, timeout=0.01)
    assert first.cancelled()
    assert not slot.is_pending
    assert slot.resolve("late") is False

    second, created = slot.acquire(loop)
    assert created is True
    assert second is not first
